"""
Domain Constants: 파이프라인 전역 상수.

디렉토리 레이아웃, glob 패턴, placeholder 문법 등
themebuild.yaml에서 오버라이드 가능한 기본값들.
"""

# =============================================================================
# Project Layout (프로젝트 디렉토리 구조)
# =============================================================================
# <project>/
# ├── themebuild.yaml
# ├── .icons/                 # 아이콘 생성기 출력 (외부)
# ├── src/                    # source_root
# │   ├── css/
# │   ├── js/main.js
# │   ├── img/  fonts/
# │   ├── templates/  modules/
# │   └── theme.html  theme.tpl
# └── dist/                   # output_root
#     └── .vite/manifest.json # 번들러 메타데이터 (마지막에 삭제)

CONFIG_FILENAME = "themebuild.yaml"
LOCK_FILENAME = ".themebuild.lock"

DEFAULT_SOURCE_ROOT = "src"
DEFAULT_OUTPUT_ROOT = "dist"
DEFAULT_METADATA_DIR = ".vite"
DEFAULT_ICONS_DIR = ".icons"
DEFAULT_ICONS_DEST = "img/icons"

# =============================================================================
# Entries (번들러 엔트리)
# =============================================================================

DEFAULT_SCRIPT_ENTRY = "src/js/main.js"
DEFAULT_STYLESHEET = "style.css"

# =============================================================================
# Discovery (템플릿 탐색 glob, source_root 기준)
# =============================================================================

DEFAULT_TEMPLATE_GLOBS = ("templates/**/*.html.tpl", "templates/**/*.html")
DEFAULT_MODULE_GLOBS = ("modules/**/*.html.tpl", "modules/**/*.html")
DEFAULT_THEME_ENTRIES = ("theme.html", "theme.tpl")
DEFAULT_ASSET_DIRS = ("img", "fonts")

# =============================================================================
# Localize (외부 리소스 로컬화)
# =============================================================================

DEFAULT_CSS_ROOT = "css"
HTML_LIKE_SUFFIXES = (".html", ".htm", ".tpl")
FALLBACK_LOCAL_NAME = "external.css"

# =============================================================================
# Placeholder Syntax (Smarty/XOOPS 스타일)
# =============================================================================

LEFT_DELIMITER = "<{"
RIGHT_DELIMITER = "}>"

DEFAULT_CSS_TOKEN = "theme_css"
DEFAULT_JS_TOKEN = "theme_js"
DEFAULT_IMG_TOKEN = "theme_img"
DEFAULT_THEME_VARIABLE = "theme_name"

ASSET_EXTENSIONS = (
    "png", "jpg", "jpeg", "gif", "svg", "webp", "ico", "avif",
    "woff", "woff2", "ttf", "eot", "otf",
)

# =============================================================================
# Bundler
# =============================================================================

DEFAULT_BUNDLER_COMMAND = ("npx", "vite", "build")
DEFAULT_PREVIEW_COMMAND = (
    "npx", "vite", "build", "--config", "vite.config.preview.js",
)


def placeholder(token: str) -> str:
    """토큰을 delimiter로 감싼 placeholder 문자열 (예: <{theme_css}>)."""
    return f"{LEFT_DELIMITER}{token}{RIGHT_DELIMITER}"

"""
설정 로드: themebuild.yaml → PipelineConfig

규칙:
- 설정 객체는 실행당 1회 생성, 모든 phase에 명시적으로 전달
- 상대 경로는 project_root 기준으로 해석
- 모든 키는 선택 (기본값: domain/constants.py)
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from themebuild.domain import constants as c
from themebuild.domain.errors import ErrorCodes, PipelineError


@dataclass
class PipelineConfig:
    """
    파이프라인 설정.

    모든 경로는 절대 경로로 정규화되어 보관된다.
    """
    project_root: Path
    source_root: Path
    output_root: Path
    manifest_path: Path
    metadata_dir: Path
    icons_dir: Path
    icons_dest: str = c.DEFAULT_ICONS_DEST
    report_path: Path | None = None

    # entries
    script_entry: str = c.DEFAULT_SCRIPT_ENTRY
    stylesheet: str = c.DEFAULT_STYLESHEET

    # localize
    css_root: Path | None = None
    html_entries: tuple[Path, ...] = ()
    download_dir: Path | None = None  # None: 참조 파일과 같은 디렉토리
    fetch_timeout: float | None = None

    # discovery (source_root 기준 glob)
    template_globs: tuple[str, ...] = c.DEFAULT_TEMPLATE_GLOBS
    module_globs: tuple[str, ...] = c.DEFAULT_MODULE_GLOBS
    theme_entries: tuple[str, ...] = c.DEFAULT_THEME_ENTRIES
    asset_dirs: tuple[str, ...] = c.DEFAULT_ASSET_DIRS

    # placeholder tokens
    css_token: str = c.DEFAULT_CSS_TOKEN
    js_token: str = c.DEFAULT_JS_TOKEN
    img_token: str = c.DEFAULT_IMG_TOKEN
    theme_variable: str = c.DEFAULT_THEME_VARIABLE

    # bundler
    bundler_command: tuple[str, ...] = c.DEFAULT_BUNDLER_COMMAND
    preview_command: tuple[str, ...] = c.DEFAULT_PREVIEW_COMMAND

    strict: bool = False

    @property
    def lock_path(self) -> Path:
        return self.project_root / c.LOCK_FILENAME

    @classmethod
    def defaults(cls, project_root: Path) -> "PipelineConfig":
        """설정 파일 없이 기본 레이아웃으로 생성."""
        return config_from_dict({}, project_root)


# =============================================================================
# Parsing helpers
# =============================================================================


def _section(data: dict[str, Any], name: str) -> dict[str, Any]:
    value = data.get(name) or {}
    if not isinstance(value, dict):
        raise PipelineError(
            ErrorCodes.CONFIG_INVALID,
            section=name,
            expected="mapping",
            actual=type(value).__name__,
        )
    return value


def _str_tuple(section: dict[str, Any], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = section.get(key)
    if value is None:
        return default
    if isinstance(value, str):
        return (value,)
    if not isinstance(value, list) or not all(isinstance(v, str) for v in value):
        raise PipelineError(
            ErrorCodes.CONFIG_INVALID,
            key=key,
            expected="string or list of strings",
        )
    return tuple(value)


def _command(section: dict[str, Any], key: str, default: tuple[str, ...]) -> tuple[str, ...]:
    value = section.get(key)
    if isinstance(value, str):
        return tuple(value.split())
    return _str_tuple(section, key, default)


def _optional_float(section: dict[str, Any], key: str) -> float | None:
    value = section.get(key)
    if value is None:
        return None
    if isinstance(value, bool) or not isinstance(value, int | float):
        raise PipelineError(ErrorCodes.CONFIG_INVALID, key=key, expected="number or null")
    return float(value)


def config_from_dict(data: dict[str, Any], project_root: Path) -> PipelineConfig:
    """
    dict(YAML 파싱 결과) → PipelineConfig.

    Args:
        data: 설정 데이터
        project_root: 상대 경로 기준 디렉토리

    Returns:
        PipelineConfig

    Raises:
        PipelineError: CONFIG_INVALID
    """
    root = project_root.resolve()
    paths = _section(data, "paths")
    entries = _section(data, "entries")
    localize = _section(data, "localize")
    discovery = _section(data, "discovery")
    tokens = _section(data, "tokens")
    bundler = _section(data, "bundler")

    source_root = root / paths.get("source_root", c.DEFAULT_SOURCE_ROOT)
    output_root = root / paths.get("output_root", c.DEFAULT_OUTPUT_ROOT)
    metadata_name = paths.get("metadata_dir", c.DEFAULT_METADATA_DIR)
    manifest = paths.get("manifest")
    manifest_path = (
        root / manifest if manifest else output_root / metadata_name / "manifest.json"
    )
    report = paths.get("report")
    download_dir = localize.get("download_dir")

    theme_entries = _str_tuple(discovery, "theme_entries", c.DEFAULT_THEME_ENTRIES)
    html_entries = _str_tuple(localize, "html_entries", theme_entries)

    return PipelineConfig(
        project_root=root,
        source_root=source_root,
        output_root=output_root,
        manifest_path=manifest_path,
        metadata_dir=output_root / metadata_name,
        icons_dir=root / paths.get("icons_dir", c.DEFAULT_ICONS_DIR),
        icons_dest=paths.get("icons_dest", c.DEFAULT_ICONS_DEST),
        report_path=root / report if report else None,
        script_entry=entries.get("script", c.DEFAULT_SCRIPT_ENTRY),
        stylesheet=entries.get("stylesheet", c.DEFAULT_STYLESHEET),
        css_root=source_root / localize.get("css_root", c.DEFAULT_CSS_ROOT),
        html_entries=tuple(source_root / name for name in html_entries),
        download_dir=root / download_dir if download_dir else None,
        fetch_timeout=_optional_float(localize, "timeout"),
        template_globs=_str_tuple(discovery, "templates", c.DEFAULT_TEMPLATE_GLOBS),
        module_globs=_str_tuple(discovery, "modules", c.DEFAULT_MODULE_GLOBS),
        theme_entries=theme_entries,
        asset_dirs=_str_tuple(discovery, "asset_dirs", c.DEFAULT_ASSET_DIRS),
        css_token=tokens.get("css", c.DEFAULT_CSS_TOKEN),
        js_token=tokens.get("js", c.DEFAULT_JS_TOKEN),
        img_token=tokens.get("img", c.DEFAULT_IMG_TOKEN),
        theme_variable=tokens.get("theme_variable", c.DEFAULT_THEME_VARIABLE),
        bundler_command=_command(bundler, "command", c.DEFAULT_BUNDLER_COMMAND),
        preview_command=_command(bundler, "preview_command", c.DEFAULT_PREVIEW_COMMAND),
        strict=bool(data.get("strict", False)),
    )


def load_config(config_path: Path | None = None, project_root: Path | None = None) -> PipelineConfig:
    """
    설정 파일 로드.

    config_path가 없거나 파일이 없으면 기본값 사용.

    Args:
        config_path: themebuild.yaml 경로
        project_root: 프로젝트 루트 (기본: 설정 파일 디렉토리 또는 cwd)

    Returns:
        PipelineConfig
    """
    if project_root is None:
        project_root = config_path.parent if config_path else Path.cwd()

    if config_path is None or not config_path.exists():
        return config_from_dict({}, project_root)

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise PipelineError(
            ErrorCodes.CONFIG_INVALID,
            path=str(config_path),
            error=str(e),
        ) from e

    if not isinstance(data, dict):
        raise PipelineError(
            ErrorCodes.CONFIG_INVALID,
            path=str(config_path),
            expected="mapping",
        )

    return config_from_dict(data, project_root)

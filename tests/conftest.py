"""
Pytest fixtures for the build pipeline tests.

테스트 구성:
- 임시 프로젝트 트리 (src/, dist/.vite/manifest.json, .icons/)
- 네트워크 없는 fetcher (FakeFetcher)
"""

import json
from pathlib import Path

import httpx
import pytest

from themebuild.core.config import PipelineConfig
from themebuild.core.logging import create_run_report
from themebuild.domain.schemas import FetchResponse
from themebuild.phases.base import BuildContext

# =============================================================================
# Fake Fetcher
# =============================================================================


class FakeFetcher:
    """
    URL → (status, body) 매핑 기반 fetcher.

    매핑에 없는 URL은 404, Exception 값이면 그대로 raise.
    """

    def __init__(self, responses: dict | None = None) -> None:
        self.responses = responses or {}
        self.calls: list[str] = []

    def fetch(self, url: str) -> FetchResponse:
        self.calls.append(url)
        value = self.responses.get(url, (404, b""))
        if isinstance(value, Exception):
            raise value
        status, body = value
        return FetchResponse(status_code=status, content=body)


@pytest.fixture
def fake_fetcher() -> FakeFetcher:
    return FakeFetcher()


@pytest.fixture
def connect_error() -> httpx.ConnectError:
    return httpx.ConnectError("connection refused")


# =============================================================================
# Project Fixtures
# =============================================================================

INDEX_HTML = """<!DOCTYPE html>
<html>
<head>
  <link rel="stylesheet" href="style.css">
  <script type="module" src="main.js"></script>
</head>
<body>
  <img src="img/logo.png" alt="logo">
  <{include file="templates/blocks/header.tpl"}>
</body>
</html>
"""

MANIFEST = {
    "src/js/main.js": {
        "file": "assets/js/main.9f8.js",
        "src": "src/js/main.js",
        "isEntry": True,
    },
}


def write(path: Path, content: str | bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    if isinstance(content, bytes):
        path.write_bytes(content)
    else:
        path.write_text(content, encoding="utf-8")
    return path


@pytest.fixture
def project_dir(tmp_path: Path) -> Path:
    """
    테마 프로젝트 트리.

    포함:
    - src/templates/index.html, src/templates/blocks/header.tpl (glob 대상 아님)
    - src/modules/news/templates/news_index.html.tpl
    - src/theme.html
    - src/css/main.css
    - src/img/logo.png, src/fonts/roboto.woff2
    - .icons/favicon.ico, .icons/android/icon-192.png
    - dist/.vite/manifest.json
    """
    root = tmp_path / "project"
    src = root / "src"

    write(src / "templates" / "index.html", INDEX_HTML)
    write(src / "templates" / "blocks" / "header.tpl", "<header>header</header>\n")
    write(
        src / "modules" / "news" / "templates" / "news_index.html.tpl",
        '<{include file="modules/news/templates/blocks/item.tpl"}>\n'
        '<img src="../img/news.png">\n',
    )
    write(
        src / "theme.html",
        '<link rel="stylesheet" href="css/theme.css">\n'
        '<script src="js/main.js"></script>\n',
    )
    write(src / "css" / "main.css", "body { color: black; }\n")
    write(src / "img" / "logo.png", b"\x89PNG fake logo")
    write(src / "fonts" / "roboto.woff2", b"wOF2 fake font")
    write(root / ".icons" / "favicon.ico", b"ico")
    write(root / ".icons" / "android" / "icon-192.png", b"png192")
    write(root / "dist" / ".vite" / "manifest.json", json.dumps(MANIFEST))

    return root


@pytest.fixture
def config(project_dir: Path) -> PipelineConfig:
    """기본 레이아웃 설정."""
    return PipelineConfig.defaults(project_dir)


@pytest.fixture
def build_ctx(config: PipelineConfig) -> BuildContext:
    """매니페스트 없는 BuildContext."""
    return BuildContext(config=config, report=create_run_report("test"))

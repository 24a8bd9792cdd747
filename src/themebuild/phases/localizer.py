"""
외부 리소스 로컬화 (pre-build).

규칙:
- 대상: css_root 아래 모든 *.css + html 엔트리 파일
- CSS @import / url() 의 http(s) URL, HTML 계열 파일은 <link href> 도 포함
- URL별 1회 다운로드 (status 200만 성공), 실패 시 경고 후 원본 URL 유지
- 성공 시 URL 문자열(정규식 이스케이프)을 상대 경로로 치환하고 원본 파일에 다시 기록
- 파일 단위, URL 단위 순차 처리 (병렬 다운로드 없음)
"""

import logging
import os
import posixpath
import re
from pathlib import Path
from typing import Protocol
from urllib.parse import unquote, urlsplit

import httpx

from themebuild.core.fsio import write_bytes, write_text
from themebuild.domain.constants import FALLBACK_LOCAL_NAME, HTML_LIKE_SUFFIXES
from themebuild.domain.errors import ErrorCodes, PipelineError
from themebuild.domain.schemas import ExternalResourceRef, FetchResponse
from themebuild.phases.base import BuildContext, PipelinePhase

logger = logging.getLogger(__name__)

# =============================================================================
# URL extraction
# =============================================================================

CSS_IMPORT_PATTERN = re.compile(
    r"""@import\s+(?:url\(\s*)?["']?(?P<url>https?://[^"')\s;]+)""",
    re.IGNORECASE,
)
CSS_URL_PATTERN = re.compile(
    r"""url\(\s*["']?(?P<url>https?://[^"')\s]+)""",
    re.IGNORECASE,
)
LINK_TAG_PATTERN = re.compile(r"<link\b[^>]*>", re.IGNORECASE)
LINK_HREF_PATTERN = re.compile(
    r"""\bhref\s*=\s*["']?(?P<url>https?://[^"'\s>]+)""",
    re.IGNORECASE,
)
# URL 직후 경계 (더 긴 URL의 앞부분만 치환되는 것 방지)
_URL_END = r"""(?=["')\s;>]|$)"""


def is_html_like(path: Path) -> bool:
    return path.name.lower().endswith(HTML_LIKE_SUFFIXES)


def extract_urls(content: str, html: bool = False) -> list[str]:
    """
    content에서 외부 URL 추출 (중복 제거, 처음 등장한 순서).

    Args:
        content: 파일 내용
        html: True면 <link href> 도 검사

    Returns:
        URL 목록
    """
    found: list[tuple[int, str]] = []
    for pattern in (CSS_IMPORT_PATTERN, CSS_URL_PATTERN):
        found.extend((m.start(), m.group("url")) for m in pattern.finditer(content))

    if html:
        for tag in LINK_TAG_PATTERN.finditer(content):
            href = LINK_HREF_PATTERN.search(tag.group(0))
            if href:
                found.append((tag.start(), href.group("url")))

    urls: list[str] = []
    for _, url in sorted(found, key=lambda item: item[0]):
        if url not in urls:
            urls.append(url)
    return urls


def local_name_for(url: str, fallback: str = FALLBACK_LOCAL_NAME) -> str:
    """
    URL 경로의 basename (비어 있으면 fallback).

    https://example.com/a/fonts.css?v=1 → fonts.css
    https://example.com/ → external.css
    """
    path = unquote(urlsplit(url).path)
    name = posixpath.basename(path.rstrip("/")) if path.strip("/") else ""
    return name or fallback


def relative_reference(target: Path, from_dir: Path) -> str:
    """
    from_dir 기준 target 상대 경로 (POSIX, 같은 디렉토리면 ./name).
    """
    rel = Path(os.path.relpath(target, from_dir)).as_posix()
    if not rel.startswith("."):
        rel = f"./{rel}"
    return rel


# =============================================================================
# Fetcher
# =============================================================================


class Fetcher(Protocol):
    """HTTP GET 인터페이스 (테스트에서 교체 가능)."""

    def fetch(self, url: str) -> FetchResponse:
        ...


class HttpxFetcher:
    """
    httpx 기반 blocking GET.

    timeout=None이면 무제한 대기 (원격 서버가 응답하지 않으면 멈춤).
    """

    def __init__(
        self,
        timeout: float | None = None,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self.timeout = timeout
        self._client = httpx.Client(
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )

    def fetch(self, url: str) -> FetchResponse:
        response = self._client.get(url)
        return FetchResponse(status_code=response.status_code, content=response.content)

    def close(self) -> None:
        self._client.close()


# =============================================================================
# Localizer Phase
# =============================================================================


class ExternalResourceLocalizer(PipelinePhase):
    """
    원격 스타일시트를 내려받아 로컬 참조로 바꾸는 pre-build phase.
    """

    name = "localize"

    def __init__(self, fetcher: Fetcher | None = None) -> None:
        self._fetcher = fetcher
        self._owns_fetcher = fetcher is None
        self._resources: dict[str, ExternalResourceRef] = {}
        self._claimed: dict[Path, str] = {}  # local_path → url

    def _get_fetcher(self, ctx: BuildContext) -> Fetcher:
        if self._fetcher is None:
            self._fetcher = HttpxFetcher(timeout=ctx.config.fetch_timeout)
        return self._fetcher

    def discover(self, ctx: BuildContext) -> list[Path]:
        """로컬화 대상 파일 목록 (css_root/**/*.css + html 엔트리)."""
        config = ctx.config
        files: list[Path] = []
        if config.css_root is not None and config.css_root.is_dir():
            files.extend(sorted(config.css_root.rglob("*.css")))
        for entry in config.html_entries:
            if entry.is_file() and entry not in files:
                files.append(entry)
        return files

    def before_build(self, ctx: BuildContext) -> None:
        # 캐시는 실행 단위
        self._resources = {}
        self._claimed = {}
        files = self.discover(ctx)
        logger.info(f"Localizing external resources in {len(files)} file(s)")
        try:
            for path in files:
                self.localize_file(ctx, path)
        finally:
            if self._owns_fetcher and isinstance(self._fetcher, HttpxFetcher):
                self._fetcher.close()
                self._fetcher = None

    def localize_file(self, ctx: BuildContext, path: Path) -> str:
        """
        단일 파일 로컬화.

        Returns:
            (변경되었을 수 있는) 파일 내용

        Raises:
            PipelineError: WRITE_FAILED
        """
        try:
            content = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            self.warn(ctx, ErrorCodes.SOURCE_FILE_MISSING, str(path), "file disappeared before localization")
            return ""

        original = content
        for url in extract_urls(content, html=is_html_like(path)):
            resource = self._ensure_downloaded(ctx, url, path.parent)
            if not resource.downloaded or resource.local_path is None:
                continue
            local_ref = relative_reference(resource.local_path, path.parent)
            content = re.sub(re.escape(url) + _URL_END, lambda _m: local_ref, content)
            self.ok(ctx, "rewrite_url", str(path), reason=f"{url} -> {local_ref}")

        if content != original:
            write_text(path, content)
            logger.info(f"Rewrote external references in {path}")
        return content

    def _target_for(self, ctx: BuildContext, url: str, from_dir: Path) -> Path:
        """
        다운로드 대상 경로.

        이번 실행에서 이미 쓴 경로와 디스크에 있는 파일(참조 파일 자신 포함)은
        덮어쓰지 않고 -1, -2 ... 접미사를 붙인다.
        """
        base_dir = ctx.config.download_dir or from_dir
        name = local_name_for(url)
        candidate = base_dir / name
        stem, suffix = os.path.splitext(name)
        counter = 1
        while candidate in self._claimed or candidate.exists():
            candidate = base_dir / f"{stem}-{counter}{suffix}"
            counter += 1
        return candidate

    def _ensure_downloaded(self, ctx: BuildContext, url: str, from_dir: Path) -> ExternalResourceRef:
        cached = self._resources.get(url)
        if cached is not None:
            return cached

        target = self._target_for(ctx, url, from_dir)
        resource = ExternalResourceRef(url=url, local_name=target.name)
        self._resources[url] = resource

        try:
            response = self._get_fetcher(ctx).fetch(url)
        except httpx.HTTPError as e:
            self.warn(ctx, ErrorCodes.DOWNLOAD_FAILED, url, f"request failed: {e}", action="download")
            return resource

        if response.status_code != 200:
            self.warn(
                ctx,
                ErrorCodes.DOWNLOAD_FAILED,
                url,
                f"unexpected status {response.status_code}",
                action="download",
            )
            return resource

        try:
            write_bytes(target, response.content)
        except PipelineError:
            logger.error(f"Could not save {url} to {target}")
            raise

        self._claimed[target] = url
        resource.downloaded = True
        resource.local_path = target
        self.ok(ctx, "download", url, reason=str(target))
        logger.info(f"Downloaded {url} -> {target}")
        return resource

    @property
    def resources(self) -> list[ExternalResourceRef]:
        return list(self._resources.values())

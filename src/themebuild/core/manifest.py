"""
빌드 매니페스트 로드/조회.

규칙:
- 매니페스트는 번들러가 생성, 실행당 1회 로드 (읽기 전용)
- 파일 없음 → MANIFEST_MISSING, 파싱 실패 → MANIFEST_CORRUPT
- 조회(resolve_*)는 절대 예외를 던지지 않음: 없으면 None
"""

import json
import logging
import posixpath
from pathlib import Path

from themebuild.domain.errors import ErrorCodes, PipelineError
from themebuild.domain.schemas import BuildManifest, ManifestEntry

logger = logging.getLogger(__name__)


def load_manifest(path: Path) -> BuildManifest:
    """
    매니페스트 JSON 로드.

    형식: {"src/js/main.js": {"file": "assets/js/main.ABC.js", "css": [...]}}

    Args:
        path: manifest.json 경로

    Returns:
        BuildManifest

    Raises:
        PipelineError: MANIFEST_MISSING, MANIFEST_CORRUPT
    """
    if not path.is_file():
        raise PipelineError(ErrorCodes.MANIFEST_MISSING, path=str(path))

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise PipelineError(
            ErrorCodes.MANIFEST_CORRUPT,
            path=str(path),
            error=str(e),
        ) from e

    if not isinstance(data, dict):
        raise PipelineError(
            ErrorCodes.MANIFEST_CORRUPT,
            path=str(path),
            error="top-level value is not an object",
        )

    manifest: BuildManifest = {}
    for key, record in data.items():
        if not isinstance(record, dict) or "file" not in record:
            logger.warning(f"Ignoring malformed manifest record: {key!r}")
            continue
        manifest[str(key)] = ManifestEntry.from_dict(record)

    logger.info(f"Loaded manifest with {len(manifest)} entries from {path}")
    return manifest


def find_entry(manifest: BuildManifest | None, key: str) -> ManifestEntry | None:
    """
    엔트리 조회.

    정확한 키가 없으면 키의 basename이 같은 엔트리로 대체
    (예: "main.js" ↔ "src/js/main.js"). 후보가 여러 개면 None.
    """
    if not manifest:
        return None

    entry = manifest.get(key)
    if entry is not None:
        return entry

    basename = posixpath.basename(key)
    candidates = [
        e for k, e in manifest.items() if posixpath.basename(k) == basename
    ]
    if len(candidates) == 1:
        return candidates[0]
    return None


def resolve_entry(manifest: BuildManifest | None, key: str) -> str | None:
    """
    엔트리 키 → 해시된 출력 경로.

    Returns:
        출력 경로 또는 None (알 수 없는 키)
    """
    entry = find_entry(manifest, key)
    if entry is None or not entry.file:
        return None
    return entry.file


def resolve_css(manifest: BuildManifest | None, key: str) -> str | None:
    """엔트리가 생성한 첫 번째 css 출력 경로 (없으면 None)."""
    entry = find_entry(manifest, key)
    if entry is None or not entry.css:
        return None
    return entry.css[0]

"""
파일시스템 유틸: 원자적 쓰기, 복사, 삭제, 실행 락

규칙:
- 모든 쓰기는 부모 디렉토리를 먼저 생성한 뒤 수행
- 중간 상태 없음: temp → rename
- 쓰기/복사 실패 → PipelineError(WRITE_FAILED), 호출부에서 중단
- 동시 실행 방지: FileLock (timeout 시 LOCK_TIMEOUT)
"""

import json
import logging
import os
import shutil
import tempfile
from collections.abc import Generator
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from filelock import FileLock, Timeout

from themebuild.domain.errors import ErrorCodes, PipelineError

logger = logging.getLogger(__name__)

# 락 timeout (초)
LOCK_TIMEOUT = 30.0

# =============================================================================
# Run Lock
# =============================================================================


@contextmanager
def run_lock(lock_path: Path, timeout: float = LOCK_TIMEOUT) -> Generator[None, None, None]:
    """
    프로젝트 단위 실행 락.

    같은 소스/출력 트리에 대한 동시 빌드 방지.

    Args:
        lock_path: 락 파일 경로
        timeout: 대기 시간 (초)

    Raises:
        PipelineError: LOCK_TIMEOUT
    """
    lock_path.parent.mkdir(parents=True, exist_ok=True)
    lock = FileLock(lock_path, timeout=timeout)

    try:
        lock.acquire()
    except Timeout as e:
        raise PipelineError(
            ErrorCodes.LOCK_TIMEOUT,
            lock_path=str(lock_path),
            timeout=timeout,
        ) from e

    try:
        yield
    finally:
        lock.release()


# =============================================================================
# Atomic Write
# =============================================================================


def _atomic_write(path: Path, data: bytes) -> None:
    dir_path = path.parent
    temp_path = None
    try:
        dir_path.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            mode="wb",
            dir=dir_path,
            suffix=".tmp",
            delete=False,
        ) as f:
            temp_path = Path(f.name)
            f.write(data)
            f.flush()

        os.replace(temp_path, path)  # 원자적
    except OSError as e:
        if temp_path and temp_path.exists():
            try:
                temp_path.unlink()
            except OSError:
                pass
        raise PipelineError(
            ErrorCodes.WRITE_FAILED,
            path=str(path),
            errno=e.errno,
            error=str(e),
        ) from e


def write_text(path: Path, content: str) -> None:
    """
    텍스트 파일 원자적 쓰기 (UTF-8).

    Raises:
        PipelineError: WRITE_FAILED
    """
    _atomic_write(path, content.encode("utf-8"))


def write_bytes(path: Path, data: bytes) -> None:
    """
    바이너리 파일 원자적 쓰기.

    Raises:
        PipelineError: WRITE_FAILED
    """
    _atomic_write(path, data)


def write_json(path: Path, data: dict[str, Any]) -> None:
    """JSON 원자적 쓰기 (리포트 저장용)."""
    _atomic_write(
        path,
        json.dumps(data, indent=2, ensure_ascii=False).encode("utf-8"),
    )


# =============================================================================
# Copy / Remove
# =============================================================================


def copy_file(src: Path, dst: Path) -> Path:
    """
    파일을 그대로 복사 (내용 변환 없음).

    Args:
        src: 원본 파일
        dst: 대상 파일 경로 (부모 디렉토리 자동 생성)

    Returns:
        dst

    Raises:
        PipelineError: WRITE_FAILED
    """
    try:
        dst.parent.mkdir(parents=True, exist_ok=True)
        shutil.copy2(str(src), str(dst))
    except OSError as e:
        raise PipelineError(
            ErrorCodes.WRITE_FAILED,
            src=str(src),
            path=str(dst),
            errno=e.errno,
            error=str(e),
        ) from e
    return dst


def remove_tree(path: Path) -> bool:
    """
    디렉토리 재귀 삭제.

    Returns:
        True if removed, False if already absent

    Raises:
        PipelineError: WRITE_FAILED
    """
    if not path.exists():
        return False

    try:
        if path.is_dir() and not path.is_symlink():
            shutil.rmtree(path)
        else:
            path.unlink()
    except OSError as e:
        raise PipelineError(
            ErrorCodes.WRITE_FAILED,
            path=str(path),
            operation="remove",
            error=str(e),
        ) from e
    return True


def relative_to_root(path: Path, root: Path) -> Path:
    """
    root 기준 상대 경로.

    root 밖의 경로면 파일명만 반환.
    """
    try:
        return path.resolve().relative_to(root.resolve())
    except ValueError:
        logger.warning(f"{path} is outside {root}; using file name only")
        return Path(path.name)

"""
Error definitions for the build pipeline.

규칙:
- 복구 가능한 실패(다운로드, 매니페스트 누락 등) → 경고로 기록 후 계속
- 쓰기 실패/번들러 실패 → PipelineError 전파, 실행 중단
"""

from typing import Any


class PipelineError(Exception):
    """
    파이프라인 단계에서 발생하는 에러.

    code로 분류하고 context로 원인을 보존한다.
    호출부에서 복구 가능 여부를 판단한다 (RECOVERABLE_CODES 참조).

    Usage:
        raise PipelineError("WRITE_FAILED", path=str(dst), error=str(e))
    """

    def __init__(self, code: str, **context: Any) -> None:
        self.code = code
        self.context = context
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        ctx_str = ", ".join(f"{k}={v!r}" for k, v in self.context.items())
        return f"[{self.code}] {ctx_str}" if ctx_str else f"[{self.code}]"

    @property
    def recoverable(self) -> bool:
        return self.code in RECOVERABLE_CODES

    def to_dict(self) -> dict[str, Any]:
        """로그/JSON 직렬화용."""
        return {
            "code": self.code,
            **self.context,
        }


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCodes:
    """에러 코드 상수."""

    # === Manifest ===
    MANIFEST_MISSING = "MANIFEST_MISSING"
    MANIFEST_CORRUPT = "MANIFEST_CORRUPT"

    # === Localize ===
    DOWNLOAD_FAILED = "DOWNLOAD_FAILED"  # warning, not fatal

    # === Rewrite / Relocate ===
    SOURCE_FILE_MISSING = "SOURCE_FILE_MISSING"  # warning, skip file
    PASS_SKIPPED = "PASS_SKIPPED"  # warning (manifest 없음)
    ICONS_MISSING = "ICONS_MISSING"  # warning
    WRITE_FAILED = "WRITE_FAILED"

    # === Orchestration ===
    BUNDLER_FAILED = "BUNDLER_FAILED"
    LOCK_TIMEOUT = "LOCK_TIMEOUT"
    CONFIG_INVALID = "CONFIG_INVALID"


RECOVERABLE_CODES = frozenset({
    ErrorCodes.MANIFEST_MISSING,
    ErrorCodes.MANIFEST_CORRUPT,
    ErrorCodes.DOWNLOAD_FAILED,
    ErrorCodes.SOURCE_FILE_MISSING,
    ErrorCodes.PASS_SKIPPED,
    ErrorCodes.ICONS_MISSING,
})

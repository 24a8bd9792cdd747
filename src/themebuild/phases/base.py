"""
Pipeline phase 추상 인터페이스.

lifecycle:
- before_build: 번들러 컴파일 전 (소스 파일 변경 가능)
- after_build: 번들러 완료 후 (매니페스트 사용, 출력 트리에만 기록)

각 phase는 BuildContext를 통해 설정/매니페스트/리포트에 접근한다.
"""

import logging
from abc import ABC
from dataclasses import dataclass

from themebuild.core.config import PipelineConfig
from themebuild.core.logging import emit_warning, record_step
from themebuild.domain.schemas import BuildManifest, RunReport, StepStatus

logger = logging.getLogger(__name__)


@dataclass
class BuildContext:
    """실행당 1개, 모든 phase가 공유."""
    config: PipelineConfig
    report: RunReport
    manifest: BuildManifest | None = None

    @property
    def manifest_loaded(self) -> bool:
        return self.manifest is not None


class PipelinePhase(ABC):
    """
    파이프라인 단계.

    하위 클래스는 필요한 lifecycle 메서드만 오버라이드한다.
    복구 가능한 실패는 warn()으로 기록하고 계속 진행,
    치명적 실패는 PipelineError를 그대로 전파한다.
    """

    name: str = "phase"

    def before_build(self, ctx: BuildContext) -> None:
        """번들러 실행 전 hook (기본: 아무것도 안 함)."""

    def after_build(self, ctx: BuildContext) -> None:
        """번들러 완료 후 hook (기본: 아무것도 안 함)."""

    # -------------------------------------------------------------------------
    # Report helpers
    # -------------------------------------------------------------------------

    def ok(
        self,
        ctx: BuildContext,
        action: str,
        target: str = "",
        reason: str | None = None,
    ) -> None:
        record_step(ctx.report, self.name, action, target, StepStatus.SUCCESS, reason=reason)

    def skip(self, ctx: BuildContext, action: str, target: str = "", reason: str | None = None) -> None:
        logger.debug(f"[{self.name}] skipped {action} {target}: {reason}")
        record_step(ctx.report, self.name, action, target, StepStatus.SKIPPED, reason=reason)

    def warn(
        self,
        ctx: BuildContext,
        code: str,
        target: str,
        message: str,
        action: str | None = None,
    ) -> None:
        emit_warning(ctx.report, code, self.name, target, message, action=action)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"

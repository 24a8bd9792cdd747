"""
빌드 파이프라인 오케스트레이터.

흐름 (build):
1. before_build: Localizer (소스 파일 변경)
2. 번들러 실행
3. after_build: 매니페스트 로드 → Rewriter → Relocator → Sanitizer (마지막)

규칙:
- 실행당 1개의 BuildContext/RunReport
- 복구 가능한 실패는 리포트에 degraded로 남기고 계속
- 치명적 실패(WRITE_FAILED, BUNDLER_FAILED 등)는 리포트를 failed로 완료한 뒤 전파
- 동시 실행 방지: 프로젝트 락
"""

import logging
from collections.abc import Callable, Sequence

from themebuild.bundler import BundlerRunner
from themebuild.core.config import PipelineConfig
from themebuild.core.fsio import run_lock
from themebuild.core.logging import (
    complete_run_report,
    create_run_report,
    emit_warning,
    record_step,
    save_run_report,
)
from themebuild.core.manifest import load_manifest
from themebuild.domain.errors import PipelineError
from themebuild.domain.schemas import RunReport
from themebuild.phases.base import BuildContext, PipelinePhase
from themebuild.phases.localizer import ExternalResourceLocalizer, Fetcher
from themebuild.phases.relocator import AssetRelocator
from themebuild.phases.rewriter import TemplateRewriter
from themebuild.phases.sanitizer import OutputSanitizer

logger = logging.getLogger(__name__)

Stage = Callable[[BuildContext], None]


def default_phases(fetcher: Fetcher | None = None) -> list[PipelinePhase]:
    """기본 phase 구성 (순서 = 실행 순서, Sanitizer는 항상 마지막)."""
    return [
        ExternalResourceLocalizer(fetcher=fetcher),
        TemplateRewriter(),
        AssetRelocator(),
        OutputSanitizer(),
    ]


class BuildPipeline:
    """
    phase 목록을 lifecycle 순서대로 실행.

    Usage:
        pipeline = BuildPipeline(load_config(Path("themebuild.yaml")))
        report = pipeline.build()
    """

    def __init__(
        self,
        config: PipelineConfig,
        phases: Sequence[PipelinePhase] | None = None,
        bundler: BundlerRunner | None = None,
    ) -> None:
        self.config = config
        self.phases = list(phases) if phases is not None else default_phases()
        self.bundler = bundler
        self.last_report: RunReport | None = None

    # -------------------------------------------------------------------------
    # Commands
    # -------------------------------------------------------------------------

    def build(self, preview: bool = False, skip_bundler: bool = False) -> RunReport:
        """pre-build hook → 번들러 → completion hook."""
        stages: list[Stage] = [self._before_build]
        if not skip_bundler:
            stages.append(lambda ctx: self._run_bundler(ctx, preview))
        stages.append(self._after_build)
        return self._execute("build", stages)

    def localize(self) -> RunReport:
        """pre-build hook만 실행."""
        return self._execute("localize", [self._before_build])

    def postbuild(self) -> RunReport:
        """completion hook만 실행 (번들러는 별도로 실행된 경우)."""
        return self._execute("postbuild", [self._after_build])

    def clean(self) -> RunReport:
        """메타데이터 디렉토리만 정리."""
        return self._execute("clean", [self._sanitize])

    # -------------------------------------------------------------------------
    # Stages
    # -------------------------------------------------------------------------

    def _before_build(self, ctx: BuildContext) -> None:
        for phase in self.phases:
            phase.before_build(ctx)

    def _run_bundler(self, ctx: BuildContext, preview: bool) -> None:
        bundler = self.bundler
        if bundler is None:
            command = self.config.preview_command if preview else self.config.bundler_command
            bundler = BundlerRunner(command, cwd=self.config.project_root)
        bundler.run()
        record_step(ctx.report, "bundler", "preview" if preview else "build", " ".join(bundler.command))

    def _after_build(self, ctx: BuildContext) -> None:
        self._load_manifest(ctx)
        for phase in self.phases:
            phase.after_build(ctx)

    def _sanitize(self, ctx: BuildContext) -> None:
        for phase in self.phases:
            if isinstance(phase, OutputSanitizer):
                phase.after_build(ctx)

    def _load_manifest(self, ctx: BuildContext) -> None:
        path = self.config.manifest_path
        try:
            ctx.manifest = load_manifest(path)
        except PipelineError as e:
            if self.config.strict or not e.recoverable:
                raise
            emit_warning(
                ctx.report,
                e.code,
                "manifest",
                str(path),
                "manifest unavailable; css/js references left unresolved",
                action="load",
            )
            ctx.manifest = None
            return
        record_step(ctx.report, "manifest", "load", str(path), reason=f"{len(ctx.manifest)} entries")

    # -------------------------------------------------------------------------
    # Execution
    # -------------------------------------------------------------------------

    def _execute(self, command: str, stages: Sequence[Stage]) -> RunReport:
        report = create_run_report(command)
        self.last_report = report
        ctx = BuildContext(config=self.config, report=report)

        try:
            with run_lock(self.config.lock_path):
                for stage in stages:
                    stage(ctx)
        except PipelineError as e:
            logger.error(f"{command} failed: {e}")
            complete_run_report(report, success=False, error_code=e.code, error_context=e.context)
            self._save_report(report)
            raise

        complete_run_report(report, success=True)
        self._save_report(report)
        return report

    def _save_report(self, report: RunReport) -> None:
        if self.config.report_path is None:
            return
        path = save_run_report(report, self.config.report_path)
        logger.info(f"Run report saved to {path}")

"""번들러 메타데이터 디렉토리 정리 (post-build 마지막 단계)."""

import logging

from themebuild.core.fsio import remove_tree
from themebuild.phases.base import BuildContext, PipelinePhase

logger = logging.getLogger(__name__)


class OutputSanitizer(PipelinePhase):
    """출력 트리에서 .vite 등 중간 메타데이터 삭제. 이미 없으면 no-op."""

    name = "sanitize"

    def after_build(self, ctx: BuildContext) -> None:
        self.clean(ctx)

    def clean(self, ctx: BuildContext) -> bool:
        target = ctx.config.metadata_dir
        if remove_tree(target):
            logger.info(f"Removed bundler metadata directory {target}")
            self.ok(ctx, "remove_metadata", str(target))
            return True
        self.skip(ctx, "remove_metadata", str(target), "already absent")
        return False

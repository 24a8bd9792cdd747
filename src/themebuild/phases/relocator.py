"""
바이너리 에셋 복사 (post-build).

- img/, fonts/ 아래 모든 파일 → 출력 트리 같은 상대 경로로 그대로 복사
- 아이콘 생성기 출력 → output_root/img/icons/ 로 평탄화 복사 (파일명만 유지)
"""

import logging
from pathlib import Path

from themebuild.core.fsio import copy_file, relative_to_root
from themebuild.domain.errors import ErrorCodes
from themebuild.phases.base import BuildContext, PipelinePhase

logger = logging.getLogger(__name__)


def _files_under(directory: Path) -> list[Path]:
    return sorted(p for p in directory.rglob("*") if p.is_file())


class AssetRelocator(PipelinePhase):
    """이미지/폰트/아이콘을 출력 트리로 옮기는 post-build phase."""

    name = "relocate"

    def after_build(self, ctx: BuildContext) -> None:
        copied = self.copy_assets(ctx)
        icons = self.copy_icons(ctx)
        logger.info(f"Copied {copied} asset(s) and {icons} icon file(s)")

    def copy_assets(self, ctx: BuildContext) -> int:
        """img/, fonts/ 미러 복사. 복사한 파일 수 반환."""
        config = ctx.config
        total = 0
        for name in config.asset_dirs:
            source_dir = config.source_root / name
            if not source_dir.is_dir():
                self.skip(ctx, "copy_assets", str(source_dir), "directory not found")
                continue
            files = _files_under(source_dir)
            for path in files:
                dst = config.output_root / relative_to_root(path, config.source_root)
                copy_file(path, dst)
            total += len(files)
            self.ok(ctx, "copy_assets", str(source_dir), reason=f"{len(files)} file(s)")
        return total

    def copy_icons(self, ctx: BuildContext) -> int:
        """
        생성된 아이콘 평탄화 복사.

        같은 파일명이 여러 하위 디렉토리에 있으면 마지막 것이 남는다.
        """
        config = ctx.config
        if not config.icons_dir.is_dir():
            self.warn(
                ctx,
                ErrorCodes.ICONS_MISSING,
                str(config.icons_dir),
                "icon output directory not found; icons not copied",
                action="copy_icons",
            )
            return 0

        dest_dir = config.output_root / config.icons_dest
        files = _files_under(config.icons_dir)
        for path in files:
            copy_file(path, dest_dir / path.name)
        self.ok(ctx, "copy_icons", str(dest_dir), reason=f"{len(files)} file(s)")
        return len(files)

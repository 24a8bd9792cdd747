"""
템플릿 재작성 (post-build).

규칙:
- 탐색: templates/, modules/ glob + 테마 엔트리 파일 (source_root 기준)
- 대상 경로: output_root / (source_root 기준 상대 경로), 부모 디렉토리 먼저 생성
- pass 순서 고정 (rewrite/passes.py 참조)
- 소스 파일은 절대 수정하지 않음
- 매니페스트 없음 → css/js pass만 건너뜀, 나머지 pass와 복사는 계속
"""

import logging
import posixpath
from pathlib import Path

from themebuild.core.fsio import relative_to_root, write_text
from themebuild.core.manifest import resolve_css, resolve_entry
from themebuild.domain.errors import ErrorCodes
from themebuild.domain.schemas import TemplateCategory, TemplateFile
from themebuild.phases.base import BuildContext, PipelinePhase
from themebuild.rewrite.passes import PASSES, RewriteContext, RewritePass, apply_passes

logger = logging.getLogger(__name__)


def discover_templates(ctx: BuildContext) -> list[TemplateFile]:
    """
    재작성 대상 템플릿 탐색.

    같은 파일이 여러 glob에 걸리면 처음 분류만 유지.

    Returns:
        TemplateFile 목록 (content는 아직 비어 있음)
    """
    config = ctx.config
    root = config.source_root
    found: dict[Path, TemplateCategory] = {}

    def add(paths: list[Path], category: TemplateCategory) -> None:
        for path in sorted(paths):
            if path.is_file() and path not in found:
                found[path] = category

    for pattern in config.template_globs:
        add(list(root.glob(pattern)), TemplateCategory.TEMPLATE)
    for pattern in config.module_globs:
        add(list(root.glob(pattern)), TemplateCategory.MODULE)
    add([root / name for name in config.theme_entries], TemplateCategory.THEME_ROOT)

    return [TemplateFile(source_path=p, category=c) for p, c in found.items()]


def build_rewrite_context(ctx: BuildContext) -> RewriteContext:
    """
    설정 + 매니페스트 → RewriteContext.

    매니페스트가 없으면 stylesheet/script가 None → css/js pass 건너뜀.
    """
    config = ctx.config
    stylesheet: str | None = None
    script: str | None = None

    if ctx.manifest_loaded:
        script = resolve_entry(ctx.manifest, config.script_entry)
        stylesheet = resolve_css(ctx.manifest, config.script_entry) or config.stylesheet

    entry_name = posixpath.basename(config.script_entry)
    return RewriteContext(
        stylesheet=stylesheet,
        script=script,
        stylesheet_name=posixpath.basename(config.stylesheet),
        script_stem=posixpath.splitext(entry_name)[0],
        css_token=config.css_token,
        js_token=config.js_token,
        img_token=config.img_token,
        theme_variable=config.theme_variable,
    )


class TemplateRewriter(PipelinePhase):
    """
    템플릿 참조를 해시된 빌드 결과물로 재작성하는 post-build phase.
    """

    name = "rewrite"

    def __init__(self, passes: tuple[RewritePass, ...] = PASSES) -> None:
        self.passes = passes

    def after_build(self, ctx: BuildContext) -> None:
        rewrite_ctx = build_rewrite_context(ctx)
        self._report_unavailable_passes(ctx, rewrite_ctx)

        templates = discover_templates(ctx)
        logger.info(f"Rewriting {len(templates)} template(s)")
        for template in templates:
            self.rewrite_file(ctx, template, rewrite_ctx)

    def _report_unavailable_passes(self, ctx: BuildContext, rewrite_ctx: RewriteContext) -> None:
        for rewrite_pass in self.passes:
            if rewrite_pass.available(rewrite_ctx):
                continue
            if not ctx.manifest_loaded:
                reason = "manifest not loaded; references left unresolved"
            else:
                reason = f"entry {ctx.config.script_entry!r} not found in manifest"
            self.warn(
                ctx,
                ErrorCodes.PASS_SKIPPED,
                rewrite_pass.name,
                reason,
                action=f"pass_{rewrite_pass.name}",
            )

    def destination_for(self, ctx: BuildContext, source: Path) -> Path:
        """source_root 접두사를 떼고 output_root 아래로."""
        return ctx.config.output_root / relative_to_root(source, ctx.config.source_root)

    def rewrite_file(
        self,
        ctx: BuildContext,
        template: TemplateFile,
        rewrite_ctx: RewriteContext,
    ) -> TemplateFile | None:
        """
        단일 템플릿 재작성 후 대상 경로에 기록.

        Returns:
            기록된 TemplateFile (소스가 사라졌으면 None)

        Raises:
            PipelineError: WRITE_FAILED
        """
        source = template.source_path
        try:
            template.content = source.read_text(encoding="utf-8")
        except FileNotFoundError:
            self.warn(ctx, ErrorCodes.SOURCE_FILE_MISSING, str(source), "template vanished before rewrite")
            return None

        outcome = apply_passes(template.content, rewrite_ctx, self.passes)
        template.content = outcome.content
        template.destination = self.destination_for(ctx, source)

        write_text(template.destination, template.content)

        changed = len(outcome.changed_references)
        self.ok(
            ctx,
            "write",
            str(template.destination),
            reason=f"{template.category.value}: {changed} reference(s) rewritten",
        )
        logger.debug(f"{source} -> {template.destination} ({changed} reference(s))")
        return template

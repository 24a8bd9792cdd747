"""Rewrite passes: 템플릿 참조 재작성 규칙."""

from .passes import (
    PASSES,
    RewriteContext,
    RewriteOutcome,
    RewritePass,
    apply_passes,
    rewrite_assets,
    rewrite_css,
    rewrite_includes,
    rewrite_js,
)

__all__ = [
    "PASSES",
    "RewriteContext",
    "RewriteOutcome",
    "RewritePass",
    "apply_passes",
    "rewrite_css",
    "rewrite_js",
    "rewrite_assets",
    "rewrite_includes",
]

"""
Pipeline phases.

순서 (BuildPipeline 기본 구성):
- before_build: ExternalResourceLocalizer
- after_build: TemplateRewriter → AssetRelocator → OutputSanitizer
"""

from .base import BuildContext, PipelinePhase
from .localizer import ExternalResourceLocalizer, HttpxFetcher
from .relocator import AssetRelocator
from .rewriter import TemplateRewriter
from .sanitizer import OutputSanitizer

__all__ = [
    "BuildContext",
    "PipelinePhase",
    "ExternalResourceLocalizer",
    "HttpxFetcher",
    "TemplateRewriter",
    "AssetRelocator",
    "OutputSanitizer",
]

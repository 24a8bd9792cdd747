"""Domain layer: errors, schemas, constants."""

from .errors import ErrorCodes, PipelineError
from .schemas import (
    AssetReference,
    BuildManifest,
    ExternalResourceRef,
    ManifestEntry,
    RunReport,
    StepResult,
    StepStatus,
    TemplateCategory,
    TemplateFile,
)

__all__ = [
    "PipelineError",
    "ErrorCodes",
    "BuildManifest",
    "ManifestEntry",
    "TemplateCategory",
    "TemplateFile",
    "AssetReference",
    "ExternalResourceRef",
    "StepResult",
    "StepStatus",
    "RunReport",
]

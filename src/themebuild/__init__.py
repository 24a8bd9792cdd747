"""
themebuild: 번들러 빌드 결과물을 테마 템플릿에 연결하는 후처리 파이프라인.

구성:
- phases/: Localizer, Rewriter, Relocator, Sanitizer
- rewrite/: 순서 고정 재작성 pass
- core/: 설정, 매니페스트, 파일 IO, 실행 리포트
- domain/: 에러, 스키마, 상수
"""

from .core.config import PipelineConfig, load_config
from .domain.errors import ErrorCodes, PipelineError
from .pipeline import BuildPipeline, default_phases

__version__ = "0.1.0"

__all__ = [
    "BuildPipeline",
    "PipelineConfig",
    "PipelineError",
    "ErrorCodes",
    "default_phases",
    "load_config",
]

"""
Core layer: 설정, 매니페스트, 파일 IO, 실행 리포트.

역할:
- 설정 객체 생성 (config.py)
- 매니페스트 로드/조회 (manifest.py)
- 원자적 쓰기, 복사, 실행 락 (fsio.py)
- RunReport 기록 (logging.py)
"""

from .config import PipelineConfig, load_config
from .fsio import copy_file, remove_tree, run_lock, write_bytes, write_text
from .logging import (
    complete_run_report,
    create_run_report,
    emit_warning,
    record_step,
    save_run_report,
)
from .manifest import load_manifest, resolve_css, resolve_entry

__all__ = [
    # config
    "PipelineConfig",
    "load_config",
    # manifest
    "load_manifest",
    "resolve_entry",
    "resolve_css",
    # fsio
    "run_lock",
    "write_text",
    "write_bytes",
    "copy_file",
    "remove_tree",
    # logging
    "create_run_report",
    "record_step",
    "emit_warning",
    "complete_run_report",
    "save_run_report",
]

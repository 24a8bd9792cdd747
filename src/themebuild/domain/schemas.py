"""
Data schemas for the build pipeline.

규칙:
- BuildManifest는 읽기 전용 (번들러가 생성, 실행당 1회 로드)
- TemplateFile은 메모리에서만 변형, 대상 경로에만 기록
- 단계별 결과는 StepResult로 남기고 RunReport에 집계
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any

# =============================================================================
# Manifest Schemas
# =============================================================================

@dataclass(frozen=True)
class ManifestEntry:
    """매니페스트 출력 레코드."""
    file: str  # 해시된 출력 경로 (assets/js/main.ABC123.js)
    css: tuple[str, ...] = ()
    is_entry: bool = False

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ManifestEntry":
        css = data.get("css") or []
        if isinstance(css, str):
            css = [css]
        return cls(
            file=str(data.get("file", "")),
            css=tuple(str(c) for c in css),
            is_entry=bool(data.get("isEntry", False)),
        )


# entry key (src/js/main.js) → ManifestEntry
BuildManifest = dict[str, ManifestEntry]


# =============================================================================
# Template Schemas
# =============================================================================

class TemplateCategory(str, Enum):
    """템플릿 분류 (탐색 root 기준)."""
    TEMPLATE = "template"      # templates/**
    MODULE = "module"          # modules/**
    THEME_ROOT = "theme_root"  # theme.html, theme.tpl


@dataclass
class TemplateFile:
    """
    재작성 대상 템플릿.

    content는 pass를 거치며 변형되고, destination에만 기록된다.
    source_path 원본은 수정하지 않는다.
    """
    source_path: Path
    category: TemplateCategory
    content: str = ""
    destination: Path | None = None


@dataclass(frozen=True)
class AssetReference:
    """content 내 참조 매치 (css/js/asset/include)."""
    kind: str  # css, js, asset, include
    original: str
    replacement: str
    start: int = 0

    @property
    def changed(self) -> bool:
        return self.original != self.replacement


# =============================================================================
# Localize Schemas
# =============================================================================

@dataclass
class ExternalResourceRef:
    """외부 리소스 참조 (http/https)."""
    url: str
    local_name: str
    downloaded: bool = False
    local_path: Path | None = None


@dataclass
class FetchResponse:
    """HTTP GET 결과 (fetcher 구현과 무관한 최소 형태)."""
    status_code: int
    content: bytes = b""


# =============================================================================
# Run Report Schemas
# =============================================================================

class StepStatus(str, Enum):
    """단계 실행 결과."""
    SUCCESS = "success"
    DEGRADED = "degraded"  # 복구 가능한 실패, 계속 진행
    SKIPPED = "skipped"
    FAILED = "failed"      # 치명적, 실행 중단


@dataclass
class StepResult:
    """
    단일 작업 결과.

    phase: localize, rewrite, relocate, sanitize, manifest, bundler
    target: 파일 경로 또는 URL
    """
    phase: str
    action: str
    target: str = ""
    status: StepStatus = StepStatus.SUCCESS
    code: str | None = None
    reason: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "phase": self.phase,
            "action": self.action,
            "target": self.target,
            "status": self.status.value,
            "code": self.code,
            "reason": self.reason,
        }


@dataclass
class WarningLog:
    """
    경고 로그.

    경고 필수 컨텍스트: level, code, phase, target, message
    """
    level: str = "warning"
    code: str = ""
    phase: str = ""
    target: str = ""
    message: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "level": self.level,
            "code": self.code,
            "phase": self.phase,
            "target": self.target,
            "message": self.message,
        }


@dataclass
class RunReport:
    """
    실행 리포트.

    실행 단위 결과 + 단계별 StepResult + 경고 목록.
    """
    run_id: str
    started_at: str  # ISO 8601
    command: str = "build"
    finished_at: str | None = None
    result: str = "pending"  # pending, success, degraded, failed

    steps: list[StepResult] = field(default_factory=list)
    warnings: list[WarningLog] = field(default_factory=list)

    # Error (if failed)
    error_code: str | None = None
    error_context: dict[str, Any] | None = None

    @property
    def degraded(self) -> bool:
        return any(s.status == StepStatus.DEGRADED for s in self.steps)

    def steps_for(self, phase: str) -> list[StepResult]:
        return [s for s in self.steps if s.phase == phase]

    def to_dict(self) -> dict[str, Any]:
        return {
            "run_id": self.run_id,
            "command": self.command,
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "result": self.result,
            "steps": [s.to_dict() for s in self.steps],
            "warnings": [w.to_dict() for w in self.warnings],
            "error_code": self.error_code,
            "error_context": self.error_context,
        }

"""
Run report: 실행 리포트, 단계 결과, 경고

규칙:
- 복구 가능한 실패도 조용히 넘기지 않음 → StepResult(degraded) + WarningLog
- 경고 필수 컨텍스트: level, code, phase, target, message
- 콘솔 로그(logging)와 리포트 기록을 항상 함께 남김
"""

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from themebuild.core.fsio import write_json
from themebuild.core.ids import generate_run_id
from themebuild.domain.schemas import RunReport, StepResult, StepStatus, WarningLog

logger = logging.getLogger(__name__)

# =============================================================================
# Run Report Management
# =============================================================================


def create_run_report(command: str = "build") -> RunReport:
    """
    새 RunReport 생성.

    Args:
        command: 실행 명령 (build, localize, postbuild, clean)

    Returns:
        초기화된 RunReport
    """
    return RunReport(
        run_id=generate_run_id(command),
        started_at=datetime.now(UTC).isoformat(),
        command=command,
        result="pending",
    )


def record_step(
    report: RunReport,
    phase: str,
    action: str,
    target: str = "",
    status: StepStatus = StepStatus.SUCCESS,
    code: str | None = None,
    reason: str | None = None,
) -> StepResult:
    """단계 결과 기록."""
    step = StepResult(
        phase=phase,
        action=action,
        target=target,
        status=status,
        code=code,
        reason=reason,
    )
    report.steps.append(step)
    return step


def emit_warning(
    report: RunReport,
    code: str,
    phase: str,
    target: str,
    message: str,
    action: str | None = None,
) -> None:
    """
    경고 이벤트 기록.

    콘솔 warning 로그 + WarningLog + degraded StepResult를 함께 남긴다.

    Args:
        report: RunReport 인스턴스
        code: 경고 코드 (ErrorCodes)
        phase: 단계 이름
        target: 파일 경로 또는 URL
        message: 경고 메시지
        action: StepResult에 남길 액션 이름 (기본: code 소문자)
    """
    logger.warning(f"[{phase}] {code}: {message} ({target})")
    report.warnings.append(
        WarningLog(
            level="warning",
            code=code,
            phase=phase,
            target=target,
            message=message,
        )
    )
    record_step(
        report,
        phase=phase,
        action=action or code.lower(),
        target=target,
        status=StepStatus.DEGRADED,
        code=code,
        reason=message,
    )


def complete_run_report(
    report: RunReport,
    success: bool,
    error_code: str | None = None,
    error_context: dict[str, Any] | None = None,
) -> None:
    """
    RunReport 완료 처리.

    success이고 degraded 단계가 있으면 result="degraded".

    Args:
        report: RunReport 인스턴스
        success: 치명적 에러 없이 끝났는지
        error_code: 에러 코드 (실패 시)
        error_context: 에러 컨텍스트 (실패 시)
    """
    report.finished_at = datetime.now(UTC).isoformat()

    if not success:
        report.result = "failed"
        report.error_code = error_code
        report.error_context = error_context
    elif report.degraded:
        report.result = "degraded"
    else:
        report.result = "success"


def save_run_report(report: RunReport, path: Path) -> Path:
    """
    RunReport를 JSON 파일로 저장.

    path가 디렉토리면 run_{run_id}.json으로 저장.

    Returns:
        저장된 파일 경로
    """
    if path.suffix != ".json":
        path = path / f"run_{report.run_id}.json"
    write_json(path, report.to_dict())
    return path


def load_run_report(path: Path) -> dict[str, Any]:
    """RunReport 파일 로드 (dict)."""
    data: dict[str, Any] = json.loads(path.read_text(encoding="utf-8"))
    return data


def summarize(report: RunReport) -> str:
    """콘솔 출력용 한 줄 요약."""
    counts: dict[str, int] = {}
    for step in report.steps:
        counts[step.status.value] = counts.get(step.status.value, 0) + 1
    parts = ", ".join(f"{k}={v}" for k, v in sorted(counts.items()))
    return (
        f"{report.run_id} {report.command}: {report.result} "
        f"({parts or 'no steps'}; warnings={len(report.warnings)})"
    )

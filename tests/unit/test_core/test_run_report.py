"""
test_run_report.py - RunReport 관리 테스트

DoD:
- 경고는 WarningLog + degraded StepResult로 함께 기록
- 완료 시 success / degraded / failed 구분
- JSON 저장
"""

from datetime import UTC, datetime
from pathlib import Path

from themebuild.core.logging import (
    complete_run_report,
    create_run_report,
    emit_warning,
    load_run_report,
    record_step,
    save_run_report,
    summarize,
)
from themebuild.domain.schemas import StepStatus


class TestCreateRunReport:
    """create_run_report 함수 테스트."""

    def test_creates_with_command(self):
        report = create_run_report("postbuild")

        assert report.command == "postbuild"
        assert report.run_id.startswith("postbuild-")
        assert report.result == "pending"
        assert report.steps == []
        assert report.warnings == []

    def test_has_started_at(self):
        before = datetime.now(UTC)
        report = create_run_report()
        after = datetime.now(UTC)

        assert before <= datetime.fromisoformat(report.started_at) <= after

    def test_run_ids_unique_and_file_safe(self):
        """명령 이름은 파일명에 안전한 형태로 run_id에 포함."""
        first = create_run_report("Post Build")
        second = create_run_report("Post Build")

        assert first.run_id != second.run_id
        assert first.run_id.startswith("post-build-")
        assert "/" not in first.run_id and " " not in first.run_id


class TestEmitWarning:
    """emit_warning 함수 테스트."""

    def test_records_warning_and_step(self, caplog):
        """경고 로그 + WarningLog + degraded step."""
        report = create_run_report()

        with caplog.at_level("WARNING"):
            emit_warning(
                report,
                code="DOWNLOAD_FAILED",
                phase="localize",
                target="https://example.com/a.css",
                message="unexpected status 404",
                action="download",
            )

        assert len(report.warnings) == 1
        warning = report.warnings[0]
        assert warning.level == "warning"
        assert warning.code == "DOWNLOAD_FAILED"
        assert warning.phase == "localize"

        step = report.steps[0]
        assert step.status == StepStatus.DEGRADED
        assert step.action == "download"
        assert step.reason == "unexpected status 404"
        assert "DOWNLOAD_FAILED" in caplog.text

    def test_default_action(self):
        report = create_run_report()

        emit_warning(report, "ICONS_MISSING", "relocate", ".icons", "not found")

        assert report.steps[0].action == "icons_missing"


class TestCompleteRunReport:
    """complete_run_report 함수 테스트."""

    def test_success(self):
        report = create_run_report()
        record_step(report, "rewrite", "write", "dist/index.html")

        complete_run_report(report, success=True)

        assert report.result == "success"
        assert report.finished_at is not None

    def test_degraded(self):
        """성공했지만 degraded 단계가 있으면 degraded."""
        report = create_run_report()
        emit_warning(report, "MANIFEST_MISSING", "manifest", "dist/.vite/manifest.json", "missing")

        complete_run_report(report, success=True)

        assert report.result == "degraded"

    def test_failed(self):
        report = create_run_report()

        complete_run_report(
            report,
            success=False,
            error_code="WRITE_FAILED",
            error_context={"path": "dist/index.html"},
        )

        assert report.result == "failed"
        assert report.error_code == "WRITE_FAILED"
        assert report.error_context == {"path": "dist/index.html"}


class TestSaveRunReport:
    """save_run_report 함수 테스트."""

    def test_save_to_directory(self, tmp_path: Path):
        """디렉토리 지정 시 run_{run_id}.json."""
        report = create_run_report()
        record_step(report, "sanitize", "remove_metadata", "dist/.vite")
        complete_run_report(report, success=True)

        path = save_run_report(report, tmp_path / "reports")

        assert path.name == f"run_{report.run_id}.json"
        data = load_run_report(path)
        assert data["result"] == "success"
        assert data["steps"][0]["status"] == "success"

    def test_save_to_file(self, tmp_path: Path):
        report = create_run_report()

        path = save_run_report(report, tmp_path / "last-run.json")

        assert path == tmp_path / "last-run.json"
        assert load_run_report(path)["run_id"] == report.run_id


def test_summarize():
    report = create_run_report("build")
    record_step(report, "rewrite", "write")
    emit_warning(report, "DOWNLOAD_FAILED", "localize", "u", "m")
    complete_run_report(report, success=True)

    summary = summarize(report)

    assert "build: degraded" in summary
    assert "degraded=1" in summary
    assert "success=1" in summary
    assert "warnings=1" in summary

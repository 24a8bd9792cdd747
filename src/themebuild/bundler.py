"""
외부 번들러 실행 (vite build 등).

번들러 자체의 컴파일/압축 로직은 범위 밖: 명령을 실행하고 종료 코드만 확인한다.
"""

import logging
import subprocess
from collections.abc import Sequence
from pathlib import Path

from themebuild.domain.errors import ErrorCodes, PipelineError

logger = logging.getLogger(__name__)


class BundlerRunner:
    """
    번들러 명령 실행기.

    Args:
        command: 실행할 명령 (예: ["npx", "vite", "build"])
        cwd: 작업 디렉토리 (프로젝트 루트)
    """

    def __init__(self, command: Sequence[str], cwd: Path) -> None:
        self.command = list(command)
        self.cwd = cwd

    def run(self) -> None:
        """
        번들러 실행.

        Raises:
            PipelineError: BUNDLER_FAILED (명령 없음, 0이 아닌 종료 코드)
        """
        if not self.command:
            raise PipelineError(ErrorCodes.BUNDLER_FAILED, error="empty bundler command")

        logger.info(f"Running bundler: {' '.join(self.command)}")
        try:
            result = subprocess.run(self.command, cwd=self.cwd, check=False)
        except OSError as e:
            raise PipelineError(
                ErrorCodes.BUNDLER_FAILED,
                command=self.command,
                error=str(e),
            ) from e

        if result.returncode != 0:
            raise PipelineError(
                ErrorCodes.BUNDLER_FAILED,
                command=self.command,
                returncode=result.returncode,
            )

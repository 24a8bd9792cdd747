"""run_id 생성: 명령 이름 + 시각 + 난수 (리포트 파일명에 사용)."""

import re
import uuid
from datetime import UTC, datetime

_UNSAFE = re.compile(r"[^a-z0-9]+")


def generate_run_id(command: str = "build") -> str:
    """
    {command}-{YYYYmmddTHHMMSS}-{uuid[:8]}

    예: postbuild-20260101T120000-1a2b3c4d
    파일명에 쓰이므로 명령 이름은 소문자/숫자만 남긴다.
    """
    name = _UNSAFE.sub("-", command.lower()).strip("-") or "run"
    stamp = datetime.now(UTC).strftime("%Y%m%dT%H%M%S")
    return f"{name}-{stamp}-{uuid.uuid4().hex[:8]}"

"""ec2cache/tools/user.py - 실행 사용자 확인"""

from __future__ import annotations

import os
import pwd


def current_user() -> str:
    return pwd.getpwuid(os.getuid()).pw_name


def require_user(user: str) -> None:
    """현재 사용자가 user가 아니면 프로세스 종료

    Raises:
        SystemExit: 사용자가 다른 경우
    """
    if current_user() != user:
        raise SystemExit(f"please run this as {user}")

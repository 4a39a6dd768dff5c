"""
ec2cache/tools - 호출자 수준 유틸리티

    lock.py    # 어드바이저리 파일 락 (단일 실행 보장용)
    serial.py  # 타입별 일련번호 기반 friendly name
    user.py    # 실행 사용자 확인
"""

from .lock import FileLock, lock_file, unlock_file
from .serial import next_friendly_name
from .user import require_user

__all__ = [
    "FileLock",
    "lock_file",
    "unlock_file",
    "next_friendly_name",
    "require_user",
]

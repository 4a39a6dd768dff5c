"""
ec2cache/tools/lock.py - 어드바이저리 파일 락

비차단 배타 락(``flock(LOCK_EX | LOCK_NB)``)으로 프로세스 단일 실행을 보장합니다.
InstanceCache는 이 락을 사용하지 않으며, 필요한 호출자(CLI refresh 등)가 직접 사용합니다.

Usage:
    with FileLock(context.lock_file):
        cache.refresh()
"""

from __future__ import annotations

import fcntl
import logging
from pathlib import Path
from typing import IO

from ec2cache.exceptions import LockError

logger = logging.getLogger(__name__)


def lock_file(file_path: str | Path) -> IO[str] | None:
    """락 파일을 열고 비차단 배타 락 획득

    Returns:
        락을 보유한 파일 핸들 (이미 다른 프로세스가 보유 중이면 None)
    """
    handle = open(file_path, "w")
    try:
        fcntl.flock(handle.fileno(), fcntl.LOCK_EX | fcntl.LOCK_NB)
    except OSError as e:
        logger.info("lock %s is held: %s", file_path, e)
        handle.close()
        return None
    return handle


def unlock_file(handle: IO[str]) -> bool:
    """락 해제 후 핸들 닫기

    Returns:
        해제 성공 여부
    """
    try:
        fcntl.flock(handle.fileno(), fcntl.LOCK_UN)
    except (OSError, ValueError) as e:
        logger.error("unlock %s failed: %s", getattr(handle, "name", handle), e)
        return False
    handle.close()
    return True


class FileLock:
    """with 문용 어드바이저리 락

    Raises:
        LockError: 진입 시 락을 획득하지 못한 경우
    """

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)
        self._handle: IO[str] | None = None

    def __enter__(self) -> FileLock:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self._handle = lock_file(self.path)
        if self._handle is None:
            raise LockError(str(self.path))
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._handle is not None:
            unlock_file(self._handle)
            self._handle = None

    @property
    def locked(self) -> bool:
        return self._handle is not None

"""캐시 TTL(Time To Live) 판정.

파일 mtime 기반으로 캐시 나이와 만료 여부를 확인합니다.
캐시 파일의 수정 시각이 유일한 신선도 신호입니다.
"""

from __future__ import annotations

import os
import time
from pathlib import Path


def get_file_age(filepath: str | Path) -> float:
    """마지막 수정 이후 경과 시간 (초)

    Raises:
        OSError: 파일이 없거나 stat 실패
    """
    return time.time() - os.path.getmtime(filepath)


def is_cache_valid(filepath: str | Path, ttl_seconds: float) -> bool:
    """파일 mtime 기반 캐시 유효성 확인

    Args:
        filepath: 캐시 파일 경로
        ttl_seconds: 유효기간 (초)

    Returns:
        캐시가 존재하고 나이가 TTL 이하이면 True
    """
    if not os.path.exists(filepath):
        return False

    try:
        return get_file_age(filepath) <= ttl_seconds
    except OSError:
        return False

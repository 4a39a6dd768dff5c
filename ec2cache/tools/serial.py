"""
ec2cache/tools/serial.py - 타입별 일련번호

``{work_dir}/{type}.serial`` 파일에 마지막 번호를 저장하고 ``"{type}-{n}"`` 형식의 이름을 발급합니다.
동시 발급이 필요한 호출자는 FileLock으로 감싸야 합니다.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ec2cache.cache.store import atomic_write_text
from ec2cache.config import RuntimeContext, settings
from ec2cache.exceptions import ParseError

logger = logging.getLogger(__name__)


def serial_path(type_name: str, context: RuntimeContext) -> Path:
    return context.work_dir / f"{type_name}{settings.SERIAL_SUFFIX}"


def read_serial(path: Path) -> int:
    """저장된 번호 (파일 없으면 0)

    Raises:
        ParseError: 정수가 아닌 내용
    """
    if not path.exists():
        return 0
    raw = path.read_text(encoding="utf-8").strip()
    if not raw:
        return 0
    try:
        return int(raw)
    except ValueError as e:
        raise ParseError(str(path), f"정수가 아닌 일련번호: {raw!r}", cause=e) from e


def next_friendly_name(type_name: str, context: RuntimeContext) -> str:
    """다음 일련번호를 저장하고 friendly name 반환

    Example:
        >>> next_friendly_name("web", context)
        'web-1'
    """
    path = serial_path(type_name, context)
    serial = read_serial(path) + 1
    atomic_write_text(path, str(serial))
    logger.info("issued %s-%d", type_name, serial)
    return f"{type_name}-{serial}"

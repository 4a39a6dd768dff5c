"""
ec2cache/cache/store.py - 스냅샷 YAML 직렬화 및 원자적 저장

같은 디렉토리의 임시 파일에 먼저 쓴 뒤 ``os.replace``로 정식 경로에 덮어씁니다.
읽는 쪽은 항상 이전 스냅샷 전체 또는 새 스냅샷 전체만 보게 됩니다.
임시 파일 이름은 쓰기마다 고유하므로 동시에 갱신하는 프로세스끼리 서로의 임시 파일을 건드리지 않습니다.
"""

from __future__ import annotations

import contextlib
import logging
import os
import tempfile
from pathlib import Path
from typing import Any

import yaml

from ec2cache.exceptions import ParseError, PersistenceError

logger = logging.getLogger(__name__)

TMP_SUFFIX = ".tmp"
FILE_MODE = 0o644


def atomic_write_text(path: Path, content: str) -> None:
    """텍스트를 고유한 임시 파일에 쓴 뒤 원자적으로 rename

    Raises:
        PersistenceError: 쓰기/rename 실패 (임시 파일은 정리됨)
    """
    tmp_path: Path | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=TMP_SUFFIX)
        tmp_path = Path(tmp)
        logger.info("writing cache file %s", tmp_path)
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            os.fchmod(f.fileno(), FILE_MODE)
            f.write(content)
            f.flush()
            os.fsync(f.fileno())
        logger.info("moving cache file %s to %s", tmp_path, path)
        os.replace(tmp_path, path)
    except OSError as e:
        if tmp_path is not None:
            with contextlib.suppress(OSError):
                tmp_path.unlink()
        raise PersistenceError(str(path), cause=e) from e


def write_snapshot(path: Path, snapshot: dict[str, Any]) -> None:
    """스냅샷을 YAML로 직렬화하여 원자적으로 저장"""
    content = yaml.safe_dump(snapshot, default_flow_style=False, allow_unicode=True)
    atomic_write_text(path, content)


def read_snapshot(path: Path) -> dict[str, Any]:
    """저장된 스냅샷 로드

    Raises:
        FileNotFoundError: 파일 없음
        ParseError: UTF-8 디코딩 실패, YAML 파싱 실패 또는 매핑이 아닌 최상위 값
    """
    logger.info("loading cache %s", path)
    try:
        content = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise ParseError(str(path), "UTF-8이 아닌 내용", cause=e) from e
    logger.debug("yml: %s", content)

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ParseError(str(path), "잘못된 YAML", cause=e) from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ParseError(str(path), f"매핑이 아닌 최상위 값: {type(data).__name__}")
    return data

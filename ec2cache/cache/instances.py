"""
ec2cache/cache/instances.py - VPC 인스턴스 인벤토리 캐시

현재 인스턴스가 속한 VPC의 EC2 인스턴스 목록을 로컬 YAML 파일로 캐싱합니다.

상태 전이:
    Missing ─┐
             ├─ refresh() ─→ Fresh ─(TTL 경과)─→ Stale
    Stale  ──┘

- Missing/Stale 상태에서는 읽기 전에 갱신을 시도합니다.
- 갱신 실패 시 기존 캐시 파일은 그대로 유지되며, 오래된 데이터라도 있으면 제공합니다.
- 캐시 파일도 없고 갱신도 실패하면 CacheUnavailableError가 발생합니다.

Example:
    cache = InstanceCache(RuntimeContext.from_env())
    snapshot = cache.load()
    for instance_id, instance in snapshot.items():
        print(instance_id, instance.get("Tags", {}).get("Name"))
"""

from __future__ import annotations

import json
import logging
from typing import Any

from ec2cache.aws.ec2_cli import Ec2Cli
from ec2cache.aws.fetch import metadata_fetch
from ec2cache.aws.tags import collapse_instance_tags
from ec2cache.config import RuntimeContext
from ec2cache.exceptions import (
    CacheUnavailableError,
    Ec2CacheError,
    NotAvailableError,
    ParseError,
    ProcessError,
)

from .store import read_snapshot, write_snapshot
from .ttl import get_file_age, is_cache_valid

logger = logging.getLogger(__name__)

Snapshot = dict[str, dict[str, Any]]

MACS_ITEM = "network/interfaces/macs/"


def build_snapshot(response: dict[str, Any]) -> Snapshot:
    """describe-instances 응답을 InstanceId 키 스냅샷으로 변환

    Reservations → Instances 중첩을 순회하며 각 인스턴스의 태그를 정규화합니다.
    동일 InstanceId가 중복되면 마지막 레코드가 남습니다.

    Raises:
        ParseError: 예상한 응답 구조가 아닌 경우
    """
    instances: Snapshot = {}
    try:
        for reservation in response["Reservations"]:
            for instance in reservation.get("Instances", []):
                instance_id = instance["InstanceId"]
                logger.info("Found instance %s", instance_id)
                instances[instance_id] = collapse_instance_tags(instance)
    except (KeyError, TypeError, AttributeError) as e:
        raise ParseError("describe-instances", "예상하지 못한 응답 구조", cause=e) from e
    return instances


class InstanceCache:
    """TTL 기반 VPC 인스턴스 캐시

    Attributes:
        context: 실행 컨텍스트
        cache_file: 스냅샷 YAML 파일 경로
        ttl: 캐시 유효기간 (초)
    """

    def __init__(
        self,
        context: RuntimeContext,
        ec2: Ec2Cli | None = None,
        ttl: float | None = None,
    ) -> None:
        self.context = context
        self.ec2 = ec2 or Ec2Cli(context)
        self.cache_file = context.cache_file
        self.ttl = context.cache_ttl if ttl is None else ttl
        self._instances: Snapshot | None = None
        logger.info("InstanceCache starting up (%s, ttl=%ss)", self.cache_file, self.ttl)

    # =========================================================================
    # 신선도
    # =========================================================================

    def get_file_age(self) -> float | None:
        """캐시 파일 나이 (초, 파일 없으면 None)"""
        try:
            return get_file_age(self.cache_file)
        except OSError:
            return None

    def is_stale(self) -> bool:
        """캐시 파일이 없거나 TTL을 초과했는지"""
        return not is_cache_valid(self.cache_file, self.ttl)

    # =========================================================================
    # 로드
    # =========================================================================

    @property
    def loaded(self) -> bool:
        return self._instances is not None

    @property
    def snapshot(self) -> Snapshot:
        """메모리 스냅샷 (최초 접근 시 1회 로드)"""
        if self._instances is None:
            self._instances = self.load()
        return self._instances

    def load(self) -> Snapshot:
        """필요 시 갱신 후 캐시 파일을 읽어 스냅샷 반환

        TTL 이내라도 파일이 손상되어 읽을 수 없으면 한 번 갱신 후 다시 읽습니다.

        Raises:
            CacheUnavailableError: 캐시 파일이 없거나 읽을 수 없고 갱신도 실패한 경우
        """
        refreshed = False
        if self.is_stale():
            refreshed = True
            if not self.refresh():
                logger.warning("cache refresh failed, serving existing cache %s", self.cache_file)

        try:
            instances = self._read()
        except CacheUnavailableError as e:
            if refreshed:
                raise
            logger.warning("%s, refreshing", e)
            if not self.refresh():
                raise
            instances = self._read()

        logger.debug("instances is %s", instances)
        self._instances = instances
        return instances

    def _read(self) -> Snapshot:
        try:
            return read_snapshot(self.cache_file)
        except (OSError, ParseError) as e:
            raise CacheUnavailableError(str(self.cache_file), cause=e) from e

    # =========================================================================
    # 갱신
    # =========================================================================

    def refresh(self) -> bool:
        """VPC 인스턴스 목록을 조회하여 캐시 파일을 교체

        실패해도 기존 캐시 파일은 변경되지 않습니다.

        Returns:
            성공 여부
        """
        logger.info("updating %s", self.cache_file)
        try:
            vpc_id = self._fetch_vpc_id()
            response = self._describe_instances(vpc_id)
            instances = build_snapshot(response)
            write_snapshot(self.cache_file, instances)
        except Ec2CacheError as e:
            logger.error("cache refresh failed: %s", e)
            return False

        logger.info("cached %d instances in %s", len(instances), vpc_id)
        return True

    def _fetch_vpc_id(self) -> str:
        """기본 네트워크 인터페이스의 MAC을 통해 VPC ID 조회"""
        macs = metadata_fetch(MACS_ITEM, self.context)
        lines = macs.split() if macs else []
        if not lines:
            raise NotAvailableError("primary mac address")
        primary_mac = lines[0].rstrip("/")

        vpc_id = metadata_fetch(f"{MACS_ITEM}{primary_mac}/vpc-id", self.context)
        if not vpc_id or not vpc_id.strip():
            raise NotAvailableError(f"vpc-id ({primary_mac})")
        return vpc_id.strip()

    def _describe_instances(self, vpc_id: str) -> dict[str, Any]:
        command = ["describe-instances", "--filters", f"Name=vpc-id,Values={vpc_id}"]
        output = self.ec2.cli(command)
        if output is None:
            raise ProcessError("ec2 " + " ".join(command))

        try:
            response = json.loads(output)
        except json.JSONDecodeError as e:
            raise ParseError("describe-instances", "잘못된 JSON", cause=e) from e
        if not isinstance(response, dict):
            raise ParseError("describe-instances", "JSON 객체가 아님")
        return response

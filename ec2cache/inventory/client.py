"""
ec2cache/inventory/client.py - EC2 인스턴스 인벤토리 파사드

InstanceCache의 메모리 스냅샷을 읽기 전용 Mapping으로 노출합니다.
갱신 정책은 전적으로 캐시가 소유하며, 파사드는 생성 시 1회 로드만 수행합니다.

Usage:
    instances = Ec2Instances.from_context(RuntimeContext.from_env())

    if "i-0123456789abcdef0" in instances:
        print(instances["i-0123456789abcdef0"]["PrivateIpAddress"])

    for instance_id in instances:
        ...
"""

from __future__ import annotations

from collections.abc import Iterator, Mapping
from typing import Any

from ec2cache.cache.instances import InstanceCache
from ec2cache.config import RuntimeContext


class Ec2Instances(Mapping):
    """InstanceId → 인스턴스 레코드 읽기 전용 매핑"""

    def __init__(self, cache: InstanceCache) -> None:
        self._cache = cache
        if not cache.loaded:
            cache.load()

    @classmethod
    def from_context(cls, context: RuntimeContext, ttl: float | None = None) -> Ec2Instances:
        return cls(InstanceCache(context, ttl=ttl))

    @property
    def cache(self) -> InstanceCache:
        return self._cache

    def __getitem__(self, instance_id: str) -> dict[str, Any]:
        return self._cache.snapshot[instance_id]

    def __iter__(self) -> Iterator[str]:
        return iter(self._cache.snapshot)

    def __len__(self) -> int:
        return len(self._cache.snapshot)

    def __contains__(self, instance_id: object) -> bool:
        return instance_id in self._cache.snapshot

    def __repr__(self) -> str:
        return f"Ec2Instances(count={len(self)}, cache={str(self._cache.cache_file)!r})"

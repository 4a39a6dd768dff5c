# ec2cache/__init__.py
"""
ec2cache - VPC EC2 인스턴스 인벤토리 캐시

현재 인스턴스가 속한 VPC의 EC2 인스턴스 목록을 주기적으로 갱신되는 로컬 캐시로 유지하고
InstanceId 기준 조회 구조로 제공합니다.

아키텍처:
    ec2cache/
    ├── aws/            # 메타데이터 fetch, aws CLI 어댑터, 태그 정규화
    ├── cache/          # TTL 판정, 원자적 YAML 저장, InstanceCache
    ├── inventory/      # Mapping 파사드, Puppet 인벤토리 RPC
    ├── tools/          # 파일 락, 일련번호, 실행 사용자 확인
    ├── config.py       # 설정 및 RuntimeContext
    └── exceptions.py   # 통합 예외 계층

Usage:
    from ec2cache import Ec2Instances, RuntimeContext

    instances = Ec2Instances.from_context(RuntimeContext.from_env())
    web = [i for i in instances.values() if i.get("Tags", {}).get("Role") == "web"]
"""

from ec2cache.config import RuntimeContext, get_version, settings
from ec2cache.exceptions import CacheUnavailableError, Ec2CacheError
from ec2cache.inventory import Ec2Instances, PuppetInventory

__version__ = get_version()

__all__: list[str] = [
    "RuntimeContext",
    "settings",
    "get_version",
    "Ec2CacheError",
    "CacheUnavailableError",
    "Ec2Instances",
    "PuppetInventory",
]

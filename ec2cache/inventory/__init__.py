"""
ec2cache/inventory - 읽기 전용 인벤토리 접근

    client.py   # Ec2Instances: 인스턴스 캐시 Mapping 파사드
    puppet.py   # PuppetInventory: 인벤토리 RPC 노드 조회
"""

from .client import Ec2Instances
from .puppet import PuppetInventory

__all__ = ["Ec2Instances", "PuppetInventory"]

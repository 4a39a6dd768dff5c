"""
ec2cache/inventory/puppet.py - Puppet 인벤토리 RPC 클라이언트

로컬 인벤토리 서비스(``/v2/<rpc>``)에서 JSON을 조회합니다.
"""

from __future__ import annotations

import json
import logging
from typing import Any

from ec2cache.aws.fetch import inventory_rpc
from ec2cache.config import RuntimeContext
from ec2cache.exceptions import ParseError

logger = logging.getLogger(__name__)


class PuppetInventory:
    """Puppet 노드 인벤토리"""

    def __init__(self, context: RuntimeContext) -> None:
        self.context = context
        self._nodes: dict[str, dict[str, Any]] | None = None
        logger.info("PuppetInventory starting up")

    def rpc(self, rpc_name: str) -> Any | None:
        """RPC 호출 후 JSON 파싱 결과 반환 (실패 시 None)"""
        response_json = inventory_rpc(rpc_name, self.context)
        if response_json is None:
            return None
        try:
            return json.loads(response_json)
        except json.JSONDecodeError as e:
            logger.error("%s", ParseError(f"rpc {rpc_name}", "잘못된 JSON", cause=e))
            return None

    @property
    def nodes(self) -> dict[str, dict[str, Any]]:
        """노드 이름 → 노드 정보 (성공한 조회 결과만 재사용)"""
        if self._nodes is None:
            response = self.rpc("nodes")
            if not isinstance(response, list):
                return {}
            self._nodes = {node["name"]: node for node in response if isinstance(node, dict) and "name" in node}
        return self._nodes

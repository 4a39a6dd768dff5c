"""
ec2cache/aws/fetch.py - 시간 제한 HTTP GET

EC2 메타데이터 서비스와 인벤토리 RPC 엔드포인트 조회에 공통으로 사용됩니다.
모든 실패(타임아웃, 연결 오류, HTTP 오류 상태)는 None으로 변환되며 재시도하지 않습니다.

Usage:
    from ec2cache.aws.fetch import metadata_fetch

    zone = metadata_fetch("placement/availability-zone", context)
    if zone is None:
        ...
"""

from __future__ import annotations

import logging

import requests

from ec2cache.config import RuntimeContext, settings
from ec2cache.exceptions import TransportError

logger = logging.getLogger(__name__)


def uri_fetch(url: str, timeout: float = settings.FETCH_TIMEOUT) -> str | None:
    """URL 내용을 텍스트로 조회

    Args:
        url: 조회할 URL
        timeout: 요청 타임아웃 (초)

    Returns:
        응답 본문 (실패 시 None)
    """
    logger.info("fetching uri item %s", url)
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
    except requests.RequestException as e:
        logger.error("%s", TransportError(url, cause=e))
        return None

    logger.debug("fetched %s", response.text)
    return response.text


def metadata_fetch(item: str, context: RuntimeContext) -> str | None:
    """EC2 인스턴스 메타데이터 항목 조회 (예: "placement/availability-zone")"""
    url = context.metadata_url.rstrip("/") + settings.METADATA_PATH + item
    return uri_fetch(url, timeout=context.fetch_timeout)


def inventory_rpc(rpc: str, context: RuntimeContext) -> str | None:
    """인벤토리 RPC 엔드포인트 조회 (예: "nodes")"""
    url = context.rpc_url.rstrip("/") + settings.RPC_PATH + rpc
    return uri_fetch(url, timeout=context.fetch_timeout)

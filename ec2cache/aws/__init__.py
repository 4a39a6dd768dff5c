"""
ec2cache/aws - AWS 연동 계층

    fetch.py    # 메타데이터/RPC HTTP 조회
    ec2_cli.py  # aws ec2 CLI 어댑터
    tags.py     # 태그 목록 → 딕셔너리 변환
"""

from .ec2_cli import Ec2Cli, region_from_zone, run_command
from .fetch import inventory_rpc, metadata_fetch, uri_fetch
from .tags import collapse_tags, collapse_instance_tags

__all__ = [
    "Ec2Cli",
    "region_from_zone",
    "run_command",
    "uri_fetch",
    "metadata_fetch",
    "inventory_rpc",
    "collapse_tags",
    "collapse_instance_tags",
]

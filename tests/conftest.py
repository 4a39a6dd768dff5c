"""
tests/conftest.py - pytest 공통 픽스처

메타데이터 서비스 / aws CLI 모킹과 임시 작업 디렉토리 컨텍스트를 제공합니다.

Usage:
    def test_something(runtime_context, fake_metadata, fake_ec2):
        cache = InstanceCache(runtime_context, ec2=fake_ec2)
        ...
"""

import copy
import json
import sys
from pathlib import Path
from typing import Any, Dict, Optional
from unittest.mock import MagicMock

import pytest

# 프로젝트 루트를 sys.path에 추가
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from ec2cache.config import RuntimeContext  # noqa: E402

# =============================================================================
# 상수
# =============================================================================

TEST_MAC = "0a:1b:2c:3d:4e:5f"
TEST_VPC_ID = "vpc-123"
TEST_ZONE = "ap-northeast-2a"

DESCRIBE_INSTANCES_RESPONSE: Dict[str, Any] = {
    "Reservations": [
        {
            "Instances": [
                {
                    "InstanceId": "i-1",
                    "InstanceType": "t3.micro",
                    "State": {"Name": "running"},
                    "PrivateIpAddress": "10.0.0.1",
                    "LaunchTime": "2024-01-01T00:00:00+00:00",
                }
            ]
        },
        {
            "Instances": [
                {
                    "InstanceId": "i-2",
                    "InstanceType": "m5.large",
                    "State": {"Name": "stopped"},
                    "PrivateIpAddress": "10.0.0.2",
                    "Tags": [
                        {"Key": "env", "Value": "prod"},
                        {"Key": "env", "Value": "qa"},
                        {"Key": "Name", "Value": "web-2"},
                    ],
                }
            ]
        },
    ]
}


# =============================================================================
# 컨텍스트
# =============================================================================


@pytest.fixture(autouse=True)
def clear_ec2cache_env(monkeypatch):
    """EC2CACHE_* 환경 변수가 테스트에 영향을 주지 않도록 제거"""
    import os

    for name in list(os.environ):
        if name.startswith("EC2CACHE_"):
            monkeypatch.delenv(name, raising=False)


@pytest.fixture
def work_dir(tmp_path) -> Path:
    """임시 작업 디렉토리"""
    path = tmp_path / "ec2"
    path.mkdir()
    return path


@pytest.fixture
def runtime_context(work_dir) -> RuntimeContext:
    """임시 작업 디렉토리를 사용하는 RuntimeContext"""
    return RuntimeContext(
        work_dir=work_dir,
        metadata_url="http://metadata.test",
        rpc_url="http://rpc.test",
        aws_binary="/opt/test/aws",
        fetch_timeout=1,
        command_timeout=5,
        cache_ttl=300,
    )


# =============================================================================
# 외부 연동 모킹
# =============================================================================


def make_metadata(items: Optional[Dict[str, Optional[str]]] = None):
    """metadata_fetch 대체 함수 생성

    Args:
        items: 메타데이터 항목 → 값 (None이면 조회 실패)
    """
    values: Dict[str, Optional[str]] = {
        "network/interfaces/macs/": f"{TEST_MAC}/\n",
        f"network/interfaces/macs/{TEST_MAC}/vpc-id": TEST_VPC_ID,
        "placement/availability-zone": TEST_ZONE,
    }
    if items:
        values.update(items)

    calls = []

    def fake_metadata_fetch(item, context):
        calls.append(item)
        return values.get(item)

    fake_metadata_fetch.calls = calls
    return fake_metadata_fetch


@pytest.fixture
def fake_metadata(monkeypatch):
    """InstanceCache가 사용하는 metadata_fetch 모킹"""
    fake = make_metadata()
    monkeypatch.setattr("ec2cache.cache.instances.metadata_fetch", fake)
    return fake


@pytest.fixture
def describe_response() -> Dict[str, Any]:
    """describe-instances 응답 (매번 새 복사본)"""
    return copy.deepcopy(DESCRIBE_INSTANCES_RESPONSE)


@pytest.fixture
def fake_ec2(describe_response):
    """Ec2Cli 모킹 (cli()가 describe-instances JSON 반환)"""
    ec2 = MagicMock()
    ec2.cli.return_value = json.dumps(describe_response)
    return ec2

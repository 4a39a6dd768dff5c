"""
ec2cache/aws/ec2_cli.py - aws CLI 어댑터

``aws --region=<region> ec2 <subcommand>`` 호출을 구성하고 실행합니다.
리전이 지정되지 않으면 메타데이터의 가용 영역에서 유도하여 어댑터 인스턴스 수명 동안 재사용합니다.

Usage:
    from ec2cache.aws.ec2_cli import Ec2Cli

    ec2 = Ec2Cli(context)
    output = ec2.cli(["describe-instances", "--filters", "Name=vpc-id,Values=vpc-123"])
    if output is None:
        # 실패 원인은 로그에 기록됨
        ...
"""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Sequence

from ec2cache.aws.fetch import metadata_fetch
from ec2cache.config import RuntimeContext
from ec2cache.exceptions import NotAvailableError, ProcessError

logger = logging.getLogger(__name__)

AVAILABILITY_ZONE_ITEM = "placement/availability-zone"


def run_command(argv: Sequence[str], timeout: float | None = None) -> str | None:
    """외부 명령 실행 (stderr는 stdout으로 병합)

    Args:
        argv: 명령과 인자 목록
        timeout: 실행 타임아웃 (초, None이면 무제한)

    Returns:
        명령 출력 (종료 코드가 0이 아니거나, 실행 불가, UTF-8 디코딩 실패 시 None)
    """
    command = shlex.join(argv)
    logger.info("calling command %s", command)

    try:
        result = subprocess.run(
            list(argv),
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            encoding="utf-8",
            timeout=timeout,
            check=False,
        )
    except (OSError, subprocess.TimeoutExpired, UnicodeDecodeError) as e:
        logger.error("%s", ProcessError(command, cause=e))
        return None

    if result.returncode != 0:
        logger.error("%s", ProcessError(command, result.returncode, result.stdout))
        logger.error("output: %s", result.stdout)
        return None
    return result.stdout


def region_from_zone(zone: str | None) -> str | None:
    """가용 영역 이름에서 리전 유도 ("ap-northeast-2a" → "ap-northeast-2")"""
    if not zone:
        return None
    zone = zone.strip()
    if len(zone) < 2:
        return None
    return zone[:-1]


class Ec2Cli:
    """aws ec2 서브명령 실행기

    Attributes:
        context: 실행 컨텍스트 (aws 바이너리 경로, 타임아웃)
    """

    def __init__(self, context: RuntimeContext) -> None:
        self.context = context
        self._default_region: str | None = None

    def get_region(self) -> str | None:
        """메타데이터에서 리전을 조회 (최초 성공 결과를 재사용)"""
        if self._default_region is None:
            zone = metadata_fetch(AVAILABILITY_ZONE_ITEM, self.context)
            region = region_from_zone(zone)
            if region is None:
                logger.error("%s", NotAvailableError("region"))
                return None
            self._default_region = region
        return self._default_region

    def build_command(self, command: Sequence[str], region: str) -> list[str]:
        return [self.context.aws_binary, f"--region={region}", "ec2", *command]

    def cli(self, command: Sequence[str], region: str | None = None) -> str | None:
        """ec2 서브명령 실행

        Args:
            command: 서브명령과 인자 (예: ["describe-instances", "--filters", ...])
            region: 리전 (None이면 메타데이터에서 조회)

        Returns:
            명령 출력 텍스트 (실패 시 None)
        """
        logger.info("calling ec2 command %s", " ".join(command))

        region = region or self.get_region()
        if not region:
            logger.error("could not find ec2 region")
            return None

        output = run_command(
            self.build_command(command, region),
            timeout=self.context.command_timeout,
        )
        if output is None:
            return None
        if not output.strip():
            logger.error("aws api command %s returned empty output", " ".join(command))
            return None
        return output

"""
ec2cache/config.py - 중앙 설정 관리

전역 상수(Settings)와 실행 컨텍스트(RuntimeContext)를 정의합니다.
프로세스 전역 싱글톤 대신 RuntimeContext를 각 컴포넌트 생성자에 명시적으로 전달합니다.

Usage:
    from ec2cache.config import RuntimeContext, settings

    context = RuntimeContext.from_env()
    cache = InstanceCache(context)

    print(settings.CACHE_FILE_NAME)  # "instance_cache.yaml"
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field, replace
from pathlib import Path

from ec2cache.exceptions import ConfigError

VERSION = "0.3.0"


@dataclass(frozen=True)
class Settings:
    """불변 전역 설정값"""

    DEFAULT_WORK_DIR: str = "/var/lib/puppet/ec2"
    METADATA_URL: str = "http://169.254.169.254"
    METADATA_PATH: str = "/latest/meta-data/"
    RPC_URL: str = "http://localhost:8080"
    RPC_PATH: str = "/v2/"
    AWS_BINARY: str = "/usr/local/bin/aws"

    # 타임아웃 (초)
    FETCH_TIMEOUT: int = 2
    COMMAND_TIMEOUT: int = 60

    # 캐시
    CACHE_TTL_SECONDS: int = 300
    CACHE_FILE_NAME: str = "instance_cache.yaml"
    LOCK_FILE_NAME: str = "refresh.lock"
    SERIAL_SUFFIX: str = ".serial"

    ENV_PREFIX: str = "EC2CACHE_"


settings = Settings()


def get_version() -> str:
    """패키지 버전 문자열 반환"""
    return VERSION


def get_env_str(name: str, default: str) -> str:
    """환경 변수 문자열 조회 (빈 값이면 기본값)"""
    value = os.environ.get(name, "").strip()
    return value or default


def get_env_int(name: str, default: int) -> int:
    """환경 변수 정수 조회

    Raises:
        ConfigError: 정수로 변환할 수 없는 값인 경우
    """
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError as e:
        raise ConfigError(name, f"정수가 아닌 값: {raw!r}", cause=e) from e


@dataclass(frozen=True)
class RuntimeContext:
    """실행 컨텍스트

    Attributes:
        work_dir: 캐시 파일과 시리얼 파일이 저장되는 작업 디렉토리
        metadata_url: EC2 메타데이터 서비스 베이스 URL
        rpc_url: 인벤토리 RPC 서비스 베이스 URL
        aws_binary: aws CLI 실행 파일 경로
        fetch_timeout: HTTP 요청 타임아웃 (초)
        command_timeout: 외부 명령 타임아웃 (초)
        cache_ttl: 캐시 유효기간 (초)
    """

    work_dir: Path = field(default_factory=lambda: Path(settings.DEFAULT_WORK_DIR))
    metadata_url: str = settings.METADATA_URL
    rpc_url: str = settings.RPC_URL
    aws_binary: str = settings.AWS_BINARY
    fetch_timeout: float = settings.FETCH_TIMEOUT
    command_timeout: float = settings.COMMAND_TIMEOUT
    cache_ttl: float = settings.CACHE_TTL_SECONDS

    def __post_init__(self) -> None:
        if not isinstance(self.work_dir, Path):
            object.__setattr__(self, "work_dir", Path(self.work_dir))
        if self.fetch_timeout <= 0:
            raise ConfigError("fetch_timeout", f"0보다 커야 함: {self.fetch_timeout}")
        if self.command_timeout <= 0:
            raise ConfigError("command_timeout", f"0보다 커야 함: {self.command_timeout}")
        if self.cache_ttl < 0:
            raise ConfigError("cache_ttl", f"음수 불가: {self.cache_ttl}")

    @property
    def cache_file(self) -> Path:
        return self.work_dir / settings.CACHE_FILE_NAME

    @property
    def lock_file(self) -> Path:
        return self.work_dir / settings.LOCK_FILE_NAME

    def with_overrides(self, **changes) -> RuntimeContext:
        """None이 아닌 값만 덮어쓴 새 컨텍스트 반환"""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @classmethod
    def from_env(cls) -> RuntimeContext:
        """환경 변수(EC2CACHE_*)로부터 컨텍스트 생성"""
        prefix = settings.ENV_PREFIX
        return cls(
            work_dir=Path(get_env_str(f"{prefix}WORK_DIR", settings.DEFAULT_WORK_DIR)),
            metadata_url=get_env_str(f"{prefix}METADATA_URL", settings.METADATA_URL),
            rpc_url=get_env_str(f"{prefix}RPC_URL", settings.RPC_URL),
            aws_binary=get_env_str(f"{prefix}AWS_BINARY", settings.AWS_BINARY),
            fetch_timeout=get_env_int(f"{prefix}FETCH_TIMEOUT", settings.FETCH_TIMEOUT),
            command_timeout=get_env_int(f"{prefix}COMMAND_TIMEOUT", settings.COMMAND_TIMEOUT),
            cache_ttl=get_env_int(f"{prefix}CACHE_TTL", settings.CACHE_TTL_SECONDS),
        )

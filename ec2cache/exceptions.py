"""
ec2cache/exceptions.py - 통합 예외 계층 구조

캐시/메타데이터/CLI 계층에서 사용되는 예외 클래스들을 정의합니다.
대부분의 내부 실패는 컴포넌트 경계에서 None/False로 흡수되며,
예외는 진단 정보 전달과 치명적 상황 보고에 사용됩니다.

예외 계층 구조:
    Ec2CacheError (베이스)
    ├── TransportError (HTTP 타임아웃/네트워크)
    ├── ProcessError (외부 명령 실패, 빈 출력)
    ├── ParseError (구조화된 응답 파싱 실패)
    ├── PersistenceError (캐시 파일 쓰기/이동 실패)
    ├── NotAvailableError (리전/VPC/MAC 조회 불가)
    ├── CacheUnavailableError (캐시 파일 없음 + 갱신 실패)
    ├── LockError (어드바이저리 락 획득 실패)
    └── ConfigError (설정 관련)

Usage:
    from ec2cache.exceptions import CacheUnavailableError

    try:
        snapshot = cache.load()
    except CacheUnavailableError as e:
        sys.exit(str(e))
"""

from typing import Any, Dict, Optional

# =============================================================================
# 베이스 예외
# =============================================================================


class Ec2CacheError(Exception):
    """ec2cache 기본 예외 클래스

    Attributes:
        message: 에러 메시지
        cause: 원인 예외 (체이닝용)
        details: 추가 상세 정보
    """

    def __init__(
        self,
        message: str,
        cause: Optional[Exception] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.cause = cause
        self.details = details or {}

    def __str__(self) -> str:
        if self.cause:
            return f"{self.message}: {self.cause}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """예외 정보를 딕셔너리로 반환"""
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "cause": str(self.cause) if self.cause else None,
            "details": self.details,
        }


# =============================================================================
# 외부 연동 예외
# =============================================================================


class TransportError(Ec2CacheError):
    """HTTP 요청 실패 (타임아웃, 연결 오류)"""

    def __init__(self, url: str, cause: Optional[Exception] = None):
        super().__init__(f"요청 실패 [{url}]", cause)
        self.url = url
        self.details["url"] = url


class ProcessError(Ec2CacheError):
    """외부 명령 실행 실패"""

    def __init__(
        self,
        command: str,
        returncode: Optional[int] = None,
        output: str = "",
        cause: Optional[Exception] = None,
    ):
        message = f"명령 실패 [{command}]"
        if returncode is not None:
            message = f"{message} (exit {returncode})"
        super().__init__(message, cause)
        self.command = command
        self.returncode = returncode
        self.output = output
        self.details.update({"command": command, "returncode": returncode})


class ParseError(Ec2CacheError):
    """구조화된 데이터 파싱 실패"""

    def __init__(self, source: str, reason: str, cause: Optional[Exception] = None):
        super().__init__(f"파싱 실패 [{source}]: {reason}", cause)
        self.source = source
        self.details["source"] = source


class PersistenceError(Ec2CacheError):
    """캐시 파일 저장 실패"""

    def __init__(self, path: str, cause: Optional[Exception] = None):
        super().__init__(f"파일 저장 실패 [{path}]", cause)
        self.path = path
        self.details["path"] = path


class NotAvailableError(Ec2CacheError):
    """메타데이터 항목 조회 불가 (region, vpc-id, mac)"""

    def __init__(self, item: str, cause: Optional[Exception] = None):
        super().__init__(f"조회 불가 [{item}]", cause)
        self.item = item
        self.details["item"] = item


# =============================================================================
# 캐시 / 락 / 설정 예외
# =============================================================================


class CacheUnavailableError(Ec2CacheError):
    """사용 가능한 캐시가 없음

    캐시 파일이 존재하지 않고 갱신도 실패한 경우에만 발생합니다.
    제공할 데이터가 전혀 없으므로 호출자에게 전파됩니다.
    """

    def __init__(self, path: str, cause: Optional[Exception] = None):
        super().__init__(f"인스턴스 캐시를 사용할 수 없음 [{path}]", cause)
        self.path = path
        self.details["path"] = path


class LockError(Ec2CacheError):
    """어드바이저리 파일 락 획득 실패"""

    def __init__(self, path: str, cause: Optional[Exception] = None):
        super().__init__(f"락 획득 실패 [{path}]", cause)
        self.path = path
        self.details["path"] = path


class ConfigError(Ec2CacheError):
    """설정 관련 예외"""

    def __init__(
        self,
        key: str,
        message: str,
        cause: Optional[Exception] = None,
    ):
        super().__init__(f"설정 오류 [{key}]: {message}", cause)
        self.config_key = key
        self.details["config_key"] = key

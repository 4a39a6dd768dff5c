"""
ec2cache/cache - 인스턴스 인벤토리 캐시

구조:
    {work_dir}/
    ├── instance_cache.yaml       ← 인스턴스 스냅샷 (InstanceId → 레코드)
    ├── .instance_cache.yaml.*.tmp ← 갱신 중 임시 파일 (쓰기마다 고유, rename 후 사라짐)
    └── refresh.lock              ← CLI refresh용 어드바이저리 락

사용법:
    from ec2cache.cache import InstanceCache

    cache = InstanceCache(context)
    snapshot = cache.load()
    instance = snapshot["i-0123456789abcdef0"]
"""

__all__ = [
    "InstanceCache",
    "get_file_age",
    "is_cache_valid",
    "read_snapshot",
    "write_snapshot",
]


def __getattr__(name: str):
    """Lazy import - 실제 사용 시점에만 모듈 로드"""
    if name == "InstanceCache":
        from .instances import InstanceCache

        return InstanceCache
    if name in ("get_file_age", "is_cache_valid"):
        from . import ttl

        return getattr(ttl, name)
    if name in ("read_snapshot", "write_snapshot"):
        from . import store

        return getattr(store, name)

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")

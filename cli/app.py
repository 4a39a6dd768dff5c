"""
cli/app.py - 메인 CLI 엔트리포인트

Click 기반의 CLI 애플리케이션 진입점입니다.

명령어 구조:
    ec2cache                        # 도움말
    ec2cache --version              # 버전 표시
    ec2cache list [--json]          # 캐시된 인스턴스 목록
    ec2cache show <instance-id>     # 인스턴스 레코드 YAML 출력
    ec2cache tags <instance-id>     # 정규화된 태그 출력
    ec2cache refresh                # 락을 잡고 강제 갱신
    ec2cache status                 # 캐시 파일 상태

공통 옵션:
    --work-dir  캐시 작업 디렉토리 (기본: EC2CACHE_WORK_DIR 또는 /var/lib/puppet/ec2)
    --ttl       캐시 유효기간 (초)
    -v          로그 상세도 (-v: INFO, -vv: DEBUG)

Usage:
    $ ec2cache list
    $ ec2cache -v refresh
    $ python -m cli.app status
"""

from __future__ import annotations

import json as json_module
from pathlib import Path

import click
import yaml
from click import Context

from cli.ui import configure_logging, print_error, print_info, print_success, print_table, print_warning
from ec2cache.cache.instances import InstanceCache
from ec2cache.config import RuntimeContext, get_version
from ec2cache.exceptions import Ec2CacheError, LockError
from ec2cache.inventory.client import Ec2Instances
from ec2cache.tools.lock import FileLock

VERSION = get_version()


def _get_context(ctx: Context) -> RuntimeContext:
    return ctx.obj["context"]


def _open_instances(ctx: Context) -> Ec2Instances:
    """인벤토리 로드 (캐시를 사용할 수 없으면 종료 코드 1)"""
    try:
        return Ec2Instances(InstanceCache(_get_context(ctx)))
    except Ec2CacheError as e:
        print_error(str(e))
        ctx.exit(1)


def _lookup(ctx: Context, instances: Ec2Instances, instance_id: str) -> dict:
    if instance_id not in instances:
        print_error(f"인스턴스를 찾을 수 없음: {instance_id}")
        ctx.exit(1)
    return instances[instance_id]


@click.group()
@click.version_option(VERSION, prog_name="ec2cache")
@click.option(
    "--work-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="캐시 작업 디렉토리",
)
@click.option("--ttl", type=click.IntRange(min=0), default=None, help="캐시 유효기간 (초)")
@click.option("-v", "--verbose", count=True, help="로그 상세도 (-v: INFO, -vv: DEBUG)")
@click.pass_context
def cli(ctx: Context, work_dir: Path | None, ttl: int | None, verbose: int) -> None:
    """VPC EC2 인스턴스 인벤토리 캐시"""
    configure_logging(verbose)
    try:
        context = RuntimeContext.from_env().with_overrides(work_dir=work_dir, cache_ttl=ttl)
    except Ec2CacheError as e:
        raise click.UsageError(str(e)) from e
    ctx.ensure_object(dict)
    ctx.obj["context"] = context


@cli.command("list")
@click.option("--json", "as_json", is_flag=True, help="JSON 형식으로 출력")
@click.pass_context
def list_command(ctx: Context, as_json: bool) -> None:
    """캐시된 인스턴스 목록"""
    instances = _open_instances(ctx)

    if as_json:
        click.echo(json_module.dumps(dict(instances), ensure_ascii=False, indent=2, default=str))
        return

    rows = []
    for instance_id in sorted(instances):
        instance = instances[instance_id]
        tags = instance.get("Tags") or {}
        rows.append(
            (
                instance_id,
                tags.get("Name"),
                (instance.get("State") or {}).get("Name"),
                instance.get("InstanceType"),
                instance.get("PrivateIpAddress"),
            )
        )
    print_table(["InstanceId", "Name", "State", "Type", "PrivateIp"], rows, title=f"EC2 instances ({len(rows)})")


@cli.command("show")
@click.argument("instance_id")
@click.pass_context
def show_command(ctx: Context, instance_id: str) -> None:
    """인스턴스 레코드를 YAML로 출력"""
    instances = _open_instances(ctx)
    instance = _lookup(ctx, instances, instance_id)
    click.echo(yaml.safe_dump(instance, default_flow_style=False, allow_unicode=True), nl=False)


@cli.command("tags")
@click.argument("instance_id")
@click.pass_context
def tags_command(ctx: Context, instance_id: str) -> None:
    """인스턴스 태그 출력"""
    instances = _open_instances(ctx)
    instance = _lookup(ctx, instances, instance_id)

    tags = instance.get("Tags")
    if not tags:
        print_warning(f"태그 없음: {instance_id}")
        return
    print_table(["Key", "Value"], sorted(tags.items()), title=instance_id)


@cli.command("refresh")
@click.pass_context
def refresh_command(ctx: Context) -> None:
    """캐시 강제 갱신 (동시 실행 방지 락 사용)"""
    context = _get_context(ctx)
    cache = InstanceCache(context)

    try:
        with FileLock(context.lock_file):
            ok = cache.refresh()
    except LockError as e:
        print_error(f"다른 갱신이 진행 중입니다: {e}")
        ctx.exit(1)

    if not ok:
        print_error(f"캐시 갱신 실패 (기존 캐시 유지): {cache.cache_file}")
        ctx.exit(1)
    print_success(f"캐시 갱신 완료: {cache.cache_file}")


@cli.command("status")
@click.pass_context
def status_command(ctx: Context) -> None:
    """캐시 파일 상태"""
    cache = InstanceCache(_get_context(ctx))
    age = cache.get_file_age()

    print_info(f"cache file: {cache.cache_file}")
    print_info(f"ttl: {cache.ttl:g}s")
    if age is None:
        print_warning("state: missing")
    elif cache.is_stale():
        print_warning(f"state: stale (age {age:.0f}s)")
    else:
        print_success(f"state: fresh (age {age:.0f}s)")


if __name__ == "__main__":
    cli()

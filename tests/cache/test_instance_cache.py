"""
tests/cache/test_instance_cache.py - InstanceCache 테스트

- 신선도 판정에 따른 갱신 여부
- 갱신 실패 시 기존 캐시 보존
- 태그 정규화된 스냅샷 생성
"""

import json
import os
import time
from unittest.mock import patch

import pytest

from conftest import TEST_MAC, TEST_VPC_ID, make_metadata
from ec2cache.cache.instances import InstanceCache, build_snapshot
from ec2cache.cache.store import read_snapshot, write_snapshot
from ec2cache.exceptions import CacheUnavailableError, ParseError

PREVIOUS_SNAPSHOT = {"i-old": {"InstanceId": "i-old", "Tags": {"Name": "old"}}}


def _age_file(path, seconds):
    past = time.time() - seconds
    os.utime(path, (past, past))


@pytest.fixture
def cache(runtime_context, fake_metadata, fake_ec2):
    return InstanceCache(runtime_context, ec2=fake_ec2)


@pytest.fixture
def fresh_cache_file(runtime_context):
    write_snapshot(runtime_context.cache_file, PREVIOUS_SNAPSHOT)
    return runtime_context.cache_file


@pytest.fixture
def stale_cache_file(fresh_cache_file):
    _age_file(fresh_cache_file, 301)
    return fresh_cache_file


# =============================================================================
# build_snapshot
# =============================================================================


class TestBuildSnapshot:
    """describe-instances 응답 → 스냅샷 변환"""

    def test_example_response(self, describe_response):
        snapshot = build_snapshot(describe_response)

        assert set(snapshot) == {"i-1", "i-2"}
        assert "Tags" not in snapshot["i-1"]
        assert "RawTags" not in snapshot["i-1"]
        assert snapshot["i-2"]["Tags"] == {"env": "qa", "Name": "web-2"}
        assert snapshot["i-2"]["RawTags"] == [
            {"Key": "env", "Value": "prod"},
            {"Key": "env", "Value": "qa"},
            {"Key": "Name", "Value": "web-2"},
        ]

    def test_duplicate_instance_id_last_wins(self):
        response = {
            "Reservations": [
                {"Instances": [{"InstanceId": "i-1", "InstanceType": "t3.micro"}]},
                {"Instances": [{"InstanceId": "i-1", "InstanceType": "m5.large"}]},
            ]
        }
        assert build_snapshot(response) == {"i-1": {"InstanceId": "i-1", "InstanceType": "m5.large"}}

    def test_empty_reservations(self):
        assert build_snapshot({"Reservations": []}) == {}

    @pytest.mark.parametrize(
        "response",
        [
            {},
            {"Reservations": None},
            {"Reservations": [{"Instances": [{"InstanceType": "t3.micro"}]}]},
            {"Reservations": ["bogus"]},
        ],
    )
    def test_unexpected_structure(self, response):
        with pytest.raises(ParseError):
            build_snapshot(response)


# =============================================================================
# refresh
# =============================================================================


class TestRefresh:
    """InstanceCache.refresh 테스트"""

    def test_refresh_writes_snapshot(self, cache, runtime_context):
        assert cache.refresh() is True

        snapshot = read_snapshot(runtime_context.cache_file)
        assert set(snapshot) == {"i-1", "i-2"}
        assert snapshot["i-2"]["Tags"] == {"env": "qa", "Name": "web-2"}

    def test_refresh_filters_by_vpc(self, cache, fake_ec2, fake_metadata):
        cache.refresh()

        fake_ec2.cli.assert_called_once_with(["describe-instances", "--filters", f"Name=vpc-id,Values={TEST_VPC_ID}"])
        assert fake_metadata.calls == [
            "network/interfaces/macs/",
            f"network/interfaces/macs/{TEST_MAC}/vpc-id",
        ]

    def test_uses_first_mac(self, runtime_context, fake_ec2, monkeypatch):
        fake = make_metadata(
            {
                "network/interfaces/macs/": "aa:aa:aa:aa:aa:aa/\nbb:bb:bb:bb:bb:bb/\n",
                "network/interfaces/macs/aa:aa:aa:aa:aa:aa/vpc-id": "vpc-primary",
            }
        )
        monkeypatch.setattr("ec2cache.cache.instances.metadata_fetch", fake)

        assert InstanceCache(runtime_context, ec2=fake_ec2).refresh() is True
        assert "Name=vpc-id,Values=vpc-primary" in fake_ec2.cli.call_args[0][0]

    @pytest.mark.parametrize(
        "items",
        [
            {"network/interfaces/macs/": None},
            {"network/interfaces/macs/": ""},
            {f"network/interfaces/macs/{TEST_MAC}/vpc-id": None},
        ],
    )
    def test_metadata_unavailable(self, runtime_context, fake_ec2, fresh_cache_file, monkeypatch, items):
        """MAC/VPC 조회 실패 시 CLI 호출 없이 실패, 기존 파일 유지"""
        monkeypatch.setattr("ec2cache.cache.instances.metadata_fetch", make_metadata(items))
        before = fresh_cache_file.read_bytes()

        assert InstanceCache(runtime_context, ec2=fake_ec2).refresh() is False

        fake_ec2.cli.assert_not_called()
        assert fresh_cache_file.read_bytes() == before

    def test_cli_failure(self, cache, fake_ec2, fresh_cache_file):
        fake_ec2.cli.return_value = None
        before = fresh_cache_file.read_bytes()

        assert cache.refresh() is False
        assert fresh_cache_file.read_bytes() == before

    @pytest.mark.parametrize("output", ["not json", "[1, 2]", '{"Reservations": [{"Instances": [{}]}]}'])
    def test_bad_response(self, cache, fake_ec2, fresh_cache_file, output):
        fake_ec2.cli.return_value = output
        before = fresh_cache_file.read_bytes()

        assert cache.refresh() is False
        assert fresh_cache_file.read_bytes() == before

    def test_persistence_failure(self, cache, fresh_cache_file):
        before = fresh_cache_file.read_bytes()

        with patch("ec2cache.cache.store.os.replace", side_effect=OSError("read-only")):
            assert cache.refresh() is False

        assert fresh_cache_file.read_bytes() == before

    def test_creates_work_dir(self, tmp_path, runtime_context, fake_metadata, fake_ec2):
        context = runtime_context.with_overrides(work_dir=tmp_path / "missing" / "ec2")

        assert InstanceCache(context, ec2=fake_ec2).refresh() is True
        assert context.cache_file.exists()


# =============================================================================
# load
# =============================================================================


class TestLoad:
    """InstanceCache.load 테스트"""

    def test_missing_file_triggers_refresh(self, cache, fake_ec2):
        snapshot = cache.load()

        assert fake_ec2.cli.call_count == 1
        assert set(snapshot) == {"i-1", "i-2"}
        assert snapshot["i-2"]["Tags"]["env"] == "qa"

    def test_fresh_file_no_refresh(self, cache, fake_ec2, fake_metadata, fresh_cache_file):
        assert cache.load() == PREVIOUS_SNAPSHOT

        fake_ec2.cli.assert_not_called()
        assert fake_metadata.calls == []

    def test_stale_file_refreshes_once(self, cache, fake_ec2, stale_cache_file):
        with patch.object(cache, "refresh", wraps=cache.refresh) as spy:
            snapshot = cache.load()

        assert spy.call_count == 1
        assert fake_ec2.cli.call_count == 1
        assert set(snapshot) == {"i-1", "i-2"}

    def test_idempotent_within_ttl(self, cache, fake_ec2):
        first = cache.load()
        second = cache.load()

        assert first == second
        assert fake_ec2.cli.call_count == 1

    def test_stale_served_when_refresh_fails(self, cache, fake_ec2, stale_cache_file):
        fake_ec2.cli.return_value = None
        before = stale_cache_file.read_bytes()

        assert cache.load() == PREVIOUS_SNAPSHOT
        assert stale_cache_file.read_bytes() == before

    def test_no_file_and_refresh_fails(self, cache, fake_ec2):
        fake_ec2.cli.return_value = None

        with pytest.raises(CacheUnavailableError):
            cache.load()

    def test_corrupt_file_and_refresh_fails(self, cache, fake_ec2, runtime_context):
        runtime_context.cache_file.write_text("i-1: [unclosed")
        _age_file(runtime_context.cache_file, 301)
        fake_ec2.cli.return_value = None

        with pytest.raises(CacheUnavailableError):
            cache.load()

    def test_corrupt_fresh_file_refreshes(self, cache, fake_ec2, runtime_context):
        """TTL 이내라도 손상된 파일은 갱신 후 새 스냅샷 제공"""
        runtime_context.cache_file.write_text("i-1: [unclosed")

        snapshot = cache.load()

        assert fake_ec2.cli.call_count == 1
        assert set(snapshot) == {"i-1", "i-2"}
        assert set(read_snapshot(runtime_context.cache_file)) == {"i-1", "i-2"}

    def test_undecodable_fresh_file_and_refresh_fails(self, cache, fake_ec2, runtime_context):
        """UTF-8이 아닌 파일 + 갱신 실패 → CacheUnavailableError (갱신은 한 번만)"""
        runtime_context.cache_file.write_bytes(b"\xff\xfe i-1")
        fake_ec2.cli.return_value = None

        with pytest.raises(CacheUnavailableError) as exc_info:
            cache.load()

        assert isinstance(exc_info.value.cause, ParseError)
        assert fake_ec2.cli.call_count == 1

    def test_corrupt_stale_file_refreshes_once(self, cache, fake_ec2, runtime_context):
        runtime_context.cache_file.write_text("i-1: [unclosed")
        _age_file(runtime_context.cache_file, 301)
        fake_ec2.cli.return_value = None

        with patch.object(cache, "refresh", wraps=cache.refresh) as spy:
            with pytest.raises(CacheUnavailableError):
                cache.load()

        assert spy.call_count == 1

    def test_custom_ttl(self, runtime_context, fake_metadata, fake_ec2, fresh_cache_file):
        _age_file(fresh_cache_file, 30)

        InstanceCache(runtime_context, ec2=fake_ec2, ttl=10).load()

        assert fake_ec2.cli.call_count == 1


# =============================================================================
# snapshot / 신선도
# =============================================================================


class TestSnapshot:
    """메모리 스냅샷 및 신선도 조회"""

    def test_snapshot_loaded_once(self, cache):
        with patch.object(cache, "load", wraps=cache.load) as spy:
            first = cache.snapshot
            second = cache.snapshot

        assert first is second
        assert spy.call_count == 1
        assert cache.loaded is True

    def test_snapshot_not_reloaded_after_ttl(self, cache, fake_ec2, runtime_context):
        cache.snapshot
        _age_file(runtime_context.cache_file, 301)
        cache.snapshot

        assert fake_ec2.cli.call_count == 1

    def test_freshness(self, cache, runtime_context):
        assert cache.is_stale() is True
        assert cache.get_file_age() is None

        cache.refresh()

        assert cache.is_stale() is False
        assert cache.get_file_age() == pytest.approx(0, abs=5)

    def test_snapshot_round_trips_through_json(self, cache):
        """CLI JSON 출력용 직렬화 가능 여부"""
        json.dumps(cache.snapshot, default=str)

"""
ec2cache/aws/tags.py - EC2 태그 정규화

describe-instances 응답의 ``Tags`` 목록(``[{"Key": ..., "Value": ...}]``)을
``{key: value}`` 딕셔너리로 변환하고, 원본 목록은 ``RawTags``에 보존합니다.

중복 키는 마지막 값이 남습니다.
"""

from __future__ import annotations

import copy
from typing import Any

TAGS_FIELD = "Tags"
RAW_TAGS_FIELD = "RawTags"


def collapse_tags(tags: list[dict[str, Any]]) -> dict[str, Any]:
    """태그 목록을 딕셔너리로 변환"""
    return {tag["Key"]: tag.get("Value") for tag in tags}


def collapse_instance_tags(instance: dict[str, Any]) -> dict[str, Any]:
    """인스턴스 레코드의 Tags를 제자리에서 정규화

    Tags 필드가 없는 레코드는 변경하지 않습니다.

    Args:
        instance: describe-instances의 Instance 레코드

    Returns:
        같은 레코드 객체
    """
    if TAGS_FIELD in instance:
        raw_tags = instance[TAGS_FIELD]
        instance[RAW_TAGS_FIELD] = copy.deepcopy(raw_tags)
        instance[TAGS_FIELD] = collapse_tags(raw_tags)
    return instance

"""Tests for snaptweet.client.notices — localized notices."""

from __future__ import annotations

import pytest

from snaptweet.client.notices import (
    API_KEY_NOTICE,
    GENERIC_NOTICE,
    IMAGE_NOTICE,
    NETWORK_NOTICE,
    RATE_LIMIT_NOTICE,
    notice_for,
)
from snaptweet.core.errors import ErrorKind


@pytest.mark.parametrize(
    "kind, expected",
    [
        (ErrorKind.API_KEY, API_KEY_NOTICE),
        (ErrorKind.NETWORK, NETWORK_NOTICE),
        (ErrorKind.RATE_LIMIT, RATE_LIMIT_NOTICE),
        (ErrorKind.IMAGE, IMAGE_NOTICE),
        (ErrorKind.GENERIC, GENERIC_NOTICE),
    ],
)
def test_notice_for_each_kind(kind, expected):
    assert notice_for(kind) == expected


def test_every_kind_has_distinct_notice():
    """No two error kinds share a notice."""
    notices = [notice_for(kind) for kind in ErrorKind]
    assert len(set(notices)) == len(ErrorKind)


def test_api_key_text():
    assert notice_for(ErrorKind.API_KEY).title == "API 키 오류"
    assert notice_for(ErrorKind.API_KEY).description == "OpenAI API 키를 확인해주세요."

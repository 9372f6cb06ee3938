# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

import base64
import json
import math
from typing import Any, Callable

import pytest

from agekey.tokens import (
    decode_token_payload,
    extract_age_thresholds,
    extract_nonce,
    extract_subject,
    is_token_expired,
)


def _segment(data: bytes) -> str:
    return base64.urlsafe_b64encode(data).rstrip(b"=").decode("ascii")


def _token(payload: Any) -> str:
    return f"{_segment(b'{}')}.{_segment(json.dumps(payload).encode('utf-8'))}.sig"


def test_decode_signed_token_recovers_claims(make_id_token: Callable[[dict[str, Any]], str]) -> None:
    claims = {
        "sub": "user-1",
        "nonce": "abc",
        "exp": 1_700_000_300,
        "age_thresholds": {"13": True, "18": False},
        "name": "Zoë 🎂",
        "nested": {"list": [1, 2.5, None, True]},
    }
    assert decode_token_payload(make_id_token(claims)) == claims


def test_decode_handles_missing_padding() -> None:
    # 1 and 2 padding characters dropped respectively
    for payload in ({"a": 1}, {"ab": 12}):
        assert decode_token_payload(_token(payload)) == payload


@pytest.mark.parametrize(
    "token",
    [
        "",
        "only-one-part",
        "two.parts",
        "a.b.c.d",
        "header..signature",
        "header.!!!.signature",
        "header.abcde.signature",
        f"header.{_segment(b'not json')}.signature",
        f"header.{_segment(bytes([0x80, 0x81, 0x82]))}.signature",
        f"header.{_segment(b'[' * 100000 + b']' * 100000)}.signature",
    ],
)
def test_decode_malformed_returns_none(token: str) -> None:
    assert decode_token_payload(token) is None


@pytest.mark.parametrize("payload", [[1, 2, 3], "a string", 42, None])
def test_decode_non_object_payload_returns_none(payload: Any) -> None:
    assert decode_token_payload(_token(payload)) is None


def test_extract_nonce_and_subject() -> None:
    assert extract_nonce({"nonce": "n1"}) == "n1"
    assert extract_nonce({"nonce": 123}) is None
    assert extract_nonce({}) is None
    assert extract_subject({"sub": "s1"}) == "s1"
    assert extract_subject({"sub": ["s1"]}) is None
    assert extract_subject({}) is None


def test_extract_age_thresholds() -> None:
    payload = {"age_thresholds": {"13": True, "18": False, "21": "yes", "25": 1, "30": None}}
    assert extract_age_thresholds(payload) == {"13": True, "18": False}
    assert extract_age_thresholds({"age_thresholds": {}}) == {}


@pytest.mark.parametrize("value", [None, [True, False], "13:true", 1])
def test_extract_age_thresholds_wrong_type(value: Any) -> None:
    payload = {} if value is None else {"age_thresholds": value}
    assert extract_age_thresholds(payload) is None


@pytest.mark.parametrize(
    "payload, now, expected",
    [
        ({"exp": 1000}, 999.0, False),
        ({"exp": 1000}, 1000.0, True),
        ({"exp": 1000}, 1001.0, True),
        ({"exp": 1000.5}, 1000.0, False),
        ({"exp": 10**30}, 1000.0, False),
        ({}, 1000.0, True),
        ({"exp": None}, 1000.0, True),
        ({"exp": "2000"}, 1000.0, True),
        ({"exp": True}, 0.0, True),
        ({"exp": math.nan}, 1000.0, True),
        ({"exp": math.inf}, 1000.0, True),
    ],
)
def test_is_token_expired(payload: dict[str, Any], now: float, expected: bool) -> None:
    assert is_token_expired(payload, now) is expected

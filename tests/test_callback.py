# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

import base64
from typing import Any, Callable

import pytest

from agekey.callback import parse_callback, parse_create_callback, validate_use_callback
from agekey.exceptions import (
    AccessDeniedError,
    AgeKeyError,
    InvalidRequestError,
    InvalidTokenError,
    NonceMismatchError,
    ServerError,
    StateMismatchError,
)
from conftest import NOW, REDIRECT_URI, callback_url, id_token_claims

STATE = "a1" * 32
NONCE = "b2" * 32

TokenFactory = Callable[[dict[str, Any]], str]


class TestParseCallback:
    def test_all_parameters(self) -> None:
        params = parse_callback(callback_url(id_token="tok", state="st", error="e", error_description="desc"))
        assert params.id_token == "tok"
        assert params.state == "st"
        assert params.error == "e"
        assert params.error_description == "desc"

    def test_missing_and_empty_are_absent(self) -> None:
        params = parse_callback(f"{REDIRECT_URI}?state=&error=")
        assert params.state is None
        assert params.error is None
        assert params.id_token is None

        assert parse_callback(REDIRECT_URI).state is None

    def test_first_value_wins(self) -> None:
        assert parse_callback(f"{REDIRECT_URI}?state=first&state=second").state == "first"

    def test_decodes_form_encoding(self) -> None:
        params = parse_callback(f"{REDIRECT_URI}?error=access_denied&error_description=User+cancelled")
        assert params.error_description == "User cancelled"


class TestValidateUseCallback:
    def test_success(self, make_id_token: TokenFactory) -> None:
        token = make_id_token(id_token_claims(NONCE))
        result = validate_use_callback(callback_url(id_token=token, state=STATE), STATE, NONCE, NOW)

        assert result.age_thresholds == {"13": True, "18": True, "21": False}
        assert result.subject == "agekey-user-42"
        assert result.raw["nonce"] == NONCE

    def test_subject_optional(self, make_id_token: TokenFactory) -> None:
        claims = id_token_claims(NONCE)
        del claims["sub"]
        result = validate_use_callback(callback_url(id_token=make_id_token(claims), state=STATE), STATE, NONCE, NOW)
        assert result.subject is None

    def test_access_denied(self) -> None:
        url = f"{REDIRECT_URI}?error=access_denied&error_description=User+cancelled&state={STATE}"
        with pytest.raises(AccessDeniedError) as exc_info:
            validate_use_callback(url, STATE, NONCE, NOW)
        assert exc_info.value.error_description == "User cancelled"

    def test_error_checked_before_state(self) -> None:
        with pytest.raises(ServerError):
            validate_use_callback(callback_url(error="server_error", state="wrong"), STATE, NONCE, NOW)

    def test_unknown_error_code(self) -> None:
        with pytest.raises(InvalidRequestError) as exc_info:
            validate_use_callback(callback_url(error="interaction_required"), STATE, NONCE, NOW)
        assert exc_info.value.code == "interaction_required"

    def test_state_mismatch(self, make_id_token: TokenFactory) -> None:
        token = make_id_token(id_token_claims(NONCE))
        with pytest.raises(StateMismatchError):
            validate_use_callback(callback_url(id_token=token, state="b" * 64), STATE, NONCE, NOW)

    def test_missing_state(self, make_id_token: TokenFactory) -> None:
        token = make_id_token(id_token_claims(NONCE))
        with pytest.raises(StateMismatchError):
            validate_use_callback(callback_url(id_token=token), STATE, NONCE, NOW)

    def test_state_checked_before_token(self) -> None:
        with pytest.raises(StateMismatchError):
            validate_use_callback(callback_url(id_token="garbage", state="other"), STATE, NONCE, NOW)

    def test_missing_id_token(self) -> None:
        with pytest.raises(InvalidTokenError, match="No ID token"):
            validate_use_callback(callback_url(state=STATE), STATE, NONCE, NOW)

    def test_undecodable_id_token(self) -> None:
        with pytest.raises(InvalidTokenError, match="Failed to decode"):
            validate_use_callback(callback_url(id_token="not.a-valid.token", state=STATE), STATE, NONCE, NOW)

    def test_deeply_nested_id_token(self) -> None:
        nested = base64.urlsafe_b64encode(b"[" * 100000 + b"]" * 100000).rstrip(b"=").decode("ascii")
        with pytest.raises(InvalidTokenError, match="Failed to decode"):
            validate_use_callback(callback_url(id_token=f"header.{nested}.sig", state=STATE), STATE, NONCE, NOW)

    def test_nonce_mismatch(self, make_id_token: TokenFactory) -> None:
        token = make_id_token(id_token_claims("c3" * 32))
        with pytest.raises(NonceMismatchError):
            validate_use_callback(callback_url(id_token=token, state=STATE), STATE, NONCE, NOW)

    def test_missing_nonce(self, make_id_token: TokenFactory) -> None:
        claims = id_token_claims(NONCE)
        del claims["nonce"]
        with pytest.raises(NonceMismatchError):
            validate_use_callback(callback_url(id_token=make_id_token(claims), state=STATE), STATE, NONCE, NOW)

    def test_expired_token_rejected_despite_matching_state_and_nonce(self, make_id_token: TokenFactory) -> None:
        token = make_id_token(id_token_claims(NONCE, exp=int(NOW) - 3600))
        with pytest.raises(InvalidTokenError, match="expired"):
            validate_use_callback(callback_url(id_token=token, state=STATE), STATE, NONCE, NOW)

    def test_token_without_exp_rejected(self, make_id_token: TokenFactory) -> None:
        claims = id_token_claims(NONCE)
        del claims["exp"]
        with pytest.raises(InvalidTokenError, match="expired"):
            validate_use_callback(callback_url(id_token=make_id_token(claims), state=STATE), STATE, NONCE, NOW)

    def test_nonce_checked_before_expiry(self, make_id_token: TokenFactory) -> None:
        token = make_id_token(id_token_claims("c3" * 32, exp=int(NOW) - 3600))
        with pytest.raises(NonceMismatchError):
            validate_use_callback(callback_url(id_token=token, state=STATE), STATE, NONCE, NOW)

    def test_missing_age_thresholds(self, make_id_token: TokenFactory) -> None:
        claims = id_token_claims(NONCE)
        del claims["age_thresholds"]
        with pytest.raises(InvalidTokenError, match="age_thresholds"):
            validate_use_callback(callback_url(id_token=make_id_token(claims), state=STATE), STATE, NONCE, NOW)

    def test_same_inputs_same_outcome(self, make_id_token: TokenFactory) -> None:
        good = callback_url(id_token=make_id_token(id_token_claims(NONCE)), state=STATE)
        assert validate_use_callback(good, STATE, NONCE, NOW) == validate_use_callback(good, STATE, NONCE, NOW)

        bad = callback_url(id_token=make_id_token(id_token_claims(NONCE)), state="x" * 64)
        outcomes = []
        for _ in range(3):
            with pytest.raises(AgeKeyError) as exc_info:
                validate_use_callback(bad, STATE, NONCE, NOW)
            outcomes.append(type(exc_info.value))
        assert outcomes == [StateMismatchError] * 3


class TestParseCreateCallback:
    def test_success(self) -> None:
        result = parse_create_callback(callback_url(state="anything"))
        assert result.success is True
        assert result.error is None

    def test_error_returned_not_raised(self) -> None:
        result = parse_create_callback(f"{REDIRECT_URI}?error=access_denied&error_description=User+cancelled")
        assert result.success is False
        assert result.error == "access_denied"
        assert result.error_description == "User cancelled"

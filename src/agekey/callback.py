# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""
Callback parsing and validation for both AgeKey flows.
"""

from urllib.parse import parse_qs, urlsplit

from agekey.exceptions import InvalidTokenError, NonceMismatchError, StateMismatchError, map_oidc_error
from agekey.models import CallbackParams, CreateAgeKeyResult, UseAgeKeyResult
from agekey.security import secure_compare
from agekey.tokens import (
    decode_token_payload,
    extract_age_thresholds,
    extract_nonce,
    extract_subject,
    is_token_expired,
)


def _first(params: dict[str, list[str]], name: str) -> str | None:
    values = params.get(name)
    if not values or not values[0]:
        return None
    return values[0]


def parse_callback(callback_url: str) -> CallbackParams:
    """
    Extracts the callback parameters without any validation.

    Only the first occurrence of each parameter is used; empty values count as absent.

    Args:
        callback_url: The full callback URL, including the query string.

    Returns:
        CallbackParams: id_token, state, error and error_description.
    """
    params = parse_qs(urlsplit(callback_url).query, keep_blank_values=True)
    return CallbackParams(
        id_token=_first(params, "id_token"),
        state=_first(params, "state"),
        error=_first(params, "error"),
        error_description=_first(params, "error_description"),
    )


def validate_use_callback(callback_url: str, state: str, nonce: str, now: float) -> UseAgeKeyResult:
    """
    Validates a Use AgeKey callback and returns the age verification result.

    Checks run in order and stop at the first failure: OIDC error, state, presence of
    the ID token, token decoding, nonce, expiry, presence of the age_thresholds claim.

    Args:
        callback_url: The full callback URL.
        state: The state stored when the authorization URL was built.
        nonce: The nonce stored when the authorization URL was built.
        now: Current time in seconds since the epoch.

    Returns:
        UseAgeKeyResult: Age threshold results, subject and raw claims.

    Raises:
        AgeKeyError: The mapped OIDC error if the callback carries one
            (e.g. AccessDeniedError for access_denied).
        StateMismatchError: If the state is missing or does not match.
        InvalidTokenError: If the ID token is missing, malformed, expired or lacks age_thresholds.
        NonceMismatchError: If the token nonce is missing or does not match.
    """
    params = parse_callback(callback_url)

    if params.error:
        raise map_oidc_error(params.error, params.error_description)

    if params.state is None or not secure_compare(params.state, state):
        raise StateMismatchError()

    if params.id_token is None:
        raise InvalidTokenError("No ID token in callback")

    payload = decode_token_payload(params.id_token)
    if payload is None:
        raise InvalidTokenError("Failed to decode ID token")

    token_nonce = extract_nonce(payload)
    if token_nonce is None or not secure_compare(token_nonce, nonce):
        raise NonceMismatchError()

    if is_token_expired(payload, now):
        raise InvalidTokenError("ID token has expired")

    age_thresholds = extract_age_thresholds(payload)
    if age_thresholds is None:
        raise InvalidTokenError("No age_thresholds in ID token")

    return UseAgeKeyResult(
        age_thresholds=age_thresholds,
        subject=extract_subject(payload),
        raw=payload,
    )


def parse_create_callback(callback_url: str) -> CreateAgeKeyResult:
    """
    Interprets a Create AgeKey callback.

    The flow uses response_type=none, so the callback only signals success or an error.
    OIDC errors are returned, not raised.

    Args:
        callback_url: The full callback URL.

    Returns:
        CreateAgeKeyResult: success, or the error code and description.
    """
    params = parse_callback(callback_url)
    if params.error:
        return CreateAgeKeyResult(success=False, error=params.error, error_description=params.error_description)
    return CreateAgeKeyResult(success=True)

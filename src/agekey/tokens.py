# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""
ID token decoding and claim extraction.

Signatures are NOT verified here. Verify ID tokens server-side against the
published JWKS before trusting them for anything beyond this flow.
"""

import math
from typing import Any

from authlib.common.encoding import json_loads, to_bytes, urlsafe_b64decode


def decode_token_payload(token: str) -> dict[str, Any] | None:
    """
    Decodes the payload segment of a compact JWT without verifying the signature.

    Args:
        token: The JWT string (header.payload.signature).

    Returns:
        dict[str, Any] | None: The payload, or None if the token is malformed.
    """
    parts = token.split(".")
    if len(parts) != 3 or not parts[1]:
        return None

    try:
        payload = json_loads(urlsafe_b64decode(to_bytes(parts[1])))
    except (ValueError, TypeError, RecursionError):
        # binascii.Error, UnicodeDecodeError and JSONDecodeError are ValueErrors; deep nesting is RecursionError
        return None

    if not isinstance(payload, dict):
        return None
    return payload


def extract_nonce(payload: dict[str, Any]) -> str | None:
    nonce = payload.get("nonce")
    return nonce if isinstance(nonce, str) else None


def extract_subject(payload: dict[str, Any]) -> str | None:
    sub = payload.get("sub")
    return sub if isinstance(sub, str) else None


def extract_age_thresholds(payload: dict[str, Any]) -> dict[str, bool] | None:
    """
    Extracts the `age_thresholds` result claim, e.g. {"13": True, "18": True, "21": False}.

    Entries whose value is not a boolean are dropped.

    Args:
        payload: The decoded token payload.

    Returns:
        dict[str, bool] | None: The results, or None if the claim is absent or not an object.
    """
    thresholds = payload.get("age_thresholds")
    if not isinstance(thresholds, dict):
        return None
    return {str(age): result for age, result in thresholds.items() if isinstance(result, bool)}


def is_token_expired(payload: dict[str, Any], now: float) -> bool:
    """
    Checks the `exp` claim. A missing, non-numeric or non-finite `exp` counts as expired.

    Args:
        payload: The decoded token payload.
        now: Current time in seconds since the epoch.

    Returns:
        bool: True if the token is expired.
    """
    exp = payload.get("exp")
    if isinstance(exp, bool) or not isinstance(exp, (int, float)):
        return True
    if isinstance(exp, float) and not math.isfinite(exp):
        return True
    return now >= exp

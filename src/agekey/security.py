# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""
Security primitives: random tokens, clock, constant-time comparison and PII anonymization.
"""

import hashlib
import hmac
import secrets
import time
from typing import Protocol

from pydantic import SecretStr

from agekey.constants import TOKEN_LENGTH
from agekey.exceptions import ConfigurationError


class RandomSourceProtocol(Protocol):
    """Protocol for a cryptographically secure random byte source."""

    def token_bytes(self, nbytes: int) -> bytes:
        """Returns `nbytes` random bytes."""
        ...


class ClockProtocol(Protocol):
    """Protocol for the clock used in expiration checks."""

    def now(self) -> float:
        """Returns the current time in seconds since the epoch."""
        ...


class SystemRandomSource:
    """Default random source backed by the OS CSPRNG."""

    def token_bytes(self, nbytes: int) -> bytes:
        return secrets.token_bytes(nbytes)


class SystemClock:
    """Default clock backed by the system wall clock."""

    def now(self) -> float:
        return time.time()


def generate_token(random_source: RandomSourceProtocol, nbytes: int = TOKEN_LENGTH) -> str:
    """
    Generates a hex-encoded random token (64 characters for the default 32 bytes).

    Args:
        random_source: The random byte source.
        nbytes: Number of random bytes.

    Returns:
        str: The hex-encoded token.

    Raises:
        ConfigurationError: If no secure random source is available.
    """
    try:
        data = random_source.token_bytes(nbytes)
    except NotImplementedError as e:
        raise ConfigurationError("No cryptographically secure random source is available.") from e
    return data.hex()


def generate_state(random_source: RandomSourceProtocol) -> str:
    return generate_token(random_source)


def generate_nonce(random_source: RandomSourceProtocol) -> str:
    return generate_token(random_source)


def secure_compare(received: str, expected: str) -> bool:
    """
    Compares two strings in constant time.

    Strings of different length never match. Equal-length strings are compared over
    every byte without an early exit.
    """
    return hmac.compare_digest(received.encode("utf-8"), expected.encode("utf-8"))


def anonymize(value: str, salt: SecretStr) -> str:
    """
    Anonymizes a value using HMAC-SHA256 with the configured salt.

    Args:
        value: The value to anonymize.
        salt: The PII salt.

    Returns:
        str: The anonymized hex digest.
    """
    return hmac.new(
        salt.get_secret_value().encode("utf-8"),
        value.encode("utf-8"),
        hashlib.sha256,
    ).hexdigest()

# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

import os
from typing import Any, Callable, Generator
from urllib.parse import urlencode

import pytest
from authlib.jose import JsonWebKey, jwt
from pydantic import SecretStr

from agekey.config import AgeKeyConfig
from agekey.environment import resolve_environment
from agekey.models_internal import ResolvedEnvironment

NOW = 1_700_000_000.0
REDIRECT_URI = "https://myapp.example.com/callback"


class FixedClock:
    """Clock frozen at a given epoch second."""

    def __init__(self, now: float = NOW) -> None:
        self.current = now

    def now(self) -> float:
        return self.current


class SequenceRandomSource:
    """Deterministic random source: every call yields a different, predictable byte run."""

    def __init__(self, seed: int = 0xA0) -> None:
        self.seed = seed
        self.calls = 0

    def token_bytes(self, nbytes: int) -> bytes:
        start = self.seed + self.calls * 7
        self.calls += 1
        return bytes((start + i) % 256 for i in range(nbytes))


@pytest.fixture(autouse=True)
def clean_agekey_env() -> Generator[None, None, None]:
    """Keeps AGEKEY_* variables from the host environment out of the tests."""
    saved = {k: v for k, v in os.environ.items() if k.startswith("AGEKEY_") and not k.startswith("AGEKEY_LOG_")}
    for key in saved:
        del os.environ[key]
    yield
    os.environ.update(saved)


@pytest.fixture
def config() -> AgeKeyConfig:
    return AgeKeyConfig(
        client_id="ak_test_client123",
        client_secret=SecretStr("sk_test_secret456"),
        redirect_uri=REDIRECT_URI,
    )


@pytest.fixture
def public_config() -> AgeKeyConfig:
    """Configuration without a client secret, as used in a browser-facing context."""
    return AgeKeyConfig(client_id="ak_test_client123", redirect_uri=REDIRECT_URI)


@pytest.fixture
def environment(config: AgeKeyConfig) -> ResolvedEnvironment:
    return resolve_environment(config.client_id)


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock()


@pytest.fixture
def random_source() -> SequenceRandomSource:
    return SequenceRandomSource()


@pytest.fixture(scope="session")
def signing_key() -> Any:
    return JsonWebKey.generate_key("RSA", 2048, is_private=True)


@pytest.fixture
def make_id_token(signing_key: Any) -> Callable[[dict[str, Any]], str]:
    """Mints an RS256 ID token with the given claims."""

    def _make(claims: dict[str, Any]) -> str:
        headers = {"alg": "RS256", "kid": signing_key.as_dict()["kid"]}
        token: bytes = jwt.encode(headers, claims, signing_key)
        return token.decode("utf-8")

    return _make


def callback_url(**params: str) -> str:
    """Builds a redirect URI callback with the given query parameters."""
    return f"{REDIRECT_URI}?{urlencode(params)}"


def id_token_claims(nonce: str, **overrides: Any) -> dict[str, Any]:
    claims: dict[str, Any] = {
        "iss": "https://api.test.agekey.org",
        "aud": "ak_test_client123",
        "sub": "agekey-user-42",
        "nonce": nonce,
        "iat": int(NOW) - 10,
        "exp": int(NOW) + 300,
        "age_thresholds": {"13": True, "18": True, "21": False},
    }
    claims.update(overrides)
    return claims

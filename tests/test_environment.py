# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

import pytest

from agekey.environment import (
    has_client_id_prefix,
    has_secret_prefix,
    is_test_credential,
    is_test_secret,
    resolve_environment,
    strip_secret_prefix,
    validate_credential_environments,
)
from agekey.exceptions import ConfigurationError


@pytest.mark.parametrize(
    "client_id, expected",
    [
        ("ak_test_abc", True),
        ("ak_live_abc", False),
        ("v2-0b7c8f2e-1d3a-4e5f-9a8b-7c6d5e4f3a2b", False),
        ("AK_TEST_abc", False),
    ],
)
def test_is_test_credential(client_id: str, expected: bool) -> None:
    assert is_test_credential(client_id) is expected


def test_secret_helpers() -> None:
    assert is_test_secret("sk_test_abc")
    assert not is_test_secret("sk_live_abc")
    assert has_secret_prefix("sk_live_abc")
    assert not has_secret_prefix("legacy-secret")
    assert has_client_id_prefix("ak_live_abc")
    assert not has_client_id_prefix("v2-1234")


@pytest.mark.parametrize(
    "secret, expected",
    [
        ("sk_test_abc123", "abc123"),
        ("sk_live_abc123", "abc123"),
        ("legacy-secret", "legacy-secret"),
    ],
)
def test_strip_secret_prefix(secret: str, expected: str) -> None:
    assert strip_secret_prefix(secret) == expected


@pytest.mark.parametrize(
    "client_id, secret",
    [
        ("ak_test_X", "sk_live_Y"),
        ("ak_live_X", "sk_test_Y"),
    ],
)
def test_mismatched_environments_rejected(client_id: str, secret: str) -> None:
    with pytest.raises(ConfigurationError, match="Environment mismatch"):
        validate_credential_environments(client_id, secret)


@pytest.mark.parametrize(
    "client_id, secret",
    [
        ("ak_test_X", "sk_test_Y"),
        ("ak_live_X", "sk_live_Y"),
        # Legacy identifiers carry no tag, so there is nothing to compare
        ("v2-1234", "sk_test_Y"),
        ("ak_test_X", "legacy-secret"),
    ],
)
def test_matching_or_untagged_environments_accepted(client_id: str, secret: str) -> None:
    validate_credential_environments(client_id, secret)


def test_resolve_test_environment() -> None:
    env = resolve_environment("ak_test_abc")
    assert env.is_test is True
    assert env.base_url == "https://api.test.agekey.org"
    assert env.use_endpoint == "https://api.test.agekey.org/v1/oidc/use"
    assert env.create_endpoint == "https://api.test.agekey.org/v1/oidc/create"
    assert env.par_endpoint == "https://api.test.agekey.org/v1/oidc/create/par"
    assert env.jwks_endpoint == "https://api.test.agekey.org/.well-known/jwks.json"


@pytest.mark.parametrize("client_id", ["ak_live_abc", "v2-1234"])
def test_resolve_live_environment(client_id: str) -> None:
    env = resolve_environment(client_id)
    assert env.is_test is False
    assert env.use_endpoint == "https://api.agekey.org/v1/oidc/use"
    assert env.par_endpoint == "https://api.agekey.org/v1/oidc/create/par"


def test_base_url_override_replaces_every_endpoint() -> None:
    env = resolve_environment("ak_test_abc", "http://localhost:8787/")
    assert env.is_test is True
    assert env.base_url == "http://localhost:8787"
    assert env.use_endpoint == "http://localhost:8787/v1/oidc/use"
    assert env.create_endpoint == "http://localhost:8787/v1/oidc/create"
    assert env.par_endpoint == "http://localhost:8787/v1/oidc/create/par"
    assert env.jwks_endpoint == "http://localhost:8787/.well-known/jwks.json"

# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""
Environment detection from credential prefixes.

Test credentials always carry the `ak_test_` / `sk_test_` prefix. Everything else,
including legacy identifiers such as `v2-<uuid>`, is treated as live.
"""

from agekey.constants import (
    BASE_URLS,
    ENDPOINT_PATHS,
    LIVE_CLIENT_ID_PREFIX,
    LIVE_SECRET_PREFIX,
    TEST_CLIENT_ID_PREFIX,
    TEST_SECRET_PREFIX,
)
from agekey.exceptions import ConfigurationError
from agekey.models_internal import ResolvedEnvironment


def is_test_credential(client_id: str) -> bool:
    """Returns True when the client ID carries the test prefix."""
    return client_id.startswith(TEST_CLIENT_ID_PREFIX)


def is_test_secret(secret: str) -> bool:
    """Returns True when the client secret carries the test prefix."""
    return secret.startswith(TEST_SECRET_PREFIX)


def has_client_id_prefix(client_id: str) -> bool:
    return client_id.startswith((TEST_CLIENT_ID_PREFIX, LIVE_CLIENT_ID_PREFIX))


def has_secret_prefix(secret: str) -> bool:
    return secret.startswith((TEST_SECRET_PREFIX, LIVE_SECRET_PREFIX))


def strip_secret_prefix(secret: str) -> str:
    """
    Removes the `sk_test_` / `sk_live_` prefix, if present.

    The prefix only identifies the environment; use this when the raw secret is needed.
    """
    for prefix in (TEST_SECRET_PREFIX, LIVE_SECRET_PREFIX):
        if secret.startswith(prefix):
            return secret[len(prefix) :]
    return secret


def validate_credential_environments(client_id: str, client_secret: str) -> None:
    """
    Ensures that the client ID and secret belong to the same environment.

    The check only applies when both values carry a recognizable prefix.

    Args:
        client_id: The AgeKey client ID.
        client_secret: The AgeKey client secret.

    Raises:
        ConfigurationError: If one is a test credential and the other a live one.
    """
    if not (has_client_id_prefix(client_id) and has_secret_prefix(client_secret)):
        return

    client_is_test = is_test_credential(client_id)
    secret_is_test = is_test_secret(client_secret)

    if client_is_test != secret_is_test:
        raise ConfigurationError(
            f"Environment mismatch: clientId is {'test' if client_is_test else 'live'} "
            f"but clientSecret is {'test' if secret_is_test else 'live'}. "
            "Both must be from the same environment."
        )


def resolve_environment(client_id: str, api_base_url: str | None = None) -> ResolvedEnvironment:
    """
    Resolves the endpoints for a client.

    Args:
        client_id: The AgeKey client ID, used to pick test or live.
        api_base_url: Optional base URL replacing the default host for every endpoint.

    Returns:
        ResolvedEnvironment: The environment with all endpoint URLs.
    """
    is_test = is_test_credential(client_id)
    base_url = (api_base_url or BASE_URLS["test" if is_test else "live"]).rstrip("/")

    return ResolvedEnvironment(
        is_test=is_test,
        base_url=base_url,
        use_endpoint=f"{base_url}{ENDPOINT_PATHS['use']}",
        create_endpoint=f"{base_url}{ENDPOINT_PATHS['create']}",
        par_endpoint=f"{base_url}{ENDPOINT_PATHS['par']}",
        jwks_endpoint=f"{base_url}{ENDPOINT_PATHS['jwks']}",
    )

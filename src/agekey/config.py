# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""
Configuration for the agekey package.
"""

from typing import Any

from pydantic import Field, SecretStr, ValidationError, ValidationInfo, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from agekey.exceptions import ConfigurationError


class AgeKeyConfig(BaseSettings):
    """
    Client identity and settings for an AgeKey client.

    Values can be passed as keyword arguments or read from `AGEKEY_*` environment variables.

    Attributes:
        client_id (str): The AgeKey application ID (`ak_test_...`, `ak_live_...` or a legacy ID).
        client_secret (SecretStr | None): The application secret (`sk_test_...` / `sk_live_...`).
            Server-side only. Required for the Create AgeKey flow.
        redirect_uri (str): The registered redirect URI for OIDC callbacks.
        api_base_url (str | None): Overrides the API base URL derived from the client ID.
        http_timeout (float): Timeout in seconds for the PAR request.
        pii_salt (SecretStr): Salt for anonymizing subject identifiers in logs/traces.
        unsafe_local_dev (bool): Allows a plain-HTTP `api_base_url` for local testing.
    """

    model_config = SettingsConfigDict(
        env_prefix="AGEKEY_",
        case_sensitive=False,
        frozen=True,
    )

    unsafe_local_dev: bool = False
    client_id: str = Field(..., min_length=1)
    client_secret: SecretStr | None = None
    redirect_uri: str = Field(..., min_length=1)
    api_base_url: str | None = None
    http_timeout: float = Field(default=10.0, gt=0)
    pii_salt: SecretStr = SecretStr("agekey-unsafe-default-salt")

    @field_validator("client_id", "redirect_uri", mode="before")
    @classmethod
    def strip_whitespace(cls, v: Any) -> Any:
        if isinstance(v, str):
            return v.strip()
        return v

    @field_validator("client_secret", mode="before")
    @classmethod
    def empty_secret_is_none(cls, v: Any) -> Any:
        """
        Treats an empty secret (e.g. an unset env var exported as "") as absent.
        """
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @field_validator("api_base_url", mode="after")
    @classmethod
    def normalize_base_url(cls, v: str | None, info: ValidationInfo) -> str | None:
        """
        Strips trailing slashes and requires HTTPS unless local dev mode is enabled.

        Args:
            v: The configured base URL.
            info: Validation context holding previously validated fields.

        Returns:
            The normalized base URL, or None when not configured.

        Raises:
            ValueError: If the URL is not HTTP(S), or is plain HTTP outside local dev mode.
        """
        if v is None or not v.strip():
            return None

        v = v.strip().rstrip("/")
        if v.startswith("http://"):
            if not info.data.get("unsafe_local_dev", False):
                raise ValueError("HTTPS is required for api_base_url. Set 'unsafe_local_dev=True' only for local testing.")
        elif not v.startswith("https://"):
            raise ValueError("api_base_url must be an absolute http(s) URL.")
        return v


def load_config(**overrides: Any) -> AgeKeyConfig:
    """
    Builds an AgeKeyConfig from keyword overrides and the environment.

    Args:
        **overrides: Field values taking precedence over `AGEKEY_*` environment variables.

    Returns:
        AgeKeyConfig: The validated configuration.

    Raises:
        ConfigurationError: If required fields are missing or invalid.
    """
    try:
        return AgeKeyConfig(**overrides)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid AgeKey configuration: {e}") from e

# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""
AgeKey client: entry point composing the Use and Create AgeKey flows.
"""

from functools import partial
from typing import Any

import anyio
import httpx
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor

from agekey.config import AgeKeyConfig, load_config
from agekey.create_agekey import CreateAgeKeyClient
from agekey.environment import resolve_environment, validate_credential_environments
from agekey.exceptions import ConfigurationError
from agekey.models import CallbackParams, CreateAgeKeyInitiateResult, CreateAgeKeyResult, PARResult
from agekey.models_internal import ResolvedEnvironment
from agekey.security import ClockProtocol, RandomSourceProtocol, SystemClock, SystemRandomSource
from agekey.use_agekey import UseAgeKeyClient
from agekey.utils.logger import logger


class AgeKeyAsync:
    """
    Async implementation of the AgeKey client (The Core).

    Use AgeKey methods are synchronous; only the Create AgeKey PAR request is awaited.
    Used as an async context manager, it keeps one pooled HTTP client open for the block.

    Attributes:
        config (AgeKeyConfig): The validated configuration.
        environment (ResolvedEnvironment): Endpoints resolved from the client ID.
        use_agekey (UseAgeKeyClient): The Use AgeKey flow.
        create_agekey (CreateAgeKeyClient): The Create AgeKey flow.
    """

    def __init__(
        self,
        config: AgeKeyConfig | None = None,
        client: httpx.AsyncClient | None = None,
        random_source: RandomSourceProtocol | None = None,
        clock: ClockProtocol | None = None,
        **settings: Any,
    ) -> None:
        """
        Initialize the AgeKey client.

        Args:
            config: The configuration object. If omitted, it is built from `settings`
                and `AGEKEY_*` environment variables.
            client: External async HTTP client for the PAR request (optional).
            random_source: Random byte source for state and nonce. Defaults to the OS CSPRNG.
            clock: Clock for token expiry checks. Defaults to the system clock.
            **settings: AgeKeyConfig fields (client_id, client_secret, redirect_uri, api_base_url, ...).

        Raises:
            ConfigurationError: If required settings are missing or the client ID and
                secret belong to different environments.
        """
        if config is None:
            config = load_config(**settings)
        elif settings:
            raise ConfigurationError("Pass either a config object or individual settings, not both.")

        if config.client_secret is not None:
            validate_credential_environments(config.client_id, config.client_secret.get_secret_value())

        self.config = config
        self.environment: ResolvedEnvironment = resolve_environment(config.client_id, config.api_base_url)

        self._external_client = client
        self._internal_client: httpx.AsyncClient | None = None
        if client is not None:
            HTTPXClientInstrumentor().instrument_client(client)

        self._random_source = random_source or SystemRandomSource()
        self._clock = clock or SystemClock()

        self.use_agekey = UseAgeKeyClient(config, self.environment, self._random_source, self._clock)
        self.create_agekey = CreateAgeKeyClient(config, self.environment, self._random_source, client=client)

        logger.debug(f"AgeKey client initialised for {'test' if self.environment.is_test else 'live'} environment")

    async def __aenter__(self) -> "AgeKeyAsync":
        if self._external_client is None and self._internal_client is None:
            self._internal_client = httpx.AsyncClient(timeout=self.config.http_timeout)
            HTTPXClientInstrumentor().instrument_client(self._internal_client)
            self.create_agekey.client = self._internal_client
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._internal_client is not None:
            await self._internal_client.aclose()
            self._internal_client = None
            self.create_agekey.client = None

    @property
    def is_test_mode(self) -> bool:
        return self.environment.is_test

    @property
    def client_id(self) -> str:
        return self.config.client_id

    @property
    def redirect_uri(self) -> str:
        return self.config.redirect_uri


class CreateAgeKeyClientSync:
    """
    Sync facade over CreateAgeKeyClient. Each network call runs in its own event loop.
    """

    def __init__(self, async_client: CreateAgeKeyClient) -> None:
        self._async = async_client

    def push_authorization_request(self, **options: Any) -> PARResult:
        result: PARResult = anyio.run(partial(self._async.push_authorization_request, **options))
        return result

    def initiate(self, **options: Any) -> CreateAgeKeyInitiateResult:
        result: CreateAgeKeyInitiateResult = anyio.run(partial(self._async.initiate, **options))
        return result

    def get_authorization_url(self, request_uri: str, enable_upgrade: bool = False) -> str:
        return self._async.get_authorization_url(request_uri, enable_upgrade=enable_upgrade)

    def handle_callback(self, callback_url: str) -> CreateAgeKeyResult:
        return self._async.handle_callback(callback_url)


class AgeKey:
    """
    Sync facade for AgeKeyAsync.

    Example:
        agekey = AgeKey(client_id="ak_test_xxxx", redirect_uri="https://myapp.com/callback")
        auth = agekey.use_agekey.get_authorization_url(age_thresholds=[13, 18, 21])
        # store auth.state / auth.nonce, redirect to auth.url
        result = agekey.use_agekey.handle_callback(callback_url, auth.state, auth.nonce)
    """

    def __init__(
        self,
        config: AgeKeyConfig | None = None,
        random_source: RandomSourceProtocol | None = None,
        clock: ClockProtocol | None = None,
        **settings: Any,
    ) -> None:
        """
        Initialize the sync client.

        Args:
            config: The configuration object (optional, see AgeKeyAsync).
            random_source: Random byte source for state and nonce.
            clock: Clock for token expiry checks.
            **settings: AgeKeyConfig fields.

        Raises:
            ConfigurationError: If the configuration is missing or inconsistent.
        """
        self._async = AgeKeyAsync(config, random_source=random_source, clock=clock, **settings)
        self.create_agekey = CreateAgeKeyClientSync(self._async.create_agekey)

    @property
    def use_agekey(self) -> UseAgeKeyClient:
        return self._async.use_agekey

    @property
    def config(self) -> AgeKeyConfig:
        return self._async.config

    @property
    def environment(self) -> ResolvedEnvironment:
        return self._async.environment

    @property
    def is_test_mode(self) -> bool:
        return self._async.is_test_mode

    @property
    def client_id(self) -> str:
        return self._async.client_id

    @property
    def redirect_uri(self) -> str:
        return self._async.redirect_uri

    def parse_callback(self, callback_url: str) -> CallbackParams:
        return self._async.use_agekey.parse_callback(callback_url)

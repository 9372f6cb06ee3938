# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""
CreateAgeKeyClient component for storing age verification signals via PAR.

The PAR request carries the client secret, so this flow must only run server-side.
"""

from typing import Any

import httpx
from opentelemetry import trace
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.trace import Status, StatusCode
from pydantic import ValidationError

from agekey.authorization_request import build_create_authorization_url, build_par_body
from agekey.callback import parse_create_callback
from agekey.config import AgeKeyConfig
from agekey.constants import DEFAULT_PAR_EXPIRY
from agekey.exceptions import (
    AgeKeyError,
    InvalidRequestError,
    ServerError,
    UnauthorizedClientError,
    map_oidc_error,
)
from agekey.models import CreateAgeKeyInitiateResult, CreateAgeKeyOptions, CreateAgeKeyResult, PARResult
from agekey.models_internal import AuthorizationDetail, PARResponseBody, ResolvedEnvironment
from agekey.security import RandomSourceProtocol, generate_state
from agekey.transport import TransportResponse, post_form
from agekey.utils.logger import logger

tracer = trace.get_tracer(__name__)


class CreateAgeKeyClient:
    """
    Pushes authorization requests and builds Create AgeKey authorization URLs.

    Attributes:
        config (AgeKeyConfig): The client configuration.
        environment (ResolvedEnvironment): The resolved endpoints.
    """

    def __init__(
        self,
        config: AgeKeyConfig,
        environment: ResolvedEnvironment,
        random_source: RandomSourceProtocol,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the CreateAgeKeyClient.

        Args:
            config: The client configuration.
            environment: The resolved endpoints.
            random_source: Source of randomness for the state parameter.
            client: Async HTTP client for the PAR request. If not provided, a transient
                client is created for each request.
        """
        self.config = config
        self.environment = environment
        self.random_source = random_source
        self.client = client

    def _require_secret(self) -> None:
        if self.config.client_secret is None:
            raise InvalidRequestError(
                "Client secret is required for Create AgeKey flow. This method must be called server-side."
            )

    @staticmethod
    def _parse_options(**options: Any) -> CreateAgeKeyOptions:
        try:
            return CreateAgeKeyOptions(**options)
        except ValidationError as e:
            raise InvalidRequestError(f"Invalid Create AgeKey options: {e}") from e

    async def _post_par(self, body: dict[str, str]) -> TransportResponse:
        if self.client is not None:
            return await post_form(self.client, self.environment.par_endpoint, body)

        async with httpx.AsyncClient(timeout=self.config.http_timeout) as client:
            HTTPXClientInstrumentor().instrument_client(client)
            return await post_form(client, self.environment.par_endpoint, body)

    @staticmethod
    def _parse_par_response(response: TransportResponse) -> PARResult:
        """
        Interprets the PAR response.

        Raises:
            UnauthorizedClientError: On HTTP 401 or an unauthorized_client error.
            AgeKeyError: The mapped OIDC error for any other error code.
            ServerError: On other failures or when request_uri is missing.
        """
        if not isinstance(response.payload, dict):
            if response.status_code == 401:
                raise UnauthorizedClientError()
            if not response.ok:
                raise ServerError(f"PAR request failed: {response.status_code}")
            raise ServerError("PAR response is not a JSON object")

        try:
            body = PARResponseBody(**response.payload)
        except ValidationError as e:
            raise ServerError(f"Invalid PAR response: {e}") from e

        if not response.ok or body.error:
            if response.status_code == 401 or body.error == "unauthorized_client":
                raise UnauthorizedClientError(body.error_description)
            if body.error:
                raise map_oidc_error(body.error, body.error_description)
            raise ServerError(f"PAR request failed: {response.status_code}")

        if not isinstance(body.request_uri, str) or not body.request_uri:
            raise ServerError("PAR response missing request_uri")

        expires_in = body.expires_in
        if isinstance(expires_in, bool) or not isinstance(expires_in, int) or expires_in <= 0:
            expires_in = DEFAULT_PAR_EXPIRY
        return PARResult(request_uri=body.request_uri, expires_in=expires_in)

    async def push_authorization_request(self, **options: Any) -> PARResult:
        """
        Sends a Pushed Authorization Request to start the Create AgeKey flow.

        Emits an OpenTelemetry span `agekey.create.push_authorization_request`.

        Args:
            **options: CreateAgeKeyOptions fields: method, age, verified_at, verification_id,
                provenance (all required), attributes, enable_upgrade.

        Returns:
            PARResult: The request_uri and its lifetime in seconds.

        Raises:
            InvalidRequestError: If no client secret is configured or the options are invalid.
            UnauthorizedClientError: If the credentials are rejected.
            ServerError: If the server fails or the response is malformed.
            NetworkError: If the request cannot be sent.
        """
        self._require_secret()
        return await self._push(self._parse_options(**options))

    async def _push(self, parsed: CreateAgeKeyOptions) -> PARResult:
        detail = AuthorizationDetail(
            method=parsed.method,
            age=parsed.age,
            verified_at=parsed.verified_at,
            verification_id=parsed.verification_id,
            provenance=parsed.provenance,
            attributes=parsed.attributes,
        )
        state = generate_state(self.random_source)
        body = build_par_body(self.config, detail, state=state, enable_upgrade=parsed.enable_upgrade)

        with tracer.start_as_current_span("agekey.create.push_authorization_request") as span:
            span.set_attribute("agekey.method", parsed.method.value)
            try:
                response = await self._post_par(body)
                result = self._parse_par_response(response)
            except AgeKeyError as e:
                logger.error(f"PAR request failed: {e.code}: {e.message}")
                span.record_exception(e)
                span.set_status(Status(StatusCode.ERROR, e.message))
                raise

            logger.info(f"PAR request accepted; request_uri valid for {result.expires_in}s")
            span.set_status(Status(StatusCode.OK))
            return result

    def get_authorization_url(self, request_uri: str, enable_upgrade: bool = False) -> str:
        """
        Builds the authorization URL for a request_uri obtained from PAR.

        Args:
            request_uri: The request_uri from `push_authorization_request`.
            enable_upgrade: Allow upgrading an existing AgeKey.

        Returns:
            str: The URL to redirect the user to.
        """
        return build_create_authorization_url(
            self.config, self.environment, request_uri, enable_upgrade=enable_upgrade
        )

    def handle_callback(self, callback_url: str) -> CreateAgeKeyResult:
        """
        Handles the Create AgeKey callback. Errors are reported in the result, not raised.
        """
        result = parse_create_callback(callback_url)
        if not result.success:
            logger.warning(f"Create AgeKey callback reported error: {result.error}")
        return result

    async def initiate(self, **options: Any) -> CreateAgeKeyInitiateResult:
        """
        Pushes the authorization request and builds the authorization URL in one call.

        Args:
            **options: Same as `push_authorization_request`.

        Returns:
            CreateAgeKeyInitiateResult: auth_url, request_uri and expires_in.
        """
        self._require_secret()
        parsed = self._parse_options(**options)
        par = await self._push(parsed)
        auth_url = self.get_authorization_url(par.request_uri, enable_upgrade=parsed.enable_upgrade)
        return CreateAgeKeyInitiateResult(auth_url=auth_url, request_uri=par.request_uri, expires_in=par.expires_in)

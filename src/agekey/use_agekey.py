# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""
UseAgeKeyClient component for verifying a user's age against thresholds.
"""

from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from agekey.authorization_request import build_use_authorization_url
from agekey.callback import parse_callback, validate_use_callback
from agekey.claims import build_use_claims, parse_use_options
from agekey.config import AgeKeyConfig
from agekey.exceptions import AgeKeyError
from agekey.models import AuthorizationUrlResult, CallbackParams, UseAgeKeyResult
from agekey.models_internal import ResolvedEnvironment
from agekey.security import ClockProtocol, RandomSourceProtocol, anonymize, generate_nonce, generate_state
from agekey.utils.logger import logger

tracer = trace.get_tracer(__name__)


class UseAgeKeyClient:
    """
    Builds Use AgeKey authorization URLs and validates their callbacks.

    All methods are synchronous and keep no per-request state: the caller persists the
    returned state and nonce and passes them back to `handle_callback`.
    """

    def __init__(
        self,
        config: AgeKeyConfig,
        environment: ResolvedEnvironment,
        random_source: RandomSourceProtocol,
        clock: ClockProtocol,
    ) -> None:
        self.config = config
        self.environment = environment
        self.random_source = random_source
        self.clock = clock

    def get_authorization_url(self, **options: Any) -> AuthorizationUrlResult:
        """
        Builds an authorization URL for the Use AgeKey flow.

        Args:
            **options: UseAgeKeyOptions fields: age_thresholds (required), allowed_methods,
                verified_after, overrides, provenance, enable_create.

        Returns:
            AuthorizationUrlResult: The URL plus the state and nonce to store in the session.

        Raises:
            InvalidRequestError: If the options are invalid.
        """
        parsed = parse_use_options(**options)
        claims = build_use_claims(parsed)

        state = generate_state(self.random_source)
        nonce = generate_nonce(self.random_source)

        url = build_use_authorization_url(
            self.config,
            self.environment,
            claims,
            state=state,
            nonce=nonce,
            enable_create=parsed.enable_create,
        )
        logger.debug(f"Built Use AgeKey authorization URL for thresholds {parsed.age_thresholds}")
        return AuthorizationUrlResult(url=url, state=state, nonce=nonce)

    def handle_callback(self, callback_url: str, state: str, nonce: str) -> UseAgeKeyResult:
        """
        Validates the callback from a Use AgeKey authorization.

        Emits an OpenTelemetry span `agekey.use.handle_callback`.

        Args:
            callback_url: The full callback URL, including query parameters.
            state: The state returned by `get_authorization_url`.
            nonce: The nonce returned by `get_authorization_url`.

        Returns:
            UseAgeKeyResult: Age threshold results, subject and raw claims.

        Raises:
            AccessDeniedError: If the user denied the request.
            StateMismatchError: If the state does not match.
            NonceMismatchError: If the ID token nonce does not match.
            InvalidTokenError: If the ID token is missing, malformed or expired.
            AgeKeyError: For other OIDC errors reported in the callback.
        """
        with tracer.start_as_current_span("agekey.use.handle_callback") as span:
            try:
                result = validate_use_callback(callback_url, state=state, nonce=nonce, now=self.clock.now())
            except AgeKeyError as e:
                logger.warning(f"Use AgeKey callback rejected: {e.code}")
                span.set_attribute("agekey.error_code", e.code)
                span.set_status(Status(StatusCode.ERROR, e.message))
                raise

            if result.subject is not None:
                user_hash = anonymize(result.subject, self.config.pii_salt)
                span.set_attribute("enduser.id", user_hash)
                logger.info(f"Use AgeKey callback validated for subject {user_hash}")
            else:
                logger.info("Use AgeKey callback validated")
            span.set_status(Status(StatusCode.OK))
            return result

    def parse_callback(self, callback_url: str) -> CallbackParams:
        """
        Parses callback parameters without validation. Useful for diagnostics.
        """
        return parse_callback(callback_url)

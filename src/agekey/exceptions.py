# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""
Custom exceptions for the agekey package.
"""

from agekey.constants import DOCS_BASE_URL


class AgeKeyError(Exception):
    """
    Base exception for all agekey errors.

    Attributes:
        code (str): Machine-readable error kind (e.g. "state_mismatch").
        message (str): Human-readable description.
        docs_url (str | None): Troubleshooting reference, if any.
    """

    code: str = "agekey_error"
    default_message: str = "AgeKey request failed."
    docs_url: str | None = None

    def __init__(self, message: str | None = None, *, code: str | None = None, docs_url: str | None = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)
        if code is not None:
            self.code = code
        if docs_url is not None:
            self.docs_url = docs_url


class ConfigurationError(AgeKeyError):
    """Raised when the client is constructed with missing or inconsistent credentials."""

    code = "configuration_error"
    default_message = "Invalid AgeKey client configuration."
    docs_url = f"{DOCS_BASE_URL}/getting-started"


class InvalidRequestError(AgeKeyError):
    """Raised when a request is malformed, either locally or as reported by the server."""

    code = "invalid_request"
    default_message = "The AgeKey request is invalid."
    docs_url = f"{DOCS_BASE_URL}/api-reference"


class UnauthorizedClientError(AgeKeyError):
    """Raised when the client credentials are rejected."""

    code = "unauthorized_client"
    default_message = "Client is not authorized to perform this request. Check your credentials."
    docs_url = f"{DOCS_BASE_URL}/troubleshooting#unauthorized-client"


class AccessDeniedError(AgeKeyError):
    """Raised when the user declines or cancels the verification."""

    code = "access_denied"
    default_message = "User denied the age verification request or closed the dialog."
    docs_url = f"{DOCS_BASE_URL}/guides/handling-denials"

    def __init__(self, error_description: str | None = None) -> None:
        super().__init__(error_description)
        self.error_description = error_description


class StateMismatchError(AgeKeyError):
    """Raised when the callback state does not match the stored state (possible CSRF)."""

    code = "state_mismatch"
    default_message = (
        "State parameter mismatch. The callback state doesn't match the original request. "
        "This could indicate a CSRF attack or an expired session."
    )
    docs_url = f"{DOCS_BASE_URL}/troubleshooting#state-mismatch"


class NonceMismatchError(AgeKeyError):
    """Raised when the ID token nonce does not match the stored nonce (possible replay)."""

    code = "nonce_mismatch"
    default_message = (
        "Nonce mismatch. The ID token nonce doesn't match the original request. "
        "This could indicate a replay attack."
    )
    docs_url = f"{DOCS_BASE_URL}/troubleshooting#nonce-mismatch"


class InvalidTokenError(AgeKeyError):
    """Raised when the ID token is missing, undecodable, expired or lacks a required claim."""

    code = "invalid_token"
    default_message = "Invalid or malformed ID token received."
    docs_url = f"{DOCS_BASE_URL}/guides/jwt-validation"


class ServerError(AgeKeyError):
    """Raised when the AgeKey server fails or returns a malformed response."""

    code = "server_error"
    default_message = "AgeKey server error. Please try again later."
    docs_url = f"{DOCS_BASE_URL}/troubleshooting#server-errors"


class OversizedResponseError(ServerError):
    """Raised when an HTTP response is too large."""


class NetworkError(AgeKeyError):
    """Raised when the transport fails (DNS, connection, timeout). The cause is chained."""

    code = "network_error"
    default_message = "Network error during API request."


def map_oidc_error(error: str, error_description: str | None = None) -> AgeKeyError:
    """
    Maps an OIDC error code to the matching AgeKeyError.

    Args:
        error: The OIDC `error` value.
        error_description: The optional `error_description` value.

    Returns:
        AgeKeyError: The exception to raise. Unknown codes become an
        InvalidRequestError that keeps the received code.
    """
    message = error_description or f"OIDC error: {error}"

    if error == "access_denied":
        return AccessDeniedError(error_description)
    if error == "invalid_request":
        return InvalidRequestError(message)
    if error == "unauthorized_client":
        return UnauthorizedClientError(message)
    if error == "server_error":
        return ServerError(message)
    if error == "temporarily_unavailable":
        return ServerError(f"Service temporarily unavailable. {message}")
    return InvalidRequestError(message, code=error)

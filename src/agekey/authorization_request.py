# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""
Renders authorization requests: the Use AgeKey URL, the PAR form body and the
Create AgeKey URL.
"""

import json
from urllib.parse import urlencode

from agekey.config import AgeKeyConfig
from agekey.constants import RESPONSE_TYPE_ID_TOKEN, RESPONSE_TYPE_NONE, SCOPE_OPENID, SCOPE_UPGRADE
from agekey.exceptions import InvalidRequestError
from agekey.models_internal import AuthorizationDetail, ResolvedEnvironment, UseRequestClaims


def _scope(upgrade: bool) -> str:
    return SCOPE_UPGRADE if upgrade else SCOPE_OPENID


def build_use_authorization_url(
    config: AgeKeyConfig,
    environment: ResolvedEnvironment,
    claims: UseRequestClaims,
    state: str,
    nonce: str,
    enable_create: bool = False,
) -> str:
    """
    Builds the Use AgeKey authorization URL.

    Args:
        config: The client configuration.
        environment: The resolved endpoints.
        claims: The request claims, sent as JSON in the `claims` parameter.
        state: CSRF protection value.
        nonce: Replay protection value bound into the ID token.
        enable_create: Request the upgrade scope and offer AgeKey creation.

    Returns:
        str: The full URL to redirect the user to.
    """
    params = {
        "client_id": config.client_id,
        "redirect_uri": config.redirect_uri,
        "response_type": RESPONSE_TYPE_ID_TOKEN,
        "scope": _scope(enable_create),
        "state": state,
        "nonce": nonce,
        "claims": claims.to_json(),
    }
    if enable_create:
        params["can_create"] = "true"

    return f"{environment.use_endpoint}?{urlencode(params)}"


def build_par_body(
    config: AgeKeyConfig,
    detail: AuthorizationDetail,
    state: str,
    enable_upgrade: bool = False,
) -> dict[str, str]:
    """
    Builds the form fields of a Pushed Authorization Request.

    Args:
        config: The client configuration. Must hold a client secret.
        detail: The single authorization detail to push.
        state: CSRF protection value.
        enable_upgrade: Request the upgrade scope.

    Returns:
        dict[str, str]: The form fields, to be sent form-encoded.

    Raises:
        InvalidRequestError: If no client secret is configured.
    """
    if config.client_secret is None:
        raise InvalidRequestError(
            "Client secret is required for Create AgeKey flow. This method must be called server-side."
        )

    authorization_details = [detail.model_dump(mode="json", exclude_none=True)]

    return {
        "client_id": config.client_id,
        "client_secret": config.client_secret.get_secret_value(),
        "redirect_uri": config.redirect_uri,
        "response_type": RESPONSE_TYPE_NONE,
        "scope": _scope(enable_upgrade),
        "state": state,
        "authorization_details": json.dumps(authorization_details, separators=(",", ":")),
    }


def build_create_authorization_url(
    config: AgeKeyConfig,
    environment: ResolvedEnvironment,
    request_uri: str,
    enable_upgrade: bool = False,
) -> str:
    """
    Builds the Create AgeKey authorization URL from a PAR request_uri.

    Args:
        config: The client configuration.
        environment: The resolved endpoints.
        request_uri: The opaque reference returned by the PAR endpoint.
        enable_upgrade: Request the upgrade scope and allow upgrading an existing AgeKey.

    Returns:
        str: The full URL to redirect the user to.
    """
    params = {
        "client_id": config.client_id,
        "redirect_uri": config.redirect_uri,
        "response_type": RESPONSE_TYPE_NONE,
        "scope": _scope(enable_upgrade),
        "request_uri": request_uri,
    }
    if enable_upgrade:
        params["can_upgrade"] = "true"

    return f"{environment.create_endpoint}?{urlencode(params)}"

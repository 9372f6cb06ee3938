# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""
AgeKey SDK: OpenID Connect client for privacy-preserving age verification.
"""

__version__ = "0.1.0"

from .client import AgeKey, AgeKeyAsync, CreateAgeKeyClientSync
from .config import AgeKeyConfig, load_config
from .constants import AUTHORIZATION_PROVENANCE
from .create_agekey import CreateAgeKeyClient
from .exceptions import (
    AccessDeniedError,
    AgeKeyError,
    ConfigurationError,
    InvalidRequestError,
    InvalidTokenError,
    NetworkError,
    NonceMismatchError,
    OversizedResponseError,
    ServerError,
    StateMismatchError,
    UnauthorizedClientError,
)
from .models import (
    AgeAtLeastYears,
    AgeDateOfBirth,
    AgeSpec,
    AgeYears,
    AuthorizationUrlResult,
    CallbackParams,
    CreateAgeKeyInitiateResult,
    CreateAgeKeyOptions,
    CreateAgeKeyResult,
    FacialOverrideWithAgeThresholds,
    FacialOverrideWithMinAge,
    MethodOverride,
    MethodOverridesMap,
    PARResult,
    ProvenanceFilter,
    UseAgeKeyOptions,
    UseAgeKeyResult,
    VerificationMethod,
)
from .use_agekey import UseAgeKeyClient

__all__ = [
    "AUTHORIZATION_PROVENANCE",
    "AccessDeniedError",
    "AgeAtLeastYears",
    "AgeDateOfBirth",
    "AgeKey",
    "AgeKeyAsync",
    "AgeKeyConfig",
    "AgeKeyError",
    "AgeSpec",
    "AgeYears",
    "AuthorizationUrlResult",
    "CallbackParams",
    "ConfigurationError",
    "CreateAgeKeyClient",
    "CreateAgeKeyClientSync",
    "CreateAgeKeyInitiateResult",
    "CreateAgeKeyOptions",
    "CreateAgeKeyResult",
    "FacialOverrideWithAgeThresholds",
    "FacialOverrideWithMinAge",
    "InvalidRequestError",
    "InvalidTokenError",
    "MethodOverride",
    "MethodOverridesMap",
    "NetworkError",
    "NonceMismatchError",
    "OversizedResponseError",
    "PARResult",
    "ProvenanceFilter",
    "ServerError",
    "StateMismatchError",
    "UnauthorizedClientError",
    "UseAgeKeyClient",
    "UseAgeKeyOptions",
    "UseAgeKeyResult",
    "VerificationMethod",
    "load_config",
]

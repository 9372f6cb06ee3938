# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""
API endpoints and protocol constants for the agekey package.
"""

from typing import Final

ENDPOINT_PATHS: Final[dict[str, str]] = {
    "use": "/v1/oidc/use",
    "create": "/v1/oidc/create",
    "par": "/v1/oidc/create/par",
    "jwks": "/.well-known/jwks.json",
}

BASE_URLS: Final[dict[str, str]] = {
    "test": "https://api.test.agekey.org",
    "live": "https://api.agekey.org",
}

TEST_CLIENT_ID_PREFIX: Final = "ak_test_"
LIVE_CLIENT_ID_PREFIX: Final = "ak_live_"
TEST_SECRET_PREFIX: Final = "sk_test_"
LIVE_SECRET_PREFIX: Final = "sk_live_"

# Bytes of randomness per state/nonce (hex encoded, so twice as many characters).
TOKEN_LENGTH: Final = 32

# Lifetime assumed for a PAR request_uri when the server omits expires_in.
DEFAULT_PAR_EXPIRY: Final = 90

MAX_AGE_THRESHOLDS: Final = 5
MAX_PROVENANCE_PATTERNS: Final = 10

SCOPE_OPENID: Final = "openid"
SCOPE_UPGRADE: Final = "openid agekey.upgrade"

RESPONSE_TYPE_ID_TOKEN: Final = "id_token"
RESPONSE_TYPE_NONE: Final = "none"

AUTHORIZATION_DETAIL_TYPE: Final = "age_verification"

# Known provenance values for Create AgeKey authorization details.
# Exported for convenience only; any non-empty string is accepted.
AUTHORIZATION_PROVENANCE: Final[tuple[str, ...]] = (
    "/connect_id",
    "/stripe",
    "/inicis",
    "/singpass",
    "/privy",
    "/spruce_id",
    "/verify_my",
    "/privately",
    "/veratad/internal",
    "/veratad/trinsic",
    "/veratad/cra",
    "/veratad/roc",
)

DOCS_BASE_URL: Final = "https://docs.agekey.org"

# Upper bound on PAR response bodies.
MAX_RESPONSE_BYTES: Final = 1_000_000

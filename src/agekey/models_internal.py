# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""
Wire-level data models for the agekey package.
These describe what is sent to and received from the AgeKey API.
"""

from datetime import datetime
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_serializer

from agekey.models import AgeSpec, MethodOverridesMap, ProvenanceFilter, VerificationMethod, to_utc_isoformat


class ResolvedEnvironment(BaseModel):
    """
    Endpoints resolved once per client from the client ID (or a base URL override).
    """

    model_config = ConfigDict(frozen=True)

    is_test: bool
    base_url: str
    use_endpoint: str
    create_endpoint: str
    par_endpoint: str
    jwks_endpoint: str


class UseRequestClaims(BaseModel):
    """
    The `claims` request parameter for Use AgeKey.
    Unset optional fields are excluded from serialization, never sent as null.
    """

    model_config = ConfigDict(frozen=True)

    age_thresholds: list[int]
    allowed_methods: list[VerificationMethod] | None = None
    verified_after: str | None = Field(default=None, description="Date only, YYYY-MM-DD (UTC).")
    overrides: MethodOverridesMap | None = None
    provenance: ProvenanceFilter | None = None

    def to_json(self) -> str:
        return self.model_dump_json(exclude_none=True)


class AuthorizationDetail(BaseModel):
    """
    A single `authorization_details` entry for Create AgeKey.
    """

    model_config = ConfigDict(frozen=True)

    type: Literal["age_verification"] = "age_verification"
    method: VerificationMethod
    age: AgeSpec
    verified_at: datetime
    verification_id: str
    provenance: str
    attributes: dict[str, Any] | None = None

    @field_serializer("verified_at")
    def serialize_verified_at(self, value: datetime) -> str:
        return to_utc_isoformat(value)


class PARResponseBody(BaseModel):
    """
    PAR endpoint response. Every field is optional so that error bodies parse too;
    presence checks happen in the Create AgeKey client.
    """

    model_config = ConfigDict(frozen=True, extra="ignore")

    request_uri: Any = None
    expires_in: Any = None
    error: str | None = None
    error_description: str | None = None

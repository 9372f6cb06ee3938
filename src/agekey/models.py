# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""
Data models for the agekey package.
"""

from datetime import date, datetime, timezone
from enum import StrEnum
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from agekey.constants import MAX_AGE_THRESHOLDS, MAX_PROVENANCE_PATTERNS

PositiveAge = Annotated[int, Field(gt=0)]


class VerificationMethod(StrEnum):
    ID_DOC_SCAN = "id_doc_scan"
    PAYMENT_CARD_NETWORK = "payment_card_network"
    FACIAL_AGE_ESTIMATION = "facial_age_estimation"
    EMAIL_AGE_ESTIMATION = "email_age_estimation"
    DIGITAL_CREDENTIAL = "digital_credential"
    NATIONAL_ID_NUMBER = "national_id_number"


def to_utc_date(value: Any) -> Any:
    """
    Truncates a datetime to its UTC calendar date. Naive datetimes are taken as UTC.
    Other values are returned unchanged for regular validation.
    """
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
        return value.date()
    return value


def to_utc_isoformat(value: datetime) -> str:
    """Formats a datetime as `YYYY-MM-DDTHH:MM:SS.mmmZ` in UTC."""
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    else:
        value = value.astimezone(timezone.utc)
    return value.replace(tzinfo=None).isoformat(timespec="milliseconds") + "Z"


# Age specifications (Create AgeKey). Exactly one variant per instance.


class AgeDateOfBirth(BaseModel):
    """Exact date of birth."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    date_of_birth: date


class AgeYears(BaseModel):
    """Exact age in years."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    years: int = Field(..., ge=0)


class AgeAtLeastYears(BaseModel):
    """Minimum age in years."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    at_least_years: int = Field(..., ge=0)


AgeSpec = AgeDateOfBirth | AgeYears | AgeAtLeastYears


# Method overrides (Use AgeKey)


class MethodOverride(BaseModel):
    """
    Adjusts age requirements for a single verification method.

    Attributes:
        min_age (int | None): Minimum age accepted from this method.
        age_thresholds (list[int] | None): Per-threshold minimum ages. Position i applies
            to root threshold i, so the length must equal the root threshold count.
        verified_after (date | None): Recency requirement for this method.
        attributes (dict[str, Any] | None): Method-specific attributes.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    min_age: PositiveAge | None = None
    age_thresholds: list[PositiveAge] | None = Field(default=None, min_length=1, max_length=MAX_AGE_THRESHOLDS)
    verified_after: date | None = None
    attributes: dict[str, Any] | None = None

    @field_validator("verified_after", mode="before")
    @classmethod
    def truncate_verified_after(cls, v: Any) -> Any:
        return to_utc_date(v)


class FacialOverrideWithMinAge(MethodOverride):
    """Facial age estimation override keyed on a minimum age."""

    min_age: PositiveAge


class FacialOverrideWithAgeThresholds(MethodOverride):
    """Facial age estimation override keyed on per-threshold ages."""

    age_thresholds: list[PositiveAge] = Field(..., min_length=1, max_length=MAX_AGE_THRESHOLDS)


# Facial age estimation requires min_age or age_thresholds; an override with neither is invalid.
FacialAgeEstimationOverride = FacialOverrideWithMinAge | FacialOverrideWithAgeThresholds


class MethodOverridesMap(BaseModel):
    """Per-method overrides, one optional entry per verification method."""

    model_config = ConfigDict(frozen=True, extra="forbid")

    id_doc_scan: MethodOverride | None = None
    payment_card_network: MethodOverride | None = None
    facial_age_estimation: FacialAgeEstimationOverride | None = None
    email_age_estimation: MethodOverride | None = None
    digital_credential: MethodOverride | None = None
    national_id_number: MethodOverride | None = None

    def items(self) -> list[tuple[str, MethodOverride]]:
        """Returns the configured (method, override) pairs."""
        pairs = []
        for name in type(self).model_fields:
            value = getattr(self, name)
            if value is not None:
                pairs.append((name, value))
        return pairs


class ProvenanceFilter(BaseModel):
    """
    Filters age signals by provenance.

    Each pattern is an exact value or a prefix ending with `*`; a lone `*` matches every
    provenance. With no patterns every provenance is accepted. A denied match always wins
    over an allowed match.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    allowed: list[str] | None = Field(default=None, max_length=MAX_PROVENANCE_PATTERNS)
    denied: list[str] | None = Field(default=None, max_length=MAX_PROVENANCE_PATTERNS)

    @field_validator("allowed", "denied")
    @classmethod
    def validate_patterns(cls, v: list[str] | None) -> list[str] | None:
        if v is None:
            return v
        for pattern in v:
            if not pattern:
                raise ValueError(f"Invalid provenance pattern: {pattern!r}")
            if "*" in pattern[:-1]:
                raise ValueError(f"Wildcard is only allowed as the last character: {pattern!r}")
        return v

    @property
    def is_empty(self) -> bool:
        return not self.allowed and not self.denied

    @staticmethod
    def _matches(pattern: str, value: str) -> bool:
        if pattern.endswith("*"):
            return value.startswith(pattern[:-1])
        return value == pattern

    def accepts(self, provenance: str) -> bool:
        """
        Evaluates the filter against a provenance value.

        Args:
            provenance: The provenance of an age signal (e.g. "/veratad/roc").

        Returns:
            bool: True if the signal is acceptable under this filter.
        """
        if any(self._matches(p, provenance) for p in self.denied or []):
            return False
        if self.allowed:
            return any(self._matches(p, provenance) for p in self.allowed)
        return True


class UseAgeKeyOptions(BaseModel):
    """
    Options for a Use AgeKey authorization request.

    Attributes:
        age_thresholds (list[int]): 1 to 5 distinct ages to verify, order preserved.
        allowed_methods (list[VerificationMethod] | None): Restricts accepted methods.
        verified_after (date | None): Require verifications on or after this date (UTC).
        overrides (MethodOverridesMap | None): Method-specific adjustments.
        provenance (ProvenanceFilter | None): Provenance filter for age signals.
        enable_create (bool): Offer to create an AgeKey if the user has none.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    age_thresholds: list[PositiveAge] = Field(..., min_length=1, max_length=MAX_AGE_THRESHOLDS)
    allowed_methods: list[VerificationMethod] | None = None
    verified_after: date | None = None
    overrides: MethodOverridesMap | None = None
    provenance: ProvenanceFilter | None = None
    enable_create: bool = False

    @field_validator("age_thresholds")
    @classmethod
    def ensure_unique(cls, v: list[int]) -> list[int]:
        if len(set(v)) != len(v):
            raise ValueError("age_thresholds must not contain duplicates")
        return v

    @field_validator("verified_after", mode="before")
    @classmethod
    def truncate_verified_after(cls, v: Any) -> Any:
        return to_utc_date(v)

    @model_validator(mode="after")
    def check_override_lengths(self) -> "UseAgeKeyOptions":
        """
        Per-threshold overrides map 1:1 onto the root thresholds, so lengths must agree.
        """
        if self.overrides is None:
            return self
        for method, override in self.overrides.items():
            if override.age_thresholds is not None and len(override.age_thresholds) != len(self.age_thresholds):
                raise ValueError(
                    f"overrides.{method}.age_thresholds has {len(override.age_thresholds)} entries; "
                    f"expected {len(self.age_thresholds)} to match age_thresholds"
                )
        return self


class CreateAgeKeyOptions(BaseModel):
    """
    Age verification data pushed with a Create AgeKey request.

    Attributes:
        method (VerificationMethod): The verification method used.
        age (AgeSpec): Date of birth, exact years or minimum years.
        verified_at (datetime): When the verification occurred.
        verification_id (str): Your identifier for this verification.
        provenance (str): Origin of the verification (see AUTHORIZATION_PROVENANCE).
        attributes (dict[str, Any] | None): Method-specific attributes.
        enable_upgrade (bool): Allow upgrading an existing AgeKey.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    method: VerificationMethod
    age: AgeSpec
    verified_at: datetime
    verification_id: str = Field(..., min_length=1)
    provenance: str = Field(..., min_length=1)
    attributes: dict[str, Any] | None = None
    enable_upgrade: bool = False


# Results


class AuthorizationUrlResult(BaseModel):
    """
    Authorization URL plus the state and nonce the caller must persist for the callback.
    """

    model_config = ConfigDict(frozen=True)

    url: str
    state: str
    nonce: str


class UseAgeKeyResult(BaseModel):
    """
    Result of a validated Use AgeKey callback.

    Attributes:
        age_thresholds (dict[str, bool]): Age (as string) to whether the user meets it.
        subject (str | None): The user's identifier within AgeKey.
        raw (dict[str, Any]): The full decoded ID token payload.
    """

    model_config = ConfigDict(frozen=True)

    age_thresholds: dict[str, bool]
    subject: str | None = None
    raw: dict[str, Any] = Field(default_factory=dict)

    def __repr__(self) -> str:
        # Subject is an identifier and is not printed
        return f"UseAgeKeyResult(age_thresholds={self.age_thresholds!r}, subject='<REDACTED>')"

    def __str__(self) -> str:
        return self.__repr__()


class CallbackParams(BaseModel):
    """Raw callback parameters, without validation."""

    model_config = ConfigDict(frozen=True)

    id_token: str | None = None
    state: str | None = None
    error: str | None = None
    error_description: str | None = None


class PARResult(BaseModel):
    """
    Result of a Pushed Authorization Request.

    Attributes:
        request_uri (str): Reference to use in the authorization URL.
        expires_in (int): Seconds the request_uri stays valid.
    """

    model_config = ConfigDict(frozen=True)

    request_uri: str
    expires_in: int


class CreateAgeKeyResult(BaseModel):
    """Outcome of a Create AgeKey callback. No token is issued for this flow."""

    model_config = ConfigDict(frozen=True)

    success: bool
    error: str | None = None
    error_description: str | None = None


class CreateAgeKeyInitiateResult(BaseModel):
    model_config = ConfigDict(frozen=True)

    auth_url: str
    request_uri: str
    expires_in: int

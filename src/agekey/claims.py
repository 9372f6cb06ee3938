# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""
Request claims construction for the Use AgeKey flow.
"""

from typing import Any

from pydantic import ValidationError

from agekey.exceptions import InvalidRequestError
from agekey.models import UseAgeKeyOptions
from agekey.models_internal import UseRequestClaims
from agekey.utils.logger import logger


def parse_use_options(**options: Any) -> UseAgeKeyOptions:
    """
    Validates Use AgeKey options.

    Args:
        **options: Fields of UseAgeKeyOptions (age_thresholds, allowed_methods, ...).

    Returns:
        UseAgeKeyOptions: The validated options.

    Raises:
        InvalidRequestError: If the options are malformed, including a facial age
            estimation override without min_age or age_thresholds.
    """
    try:
        return UseAgeKeyOptions(**options)
    except ValidationError as e:
        logger.warning(f"Rejected Use AgeKey options: {e.error_count()} validation error(s)")
        raise InvalidRequestError(f"Invalid Use AgeKey options: {e}") from e


def build_use_claims(options: UseAgeKeyOptions) -> UseRequestClaims:
    """
    Builds the `claims` object sent with a Use AgeKey request.

    Only populated filters are included: empty allowed_methods, empty overrides and a
    provenance filter without patterns are left out entirely. verified_after is sent
    as a date (YYYY-MM-DD).

    Args:
        options: Validated Use AgeKey options.

    Returns:
        UseRequestClaims: The claims, ready to serialize.
    """
    fields: dict[str, Any] = {"age_thresholds": list(options.age_thresholds)}

    if options.allowed_methods:
        fields["allowed_methods"] = list(options.allowed_methods)

    if options.verified_after is not None:
        fields["verified_after"] = options.verified_after.isoformat()

    if options.overrides is not None and options.overrides.items():
        fields["overrides"] = options.overrides

    if options.provenance is not None and not options.provenance.is_empty:
        fields["provenance"] = options.provenance

    return UseRequestClaims(**fields)

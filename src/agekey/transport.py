# Copyright (c) 2025 CoReason, Inc.
#
# This software is proprietary and dual-licensed.
# Licensed under the Prosperity Public License 3.0 (the "License").
# A copy of the license is available at https://prosperitylicense.com/versions/3.0.0
# For details, see the LICENSE file.
# Commercial use beyond a 30-day trial requires a separate license.

"""
HTTP helpers for calls to the AgeKey API.
"""

import json
from dataclasses import dataclass
from typing import Any

import httpx

from agekey.constants import MAX_RESPONSE_BYTES
from agekey.exceptions import AgeKeyError, NetworkError, OversizedResponseError
from agekey.utils.logger import logger

FORM_HEADERS = {"Content-Type": "application/x-www-form-urlencoded", "Accept": "application/json"}


@dataclass(frozen=True)
class TransportResponse:
    """
    Status and parsed body of an HTTP response.

    Attributes:
        status_code (int): The HTTP status code.
        payload (Any): The parsed JSON body, or None if the body was empty or not JSON.
    """

    status_code: int
    payload: Any

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


async def _read_limited(response: httpx.Response, max_bytes: int) -> bytes:
    content_length = response.headers.get("Content-Length")
    if content_length:
        try:
            if int(content_length) > max_bytes:
                raise OversizedResponseError("Response too large")
        except ValueError:
            pass

    content = bytearray()
    async for chunk in response.aiter_bytes():
        content.extend(chunk)
        if len(content) > max_bytes:
            raise OversizedResponseError("Response too large")
    return bytes(content)


async def post_form(
    client: httpx.AsyncClient,
    url: str,
    data: dict[str, str],
    max_bytes: int = MAX_RESPONSE_BYTES,
) -> TransportResponse:
    """
    POSTs a form-encoded body and returns the status with the parsed JSON body.

    The body is read as a stream and capped at `max_bytes`. Non-2xx statuses are
    returned, not raised, so callers can read OAuth error bodies.

    Args:
        client: The async HTTP client.
        url: The endpoint URL.
        data: The form fields.
        max_bytes: Maximum accepted response size.

    Returns:
        TransportResponse: The response status and parsed payload.

    Raises:
        OversizedResponseError: If the response exceeds `max_bytes`.
        NetworkError: For any transport-level failure (DNS, connection, timeout).
    """
    try:
        async with client.stream("POST", url, data=data, headers=FORM_HEADERS) as response:
            content = await _read_limited(response, max_bytes)
            status_code = response.status_code
    except AgeKeyError:
        raise
    except Exception as e:
        logger.error(f"Request to {url} failed: {type(e).__name__}")
        raise NetworkError(f"Failed to connect to AgeKey endpoint {url}: {e}") from e

    payload: Any = None
    if content:
        try:
            payload = json.loads(content)
        except ValueError:
            logger.warning(f"Non-JSON response from {url} (status {status_code})")

    return TransportResponse(status_code=status_code, payload=payload)

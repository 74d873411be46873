"""
HTTP helpers shared by vendor adapters.

Wraps requests so every adapter maps transport failures and vendor status
codes onto the same exception types, and logs payloads with image data
truncated when debug_api is on.
"""

import json
from typing import Any

import requests

from genmedia.logging_config import get_logger
from genmedia.utils.exceptions import (
    AuthenticationError,
    AuthorizationError,
    NetworkError,
    RequestTimeoutError,
    ThrottlingError,
    UpstreamError,
)

logger = get_logger(__name__)

_DEBUG_TRUNCATE_THRESHOLD = 200
_DEBUG_NEVER_TRUNCATE_KEYS = frozenset({"prompt", "error", "detail", "message"})
_RAW_TEXT_LOG_MAX = 2000


def truncate_for_log(obj: Any, parent_key: str | None = None) -> Any:
    """Recursively replace long base64/data URL strings with placeholders for safe logging."""
    if isinstance(obj, dict):
        return {k: truncate_for_log(v, k) for k, v in obj.items()}
    if isinstance(obj, list):
        return [truncate_for_log(v, None) for v in obj]
    if isinstance(obj, str) and len(obj) >= _DEBUG_TRUNCATE_THRESHOLD:
        if parent_key in _DEBUG_NEVER_TRUNCATE_KEYS:
            return obj
        if obj.startswith("data:"):
            return f"<data URL, {len(obj)} chars>"
        return f"<string, {len(obj)} chars>"
    return obj


def _error_detail(response: requests.Response) -> str:
    """Best-effort human readable error from a vendor error body."""
    try:
        body = response.json()
    except ValueError:
        return response.text[:500]
    if isinstance(body, dict):
        for key in ("detail", "error", "message", "title"):
            value = body.get(key)
            if isinstance(value, dict):
                value = value.get("message") or json.dumps(value)
            if value:
                return str(value)
    return response.text[:500]


def raise_for_vendor_status(response: requests.Response, provider: str, vendor_name: str) -> None:
    """
    Map a vendor HTTP error status onto the provider error taxonomy.

    Raises:
        AuthenticationError: 401
        AuthorizationError: 402 or 403
        ThrottlingError: 429
        UpstreamError: any other status >= 400
    """
    status = response.status_code
    if status < 400:
        return
    detail = _error_detail(response)
    if status == 401:
        raise AuthenticationError(
            f"Authentication failed. Please check your {vendor_name} API key.",
            status_code=status,
            response=response.text,
            provider=provider,
        )
    if status in (402, 403):
        raise AuthorizationError(
            f"Access denied by {vendor_name}. Make sure your account has access to this "
            f"model and billing is enabled. {detail}".strip(),
            status_code=status,
            response=response.text,
            provider=provider,
        )
    if status == 429:
        raise ThrottlingError(
            "Rate limit exceeded. Please try again later.",
            status_code=status,
            response=response.text,
            provider=provider,
        )
    raise UpstreamError(
        f"{vendor_name} API error: {status}. {detail}".strip(),
        status_code=status,
        response=response.text,
        provider=provider,
    )


def send(
    session: requests.Session,
    method: str,
    url: str,
    *,
    provider: str,
    vendor_name: str,
    timeout: int,
    headers: dict[str, str] | None = None,
    payload: dict[str, Any] | None = None,
    debug: bool = False,
) -> requests.Response:
    """
    Perform one vendor HTTP call and check its status.

    Raises:
        RequestTimeoutError: If the call timed out
        NetworkError: If the vendor could not be reached
        ProviderError: Subclass matching the vendor's error status
    """
    logger.debug("%s %s %s timeout=%s", vendor_name, method, url, timeout)
    if debug and payload is not None:
        logger.info(
            "%s request payload (image data truncated): %s",
            vendor_name,
            json.dumps(truncate_for_log(payload), indent=2, default=str),
        )
    try:
        response = session.request(method, url, headers=headers, json=payload, timeout=timeout)
    except requests.exceptions.Timeout as e:
        raise RequestTimeoutError(
            f"Request to {vendor_name} timed out after {timeout} seconds.", provider=provider
        ) from e
    except requests.exceptions.ConnectionError as e:
        raise NetworkError(
            f"Failed to connect to {vendor_name}. Please check your internet connection.",
            original_error=e,
            provider=provider,
        ) from e
    except requests.exceptions.RequestException as e:
        raise NetworkError(
            f"Network error during {vendor_name} request: {str(e)}",
            original_error=e,
            provider=provider,
        ) from e

    logger.debug("%s response status=%s", vendor_name, response.status_code)
    if debug:
        try:
            logger.info(
                "%s response (image data truncated): %s",
                vendor_name,
                json.dumps(truncate_for_log(response.json()), indent=2, default=str),
            )
        except ValueError:
            text = response.text
            if len(text) > _RAW_TEXT_LOG_MAX:
                text = text[:_RAW_TEXT_LOG_MAX] + f"... <truncated, {len(response.text)} chars total>"
            logger.info("%s response (raw text): %s", vendor_name, text)

    raise_for_vendor_status(response, provider, vendor_name)
    return response


def json_body(response: requests.Response, provider: str, vendor_name: str) -> Any:
    """
    Decode a vendor JSON body.

    Raises:
        UpstreamError: If the body is not JSON
    """
    try:
        return response.json()
    except ValueError as e:
        raise UpstreamError(
            f"Failed to parse {vendor_name} response as JSON: {str(e)}",
            status_code=response.status_code,
            response=response.text,
            provider=provider,
        ) from e

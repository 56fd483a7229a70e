"""Translate provider-native results and faults into the canonical shapes."""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from chat_bridge.errors import ChatBridgeError, ProviderAPIError, ProviderError

UNEXPECTED_ERROR_MESSAGE = "An unexpected error occurred"
_RATE_LIMIT_MARKERS = ("quota", "rate limit")

_logger = logging.getLogger(__name__)


def require_content(provider: str, text: str | None) -> str:
    """Return ``text`` or fail with ``empty_response`` when there is none."""
    if not text:
        raise ProviderError(
            provider,
            f"No response content received from {provider}",
            code="empty_response",
            status=500,
        )
    return text


def looks_rate_limited(message: str) -> bool:
    lowered = message.lower()
    return any(marker in lowered for marker in _RATE_LIMIT_MARKERS)


def normalize_error(
    provider: str,
    exc: BaseException,
    *,
    detect_rate_limit: bool = False,
    keep_unexpected_message: bool = False,
) -> ChatBridgeError:
    """Map any fault raised during a provider call onto the error taxonomy.

    Canonical errors are returned unchanged. ``ProviderAPIError`` keeps the
    provider's message, code and status. Anything else becomes
    ``unknown_error``. With ``detect_rate_limit`` a message mentioning quota or
    rate limits is classified as ``rate_limit_exceeded`` before the generic
    mapping applies.
    """
    if isinstance(exc, ChatBridgeError) and not isinstance(exc, ProviderAPIError):
        return exc

    message = exc.message if isinstance(exc, ProviderAPIError) else str(exc)
    if detect_rate_limit and looks_rate_limited(message):
        _logger.warning("%s rate limited: %s", provider, message)
        return ProviderError(provider, "Rate limit exceeded", code="rate_limit_exceeded", status=429)

    if isinstance(exc, ProviderAPIError):
        _logger.warning("%s API error %s: %s", provider, exc.status_code, exc.message)
        return ProviderError(
            provider,
            exc.message,
            code=exc.error_code or "api_error",
            status=exc.status_code,
        )

    _logger.warning("%s call failed unexpectedly", provider, exc_info=exc)
    return ProviderError(
        provider,
        (message or UNEXPECTED_ERROR_MESSAGE) if keep_unexpected_message else UNEXPECTED_ERROR_MESSAGE,
        code="unknown_error",
        status=500,
    )


@contextmanager
def normalized_errors(
    provider: str,
    *,
    detect_rate_limit: bool = False,
    keep_unexpected_message: bool = False,
) -> Iterator[None]:
    """Re-raise anything escaping the block as a canonical error."""
    try:
        yield
    except Exception as exc:
        error = normalize_error(
            provider,
            exc,
            detect_rate_limit=detect_rate_limit,
            keep_unexpected_message=keep_unexpected_message,
        )
        if error is exc:
            raise
        raise error from exc

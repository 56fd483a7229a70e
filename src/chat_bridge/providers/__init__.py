"""Provider definitions for chat_bridge."""

from __future__ import annotations

import threading

import httpx

from chat_bridge.config import Settings, get_settings
from chat_bridge.errors import ConfigurationError

from .anthropic import AnthropicProvider
from .base import BaseProvider
from .gemini import GeminiProvider
from .openai import OpenAIProvider

PROVIDERS: dict[str, type[BaseProvider]] = {
    OpenAIProvider.name: OpenAIProvider,
    AnthropicProvider.name: AnthropicProvider,
    GeminiProvider.name: GeminiProvider,
}


def create_provider(
    name: str,
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BaseProvider:
    """Build the provider selected by ``name`` from configuration.

    A missing credential is a startup fault and raises ``ConfigurationError``.
    """
    try:
        provider_cls = PROVIDERS[name]
    except KeyError:
        raise ConfigurationError(
            f"Unknown provider '{name}'. Must be one of: {', '.join(PROVIDERS)}"
        ) from None
    settings = settings or get_settings()
    return provider_cls(
        api_key=settings.api_key_for(name),
        base_url=settings.base_url_for(name),
        timeout_s=settings.http_timeout_s,
        transport=transport,
    )


_instances: dict[str, BaseProvider] = {}
_instances_lock = threading.Lock()


def get_provider(
    name: str,
    settings: Settings | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BaseProvider:
    """Return the process-wide provider for ``name``, creating it on first use.

    ``settings`` and ``transport`` only apply to the call that creates it.
    """
    with _instances_lock:
        provider = _instances.get(name)
        if provider is None:
            provider = _instances[name] = create_provider(name, settings, transport=transport)
        return provider


async def close_providers() -> None:
    """Close and forget every provider handed out by :func:`get_provider`."""
    with _instances_lock:
        providers = list(_instances.values())
        _instances.clear()
    for provider in providers:
        await provider.aclose()


__all__ = [
    "BaseProvider",
    "OpenAIProvider",
    "AnthropicProvider",
    "GeminiProvider",
    "PROVIDERS",
    "create_provider",
    "get_provider",
    "close_providers",
]

"""Provider-agnostic base interfaces and helpers."""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any, Generic, TypeVar

import httpx

from chat_bridge.catalog import ModelCatalog
from chat_bridge.errors import ConfigurationError, ProviderAPIError
from chat_bridge.types import ChatRequest, ChatResponse

T = TypeVar("T")

DEFAULT_TIMEOUT_S = 60.0


class LazyHandle(Generic[T]):
    """Initialize-once, read-many cell holding a shared client."""

    def __init__(self, factory: Callable[[], T]) -> None:
        self._factory = factory
        self._value: T | None = None
        self._lock = threading.Lock()

    @property
    def initialized(self) -> bool:
        return self._value is not None

    def get(self) -> T:
        value = self._value
        if value is None:
            with self._lock:
                if self._value is None:
                    self._value = self._factory()
                value = self._value
        return value

    def clear(self) -> T | None:
        """Detach and return the current value, if any."""
        with self._lock:
            value, self._value = self._value, None
        return value


class BaseProvider(ABC):
    """Abstract base class for provider implementations."""

    name: str
    label: str
    catalog: ModelCatalog
    credential_env: str
    default_base_url: str
    allowed_roles: tuple[str, ...] = ("system", "user", "assistant")
    # whether requests may carry out-of-band ``system``/``task`` prompt fields
    supports_system_prompt: bool = False

    def __init__(
        self,
        *,
        api_key: str | None,
        base_url: str | None = None,
        timeout_s: float = DEFAULT_TIMEOUT_S,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._base_url = base_url or self.default_base_url
        self._timeout_s = timeout_s
        self._transport = transport
        self._handle: LazyHandle[httpx.AsyncClient] = LazyHandle(self._build_client)

    @abstractmethod
    async def chat(self, req: ChatRequest) -> ChatResponse:
        """Execute an async chat completion request."""
        raise NotImplementedError

    @abstractmethod
    def _headers(self) -> dict[str, str]:
        """Return the credentialed headers sent with every call."""
        raise NotImplementedError

    async def aclose(self) -> None:
        """Close the underlying HTTP client if it was ever created."""
        client = self._handle.clear()
        if client is not None:
            await client.aclose()

    def _client(self) -> httpx.AsyncClient:
        if not self._api_key:
            raise ConfigurationError(f"{self.label} API key not configured ({self.credential_env})")
        return self._handle.get()

    def _build_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._base_url,
            headers=self._headers(),
            timeout=self._timeout_s,
            transport=self._transport,
        )


def error_details(response: httpx.Response) -> tuple[str, dict[str, Any]]:
    """Return the error message and the ``error`` object of a failed response."""
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase, {}
    error = body.get("error") if isinstance(body, dict) else None
    if not isinstance(error, dict):
        return response.text or response.reason_phrase, {}
    message = error.get("message")
    if not isinstance(message, str) or not message:
        message = response.text or response.reason_phrase
    return message, error


def json_or_error(
    provider: str,
    response: httpx.Response,
    code_from: Callable[[dict[str, Any], httpx.Response], str | None],
) -> dict[str, Any]:
    """Decode a successful response or raise ``ProviderAPIError``."""
    if response.status_code >= 400:
        message, error = error_details(response)
        raise ProviderAPIError(
            provider,
            message,
            status_code=response.status_code,
            error_code=code_from(error, response),
        )
    return response.json()

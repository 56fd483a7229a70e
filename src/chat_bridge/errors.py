"""Package specific exception hierarchy."""

from __future__ import annotations


class ChatBridgeError(Exception):
    """Base exception for chat_bridge package."""

    code: str = "unknown_error"
    status: int | None = None


class ParseError(ChatBridgeError):
    """Raised when tool-call arguments do not form a valid request."""

    def __init__(self, message: str, code: str = "parse_error") -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.status = 400


class ConfigurationError(ChatBridgeError):
    """Raised when credentials or settings are missing or inconsistent."""

    code = "configuration_error"
    status = 401

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class ProviderError(ChatBridgeError):
    """Canonical provider failure: a message, a taxonomy code and a status."""

    def __init__(
        self,
        provider: str,
        message: str,
        code: str = "api_error",
        status: int | None = None,
    ) -> None:
        suffix = f" (status {status})" if status is not None else ""
        super().__init__(f"{provider}: {message}{suffix}")
        self.provider = provider
        self.message = message
        self.code = code
        self.status = status


class ProviderAPIError(ChatBridgeError):
    """Raised by the HTTP layer when a provider answers with an error status."""

    def __init__(
        self,
        provider: str,
        message: str,
        status_code: int,
        error_code: str | None = None,
    ) -> None:
        super().__init__(f"{provider}: {message} (status {status_code})")
        self.provider = provider
        self.message = message
        self.status_code = status_code
        self.error_code = error_code
        self.code = error_code or "api_error"
        self.status = status_code


class UnknownToolError(ChatBridgeError):
    """Raised when a tool call names a tool that is not registered."""

    code = "method_not_found"

    def __init__(self, name: str) -> None:
        super().__init__(f"Unknown tool: {name}")
        self.name = name

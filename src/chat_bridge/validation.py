"""Coerce untyped tool-call arguments into a :class:`ChatRequest`."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from chat_bridge.errors import ParseError
from chat_bridge.prompts import TASK_PROMPTS
from chat_bridge.providers.base import BaseProvider
from chat_bridge.types import DEFAULT_TEMPERATURE, ChatRequest, Message

MIN_TEMPERATURE = 0
MAX_TEMPERATURE = 2
MIN_MAX_TOKENS = 1
MAX_MAX_TOKENS = 4096


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def _describe_roles(roles: tuple[str, ...]) -> str:
    if len(roles) == 1:
        return roles[0]
    return f"{', '.join(roles[:-1])}{',' if len(roles) > 2 else ''} or {roles[-1]}"


def _validate_messages(raw: Any, allowed_roles: tuple[str, ...]) -> tuple[Message, ...]:
    if not isinstance(raw, list) or not raw:
        raise ParseError("Messages array is required and must not be empty")

    messages = []
    for item in raw:
        if (
            not isinstance(item, Mapping)
            or not isinstance(item.get("role"), str)
            or not isinstance(item.get("content"), str)
            or not item["content"]
            or item["role"] not in allowed_roles
        ):
            raise ParseError(
                f"Each message must have a valid role ({_describe_roles(allowed_roles)}) and content string"
            )
        messages.append(Message(role=item["role"], content=item["content"]))
    return tuple(messages)


def validate_chat_request(arguments: Any, provider: BaseProvider) -> ChatRequest:
    """Validate ``arguments`` against the rules of ``provider``.

    Checks run in a fixed order and the first violation raises ``ParseError``
    naming the field and its valid range or set. Nothing is sent anywhere.
    """
    if not isinstance(arguments, Mapping):
        raise ParseError("Invalid request format")

    messages = _validate_messages(arguments.get("messages"), provider.allowed_roles)

    # an explicit null is a malformed value, not an omitted field
    model = arguments.get("model")
    if "model" in arguments and (not isinstance(model, str) or model not in provider.catalog):
        raise ParseError(
            f"Invalid model. Must be one of: {', '.join(provider.catalog.names())}",
            code="invalid_model",
        )

    temperature = arguments.get("temperature")
    if "temperature" in arguments and (
        not _is_number(temperature) or not MIN_TEMPERATURE <= temperature <= MAX_TEMPERATURE
    ):
        raise ParseError(f"Temperature must be a number between {MIN_TEMPERATURE} and {MAX_TEMPERATURE}")

    max_tokens = arguments.get("maxTokens")
    if "maxTokens" in arguments:
        if (
            not _is_number(max_tokens)
            or (isinstance(max_tokens, float) and not max_tokens.is_integer())
            or not MIN_MAX_TOKENS <= max_tokens <= MAX_MAX_TOKENS
        ):
            raise ParseError(f"maxTokens must be an integer between {MIN_MAX_TOKENS} and {MAX_MAX_TOKENS}")
        max_tokens = int(max_tokens)

    system = task = None
    if provider.supports_system_prompt:
        system = arguments.get("system")
        if system is not None and not isinstance(system, str):
            raise ParseError("system must be a string")
        task = arguments.get("task")
        if task is not None and (not isinstance(task, str) or task not in TASK_PROMPTS):
            raise ParseError(f"Invalid task. Must be one of: {', '.join(TASK_PROMPTS)}")

    return ChatRequest(
        messages=messages,
        model=model or provider.catalog.default,
        temperature=DEFAULT_TEMPERATURE if temperature is None else temperature,
        max_tokens=max_tokens,
        system=system or None,
        task=task,
    )

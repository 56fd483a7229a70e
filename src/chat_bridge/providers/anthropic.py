"""Anthropic provider implementation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from chat_bridge.catalog import ANTHROPIC_MODELS
from chat_bridge.normalize import normalized_errors, require_content
from chat_bridge.prompts import build_system_prompt
from chat_bridge.providers.base import BaseProvider, json_or_error
from chat_bridge.types import ChatRequest, ChatResponse, Message, Usage

_MESSAGES_PATH = "/v1/messages"
_API_VERSION = "2023-06-01"
_DEFAULT_MAX_TOKENS = 1024


def conversation_messages(messages: Sequence[Message]) -> list[dict[str, Any]]:
    """Serialize the user/assistant turns; system-role messages are not forwarded."""
    return [{"role": m.role, "content": m.content} for m in messages if m.role in ("user", "assistant")]


class AnthropicProvider(BaseProvider):
    """Async wrapper for the Anthropic Messages API."""

    name = "anthropic"
    label = "Anthropic"
    catalog = ANTHROPIC_MODELS
    credential_env = "ANTHROPIC_API_KEY"
    default_base_url = "https://api.anthropic.com"
    allowed_roles = ("user", "assistant")
    supports_system_prompt = True
    _logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        return {
            "x-api-key": self._api_key or "",
            "anthropic-version": _API_VERSION,
            "content-type": "application/json",
        }

    async def chat(self, req: ChatRequest) -> ChatResponse:
        client = self._client()
        with normalized_errors(self.name):
            model_id = self.catalog.resolve(req.model)
            payload = self._build_payload(req, model_id)
            self._logger.debug(
                "POST %s model=%s messages=%d system=%s",
                _MESSAGES_PATH,
                model_id,
                len(payload["messages"]),
                "system" in payload,
            )
            response = await client.post(_MESSAGES_PATH, json=payload)
            data = json_or_error(self.name, response, self._error_code)
            text = require_content(self.name, self._extract_text(data))
            return ChatResponse(
                provider=self.name,
                model=model_id,
                content=text,
                usage=self._extract_usage(data),
            )

    def _build_payload(self, req: ChatRequest, model_id: str) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "model": model_id,
            "messages": conversation_messages(req.messages),
            "temperature": req.temperature,
            "max_tokens": req.max_tokens or _DEFAULT_MAX_TOKENS,
        }
        system_prompt = build_system_prompt(req.task, req.system)
        if system_prompt is not None:
            payload["system"] = system_prompt
        return payload

    @staticmethod
    def _error_code(error: dict[str, Any], response: httpx.Response) -> str | None:
        # Anthropic faults are classified by HTTP status.
        return str(response.status_code)

    @staticmethod
    def _extract_text(data: dict[str, Any]) -> str:
        for block in data.get("content") or []:
            if block.get("type") == "text":
                return block.get("text", "")
        return ""

    @staticmethod
    def _extract_usage(data: dict[str, Any]) -> Usage | None:
        usage = data.get("usage")
        if not usage:
            return None
        input_tokens = usage.get("input_tokens") or 0
        output_tokens = usage.get("output_tokens") or 0
        return Usage(
            prompt_tokens=input_tokens,
            completion_tokens=output_tokens,
            total_tokens=input_tokens + output_tokens,
        )

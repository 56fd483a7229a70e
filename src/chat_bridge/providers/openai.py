"""OpenAI provider implementation."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from chat_bridge.catalog import OPENAI_MODELS
from chat_bridge.normalize import normalized_errors, require_content
from chat_bridge.prompts import REASONING_PROMPTS
from chat_bridge.providers.base import BaseProvider, json_or_error
from chat_bridge.types import ChatRequest, ChatResponse, Message, Usage

_CHAT_PATH = "/v1/chat/completions"


def with_reasoning_prompt(messages: Sequence[Message], model: str) -> list[Message]:
    """Prepend the reasoning instructions when ``model`` is a reasoning variant.

    Returns a new list; system messages already in the conversation stay where
    the caller put them.
    """
    prompt = REASONING_PROMPTS.get(model)
    if prompt is None:
        return list(messages)
    return [Message(role="system", content=prompt), *messages]


class OpenAIProvider(BaseProvider):
    """Async wrapper for the OpenAI Chat Completions API."""

    name = "openai"
    label = "OpenAI"
    catalog = OPENAI_MODELS
    credential_env = "OPENAI_API_KEY"
    default_base_url = "https://api.openai.com"
    _logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def chat(self, req: ChatRequest) -> ChatResponse:
        """Call OpenAI Chat Completions and normalize the result."""
        client = self._client()
        with normalized_errors(self.name):
            model_id = self.catalog.resolve(req.model)
            payload = self._build_payload(req, model_id)
            self._logger.debug("POST %s model=%s messages=%d", _CHAT_PATH, model_id, len(payload["messages"]))
            response = await client.post(_CHAT_PATH, json=payload)
            data = json_or_error(self.name, response, self._error_code)

            choices = data.get("choices") or []
            message = choices[0].get("message", {}) if choices else {}
            text = require_content(self.name, message.get("content"))

            return ChatResponse(
                provider=self.name,
                model=model_id,
                content=text,
                usage=self._extract_usage(data),
            )

    def _build_payload(self, req: ChatRequest, model_id: str) -> dict[str, Any]:
        messages = with_reasoning_prompt(req.messages, req.model)
        payload: dict[str, Any] = {
            "model": model_id,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": req.temperature,
            "stream": False,
        }
        if req.max_tokens is not None:
            payload["max_tokens"] = req.max_tokens
        return payload

    @staticmethod
    def _error_code(error: dict[str, Any], response: httpx.Response) -> str | None:
        code = error.get("code")
        return code if isinstance(code, str) and code else None

    @staticmethod
    def _extract_usage(data: dict[str, Any]) -> Usage | None:
        usage = data.get("usage")
        if not usage:
            return None
        return Usage(
            prompt_tokens=usage.get("prompt_tokens"),
            completion_tokens=usage.get("completion_tokens"),
            total_tokens=usage.get("total_tokens"),
        )

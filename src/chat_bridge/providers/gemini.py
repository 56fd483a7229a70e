"""Gemini provider implementation.

Gemini chat is session based: the conversation is rebuilt on every call by
replaying the earlier turns into a fresh :class:`GeminiChatSession` and only
the reply to the final turn is returned.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence
from typing import Any

import httpx

from chat_bridge.catalog import GEMINI_MODELS
from chat_bridge.errors import ProviderError
from chat_bridge.normalize import normalized_errors, require_content
from chat_bridge.providers.base import BaseProvider, json_or_error
from chat_bridge.types import ChatRequest, ChatResponse, Message, Usage

_DEFAULT_MAX_OUTPUT_TOKENS = 1024

_logger = logging.getLogger(__name__)


def fold_system_messages(messages: Sequence[Message]) -> list[dict[str, Any]]:
    """Convert the conversation to Gemini turns.

    A system message is held as pending text and folded into the next user
    message only; assistant turns take Gemini's ``model`` role. A system
    message with no user message after it is dropped.
    """
    turns: list[dict[str, Any]] = []
    pending = ""
    for message in messages:
        if message.role == "system":
            pending = message.content
        elif message.role == "user":
            text = f"{pending}\n\nUser: {message.content}" if pending else message.content
            turns.append({"role": "user", "parts": [{"text": text}]})
            pending = ""
        else:
            turns.append({"role": "model", "parts": [{"text": message.content}]})
    return turns


class GeminiChatSession:
    """Stateful chat over ``generateContent``; history grows with every turn."""

    def __init__(
        self,
        client: httpx.AsyncClient,
        model_id: str,
        generation_config: dict[str, Any],
    ) -> None:
        self._client = client
        self._path = f"/v1beta/models/{model_id}:generateContent"
        self._generation_config = generation_config
        self.history: list[dict[str, Any]] = []

    async def send_message(self, text: str) -> dict[str, Any]:
        """Send one user turn; the exchange is kept in the history only if the model replied."""
        turn = {"role": "user", "parts": [{"text": text}]}
        payload = {
            "contents": [*self.history, turn],
            "generationConfig": self._generation_config,
        }
        response = await self._client.post(self._path, json=payload)
        data = json_or_error(GeminiProvider.name, response, GeminiProvider._error_code)

        candidates = data.get("candidates") or []
        content = candidates[0].get("content") if candidates else None
        if content:
            self.history.append(turn)
            self.history.append({"role": "model", "parts": content.get("parts") or []})
        else:
            feedback = data.get("promptFeedback") or {}
            _logger.warning(
                "no candidate returned, turn left out of history (blockReason=%s)",
                feedback.get("blockReason"),
            )
        return data


class GeminiProvider(BaseProvider):
    """Async wrapper for the Gemini generateContent API."""

    name = "gemini"
    label = "Google AI"
    catalog = GEMINI_MODELS
    credential_env = "GOOGLE_AI_API_KEY"
    default_base_url = "https://generativelanguage.googleapis.com"
    _logger = logging.getLogger(__name__)

    def _headers(self) -> dict[str, str]:
        return {
            "x-goog-api-key": self._api_key or "",
            "Content-Type": "application/json",
        }

    async def chat(self, req: ChatRequest) -> ChatResponse:
        client = self._client()
        with normalized_errors(self.name, detect_rate_limit=True, keep_unexpected_message=True):
            model_id = self.catalog.resolve(req.model)
            turns = fold_system_messages(req.messages)
            if not turns:
                raise ProviderError(
                    self.name,
                    "Conversation must contain at least one user or assistant message",
                    code="invalid_request",
                    status=400,
                )

            session = self.start_chat(client, model_id, req)
            # Earlier turns only rebuild context; their replies are discarded.
            for index, turn in enumerate(turns[:-1], start=1):
                self._logger.debug("replaying turn %d/%d model=%s", index, len(turns) - 1, model_id)
                await session.send_message(turn["parts"][0]["text"])

            data = await session.send_message(turns[-1]["parts"][0]["text"])
            text = require_content(self.name, self._extract_text(data))
            return ChatResponse(
                provider=self.name,
                model=model_id,
                content=text,
                usage=self._extract_usage(data),
            )

    @staticmethod
    def start_chat(client: httpx.AsyncClient, model_id: str, req: ChatRequest) -> GeminiChatSession:
        generation_config = {
            "temperature": req.temperature,
            "maxOutputTokens": req.max_tokens or _DEFAULT_MAX_OUTPUT_TOKENS,
        }
        return GeminiChatSession(client, model_id, generation_config)

    @staticmethod
    def _error_code(error: dict[str, Any], response: httpx.Response) -> str | None:
        return None

    @staticmethod
    def _extract_text(data: dict[str, Any]) -> str:
        candidates = data.get("candidates") or []
        if not candidates:
            return ""
        parts = (candidates[0].get("content") or {}).get("parts") or []
        return "".join(part.get("text", "") for part in parts)

    @staticmethod
    def _extract_usage(data: dict[str, Any]) -> Usage | None:
        usage = data.get("usageMetadata")
        if not usage:
            return None
        return Usage(
            prompt_tokens=usage.get("promptTokenCount"),
            completion_tokens=usage.get("candidatesTokenCount"),
            total_tokens=usage.get("totalTokenCount"),
        )

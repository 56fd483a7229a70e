"""Tool descriptions and the dispatcher the transport host calls into."""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any, Protocol

from chat_bridge.errors import UnknownToolError
from chat_bridge.prompts import TASK_PROMPTS
from chat_bridge.providers.base import BaseProvider
from chat_bridge.types import DEFAULT_TEMPERATURE, ChatResponse, ToolResult
from chat_bridge.validation import (
    MAX_MAX_TOKENS,
    MAX_TEMPERATURE,
    MIN_MAX_TOKENS,
    MIN_TEMPERATURE,
    validate_chat_request,
)

_logger = logging.getLogger(__name__)

TOOL_NAMES = {
    "openai": "chat_with_chatgpt",
    "anthropic": "chat_with_claude",
    "gemini": "chat_with_gemini",
}

TOOL_DESCRIPTIONS = {
    "openai": """Talk directly with OpenAI's ChatGPT models. You can use this tool to get responses from different versions of ChatGPT.

Example usage:
  "Can you ask gpt-4o about ..."
  "Let's see what o1 thinks about ..."

Available models:

GPT Models (Fast and versatile):
- gpt-4o        : Latest GPT-4 Turbo - Best for general use
- gpt-4o-mini   : GPT-3.5 Turbo - Faster and more cost-effective

Reasoning Models (Specialized in step-by-step analysis):
- o1            : Advanced reasoning with GPT-4
- o1-mini       : Balanced reasoning with GPT-3.5
- o3-mini       : Efficient reasoning with GPT-3.5

Each reasoning model is optimized for breaking down complex problems step by step.

Default model: gpt-4o""",
    "anthropic": """Talk directly with Anthropic's Claude models. You can use this tool to get responses from different versions of Claude.

Example usage:
  "Can you ask claude-3o about ..."
  "Let's see what claude-3.5s thinks about ..."

Available models:

- claude-3o      : Claude 3 Opus - Most capable, best for complex tasks
- claude-3.5s    : Claude 3.5 Sonnet - Strong general-purpose model
- claude-3.5h    : Claude 3.5 Haiku - Fast, efficient for simpler tasks

Task-specific prompts available:
- analysis: Detailed analytical thinking
- coding: Programming and software development
- writing: Content creation and writing

Default model: claude-3o""",
    "gemini": """Talk directly with Google's Gemini models. You can use this tool to get responses from different versions of Gemini.

Example usage:
  "Can you ask gemini-1.5-flash about ..."
  "Let's see what gemini-2.0-flash-exp thinks about ..."

Available models:
- gemini-1.5-flash     : Fast and efficient model based on Gemini 1.5 Pro
- gemini-2.0-flash-exp : More capable experimental model based on Gemini 2.0 Pro

Default model: gemini-1.5-flash""",
}


class Tool(Protocol):
    name: str
    description: str
    input_schema: dict[str, Any]

    async def call(self, arguments: Any) -> ToolResult: ...


def chat_input_schema(provider: BaseProvider) -> dict[str, Any]:
    """JSON schema of the chat tool arguments accepted by ``provider``."""
    properties: dict[str, Any] = {
        "messages": {
            "type": "array",
            "description": "Array of messages for the conversation",
            "minItems": 1,
            "items": {
                "type": "object",
                "properties": {
                    "role": {
                        "type": "string",
                        "enum": list(provider.allowed_roles),
                        "description": "Role of the message sender",
                    },
                    "content": {
                        "type": "string",
                        "description": "Content of the message",
                    },
                },
                "required": ["role", "content"],
            },
        },
        "model": {
            "type": "string",
            "enum": provider.catalog.names(),
            "description": "Model to use for the chat completion",
            "default": provider.catalog.default,
        },
        "temperature": {
            "type": "number",
            "description": "Sampling temperature (0-2.0). Lower values make responses more focused and deterministic",
            "minimum": MIN_TEMPERATURE,
            "maximum": MAX_TEMPERATURE,
            "default": DEFAULT_TEMPERATURE,
        },
        "maxTokens": {
            "type": "integer",
            "description": "Maximum length of the response in tokens",
            "minimum": MIN_MAX_TOKENS,
            "maximum": MAX_MAX_TOKENS,
        },
    }
    if provider.supports_system_prompt:
        properties["system"] = {
            "type": "string",
            "description": "Optional system prompt to guide the model's behavior",
        }
        properties["task"] = {
            "type": "string",
            "enum": list(TASK_PROMPTS),
            "description": "Optional task-specific prompt template",
        }
    return {"type": "object", "properties": properties, "required": ["messages"]}


class ChatTool:
    """Exposes one provider as a chat tool."""

    def __init__(
        self,
        provider: BaseProvider,
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> None:
        self.provider = provider
        self.name = name or TOOL_NAMES[provider.name]
        self.description = description or TOOL_DESCRIPTIONS[provider.name]
        self.input_schema = chat_input_schema(provider)

    async def chat(self, arguments: Any) -> ChatResponse:
        request = validate_chat_request(arguments, self.provider)
        return await self.provider.chat(request)

    async def call(self, arguments: Any) -> ToolResult:
        response = await self.chat(arguments)
        return ToolResult.text(response.content)

    async def aclose(self) -> None:
        await self.provider.aclose()


class ToolRegistry:
    """Routes tool calls from the transport host to the registered tools."""

    def __init__(self, tools: Iterable[Tool] = ()) -> None:
        self._tools: dict[str, Tool] = {}
        for tool in tools:
            self.register(tool)

    def register(self, tool: Tool) -> None:
        self._tools[tool.name] = tool

    def get_tool(self, name: str) -> Tool:
        """Return a tool by its registered name."""
        try:
            return self._tools[name]
        except KeyError as exc:
            raise UnknownToolError(name) from exc

    def list_tools(self) -> list[dict[str, Any]]:
        return [
            {"name": t.name, "description": t.description, "inputSchema": t.input_schema}
            for t in self._tools.values()
        ]

    async def handle_tool_call(self, name: str, arguments: Any) -> ToolResult:
        """Run ``name`` with the raw ``arguments``; canonical errors propagate."""
        tool = self.get_tool(name)
        _logger.debug("tool call %s", name)
        return await tool.call(arguments)

    async def aclose(self) -> None:
        """Release resources held by tools that own any (chat providers)."""
        for tool in self._tools.values():
            close = getattr(tool, "aclose", None)
            if close is not None:
                await close()

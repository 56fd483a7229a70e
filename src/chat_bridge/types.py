"""Provider-agnostic request/response models."""

from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

Role = Literal["system", "user", "assistant"]

DEFAULT_TEMPERATURE = 0.7


class Message(BaseModel):
    """Single chat message."""

    model_config = ConfigDict(frozen=True)

    role: Role
    content: str


class ChatRequest(BaseModel):
    """Normalized request shared by all providers."""

    model_config = ConfigDict(frozen=True)

    messages: tuple[Message, ...] = Field(min_length=1)
    model: str
    temperature: float = Field(default=DEFAULT_TEMPERATURE, ge=0, le=2)
    max_tokens: int | None = Field(default=None, ge=1, le=4096)
    # only honored by providers that take an out-of-band system prompt
    system: str | None = None
    task: str | None = None


class Usage(BaseModel):
    """Token accounting reported by a provider."""

    model_config = ConfigDict(frozen=True)

    prompt_tokens: int | None = None
    completion_tokens: int | None = None
    total_tokens: int | None = None


class ChatResponse(BaseModel):
    """Normalized chat completion."""

    model_config = ConfigDict(frozen=True)

    provider: str
    model: str
    content: str = Field(min_length=1)
    usage: Usage | None = None


class TextContent(BaseModel):
    """Text block of a tool result."""

    type: Literal["text"] = "text"
    text: str


class ToolResult(BaseModel):
    """Result handed back to the transport host for a tool call.

    Dumps with the wire name ``isError``; either name is accepted on input.
    """

    model_config = ConfigDict(populate_by_name=True, serialize_by_alias=True)

    content: list[TextContent]
    is_error: bool = Field(default=False, alias="isError")

    @classmethod
    def text(cls, text: str, *, is_error: bool = False) -> ToolResult:
        return cls(content=[TextContent(text=text)], is_error=is_error)

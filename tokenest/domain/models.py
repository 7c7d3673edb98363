"""Pydantic models for ``count_tokens`` style requests."""

from __future__ import annotations

from typing import Annotated, Any, Callable, Literal, Union

from pydantic import BaseModel, ConfigDict, Discriminator, Field, Tag


class ContentBlock(BaseModel):
    """Any content block; fields beyond ``type`` depend on the block kind."""

    model_config = ConfigDict(extra="allow")

    type: str


class TextBlock(ContentBlock):
    type: Literal["text"] = "text"
    text: str


class ThinkingBlock(ContentBlock):
    type: Literal["thinking"] = "thinking"
    thinking: str


class ToolUseBlock(ContentBlock):
    type: Literal["tool_use"] = "tool_use"
    id: str | None = None
    name: str
    input: dict[str, Any] = Field(default_factory=dict)


def _block_tag(known: frozenset[str]) -> Callable[[Any], str]:
    """Pick the block model by its ``type``; unknown types validate as ``ContentBlock``."""

    def tag(value: Any) -> str:
        block_type = value.get("type") if isinstance(value, dict) else getattr(value, "type", None)
        return block_type if isinstance(block_type, str) and block_type in known else "other"

    return tag


ResultBlock = Annotated[
    Union[
        Annotated[TextBlock, Tag("text")],
        Annotated[ContentBlock, Tag("other")],
    ],
    Discriminator(_block_tag(frozenset({"text"}))),
]


class ToolResultBlock(ContentBlock):
    type: Literal["tool_result"] = "tool_result"
    tool_use_id: str | None = None
    content: str | list[ResultBlock] = ""


class ImageBlock(ContentBlock):
    type: Literal["image"] = "image"
    source: dict[str, Any] = Field(default_factory=dict)


Block = Annotated[
    Union[
        Annotated[TextBlock, Tag("text")],
        Annotated[ThinkingBlock, Tag("thinking")],
        Annotated[ToolUseBlock, Tag("tool_use")],
        Annotated[ToolResultBlock, Tag("tool_result")],
        Annotated[ImageBlock, Tag("image")],
        Annotated[ContentBlock, Tag("other")],
    ],
    Discriminator(
        _block_tag(frozenset({"text", "thinking", "tool_use", "tool_result", "image"}))
    ),
]


class Message(BaseModel):
    role: Literal["user", "assistant"]
    content: str | list[Block]


class ToolDefinition(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str
    description: str | None = None
    input_schema: dict[str, Any] = Field(default_factory=dict)


class CountTokensRequest(BaseModel):
    model: str
    system: str | list[TextBlock] | None = None
    messages: list[Message]
    tools: list[ToolDefinition] | None = None


class CountTokensResponse(BaseModel):
    input_tokens: int = Field(ge=0)


__all__ = [
    "Block",
    "ContentBlock",
    "CountTokensRequest",
    "CountTokensResponse",
    "ImageBlock",
    "Message",
    "TextBlock",
    "ThinkingBlock",
    "ToolDefinition",
    "ToolResultBlock",
    "ToolUseBlock",
]

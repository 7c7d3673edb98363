"""Token estimation for raw input and ``count_tokens`` request payloads."""

from __future__ import annotations

import json
from typing import Any, Iterable, Iterator, Mapping, Sequence

from pydantic import ValidationError

from tokenest.config import EstimatorSettings, get_settings
from tokenest.domain.models import (
    ContentBlock,
    CountTokensRequest,
    CountTokensResponse,
    Message,
    TextBlock,
    ThinkingBlock,
    ToolDefinition,
    ToolResultBlock,
    ToolUseBlock,
)
from tokenest.logging import logger
from tokenest.services.exceptions import (
    InputTooLargeError,
    InvalidRequestError,
    MalformedInputError,
)
from tokenest.utils.tokens import count_tokens


def decode_text(data: str | bytes | bytearray, encoding: str = "utf-8") -> str:
    """Return ``data`` as text made only of Unicode scalar values."""

    if isinstance(data, (bytes, bytearray)):
        try:
            text = bytes(data).decode(encoding)
        except UnicodeDecodeError as exc:
            raise MalformedInputError(
                f"Input is not valid {encoding} at byte {exc.start}."
            ) from exc
    else:
        text = data

    # Lone surrogates can sneak in through str (e.g. surrogateescape); they are not scalar values.
    try:
        text.encode("utf-8")
    except UnicodeEncodeError as exc:
        raise MalformedInputError(
            f"Input contains a lone surrogate at index {exc.start}."
        ) from exc
    return text


def ensure_within_limit(text: str, max_chars: int | None) -> str:
    if max_chars is not None and len(text) > max_chars:
        raise InputTooLargeError(f"Input too large: {len(text)}/{max_chars} characters.")
    return text


def _json_text(value: Any) -> str:
    return json.dumps(value, ensure_ascii=False)


def system_fragments(system: str | Sequence[TextBlock] | None) -> Iterator[str]:
    if system is None:
        return
    if isinstance(system, str):
        yield system
        return
    for block in system:
        yield block.text


def content_fragments(content: str | Sequence[ContentBlock]) -> Iterator[str]:
    """Yield the text pieces of a message body that carry token cost.

    Blocks without textual payload (images, documents, unknown types) yield nothing.
    """

    if isinstance(content, str):
        yield content
        return

    for block in content:
        if isinstance(block, TextBlock):
            yield block.text
        elif isinstance(block, ThinkingBlock):
            yield block.thinking
        elif isinstance(block, ToolUseBlock):
            yield block.name
            yield _json_text(block.input)
        elif isinstance(block, ToolResultBlock):
            yield from content_fragments(block.content)


def tool_fragments(tools: Sequence[ToolDefinition] | None) -> Iterator[str]:
    for tool in tools or ():
        yield tool.name
        if tool.description:
            yield tool.description
        yield _json_text(tool.input_schema)


def request_fragments(request: CountTokensRequest) -> Iterator[str]:
    yield from system_fragments(request.system)
    for message in request.messages:
        yield from content_fragments(message.content)
    yield from tool_fragments(request.tools)


def count_system_tokens(system: str | Sequence[TextBlock] | None) -> int:
    return sum(count_tokens(fragment) for fragment in system_fragments(system))


def count_content_tokens(content: str | Sequence[ContentBlock]) -> int:
    return sum(count_tokens(fragment) for fragment in content_fragments(content))


def count_message_tokens(messages: Iterable[Message]) -> int:
    return sum(count_content_tokens(message.content) for message in messages)


def count_tool_tokens(tools: Sequence[ToolDefinition] | None) -> int:
    return sum(count_tokens(fragment) for fragment in tool_fragments(tools))


def count_request_tokens(request: CountTokensRequest) -> int:
    """Sum the estimates of every fragment in a request, each rounded on its own."""

    return sum(count_tokens(fragment) for fragment in request_fragments(request))


class TokenEstimator:
    def __init__(self, settings: EstimatorSettings | None = None) -> None:
        self.settings = settings or get_settings()

    def estimate_text(self, data: str | bytes | bytearray) -> int:
        text = decode_text(data, self.settings.input.encoding)
        ensure_within_limit(text, self.settings.input.max_chars)
        tokens = count_tokens(text)
        logger.debug("tokens_estimated", characters=len(text), tokens=tokens)
        return tokens

    def estimate_request(
        self, payload: CountTokensRequest | Mapping[str, Any]
    ) -> CountTokensResponse:
        request = self._parse_request(payload)
        tokens = 0
        characters = 0
        for fragment in request_fragments(request):
            decode_text(fragment)
            characters += len(fragment)
            tokens += count_tokens(fragment)
        # The limit covers every counted fragment of the request together.
        max_chars = self.settings.input.max_chars
        if max_chars is not None and characters > max_chars:
            raise InputTooLargeError(
                f"Request too large: {characters}/{max_chars} characters."
            )
        logger.debug(
            "request_tokens_estimated",
            model=request.model,
            messages=len(request.messages),
            tools=len(request.tools or []),
            characters=characters,
            tokens=tokens,
        )
        return CountTokensResponse(input_tokens=tokens)

    def _parse_request(
        self, payload: CountTokensRequest | Mapping[str, Any]
    ) -> CountTokensRequest:
        if isinstance(payload, CountTokensRequest):
            return payload
        try:
            return CountTokensRequest.model_validate(payload)
        except ValidationError as exc:
            raise InvalidRequestError(
                f"Invalid count_tokens request: {exc.error_count()} error(s)."
            ) from exc


__all__ = [
    "TokenEstimator",
    "content_fragments",
    "count_content_tokens",
    "count_message_tokens",
    "count_request_tokens",
    "count_system_tokens",
    "count_tool_tokens",
    "decode_text",
    "ensure_within_limit",
    "request_fragments",
    "system_fragments",
    "tool_fragments",
]

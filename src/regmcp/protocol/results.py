"""Invocation results — a tagged union over handler return values.

Handlers may return plain text, a mapping carrying ``content`` blocks, a
mapping carrying ``messages``, or anything else.  :func:`coerce_result`
classifies a raw return value once, at the invoker boundary, so tool and
prompt dispatch only ever switch on the ``kind`` tag.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Literal

from pydantic import BaseModel, Field


class TextResult(BaseModel):
    """A plain textual result."""

    kind: Literal["text"] = "text"
    text: str


class ContentResult(BaseModel):
    """Explicit MCP content blocks, passed through verbatim.

    ``messages`` is kept when the raw mapping carried both payloads, so a
    prompt handler's messages are not lost to the ``content`` classification.
    """

    kind: Literal["content"] = "content"
    content: list[Any] = Field(default_factory=list)
    messages: list[Any] | None = None


class MessagesResult(BaseModel):
    """Explicit prompt messages, passed through verbatim."""

    kind: Literal["messages"] = "messages"
    messages: list[Any] = Field(default_factory=list)


class EmptyResult(BaseModel):
    """No recognised payload; ``value`` keeps the raw return for display."""

    kind: Literal["empty"] = "empty"
    value: Any = None


InvocationResult = TextResult | ContentResult | MessagesResult | EmptyResult


def coerce_result(value: Any) -> InvocationResult:
    """Classify a raw handler return value.

    A mapping that carries both ``content`` and ``messages`` is classified
    as :class:`ContentResult` with its ``messages`` retained.
    """
    if isinstance(value, TextResult | ContentResult | MessagesResult | EmptyResult):
        return value
    if isinstance(value, str):
        return TextResult(text=value)
    if isinstance(value, Mapping):
        if value.get("content") is not None:
            messages = value.get("messages")
            return ContentResult(
                content=_as_list(value["content"]),
                messages=None if messages is None else _as_list(messages),
            )
        if value.get("messages") is not None:
            return MessagesResult(messages=_as_list(value["messages"]))
    return EmptyResult(value=value)


def _as_list(value: Any) -> list[Any]:
    if isinstance(value, list):
        return value
    if isinstance(value, tuple):
        return list(value)
    return [value]

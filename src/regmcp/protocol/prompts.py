"""Prompt dispatch — ``prompts/list``, ``prompts/get`` and template resolution.

Prompts come in two flavours:

- **static** prompts declare ``messages`` and/or ``extend`` in their metadata
  and are resolved by :func:`resolve_messages`, which walks the ``extend``
  chain depth-first and substitutes ``{{argument}}`` placeholders;
- **dynamic** prompts declare neither and are produced by invoking the
  entry's handler.

Unlike tools, a failing dynamic prompt is reported as ``internal_error``.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from regmcp.protocol import jsonrpc
from regmcp.protocol.discovery import PromptDiscovery
from regmcp.protocol.errors import InvocationError, RegistryError, TemplateCycleError
from regmcp.protocol.results import (
    ContentResult,
    InvocationResult,
    MessagesResult,
    TextResult,
    coerce_result,
)
from regmcp.utils.telemetry import (
    ATTR_ENTRY_ID,
    ATTR_PROMPT_DYNAMIC,
    ATTR_PROMPT_MESSAGES,
    ATTR_PROMPT_NAME,
    get_tracer,
)

if TYPE_CHECKING:
    from regmcp.protocol.models import Message, PromptDescriptor
    from regmcp.protocol.provider import Invoker, Registry

logger = logging.getLogger(__name__)
_tracer = get_tracer(__name__)

_PLACEHOLDER = re.compile(r"\{\{([^{}]+)\}\}")


# ---------------------------------------------------------------------------
# Argument substitution
# ---------------------------------------------------------------------------


def stringify(value: Any) -> str:
    """Render an argument value the way it appears in substituted text."""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if value is None:
        return "null"
    if isinstance(value, Mapping | list | tuple):
        return json.dumps(value, default=str)
    return str(value)


def substitute(text: str, arguments: Mapping[str, Any] | None) -> str:
    """Replace ``{{key}}`` with the stringified argument for every known key.

    Placeholders naming keys absent from *arguments* are left untouched.
    Substitution is a single pass, so substituted values are never expanded.
    """
    if not arguments:
        return text

    def _replace(match: re.Match[str]) -> str:
        key = match.group(1)
        if key in arguments:
            return stringify(arguments[key])
        return match.group(0)

    return _PLACEHOLDER.sub(_replace, text)


# ---------------------------------------------------------------------------
# Template inheritance
# ---------------------------------------------------------------------------


def resolve_messages(
    prompt: PromptDescriptor,
    all_prompts: Mapping[str, PromptDescriptor],
    arguments: Mapping[str, Any] | None,
    *,
    _path: tuple[str, ...] = (),
) -> list[dict[str, Any]]:
    """Resolve a static prompt into its final message list.

    Messages from every ``extend`` parent (in declaration order, each
    resolved recursively) precede the prompt's own messages.  Parents that
    cannot be found are skipped.

    Raises:
        TemplateCycleError: If the ``extend`` chain re-enters a prompt that
            is already being resolved.
    """
    path = (*_path, prompt.name)
    arguments = arguments or {}
    messages: list[dict[str, Any]] = []

    for ext in prompt.extend or []:
        parent = all_prompts.get(ext.id)
        if parent is None:
            logger.debug("Prompt %s extends unknown %s; skipping", prompt.name, ext.id)
            continue
        if parent.name in path:
            raise TemplateCycleError([*path, parent.name])

        merged: dict[str, Any] = {
            key: substitute(stringify(value), arguments) for key, value in ext.arguments.items()
        }
        for key, value in arguments.items():
            merged.setdefault(key, value)

        messages.extend(resolve_messages(parent, all_prompts, merged, _path=path))

    for msg in prompt.messages or []:
        content = msg.content
        if isinstance(content, Mapping) and "text" in content:
            content = content["text"]
        text = "" if content is None else stringify(content)
        messages.append({
            "role": msg.role or "user",
            "content": {"type": "text", "text": substitute(text, arguments)},
        })

    return messages


def messages_from_result(result: InvocationResult | Any) -> list[Any]:
    """Normalize a dynamic prompt's invocation result into messages.

    Raw handler values are classified with :func:`coerce_result` first.
    A ``messages`` payload always wins, even next to ``content``.
    """
    result = coerce_result(result)
    if isinstance(result, TextResult):
        return [{"role": "user", "content": {"type": "text", "text": result.text}}]
    if isinstance(result, MessagesResult):
        return result.messages
    if isinstance(result, ContentResult) and result.messages is not None:
        return result.messages
    return []


# ---------------------------------------------------------------------------
# Handler
# ---------------------------------------------------------------------------


class PromptHandler:
    """Answers prompt methods using a registry for discovery and an invoker."""

    def __init__(self, registry: Registry, invoker: Invoker) -> None:
        self._discovery = PromptDiscovery(registry)
        self._invoker = invoker

    def handle(self, msg: Message) -> str | None:
        if msg.kind != "request":
            return None
        if msg.method == "prompts/list":
            return self.handle_list(msg.id, msg.params)
        if msg.method == "prompts/get":
            return self.handle_get(msg.id, msg.params)
        return None

    def handle_list(self, id: Any, params: dict[str, Any]) -> str:
        try:
            prompts = self._discovery.discover()
        except RegistryError as exc:
            logger.warning("Prompt discovery failed: %s", exc)
            return jsonrpc.internal_error(id, f"Failed to discover prompts: {exc}")

        listing = [
            prompts[name].to_listing() for name in sorted(prompts) if not prompts[name].is_template
        ]
        return jsonrpc.encode_response(id, {"prompts": listing})

    def handle_get(self, id: Any, params: dict[str, Any]) -> str:
        name = params.get("name")
        if not isinstance(name, str) or not name:
            return jsonrpc.invalid_params(id, "Missing prompt name")

        arguments = params.get("arguments")
        if arguments is None:
            arguments = {}
        elif not isinstance(arguments, dict):
            return jsonrpc.invalid_params(id, "Prompt arguments must be an object")

        try:
            prompts = self._discovery.discover()
        except RegistryError as exc:
            logger.warning("Prompt discovery failed: %s", exc)
            return jsonrpc.internal_error(id, f"Failed to discover prompts: {exc}")

        prompt = prompts.get(name)
        if prompt is None:
            return jsonrpc.invalid_params(id, f"Unknown prompt: {name}")
        if prompt.is_template:
            return jsonrpc.invalid_params(id, f"Cannot get template directly: {name}")

        with _tracer.start_as_current_span("regmcp.prompt.get") as span:
            span.set_attribute(ATTR_PROMPT_NAME, name)
            span.set_attribute(ATTR_ENTRY_ID, prompt.entry_id)
            span.set_attribute(ATTR_PROMPT_DYNAMIC, prompt.is_dynamic)

            if prompt.is_dynamic:
                try:
                    result = coerce_result(self._invoker.call(prompt.entry_id, arguments))
                except InvocationError as exc:
                    logger.warning("Prompt %s failed: %s", name, exc)
                    return jsonrpc.internal_error(id, f"Prompt handler error: {exc}")
                messages = messages_from_result(result)
            else:
                try:
                    messages = resolve_messages(prompt, prompts, arguments)
                except TemplateCycleError as exc:
                    logger.warning("Prompt %s cannot be resolved: %s", name, exc)
                    return jsonrpc.internal_error(id, str(exc))

            span.set_attribute(ATTR_PROMPT_MESSAGES, len(messages))

        response: dict[str, Any] = {"messages": messages}
        if prompt.description is not None:
            response["description"] = prompt.description
        return jsonrpc.encode_response(id, response)

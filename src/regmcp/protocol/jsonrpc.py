"""JSON-RPC 2.0 codec — encode response envelopes, decode and classify input.

Pure protocol plumbing.  :func:`decode` never raises: every failure path
returns an ``invalid`` :class:`~regmcp.protocol.models.Message` carrying a
diagnostic string.
"""

from __future__ import annotations

import json
from typing import Any

from regmcp.protocol.models import Message

JSONRPC_VERSION = "2.0"

# ---------------------------------------------------------------------------
# Standard error codes
# ---------------------------------------------------------------------------

PARSE_ERROR = -32700
INVALID_REQUEST = -32600
METHOD_NOT_FOUND = -32601
INVALID_PARAMS = -32602
INTERNAL_ERROR = -32603
SERVER_ERROR = -32000


def _dumps(payload: dict[str, Any]) -> str:
    return json.dumps(payload, separators=(",", ":"), default=str)


# ---------------------------------------------------------------------------
# Encoding
# ---------------------------------------------------------------------------


def encode_response(id: Any, result: Any) -> str:
    """Encode a success response.

    An empty result (``{}``, ``[]``, ``()`` or ``None``) is always emitted
    as ``{}``; MCP clients reject ``[]`` or ``null`` for ``ping`` and for
    capability objects with no enabled groups.
    """
    if result is None or (isinstance(result, dict | list | tuple) and not result):
        result = {}
    return _dumps({"jsonrpc": JSONRPC_VERSION, "id": id, "result": result})


def encode_error(id: Any, code: int, message: str, data: Any = None) -> str:
    """Encode an error response."""
    error: dict[str, Any] = {"code": code, "message": message}
    if data is not None:
        error["data"] = data
    return _dumps({"jsonrpc": JSONRPC_VERSION, "id": id, "error": error})


def encode_notification(method: str, params: dict[str, Any] | None = None) -> str:
    """Encode a notification (no id, no response expected)."""
    payload: dict[str, Any] = {"jsonrpc": JSONRPC_VERSION, "method": method}
    if params is not None:
        payload["params"] = params
    return _dumps(payload)


# ---------------------------------------------------------------------------
# Decoding
# ---------------------------------------------------------------------------


def decode(line: str | bytes) -> Message:
    """Decode one JSON-RPC line and classify it."""
    try:
        data = json.loads(line)
    except (ValueError, TypeError) as exc:
        return Message.invalid(f"Parse error: {exc}")

    if not isinstance(data, dict):
        return Message.invalid(f"Expected JSON object, got {_json_type(data)}")

    if data.get("jsonrpc") != JSONRPC_VERSION:
        return Message.invalid("Missing or invalid jsonrpc version")

    method = data.get("method")
    if not isinstance(method, str):
        return Message.invalid("Missing or invalid method field")

    params = data.get("params")
    if params is None:
        params = {}
    elif not isinstance(params, dict):
        return Message.invalid("params must be an object")

    if "id" in data:
        return Message.request(data["id"], method, params)
    return Message.notification(method, params)


def _json_type(value: Any) -> str:
    if isinstance(value, list):
        return "array"
    if isinstance(value, str):
        return "string"
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, int | float):
        return "number"
    if value is None:
        return "null"
    return type(value).__name__


# ---------------------------------------------------------------------------
# Error helpers
# ---------------------------------------------------------------------------


def parse_error(id: Any = None, message: str | None = None) -> str:
    return encode_error(id, PARSE_ERROR, message or "Parse error")


def invalid_request(id: Any, message: str | None = None) -> str:
    return encode_error(id, INVALID_REQUEST, message or "Invalid request")


def method_not_found(id: Any, message: str | None = None) -> str:
    return encode_error(id, METHOD_NOT_FOUND, message or "Method not found")


def invalid_params(id: Any, message: str | None = None) -> str:
    return encode_error(id, INVALID_PARAMS, message or "Invalid params")


def internal_error(id: Any, message: str | None = None) -> str:
    return encode_error(id, INTERNAL_ERROR, message or "Internal error")


def server_error(id: Any, message: str | None = None) -> str:
    return encode_error(id, SERVER_ERROR, message or "Server error")

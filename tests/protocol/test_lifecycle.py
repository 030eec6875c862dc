"""Tests for the handshake state machine."""

from __future__ import annotations

import json

from regmcp.protocol.lifecycle import PROTOCOL_VERSION, Lifecycle
from regmcp.protocol.models import CapabilitySettings, Message, Phase, ServerInfo


def _lifecycle(**kwargs: object) -> Lifecycle:
    return Lifecycle(ServerInfo(name="srv", version="1.2.3"), **kwargs)  # type: ignore[arg-type]


def _init(lc: Lifecycle, id: object = 1, **params: object) -> dict:
    out = lc.handle(Message.request(id, "initialize", dict(params)))
    assert out is not None
    return json.loads(out)


class TestInitialize:
    def test_initial_state(self) -> None:
        lc = _lifecycle()
        assert lc.state.phase == Phase.DISCONNECTED
        assert not lc.ready
        assert lc.state.client_info is None

    def test_handshake_result(self) -> None:
        lc = _lifecycle()
        data = _init(lc, clientInfo={"name": "inspector", "version": "0.1"})
        result = data["result"]
        assert data["id"] == 1
        assert result["protocolVersion"] == PROTOCOL_VERSION
        assert result["serverInfo"] == {"name": "srv", "version": "1.2.3"}
        assert result["capabilities"] == {
            "tools": {"listChanged": False},
            "prompts": {"listChanged": False},
        }
        assert "instructions" not in result

    def test_records_client_info_and_transitions(self) -> None:
        lc = _lifecycle()
        _init(lc, clientInfo={"name": "inspector"}, protocolVersion="2024-11-05")
        assert lc.ready
        assert lc.state.client_info == {"name": "inspector"}
        assert lc.state.client_protocol_version == "2024-11-05"

    def test_instructions_included_when_set(self) -> None:
        lc = _lifecycle(instructions="Be nice.")
        assert _init(lc)["result"]["instructions"] == "Be nice."

    def test_disabled_groups_are_omitted(self) -> None:
        lc = _lifecycle(capabilities=CapabilitySettings(tools=True, prompts=False))
        assert _init(lc)["result"]["capabilities"] == {"tools": {"listChanged": False}}

    def test_no_groups_serializes_as_empty_object(self) -> None:
        lc = _lifecycle(capabilities=CapabilitySettings(tools=False, prompts=False))
        out = lc.handle(Message.request(1, "initialize"))
        assert out is not None
        assert '"capabilities":{}' in out

    def test_custom_protocol_version(self) -> None:
        lc = _lifecycle(protocol_version="2024-11-05")
        assert _init(lc)["result"]["protocolVersion"] == "2024-11-05"

    def test_second_initialize_is_rejected(self) -> None:
        lc = _lifecycle()
        _init(lc, clientInfo={"name": "first"})
        data = _init(lc, id=2, clientInfo={"name": "second"})
        assert data["id"] == 2
        assert data["error"]["code"] == -32600
        assert "already initialized" in data["error"]["message"]
        assert lc.state.client_info == {"name": "first"}
        assert lc.ready


class TestGating:
    def test_requests_before_initialize_are_invalid(self) -> None:
        lc = _lifecycle()
        for method in ("ping", "tools/list", "tools/call", "prompts/get", "no/such"):
            out = lc.handle(Message.request(5, method))
            assert out is not None
            data = json.loads(out)
            assert data["error"]["code"] == -32600
            assert data["error"]["message"] == "Server not initialized"
            assert data["id"] == 5

    def test_ping_after_initialize(self) -> None:
        lc = _lifecycle()
        _init(lc)
        out = lc.handle(Message.request(3, "ping"))
        assert out == '{"jsonrpc":"2.0","id":3,"result":{}}'

    def test_other_requests_pass_through_when_ready(self) -> None:
        lc = _lifecycle()
        _init(lc)
        assert lc.handle(Message.request(3, "tools/list")) is None
        assert lc.handle(Message.request(4, "unknown/method")) is None


class TestNotifications:
    def test_initialized_before_handshake_is_silent(self) -> None:
        lc = _lifecycle()
        assert lc.handle(Message.notification("notifications/initialized")) is None
        assert lc.state.phase == Phase.DISCONNECTED

    def test_initialized_after_handshake_is_silent(self) -> None:
        lc = _lifecycle()
        _init(lc)
        assert lc.handle(Message.notification("notifications/initialized")) is None

    def test_other_notifications_are_silent(self) -> None:
        lc = _lifecycle()
        assert lc.handle(Message.notification("notifications/cancelled")) is None

    def test_invalid_messages_are_not_handled(self) -> None:
        lc = _lifecycle()
        assert lc.handle(Message.invalid("bad")) is None

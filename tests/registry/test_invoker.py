"""Tests for HandlerInvoker."""

from __future__ import annotations

import threading
from pathlib import Path
from typing import Any

import pytest

from regmcp.protocol.errors import InvocationError, InvocationTimeoutError, RegistryError
from regmcp.protocol.provider import Invoker
from regmcp.protocol.results import ContentResult, EmptyResult, MessagesResult, TextResult
from regmcp.registry import HandlerInvoker, InMemoryRegistry


class _FailingLookup:
    def get(self, entry_id: str) -> None:
        raise RegistryError("lookup down")


class TestCall:
    def test_satisfies_protocol(self) -> None:
        assert isinstance(HandlerInvoker(), Invoker)

    def test_explicit_handler(self) -> None:
        invoker = HandlerInvoker(handlers={"x": lambda args: f"hello {args['who']}"})
        assert invoker.call("x", {"who": "Ada"}) == TextResult(text="hello Ada")

    def test_register(self) -> None:
        invoker = HandlerInvoker()
        invoker.register("x", lambda args: {"content": [{"type": "text", "text": "hi"}]})
        assert isinstance(invoker.call("x", {}), ContentResult)

    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            ("text", TextResult),
            ({"value": 1}, EmptyResult),
            ({"content": [{"type": "text", "text": "x"}]}, ContentResult),
            ({"messages": [{"role": "user"}]}, MessagesResult),
            (None, EmptyResult),
            (12, EmptyResult),
        ],
    )
    def test_results_are_coerced(self, value: Any, expected: type) -> None:
        invoker = HandlerInvoker(handlers={"x": lambda args: value})
        assert isinstance(invoker.call("x", {}), expected)

    def test_handler_receives_a_copy(self) -> None:
        seen: list[dict[str, Any]] = []

        def handler(args: dict[str, Any]) -> str:
            args["mutated"] = True
            seen.append(args)
            return "ok"

        original = {"a": 1}
        HandlerInvoker(handlers={"x": handler}).call("x", original)
        assert original == {"a": 1}
        assert seen[0] == {"a": 1, "mutated": True}

    def test_handler_exception(self) -> None:
        def handler(args: dict[str, Any]) -> str:
            raise ValueError("bad location")

        with pytest.raises(InvocationError) as info:
            HandlerInvoker(handlers={"x": handler}).call("x", {})
        assert info.value.entry_id == "x"
        assert info.value.detail == "bad location"
        assert isinstance(info.value.__cause__, ValueError)

    def test_exception_without_message_uses_type_name(self) -> None:
        def handler(args: dict[str, Any]) -> str:
            raise KeyError

        with pytest.raises(InvocationError) as info:
            HandlerInvoker(handlers={"x": handler}).call("x", {})
        assert info.value.detail == "KeyError"


class TestTimeout:
    def test_slow_handler_times_out(self) -> None:
        release = threading.Event()

        def handler(args: dict[str, Any]) -> str:
            release.wait(5)
            return "late"

        invoker = HandlerInvoker(handlers={"slow": handler}, timeout=0.05)
        try:
            with pytest.raises(InvocationTimeoutError) as info:
                invoker.call("slow", {})
        finally:
            release.set()
        assert info.value.timeout == 0.05
        assert info.value.entry_id == "slow"

    def test_no_timeout(self) -> None:
        invoker = HandlerInvoker(handlers={"x": lambda args: "ok"}, timeout=None)
        assert invoker.timeout is None
        assert invoker.call("x", {}) == TextResult(text="ok")


class TestResolve:
    def test_no_lookup_and_no_handler(self) -> None:
        with pytest.raises(InvocationError, match="no handler registered"):
            HandlerInvoker().call("x", {})

    def test_unknown_entry(self) -> None:
        with pytest.raises(InvocationError, match="no such registry entry"):
            HandlerInvoker(InMemoryRegistry()).call("x", {})

    def test_entry_without_handler(self) -> None:
        reg = InMemoryRegistry()
        reg.add("x")
        with pytest.raises(InvocationError, match="entry has no handler"):
            HandlerInvoker(reg).call("x", {})

    def test_lookup_failure(self) -> None:
        with pytest.raises(InvocationError, match="lookup down"):
            HandlerInvoker(_FailingLookup()).call("x", {})

    def test_explicit_handler_takes_precedence(self) -> None:
        reg = InMemoryRegistry()
        reg.add("x", handler="no.such.module:fn")
        invoker = HandlerInvoker(reg, handlers={"x": lambda args: "explicit"})
        assert invoker.call("x", {}) == TextResult(text="explicit")


class TestImportPath:
    @pytest.fixture
    def handler_module(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> str:
        (tmp_path / "regmcp_sample_handlers.py").write_text(
            "class Weather:\n"
            "    @staticmethod\n"
            "    def get(args):\n"
            "        return 'Sunny in ' + args['location']\n"
            "\n"
            "def greet(args):\n"
            "    return 'hi'\n"
            "\n"
            "NOT_CALLABLE = 3\n"
        )
        monkeypatch.syspath_prepend(str(tmp_path))
        return "regmcp_sample_handlers"

    def test_module_attribute(self, handler_module: str) -> None:
        reg = InMemoryRegistry()
        reg.add("x", handler=f"{handler_module}:greet")
        assert HandlerInvoker(reg).call("x", {}) == TextResult(text="hi")

    def test_dotted_attribute(self, handler_module: str) -> None:
        reg = InMemoryRegistry()
        reg.add("x", handler=f"{handler_module}:Weather.get")
        result = HandlerInvoker(reg).call("x", {"location": "Lisbon"})
        assert result == TextResult(text="Sunny in Lisbon")

    def test_missing_module(self) -> None:
        reg = InMemoryRegistry()
        reg.add("x", handler="regmcp_no_such_module:fn")
        with pytest.raises(InvocationError, match="cannot load handler"):
            HandlerInvoker(reg).call("x", {})

    def test_missing_attribute(self, handler_module: str) -> None:
        reg = InMemoryRegistry()
        reg.add("x", handler=f"{handler_module}:absent")
        with pytest.raises(InvocationError, match="cannot load handler"):
            HandlerInvoker(reg).call("x", {})

    def test_not_callable(self, handler_module: str) -> None:
        reg = InMemoryRegistry()
        reg.add("x", handler=f"{handler_module}:NOT_CALLABLE")
        with pytest.raises(InvocationError, match="not callable"):
            HandlerInvoker(reg).call("x", {})

    @pytest.mark.parametrize("path", ["no_colon", ":fn", "mod:"])
    def test_malformed_path(self, path: str) -> None:
        reg = InMemoryRegistry()
        reg.add("x", handler=path)
        with pytest.raises(InvocationError, match="invalid handler path"):
            HandlerInvoker(reg).call("x", {})

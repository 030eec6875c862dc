"""Tracing for the dispatch path.

The protocol core opens three spans: ``regmcp.dispatch`` per message,
``regmcp.tool.call`` per tool invocation and ``regmcp.prompt.get`` per
prompt resolution.  They go through the OpenTelemetry API and are no-ops
until ``regmcp serve --trace`` or ``--otlp-endpoint`` installs an SDK
provider (the ``otel`` extra).

Console spans are written to stderr; stdout carries the protocol stream.
"""

from __future__ import annotations

import sys
from typing import TYPE_CHECKING

from opentelemetry import trace

if TYPE_CHECKING:
    from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]

ATTR_METHOD = "regmcp.method"
ATTR_MESSAGE_KIND = "regmcp.message.kind"
ATTR_ENTRY_ID = "regmcp.entry.id"
ATTR_TOOL_NAME = "regmcp.tool.name"
ATTR_TOOL_IS_ERROR = "regmcp.tool.is_error"
ATTR_PROMPT_NAME = "regmcp.prompt.name"
ATTR_PROMPT_DYNAMIC = "regmcp.prompt.dynamic"
ATTR_PROMPT_MESSAGES = "regmcp.prompt.messages"

_INSTRUMENTATION_NAME = "regmcp"


def get_tracer(name: str | None = None) -> trace.Tracer:
    """Return the tracer for a regmcp module (no-op until configured)."""
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def configure_telemetry(
    *,
    service_name: str = "regmcp",
    export_to_console: bool = True,
    otlp_endpoint: str | None = None,
) -> TracerProvider:
    """Install an SDK tracer provider for a serving process.

    Console export uses a synchronous processor so spans appear on stderr
    as each message is handled.  OTLP export is batched.

    Raises:
        ImportError: If ``opentelemetry-sdk`` (or, when *otlp_endpoint* is
            set, ``opentelemetry-exporter-otlp``) is not installed.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports]
        from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports]
            BatchSpanProcessor,
            ConsoleSpanExporter,
            SimpleSpanProcessor,
        )
    except ImportError as exc:
        raise ImportError(
            "opentelemetry-sdk is required for --trace/--otlp-endpoint. "
            "Install it with: pip install regmcp[otel]"
        ) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))

    if export_to_console:
        provider.add_span_processor(SimpleSpanProcessor(ConsoleSpanExporter(out=sys.stderr)))

    if otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # pyright: ignore[reportMissingImports]
                OTLPSpanExporter,
            )
        except ImportError as exc:
            raise ImportError(
                "opentelemetry-exporter-otlp is required for --otlp-endpoint. "
                "Install it with: pip install regmcp[otel]"
            ) from exc
        provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))

    trace.set_tracer_provider(provider)
    return provider

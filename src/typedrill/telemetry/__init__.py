"""Telemetry facade for typedrill instrumentation."""

from .runtime import (
    TelemetryConfig,
    TelemetryRuntime,
    TelemetrySpan,
    TraceContextFilter,
    configure_telemetry,
    get_telemetry,
)

__all__ = [
    "TelemetryRuntime",
    "TelemetrySpan",
    "TelemetryConfig",
    "TraceContextFilter",
    "configure_telemetry",
    "get_telemetry",
]

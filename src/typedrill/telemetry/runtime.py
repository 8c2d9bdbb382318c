"""OpenTelemetry runtime wiring and instrumentation helpers."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass, field
from threading import Lock
from typing import cast

from opentelemetry import metrics, trace
from opentelemetry.exporter.otlp.proto.http.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.metrics import Counter, Histogram
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.trace import Span, Status, StatusCode, Tracer

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class TelemetryConfig:
    """Normalized telemetry configuration used by runtime bootstrap."""

    enabled: bool = False
    service_name: str = "typedrill"
    otlp_endpoint: str | None = None
    sample_ratio: float = 1.0
    export_metrics: bool = True
    metrics_export_interval_ms: int = 60_000
    headers: dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class _NoopCounter:
    """No-op metric instrument implementation."""

    def add(
        self, amount: int | float, attributes: Mapping[str, str] | None = None
    ) -> None:
        """Accept metric updates without side effects."""


@dataclass(slots=True)
class _NoopHistogram:
    """No-op metric instrument implementation."""

    def record(
        self, amount: int | float, attributes: Mapping[str, str] | None = None
    ) -> None:
        """Accept metric updates without side effects."""


class TraceContextFilter(logging.Filter):
    """Attach trace/span identifiers to log records."""

    def filter(self, record: logging.LogRecord) -> bool:
        """Populate trace fields on each record."""
        span_context = trace.get_current_span().get_span_context()
        if not span_context.is_valid:
            record.trace_id = ""
            record.span_id = ""
            return True

        record.trace_id = f"{span_context.trace_id:032x}"
        record.span_id = f"{span_context.span_id:016x}"
        return True


@dataclass(slots=True)
class TelemetrySpan:
    """Wrapper over OpenTelemetry span to avoid ad-hoc API usage."""

    _span: Span | None

    def set_attribute(self, key: str, value: str | bool | int | float) -> None:
        """Set a span attribute when a real span is present."""
        if self._span is not None:
            self._span.set_attribute(key, value)

    def record_exception(self, error: BaseException) -> None:
        """Record an exception and set error status."""
        if self._span is not None:
            self._span.record_exception(error)
            self._span.set_status(Status(StatusCode.ERROR, str(error)))


class TelemetryRuntime:
    """Process-wide telemetry runtime."""

    def __init__(
        self,
        *,
        enabled: bool,
        tracer: Tracer | None,
        tracer_provider: TracerProvider | None,
        meter_provider: MeterProvider | None,
    ) -> None:
        """Initialize runtime with concrete OTel providers/instruments."""
        self._enabled = enabled
        self._tracer = tracer
        self._tracer_provider = tracer_provider
        self._meter_provider = meter_provider
        self._shutdown = False

        if enabled:
            meter = metrics.get_meter("typedrill.telemetry")
            self._sessions_started: Counter = meter.create_counter(
                name="typedrill_sessions_started_total",
                unit="1",
                description="Typing sessions started",
            )
            self._sessions_finished: Counter = meter.create_counter(
                name="typedrill_sessions_finished_total",
                unit="1",
                description="Typing sessions finished",
            )
            self._fetch_errors: Counter = meter.create_counter(
                name="typedrill_wordlist_fetch_errors_total",
                unit="1",
                description="Word list fetch failures",
            )
            self._session_wpm: Histogram = meter.create_histogram(
                name="typedrill_session_wpm",
                unit="{word}/min",
                description="Words per minute of finished sessions",
            )
        else:
            self._sessions_started = cast(Counter, _NoopCounter())
            self._sessions_finished = cast(Counter, _NoopCounter())
            self._fetch_errors = cast(Counter, _NoopCounter())
            self._session_wpm = cast(Histogram, _NoopHistogram())

    @property
    def enabled(self) -> bool:
        """Return whether telemetry is enabled."""
        return self._enabled

    @property
    def is_shutdown(self) -> bool:
        """Return whether providers were already shut down."""
        return self._shutdown

    @contextmanager
    def start_span(
        self,
        name: str,
        *,
        attributes: Mapping[str, str | bool | int | float] | None = None,
    ) -> Iterator[TelemetrySpan]:
        """Start a new span as current context."""
        if not self._enabled or self._tracer is None:
            yield TelemetrySpan(None)
            return

        with self._tracer.start_as_current_span(name, attributes=attributes) as span:
            yield TelemetrySpan(span)

    def record_session_started(self, *, policy: str) -> None:
        self._sessions_started.add(1, attributes={"policy": policy})

    def record_session_finished(self, *, policy: str, wpm: float) -> None:
        self._sessions_finished.add(1, attributes={"policy": policy})
        self._session_wpm.record(wpm, attributes={"policy": policy})

    def record_fetch_error(self, *, language: str) -> None:
        self._fetch_errors.add(1, attributes={"language": language})

    def install_log_correlation(self) -> None:
        """Attach trace context fields to log records."""
        if not self._enabled:
            return

        root = logging.getLogger()
        if not any(isinstance(f, TraceContextFilter) for f in root.filters):
            root.addFilter(TraceContextFilter())
        for handler in root.handlers:
            if not any(isinstance(f, TraceContextFilter) for f in handler.filters):
                handler.addFilter(TraceContextFilter())

    def shutdown(self) -> None:
        """Flush and shutdown telemetry providers."""
        if self._shutdown:
            return
        if self._tracer_provider is not None:
            self._tracer_provider.shutdown()
        if self._meter_provider is not None:
            self._meter_provider.shutdown()
        self._shutdown = True


_runtime_lock = Lock()
_runtime: TelemetryRuntime | None = None


def _disabled_runtime() -> TelemetryRuntime:
    return TelemetryRuntime(
        enabled=False, tracer=None, tracer_provider=None, meter_provider=None
    )


def get_telemetry() -> TelemetryRuntime:
    """Return process telemetry runtime (disabled by default)."""
    global _runtime
    with _runtime_lock:
        if _runtime is None:
            _runtime = _disabled_runtime()
        return _runtime


def configure_telemetry(settings: TelemetryConfig) -> TelemetryRuntime:
    """Configure global telemetry runtime once per process."""
    global _runtime

    with _runtime_lock:
        if _runtime is not None and _runtime.enabled and not _runtime.is_shutdown:
            return _runtime

        if not settings.enabled:
            if _runtime is None:
                _runtime = _disabled_runtime()
            return _runtime

        resource = Resource.create({"service.name": settings.service_name})
        sampler = ParentBased(TraceIdRatioBased(settings.sample_ratio))
        tracer_provider = TracerProvider(resource=resource, sampler=sampler)

        if settings.otlp_endpoint:
            trace_exporter = OTLPSpanExporter(
                endpoint=settings.otlp_endpoint.rstrip("/") + "/v1/traces",
                headers=dict(settings.headers),
            )
            tracer_provider.add_span_processor(BatchSpanProcessor(trace_exporter))

        meter_provider = MeterProvider(resource=resource)
        if settings.otlp_endpoint and settings.export_metrics:
            metric_reader = PeriodicExportingMetricReader(
                exporter=OTLPMetricExporter(
                    endpoint=settings.otlp_endpoint.rstrip("/") + "/v1/metrics",
                    headers=dict(settings.headers),
                ),
                export_interval_millis=settings.metrics_export_interval_ms,
            )
            meter_provider = MeterProvider(
                resource=resource, metric_readers=[metric_reader]
            )

        trace.set_tracer_provider(tracer_provider)
        metrics.set_meter_provider(meter_provider)

        _runtime = TelemetryRuntime(
            enabled=True,
            tracer=trace.get_tracer("typedrill.telemetry"),
            tracer_provider=tracer_provider,
            meter_provider=meter_provider,
        )
        _runtime.install_log_correlation()

        logger.info(
            "OpenTelemetry enabled",
            extra={
                "service_name": settings.service_name,
                "otlp_endpoint": settings.otlp_endpoint,
                "export_metrics": settings.export_metrics,
            },
        )
        return _runtime

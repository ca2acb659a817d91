"""OpenTelemetry tracing for the task visibility service.

One TelemetryConfig per process, built in the lifespan from Settings. Spans
go to the console (development), an OTLP gRPC collector, or nowhere.
"""

import logging
import threading
from collections.abc import Callable

from fastapi import FastAPI
from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, SERVICE_VERSION, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
    SpanExporter,
)
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from sqlalchemy.ext.asyncio import AsyncEngine

logger = logging.getLogger(__name__)

# Probes are polled constantly and carry no task data.
UNTRACED_URLS = "/api/v1/health,/api/v1/health/ready"


def build_exporter(exporter_type: str, otlp_endpoint: str | None) -> SpanExporter | None:
    """Return the span exporter for a TELEMETRY_EXPORTER value ("none" -> None)."""
    if exporter_type == "none":
        return None
    if exporter_type == "otlp":
        if otlp_endpoint:
            return OTLPSpanExporter(
                endpoint=otlp_endpoint, insecure=otlp_endpoint.startswith("http://")
            )
        logger.warning("TELEMETRY_EXPORTER=otlp without an endpoint; falling back to console")
    elif exporter_type != "console":
        logger.warning("Unknown telemetry exporter %r; falling back to console", exporter_type)
    return ConsoleSpanExporter()


class TelemetryConfig:
    """Tracer provider plus the instrumentations this service uses.

    A failing instrumentation is logged and skipped; the service keeps
    serving without those spans.
    """

    def __init__(
        self,
        service_name: str,
        service_version: str,
        enabled: bool = True,
        environment: str = "development",
    ) -> None:
        self.service_name = service_name
        self.service_version = service_version
        self.enabled = enabled
        self.environment = environment
        self.tracer_provider: TracerProvider | None = None
        self.instrumented: list[str] = []

    @property
    def active(self) -> bool:
        return self.enabled and self.tracer_provider is not None

    def setup_telemetry(
        self,
        exporter_type: str = "console",
        otlp_endpoint: str | None = None,
        sample_rate: float = 1.0,
    ) -> TracerProvider | None:
        """Create the tracer provider and install it globally.

        Sampling follows the caller's decision when a traceparent header is
        present and otherwise samples sample_rate of new traces.

        Args:
            exporter_type: "console", "otlp", or "none".
            otlp_endpoint: OTLP gRPC endpoint (e.g. http://localhost:4317).
            sample_rate: Ratio of new traces kept, 0.0-1.0.

        Returns:
            TracerProvider, or None when disabled.
        """
        if not self.enabled:
            logger.info("Telemetry disabled")
            return None
        resource = Resource(
            attributes={
                SERVICE_NAME: self.service_name,
                SERVICE_VERSION: self.service_version,
                "deployment.environment": self.environment,
            }
        )
        provider = TracerProvider(
            resource=resource, sampler=ParentBased(TraceIdRatioBased(sample_rate))
        )
        exporter = build_exporter(exporter_type, otlp_endpoint)
        if exporter is not None:
            provider.add_span_processor(BatchSpanProcessor(exporter))
        trace.set_tracer_provider(provider)
        self.tracer_provider = provider
        logger.info(
            "Tracing enabled: service=%s exporter=%s sample_rate=%s",
            self.service_name,
            exporter_type,
            sample_rate,
        )
        return provider

    def _instrument(self, name: str, install: Callable[[], None]) -> None:
        if not self.active:
            return
        try:
            install()
        except Exception:
            logger.exception("Failed to instrument %s; continuing without it", name)
            return
        self.instrumented.append(name)

    def instrument_fastapi(self, app: FastAPI) -> None:
        """Span per request, except health probes."""
        self._instrument(
            "fastapi",
            lambda: FastAPIInstrumentor.instrument_app(
                app, tracer_provider=self.tracer_provider, excluded_urls=UNTRACED_URLS
            ),
        )

    def instrument_sqlalchemy(self, engine: AsyncEngine) -> None:
        """Span per candidate, control, and assignment query."""
        self._instrument(
            "sqlalchemy",
            lambda: SQLAlchemyInstrumentor().instrument(
                engine=engine.sync_engine,
                tracer_provider=self.tracer_provider,
                enable_commenter=True,
            ),
        )

    def instrument_redis(self) -> None:
        """Span per directory cache command."""
        self._instrument(
            "redis",
            lambda: RedisInstrumentor().instrument(tracer_provider=self.tracer_provider),
        )

    def instrument_logging(self) -> None:
        """Inject trace and span ids into log records."""
        self._instrument(
            "logging",
            lambda: LoggingInstrumentor().instrument(
                tracer_provider=self.tracer_provider, set_logging_format=False
            ),
        )

    def shutdown(self) -> None:
        """Flush pending spans and stop the provider."""
        if self.tracer_provider is None:
            return
        self.tracer_provider.shutdown()
        logger.info("Tracing shut down (instrumented: %s)", ", ".join(self.instrumented) or "-")
        self.tracer_provider = None


_telemetry: TelemetryConfig | None = None
_telemetry_lock = threading.Lock()


def get_telemetry() -> TelemetryConfig | None:
    """Return the process-wide telemetry instance (None before startup)."""
    with _telemetry_lock:
        return _telemetry


def set_telemetry(telemetry: TelemetryConfig | None) -> None:
    """Install (or clear, with None) the process-wide telemetry instance."""
    global _telemetry
    with _telemetry_lock:
        _telemetry = telemetry

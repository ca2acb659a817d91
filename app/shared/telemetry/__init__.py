"""Shared telemetry: request-aware logging, OpenTelemetry setup, span helpers."""

from app.shared.telemetry.logging import request_id_var, setup_logging
from app.shared.telemetry.telemetry import TelemetryConfig, get_telemetry, set_telemetry
from app.shared.telemetry.tracing import (
    add_span_attributes,
    get_trace_id,
    set_span_error,
    traced,
)

__all__ = [
    "TelemetryConfig",
    "add_span_attributes",
    "get_telemetry",
    "get_trace_id",
    "request_id_var",
    "set_span_error",
    "set_telemetry",
    "setup_logging",
    "traced",
]

from typing import Any, Callable, Dict, Optional
import asyncio
import functools
import logging
from opentelemetry import trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.http._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.http.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk._logs import LoggerProvider, LoggingHandler
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.resources import Resource, SERVICE_NAME, SERVICE_VERSION
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from common.core.config import settings

logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    force=True,
)

_tracer: Optional[trace.Tracer] = None


def _otlp_url(signal: str) -> str:
    return f"{settings.otel_exporter_otlp_endpoint.rstrip('/')}/v1/{signal}"


def _setup_log_export(resource: Resource) -> None:
    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(
        BatchLogRecordProcessor(
            OTLPLogExporter(
                endpoint=_otlp_url("logs"),
                headers=settings.otel_exporter_otlp_headers,
            )
        )
    )
    set_logger_provider(logger_provider)
    logging.getLogger().addHandler(
        LoggingHandler(level=logging.INFO, logger_provider=logger_provider)
    )


def _setup_telemetry() -> trace.Tracer:
    """
    Install the tracer provider on first use.

    Spans are always recorded; they are only exported (together with log
    records) when an OTLP endpoint is configured.
    """
    global _tracer

    if _tracer is not None:
        return _tracer

    resource = Resource(
        attributes={
            SERVICE_NAME: settings.otel_service_name,
            SERVICE_VERSION: settings.otel_service_version,
        }
    )
    provider = TracerProvider(resource=resource)

    if settings.otel_exporter_otlp_endpoint:
        provider.add_span_processor(
            BatchSpanProcessor(
                OTLPSpanExporter(
                    endpoint=_otlp_url("traces"),
                    headers=settings.otel_exporter_otlp_headers,
                )
            )
        )
        _setup_log_export(resource)

    trace.set_tracer_provider(provider)
    _tracer = trace.get_tracer(settings.otel_service_name)
    return _tracer


def get_logger(name: str) -> logging.Logger:
    """Module logger; always use this so telemetry is set up before the first record."""
    _setup_telemetry()
    return logging.getLogger(name)


def _span_name(func: Callable, args: tuple) -> str:
    # Bound methods are named Class.method
    if args and hasattr(args[0], func.__name__):
        return f"{type(args[0]).__name__}.{func.__name__}"
    return func.__name__


def trace_span(func):
    """Wrap a sync or async callable in a span named after it."""

    if asyncio.iscoroutinefunction(func):

        @functools.wraps(func)
        async def async_wrapper(*args, **kwargs):
            with _setup_telemetry().start_as_current_span(_span_name(func, args)):
                return await func(*args, **kwargs)

        return async_wrapper

    @functools.wraps(func)
    def sync_wrapper(*args, **kwargs):
        with _setup_telemetry().start_as_current_span(_span_name(func, args)):
            return func(*args, **kwargs)

    return sync_wrapper


def log_span_event(message: str, attributes: Optional[Dict[str, Any]] = None):
    """
    Record a billing decision on the active span and in the logs.
    """
    span = trace.get_current_span()
    if span.is_recording():
        span.add_event(message, attributes=attributes or {})

    get_logger(__name__).info(message, extra=attributes)

"""
OpenTelemetry instrumentation for FastAPI

Creates spans for inbound requests, outgoing flag-source calls and
PostgreSQL statements. Export is configured by the OTEL_* environment.
"""

from typing import Optional

from opentelemetry import trace
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.aiohttp_client import AioHttpClientInstrumentor
from opentelemetry.instrumentation.asyncpg import AsyncPGInstrumentor

from app.core.config import config
from app.core.logger import logger


def instrument_app(app):
    """
    Instrument the application with OpenTelemetry.

    Failures are logged and never prevent startup.

    Args:
        app: FastAPI application instance
    """
    try:
        FastAPIInstrumentor.instrument_app(
            app, excluded_urls="health,ready"
        )
        logger.info("FastAPI instrumented with OpenTelemetry")

        AioHttpClientInstrumentor().instrument()
        logger.info("aiohttp client instrumented with OpenTelemetry")

        AsyncPGInstrumentor().instrument()
        logger.info("asyncpg instrumented with OpenTelemetry")

    except Exception as e:
        logger.error(f"Failed to instrument application: {e}", error=e)


def get_tracer() -> trace.Tracer:
    """Tracer for spans the service creates itself"""
    return trace.get_tracer(config.service_name)


def get_current_trace_id() -> Optional[str]:
    """Hex trace ID of the active span, or None outside a recorded trace"""
    span = trace.get_current_span()
    context = span.get_span_context()
    if not context.is_valid:
        return None
    return format(context.trace_id, "032x")

"""
OpenTelemetry tracing.

Spans go to an OTLP collector when OTEL_EXPORTER_OTLP_ENDPOINT is set, to the console
when OTEL_CONSOLE_EXPORT=true, and nowhere otherwise (the provider still hands out
span contexts so log lines and error recording keep working).
"""

import os
from typing import Any

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.redis import RedisInstrumentor
from opentelemetry.instrumentation.sqlalchemy import SQLAlchemyInstrumentor
from opentelemetry.sdk.resources import SERVICE_NAME, Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor, ConsoleSpanExporter
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased


# Ops endpoints plus SSE streams: a stream span would stay open for the whole connection
UNTRACED_URLS = 'health,metrics,api/run/[0-9]+/events'


class TracingConfig:
    def __init__(
        self,
        *,
        service_name: str,
        otlp_endpoint: str | None = None,
        enable_console: bool = False,
        sample_ratio: float | None = None,
    ) -> None:
        self.service_name = service_name
        self.otlp_endpoint = otlp_endpoint or os.getenv('OTEL_EXPORTER_OTLP_ENDPOINT')
        self.enable_console = (
            enable_console or os.getenv('OTEL_CONSOLE_EXPORT', 'false').lower() == 'true'
        )
        self.sample_ratio = (
            sample_ratio
            if sample_ratio is not None
            else float(os.getenv('OTEL_TRACES_SAMPLE_RATIO', '1.0'))
        )
        self._provider: TracerProvider | None = None

    def setup(self) -> None:
        """Install the global tracer provider. Call once at startup."""
        self._provider = TracerProvider(
            resource=Resource(attributes={SERVICE_NAME: self.service_name}),
            sampler=ParentBased(TraceIdRatioBased(self.sample_ratio)),
        )
        if self.otlp_endpoint:
            self._provider.add_span_processor(
                BatchSpanProcessor(OTLPSpanExporter(endpoint=self.otlp_endpoint))
            )
        if self.enable_console:
            self._provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

        trace.set_tracer_provider(self._provider)

    def instrument_fastapi(self, *, app: Any) -> None:
        FastAPIInstrumentor.instrument_app(app, excluded_urls=UNTRACED_URLS)

    def instrument_sqlalchemy(self, *, engine: Any) -> None:
        # AsyncEngine wraps the sync engine the instrumentor hooks into
        SQLAlchemyInstrumentor().instrument(engine=getattr(engine, 'sync_engine', engine))

    def instrument_redis(self) -> None:
        RedisInstrumentor().instrument()

    def shutdown(self) -> None:
        if self._provider:
            self._provider.shutdown()

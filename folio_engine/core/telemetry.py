"""OpenTelemetry setup and the pricing instruments the services report through."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import FastAPI
from opentelemetry import metrics, trace
from opentelemetry._logs import set_logger_provider
from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.instrumentation.fastapi import FastAPIInstrumentor
from opentelemetry.instrumentation.httpx import HTTPXClientInstrumentor
from opentelemetry.instrumentation.logging import LoggingInstrumentor
from opentelemetry.instrumentation.system_metrics import SystemMetricsInstrumentor
from opentelemetry.metrics import Meter
from opentelemetry.sdk._logs import LoggerProvider
from opentelemetry.sdk._logs.export import BatchLogRecordProcessor
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader
from opentelemetry.sdk.resources import Resource
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.sdk.trace.sampling import ParentBased, TraceIdRatioBased
from opentelemetry.semconv.resource import ResourceAttributes
from opentelemetry.trace import Tracer

from folio_engine.config import AppSettings

logger = logging.getLogger(__name__)

INSTRUMENTATION_SCOPE = "folio_engine.pricing"

_TELEMETRY_INITIALISED = False
_METRIC_EXPORT_INTERVAL_MS = 10000


class PricingInstruments:
    """Tracer and counters for quote resolution and FX lookups.

    Built from the global providers by default, so the instruments export
    once :func:`setup_telemetry` has run and are no-ops otherwise. Tests pass
    an SDK meter backed by an in-memory reader.
    """

    def __init__(self, meter: Meter | None = None, tracer: Tracer | None = None) -> None:
        meter = meter or metrics.get_meter(INSTRUMENTATION_SCOPE)
        self.tracer = tracer or trace.get_tracer(INSTRUMENTATION_SCOPE)
        self.provider_fallbacks = meter.create_counter(
            "folio.quote.provider_fallbacks",
            unit="1",
            description="Quote steps abandoned for the next host or endpoint in a fallback chain",
        )
        self.quote_failures = meter.create_counter(
            "folio.quote.failures",
            unit="1",
            description="Assets left without a price in a batch resolution",
        )
        self.fx_lookups = meter.create_counter(
            "folio.fx.lookups",
            unit="1",
            description="Dated FX rate lookups, by cache outcome",
        )

    def fallback(self, provider: str, step: str, reason: str) -> None:
        self.provider_fallbacks.add(1, {"provider": provider, "step": step, "reason": reason})

    def failure(self, asset_id: str, reason: str) -> None:
        self.quote_failures.add(1, {"asset_id": asset_id, "reason": reason})

    def fx_lookup(self, from_ccy: str, to_ccy: str, outcome: str) -> None:
        self.fx_lookups.add(1, {"from": from_ccy, "to": to_ccy, "cache": outcome})


_instruments: PricingInstruments | None = None


def get_instruments() -> PricingInstruments:
    global _instruments  # noqa: PLW0603 - lazily shared instance
    if _instruments is None:
        _instruments = PricingInstruments()
    return _instruments


def setup_telemetry(app: FastAPI, settings: AppSettings) -> None:
    """Configure OTLP export and instrument FastAPI plus outbound provider calls."""

    global _TELEMETRY_INITIALISED  # noqa: PLW0603 - single initialisation guard

    if _TELEMETRY_INITIALISED:
        return

    if not settings.telemetry_enabled:
        logger.info("Telemetry disabled via configuration")
        return

    resource = Resource.create(
        {
            ResourceAttributes.SERVICE_NAME: settings.telemetry_service_name or settings.app_name,
            ResourceAttributes.SERVICE_NAMESPACE: "folio",
            "folio.accounting_currency": settings.accounting_currency,
            "folio.timezone": settings.timezone,
        }
    )
    exporter_options: dict[str, Any] = {"insecure": settings.telemetry_otlp_insecure}
    if settings.telemetry_otlp_endpoint:
        exporter_options["endpoint"] = settings.telemetry_otlp_endpoint

    tracer_provider = TracerProvider(
        resource=resource,
        sampler=ParentBased(TraceIdRatioBased(settings.telemetry_sample_ratio)),
    )
    tracer_provider.add_span_processor(BatchSpanProcessor(OTLPSpanExporter(**exporter_options)))
    trace.set_tracer_provider(tracer_provider)

    meter_provider = MeterProvider(
        resource=resource,
        metric_readers=[
            PeriodicExportingMetricReader(
                OTLPMetricExporter(**exporter_options),
                export_interval_millis=_METRIC_EXPORT_INTERVAL_MS,
            )
        ],
    )
    metrics.set_meter_provider(meter_provider)

    logger_provider = LoggerProvider(resource=resource)
    logger_provider.add_log_record_processor(BatchLogRecordProcessor(OTLPLogExporter(**exporter_options)))
    set_logger_provider(logger_provider)
    LoggingInstrumentor().instrument(set_logging_format=False)

    FastAPIInstrumentor.instrument_app(app, tracer_provider=tracer_provider, meter_provider=meter_provider)
    # CoinGecko, Yahoo and Frankfurter calls all go through httpx
    HTTPXClientInstrumentor().instrument(tracer_provider=tracer_provider, meter_provider=meter_provider)
    SystemMetricsInstrumentor().instrument(meter_provider=meter_provider)

    _TELEMETRY_INITIALISED = True
    logger.info("Telemetry initialised for %s", settings.telemetry_service_name)


__all__ = ["INSTRUMENTATION_SCOPE", "PricingInstruments", "get_instruments", "setup_telemetry"]

import asyncio
import inspect
import pathlib
import sys
from datetime import datetime, timedelta, timezone
from typing import Callable

import httpx
import pytest
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import InMemoryMetricReader

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from folio_engine.core.telemetry import PricingInstruments  # noqa: E402


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the suite."""

    config.addinivalue_line("markers", "asyncio: mark test as running in an asyncio event loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Execute async test functions without requiring pytest-asyncio."""

    test_function = pyfuncitem.obj
    if inspect.iscoroutinefunction(test_function):
        loop = asyncio.new_event_loop()
        try:
            asyncio.set_event_loop(loop)
            argnames = pyfuncitem._fixtureinfo.argnames
            kwargs = {name: pyfuncitem.funcargs[name] for name in argnames}
            loop.run_until_complete(test_function(**kwargs))
        finally:
            asyncio.set_event_loop(None)
            loop.close()
        return True
    return None


class FakeClock:
    """Manually advanced clock for cache expiry tests."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 3, 15, 12, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs: float) -> None:
        self.now += timedelta(**kwargs)


class RecordingHandler:
    """MockTransport handler that records requests and routes on URL path."""

    def __init__(self, routes: Callable[[httpx.Request], httpx.Response]) -> None:
        self.routes = routes
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.routes(request)

    def paths(self) -> list[str]:
        return [f"{r.url.host}{r.url.path}" for r in self.requests]


def mock_client(routes: Callable[[httpx.Request], httpx.Response]) -> tuple[httpx.AsyncClient, RecordingHandler]:
    handler = RecordingHandler(routes)
    return httpx.AsyncClient(transport=httpx.MockTransport(handler)), handler


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


def recording_instruments() -> tuple[PricingInstruments, InMemoryMetricReader]:
    reader = InMemoryMetricReader()
    meter = MeterProvider(metric_readers=[reader]).get_meter("folio_engine.tests")
    return PricingInstruments(meter=meter), reader


def counter_values(reader: InMemoryMetricReader, name: str) -> dict[tuple[tuple[str, str], ...], int]:
    """Map each attribute set recorded on counter ``name`` to its total."""

    values: dict[tuple[tuple[str, str], ...], int] = {}
    data = reader.get_metrics_data()
    if data is None:
        return values
    for resource_metrics in data.resource_metrics:
        for scope_metrics in resource_metrics.scope_metrics:
            for metric in scope_metrics.metrics:
                if metric.name != name:
                    continue
                for point in metric.data.data_points:
                    values[tuple(sorted(point.attributes.items()))] = point.value
    return values

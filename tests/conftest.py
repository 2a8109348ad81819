from __future__ import annotations

from datetime import datetime, timezone
from typing import Generator

import pytest
from fastapi.testclient import TestClient

from cart_forecast.api.deps import (
    get_forecast_config,
    get_forecast_sink,
    get_order_source,
    get_shop,
)
from cart_forecast.core.config import ForecastConfig
from cart_forecast.main import app
from tests.test_utils import FakeOrderSource, RecordingSink


@pytest.fixture
def now() -> datetime:
    return datetime(2025, 3, 15, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def config() -> ForecastConfig:
    return ForecastConfig()


@pytest.fixture
def order_source() -> FakeOrderSource:
    return FakeOrderSource()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def client(order_source, sink, config) -> Generator[TestClient, None, None]:
    """API client wired to in-memory collaborators.

    Tests mutate ``order_source.orders`` / ``order_source.error`` to shape the
    upstream responses.
    """
    app.dependency_overrides[get_order_source] = lambda: order_source
    app.dependency_overrides[get_forecast_sink] = lambda: sink
    app.dependency_overrides[get_forecast_config] = lambda: config
    app.dependency_overrides[get_shop] = lambda: "test-shop.myshopify.com"
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()

from __future__ import annotations

import logging
import threading

import pytest
import requests

from cart_forecast.core.config import SinkSettings
from cart_forecast.schemas.forecast import ForecastItemSchema, ForecastSinkPayload
from cart_forecast.services import forecast_sink
from cart_forecast.services.forecast_sink import ForecastSinkDispatcher


class _Resp:
    def __init__(self, status_code: int) -> None:
        self.status_code = status_code
        self.text = "nope"

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 300


@pytest.fixture
def payload() -> ForecastSinkPayload:
    return ForecastSinkPayload(
        shop="test-shop.myshopify.com",
        customer_id="42",
        email=None,
        forecast_items=[ForecastItemSchema(variant_id="111", qty=1, title="Beans")],
        cart_url="/cart/111:1",
        timestamp="2025-03-15T12:00:00+00:00",
    )


@pytest.fixture
def dispatcher():
    d = ForecastSinkDispatcher(SinkSettings(webhook_url="https://hooks.example.com/forecast"))
    yield d
    d.shutdown()


def test_deliver_posts_camel_case_payload(dispatcher, payload, monkeypatch):
    calls = []

    def _fake_post(url, json=None, timeout=None):
        calls.append({"url": url, "json": json, "timeout": timeout})
        return _Resp(200)

    monkeypatch.setattr(forecast_sink.requests, "post", _fake_post)

    dispatcher.deliver(payload)

    (call,) = calls
    assert call["url"] == "https://hooks.example.com/forecast"
    assert call["json"]["cartUrl"] == "/cart/111:1"
    assert call["json"]["forecastItems"] == [{"variant_id": "111", "qty": 1, "title": "Beans"}]
    assert call["json"]["customer_id"] == "42"
    assert call["json"]["shop"] == "test-shop.myshopify.com"


def test_deliver_swallows_transport_errors(dispatcher, payload, monkeypatch, caplog):
    def _failing_post(*args, **kwargs):
        raise requests.ConnectionError("unreachable")

    monkeypatch.setattr(forecast_sink.requests, "post", _failing_post)

    with caplog.at_level(logging.WARNING):
        dispatcher.deliver(payload)

    assert "Failed to forward forecast" in caplog.text


def test_deliver_logs_rejected_delivery(dispatcher, payload, monkeypatch, caplog):
    monkeypatch.setattr(forecast_sink.requests, "post", lambda *a, **kw: _Resp(500))

    with caplog.at_level(logging.WARNING):
        dispatcher.deliver(payload)

    assert "Webhook rejected forecast: 500" in caplog.text


def test_submit_runs_delivery_in_background(dispatcher, payload, monkeypatch):
    delivered = threading.Event()

    def _fake_post(url, json=None, timeout=None):
        delivered.set()
        return _Resp(200)

    monkeypatch.setattr(forecast_sink.requests, "post", _fake_post)

    dispatcher.start()
    assert dispatcher.running
    assert dispatcher.submit(payload) is True

    assert delivered.wait(timeout=5)


def test_submit_drops_payload_when_not_running(dispatcher, payload):
    assert dispatcher.submit(payload) is False


def test_start_is_noop_without_webhook_url():
    d = ForecastSinkDispatcher(SinkSettings(webhook_url=""))
    d.start()

    assert d.running is False


def test_start_respects_disabled_flag():
    d = ForecastSinkDispatcher(SinkSettings(webhook_url="https://hooks.example.com", enabled=False))
    d.start()

    assert d.running is False

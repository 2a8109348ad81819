from __future__ import annotations

import pytest
from pydantic import ValidationError

from cart_forecast.core.config import ForecastConfig, load_settings


def test_defaults_without_environment(monkeypatch):
    for name in (
        "FORECAST_RECENT_MONTHS",
        "FORECAST_SEASONAL_YEARS",
        "FORECAST_TOP_N",
        "FORECAST_MAX_QTY_CLAMP",
        "FORECAST_MIN_QTY_FLOOR",
        "FORECAST_SEASONAL_BLEND",
        "FORECAST_COUNT_OVERLAP",
        "SHOPIFY_API_VERSION",
        "N8N_WEBHOOK_URL",
        "FORECAST_SINK_ENABLED",
    ):
        monkeypatch.delenv(name, raising=False)

    settings = load_settings()

    assert settings.forecast == ForecastConfig()
    assert settings.forecast.recent_months == 6
    assert settings.forecast.seasonal_years == 2
    assert settings.forecast.max_qty_clamp == 50
    assert settings.shopify.api_version == "2024-10"
    assert settings.sink.is_active is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("SHOPIFY_STORE", "shop.myshopify.com")
    monkeypatch.setenv("SHOPIFY_TOKEN", "secret")
    monkeypatch.setenv("N8N_WEBHOOK_URL", "https://hooks.example.com")
    monkeypatch.setenv("FORECAST_TOP_N", "12")
    monkeypatch.setenv("FORECAST_MAX_QTY_CLAMP", "none")
    monkeypatch.setenv("FORECAST_MIN_QTY_FLOOR", "false")
    monkeypatch.setenv("FORECAST_COUNT_OVERLAP", "off")

    settings = load_settings()

    assert settings.shopify.store == "shop.myshopify.com"
    assert settings.shopify.access_token == "secret"
    assert settings.sink.is_active is True
    assert settings.forecast.top_n == 12
    assert settings.forecast.max_qty_clamp is None
    assert settings.forecast.min_qty_floor is False
    assert settings.forecast.count_overlapping_orders is False


def test_forecast_config_rejects_non_positive_windows():
    with pytest.raises(ValidationError):
        ForecastConfig(recent_months=0)


def test_cors_origins_default_to_any(monkeypatch):
    monkeypatch.delenv("CORS_ALLOW_ORIGINS", raising=False)

    assert load_settings().cors_allow_origins == ["*"]


def test_cors_origins_from_environment(monkeypatch):
    monkeypatch.setenv("CORS_ALLOW_ORIGINS", "https://shop.example.com, https://www.example.com,")

    assert load_settings().cors_allow_origins == [
        "https://shop.example.com",
        "https://www.example.com",
    ]

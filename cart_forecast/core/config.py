from __future__ import annotations

import os
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Optional

from pydantic import BaseModel, Field


_TRUTHY = ("1", "true", "yes", "on")


def _env_flag(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in _TRUTHY


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    return int(raw)


def _env_optional_int(name: str, default: Optional[int]) -> Optional[int]:
    """Read an optional positive int; "none", "off" and "0" disable the value."""
    raw = os.getenv(name)
    if raw is None:
        return default
    raw = raw.strip().lower()
    if raw in ("", "none", "off", "0"):
        return None
    return int(raw)


def _env_list(name: str, default: list[str]) -> list[str]:
    """Read a comma separated list; blank entries are ignored."""
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return list(default)
    return [part.strip() for part in raw.split(",") if part.strip()]


class ForecastConfig(BaseModel):
    """Tuning knobs for the cart forecast computation."""

    recent_months: int = Field(6, ge=1)
    seasonal_years: int = Field(2, ge=1)
    top_n: int = Field(20, ge=1)
    max_qty_clamp: Optional[int] = Field(50, ge=1)
    min_qty_floor: bool = True
    seasonal_blend: bool = True
    count_overlapping_orders: bool = True


@dataclass
class ShopifySettings:
    store: str
    """Shop domain, e.g. "example.myshopify.com"."""

    access_token: str
    """Admin API access token sent as X-Shopify-Access-Token."""

    api_version: str = "2024-10"

    timeout_seconds: float = 30.0


@dataclass
class SinkSettings:
    webhook_url: str = ""
    """Listener receiving computed forecasts; empty disables forwarding."""

    enabled: bool = True

    timeout_seconds: float = 10.0

    @property
    def is_active(self) -> bool:
        return self.enabled and bool(self.webhook_url)


@dataclass
class Settings:
    shopify: ShopifySettings
    sink: SinkSettings
    forecast: ForecastConfig
    cors_allow_origins: list[str] = field(default_factory=lambda: ["*"])
    """Origins allowed to call the API from a browser; "*" allows any."""


def load_settings() -> Settings:
    """Build the service settings from environment variables."""

    forecast = ForecastConfig(
        recent_months=_env_int("FORECAST_RECENT_MONTHS", 6),
        seasonal_years=_env_int("FORECAST_SEASONAL_YEARS", 2),
        top_n=_env_int("FORECAST_TOP_N", 20),
        max_qty_clamp=_env_optional_int("FORECAST_MAX_QTY_CLAMP", 50),
        min_qty_floor=_env_flag("FORECAST_MIN_QTY_FLOOR", True),
        seasonal_blend=_env_flag("FORECAST_SEASONAL_BLEND", True),
        count_overlapping_orders=_env_flag("FORECAST_COUNT_OVERLAP", True),
    )

    shopify = ShopifySettings(
        store=os.getenv("SHOPIFY_STORE", ""),
        access_token=os.getenv("SHOPIFY_TOKEN", ""),
        api_version=os.getenv("SHOPIFY_API_VERSION", "2024-10"),
        timeout_seconds=float(os.getenv("SHOPIFY_TIMEOUT_SECONDS", "30")),
    )

    sink = SinkSettings(
        webhook_url=os.getenv("N8N_WEBHOOK_URL", ""),
        enabled=_env_flag("FORECAST_SINK_ENABLED", True),
    )

    return Settings(
        shopify=shopify,
        sink=sink,
        forecast=forecast,
        cors_allow_origins=_env_list("CORS_ALLOW_ORIGINS", ["*"]),
    )


@lru_cache
def get_settings() -> Settings:
    return load_settings()

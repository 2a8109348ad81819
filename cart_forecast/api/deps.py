from __future__ import annotations

from typing import Generator, Optional

from fastapi import Depends, Request

from cart_forecast.core.config import ForecastConfig, Settings, get_settings
from cart_forecast.services.forecast_sink import ForecastSinkDispatcher
from cart_forecast.services.order_history import OrderSource
from cart_forecast.services.shopify_client import ShopifyOrderSource


def get_forecast_config(settings: Settings = Depends(get_settings)) -> ForecastConfig:
    return settings.forecast


def get_order_source(settings: Settings = Depends(get_settings)) -> Generator[OrderSource, None, None]:
    """Provide a Shopify order source whose HTTP session lives for one request."""
    source = ShopifyOrderSource(settings.shopify)
    try:
        yield source
    finally:
        source.close()


def get_forecast_sink(request: Request) -> Optional[ForecastSinkDispatcher]:
    return getattr(request.app.state, "forecast_sink", None)


def get_shop(settings: Settings = Depends(get_settings)) -> str:
    return settings.shopify.store

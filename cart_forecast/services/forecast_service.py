from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Optional

from fastapi import HTTPException, status

from cart_forecast.core.config import ForecastConfig
from cart_forecast.core.forecasting.domain import ForecastItem
from cart_forecast.core.forecasting.engine import EMPTY_CART_URL, compute_forecast
from cart_forecast.schemas.forecast import (
    ForecastItemSchema,
    ForecastRequest,
    ForecastResponse,
    ForecastSinkPayload,
)
from cart_forecast.services.forecast_sink import ForecastSinkDispatcher
from cart_forecast.services.order_history import OrderSource, fetch_order_windows
from cart_forecast.services.shopify_client import OrderSourceError


logger = logging.getLogger(__name__)

NO_HISTORY_MESSAGE = "No purchase history found for this customer."
NO_ITEMS_MESSAGE = "No items could be forecast from the purchase history."


def _to_schema(items: list[ForecastItem]) -> list[ForecastItemSchema]:
    return [
        ForecastItemSchema(variant_id=item.variant_id, qty=item.qty, title=item.title)
        for item in items
    ]


def _resolve_config(request: ForecastRequest, config: ForecastConfig) -> ForecastConfig:
    overrides = {}
    if request.recent_months is not None:
        overrides["recent_months"] = request.recent_months
    if request.seasonal_years is not None:
        overrides["seasonal_years"] = request.seasonal_years
    return config.model_copy(update=overrides) if overrides else config


def build_cart_forecast(
    request: ForecastRequest,
    source: OrderSource,
    config: ForecastConfig,
    sink: Optional[ForecastSinkDispatcher] = None,
    shop: str = "",
    now: Optional[datetime] = None,
) -> ForecastResponse:
    """Fetch a customer's order history and turn it into a prefilled cart.

    Raises HTTPException(400) when no customer identity is given and
    propagates order source failures with the upstream status code.
    """

    customer_id = None
    if request.customer_id is not None and request.customer_id != "":
        customer_id = str(request.customer_id)
    email = request.email or None
    if not customer_id and not email:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Provide customer_id or email",
        )

    if now is None:
        now = datetime.now(timezone.utc)
    config = _resolve_config(request, config)

    try:
        windows = fetch_order_windows(
            source,
            now=now,
            recent_months=config.recent_months,
            seasonal_years=config.seasonal_years,
            customer_id=customer_id,
            email=email,
            include_seasonal=config.seasonal_blend,
        )
    except OrderSourceError as exc:
        logger.warning("Order history fetch failed (status=%s): %s", exc.status_code, exc)
        raise HTTPException(
            status_code=exc.status_code or status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail=str(exc) or "server_error",
        ) from exc
    except Exception as exc:
        logger.exception("Unexpected error while fetching order history")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="server_error",
        ) from exc

    if not windows.recent and not windows.seasonal:
        return ForecastResponse(cart_url=EMPTY_CART_URL, items=[], message=NO_HISTORY_MESSAGE)

    result = compute_forecast(windows.recent, windows.seasonal, config, now=now)
    items = _to_schema(result.items)
    logger.info(
        "Forecast for customer_id=%s email=%s: %s orders -> %s items",
        customer_id,
        email,
        result.orders_considered,
        len(items),
    )

    if sink is not None and sink.running:
        sink.submit(
            ForecastSinkPayload(
                shop=shop,
                customer_id=customer_id,
                email=email,
                forecast_items=items,
                cart_url=result.cart_url,
                timestamp=now.isoformat(),
            )
        )

    if not items:
        return ForecastResponse(cart_url=EMPTY_CART_URL, items=[], message=NO_ITEMS_MESSAGE)

    return ForecastResponse(cart_url=result.cart_url, items=items)

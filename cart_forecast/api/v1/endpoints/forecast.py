from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Body, Depends, Query, Response, status

from cart_forecast.api.deps import (
    get_forecast_config,
    get_forecast_sink,
    get_order_source,
    get_shop,
)
from cart_forecast.core.config import ForecastConfig
from cart_forecast.schemas.forecast import ForecastRequest, ForecastResponse
from cart_forecast.services.forecast_sink import ForecastSinkDispatcher
from cart_forecast.services.forecast_service import build_cart_forecast
from cart_forecast.services.order_history import OrderSource


router = APIRouter()


@router.post(
    "",
    response_model=ForecastResponse,
    response_model_exclude_none=True,
)
def create_forecast(
    payload: Optional[ForecastRequest] = Body(None),
    customer_id: Optional[str] = Query(None),
    email: Optional[str] = Query(None),
    recent_months: Optional[int] = Query(None, ge=1, le=36),
    seasonal_years: Optional[int] = Query(None, ge=1, le=10),
    source: OrderSource = Depends(get_order_source),
    config: ForecastConfig = Depends(get_forecast_config),
    sink: Optional[ForecastSinkDispatcher] = Depends(get_forecast_sink),
    shop: str = Depends(get_shop),
):
    """Build a prefilled cart for a customer from their order history.

    The customer can be identified in the JSON body or the query string;
    body values take precedence.
    """

    body = payload or ForecastRequest()
    request = ForecastRequest(
        customer_id=body.customer_id if body.customer_id is not None else customer_id,
        email=body.email or email,
        recent_months=body.recent_months or recent_months,
        seasonal_years=body.seasonal_years or seasonal_years,
    )

    return build_cart_forecast(
        request,
        source=source,
        config=config,
        sink=sink,
        shop=shop,
    )


@router.get("/cached", status_code=status.HTTP_204_NO_CONTENT)
def get_cached_forecast() -> Response:
    """Cached forecasts are not stored; always answers 204."""

    return Response(status_code=status.HTTP_204_NO_CONTENT)

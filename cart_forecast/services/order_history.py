from __future__ import annotations

import calendar
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from typing import Optional, Protocol

from cart_forecast.core.forecasting.domain import OrderWindows
from cart_forecast.schemas.shopify import ShopifyOrder


class OrderSource(Protocol):
    def fetch_customer_orders(
        self,
        created_at_min: datetime,
        customer_id: Optional[str] = None,
        email: Optional[str] = None,
    ) -> list[ShopifyOrder]:
        ...


def months_ago(now: datetime, months: int) -> datetime:
    """Shift ``now`` back by whole calendar months, clamping the day."""

    month_index = now.year * 12 + (now.month - 1) - months
    year, month = divmod(month_index, 12)
    month += 1
    day = min(now.day, calendar.monthrange(year, month)[1])
    return now.replace(year=year, month=month, day=day)


def years_ago(now: datetime, years: int) -> datetime:
    return months_ago(now, years * 12)


def fetch_order_windows(
    source: OrderSource,
    now: datetime,
    recent_months: int,
    seasonal_years: int,
    customer_id: Optional[str] = None,
    email: Optional[str] = None,
    include_seasonal: bool = True,
) -> OrderWindows:
    """Fetch the recent and seasonal windows concurrently.

    Both fetches must finish before a result is returned; an error in either
    propagates to the caller.
    """

    recent_min = months_ago(now, recent_months)
    seasonal_min = years_ago(now, seasonal_years)

    if not include_seasonal:
        recent = source.fetch_customer_orders(recent_min, customer_id=customer_id, email=email)
        return OrderWindows(recent=recent, seasonal=[])

    with ThreadPoolExecutor(max_workers=2) as executor:
        recent_future = executor.submit(
            source.fetch_customer_orders, recent_min, customer_id=customer_id, email=email
        )
        seasonal_future = executor.submit(
            source.fetch_customer_orders, seasonal_min, customer_id=customer_id, email=email
        )
        recent = recent_future.result()
        seasonal = seasonal_future.result()

    return OrderWindows(recent=recent, seasonal=seasonal)

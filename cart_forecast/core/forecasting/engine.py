"""Forecast aggregation and ranking.

Turns historical orders into a ranked, bounded list of (item, quantity)
pairs by blending a recurring-demand signal (every line item of the recent
window) with a seasonal signal (line items of the seasonal window ordered in
the current calendar month), and renders the result as a storefront cart
path.
"""

from __future__ import annotations

import math
from datetime import datetime, timezone, tzinfo
from typing import Iterable, Iterator, Optional

from cart_forecast.core.config import ForecastConfig
from cart_forecast.core.forecasting.domain import (
    AggregateEntry,
    ForecastItem,
    ForecastResult,
    LineItemRecord,
)
from cart_forecast.schemas.shopify import ShopifyOrder


EMPTY_CART_URL = "/cart"


def _order_month(order: ShopifyOrder, tz: tzinfo) -> int:
    created_at = order.created_at
    if created_at.tzinfo is None:
        created_at = created_at.replace(tzinfo=timezone.utc)
    return created_at.astimezone(tz).month


def extract_line_items(order: ShopifyOrder, tz: tzinfo = timezone.utc) -> Iterator[LineItemRecord]:
    """Yield one record per identifiable line item of ``order``."""

    month = _order_month(order, tz)
    for line_item in order.line_items:
        raw_id = line_item.variant_id or line_item.product_id
        if raw_id is None or raw_id == "":
            continue
        yield LineItemRecord(
            item_id=str(raw_id),
            title=line_item.name or line_item.title or "",
            quantity=max(line_item.quantity or 0, 0),
            month=month,
        )


def aggregate_line_items(
    recent_orders: Iterable[ShopifyOrder],
    seasonal_orders: Iterable[ShopifyOrder],
    config: ForecastConfig,
    now: datetime,
) -> dict[str, AggregateEntry]:
    """Fold both lookback windows into per-item running totals.

    Orders present in both windows are counted once per window unless
    ``config.count_overlapping_orders`` is disabled.
    """

    tz = now.tzinfo or timezone.utc
    entries: dict[str, AggregateEntry] = {}

    def _add(record: LineItemRecord) -> None:
        entry = entries.get(record.item_id)
        if entry is None:
            entry = AggregateEntry(item_id=record.item_id)
            entries[record.item_id] = entry
        entry.add(record)

    recent_order_ids: set[str] = set()
    for order in recent_orders:
        if order.id is not None:
            recent_order_ids.add(str(order.id))
        for record in extract_line_items(order, tz):
            _add(record)

    if not config.seasonal_blend:
        return entries

    current_month = now.month
    for order in seasonal_orders:
        if (
            not config.count_overlapping_orders
            and order.id is not None
            and str(order.id) in recent_order_ids
        ):
            continue
        for record in extract_line_items(order, tz):
            if record.month == current_month:
                _add(record)

    return entries


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def predict_quantity(total_qty: int, config: ForecastConfig) -> int:
    """Average the total over the recent window and apply floor/clamp rules.

    Returns 0 when the item should not be forecast.
    """

    if total_qty <= 0:
        return 0

    qty = _round_half_up(total_qty / config.recent_months)
    if qty < 1:
        if not config.min_qty_floor:
            return 0
        qty = 1
    if config.max_qty_clamp is not None:
        qty = min(qty, config.max_qty_clamp)
    return qty


def build_forecast(entries: Iterable[AggregateEntry], config: ForecastConfig) -> list[ForecastItem]:
    """Rank entries by accumulated quantity and keep the top ``config.top_n``.

    Ties on the accumulated quantity are broken by item id ascending.
    """

    forecast: list[ForecastItem] = []
    for entry in entries:
        qty = predict_quantity(entry.total_qty, config)
        if qty <= 0:
            continue
        forecast.append(
            ForecastItem(
                variant_id=entry.item_id,
                qty=qty,
                title=entry.title,
                total_qty=entry.total_qty,
            )
        )

    forecast.sort(key=lambda item: (-item.total_qty, item.variant_id))
    return forecast[: config.top_n]


def build_cart_url(items: Iterable[ForecastItem]) -> str:
    parts = [f"{item.variant_id}:{item.qty}" for item in items]
    if not parts:
        return EMPTY_CART_URL
    return f"{EMPTY_CART_URL}/{','.join(parts)}"


def parse_cart_url(path: str) -> list[tuple[str, int]]:
    """Inverse of :func:`build_cart_url`: return the (id, qty) pairs in order."""

    if path.rstrip("/") == EMPTY_CART_URL:
        return []
    prefix = f"{EMPTY_CART_URL}/"
    if not path.startswith(prefix):
        raise ValueError(f"Not a cart path: {path!r}")

    pairs: list[tuple[str, int]] = []
    for part in path[len(prefix):].split(","):
        item_id, _, qty = part.rpartition(":")
        pairs.append((item_id, int(qty)))
    return pairs


def compute_forecast(
    recent_orders: list[ShopifyOrder],
    seasonal_orders: list[ShopifyOrder],
    config: ForecastConfig,
    now: Optional[datetime] = None,
) -> ForecastResult:
    """Aggregate both windows, rank the totals and render the cart path."""

    if now is None:
        now = datetime.now(timezone.utc)

    entries = aggregate_line_items(recent_orders, seasonal_orders, config, now)
    items = build_forecast(entries.values(), config)

    return ForecastResult(
        items=items,
        cart_url=build_cart_url(items),
        orders_considered=len(recent_orders) + len(seasonal_orders),
    )

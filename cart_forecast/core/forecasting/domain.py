from __future__ import annotations

from dataclasses import dataclass
from typing import List

from cart_forecast.schemas.shopify import ShopifyOrder


@dataclass(frozen=True)
class LineItemRecord:
    """Normalized view of a single order line item."""

    item_id: str
    """Variant id, or product id when the variant is missing, as a string key."""

    title: str

    quantity: int

    month: int
    """Calendar month (1-12) of the parent order's creation timestamp."""


@dataclass
class AggregateEntry:
    """Running total for one item across the recent and seasonal windows.

    The first non-empty title observed for the item is kept.
    """

    item_id: str
    title: str = ""
    total_qty: int = 0

    def add(self, record: LineItemRecord) -> None:
        if not self.title and record.title:
            self.title = record.title
        self.total_qty += record.quantity


@dataclass(frozen=True)
class ForecastItem:
    variant_id: str
    qty: int
    title: str
    total_qty: int
    """Accumulated quantity the item was ranked by."""


@dataclass
class OrderWindows:
    """Orders fetched for the recent and seasonal lookback windows."""

    recent: List[ShopifyOrder]
    seasonal: List[ShopifyOrder]


@dataclass
class ForecastResult:
    items: List[ForecastItem]
    cart_url: str
    orders_considered: int

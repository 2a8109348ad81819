from __future__ import annotations

import logging
from datetime import datetime
from typing import Optional

import requests

from cart_forecast.core.config import ShopifySettings
from cart_forecast.schemas.shopify import ShopifyOrder


logger = logging.getLogger(__name__)

ORDERS_PAGE_LIMIT = 250


class OrderSourceError(Exception):
    """Order history could not be fetched from the storefront.

    ``status_code`` carries the upstream HTTP status when one was received.
    """

    def __init__(self, message: str, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class ShopifyOrderSource:
    """Minimal Shopify Admin REST client for a customer's order history."""

    def __init__(self, settings: ShopifySettings, session: Optional[requests.Session] = None) -> None:
        self._settings = settings
        self._session = session or requests.Session()

    @property
    def base_url(self) -> str:
        return f"https://{self._settings.store}/admin/api/{self._settings.api_version}"

    @property
    def headers(self) -> dict[str, str]:
        return {
            "X-Shopify-Access-Token": self._settings.access_token,
            "Content-Type": "application/json",
        }

    def fetch_customer_orders(
        self,
        created_at_min: datetime,
        customer_id: Optional[str] = None,
        email: Optional[str] = None,
    ) -> list[ShopifyOrder]:
        """Return the customer's orders created on or after ``created_at_min``.

        ``customer_id`` takes precedence over ``email`` when both are given.
        Only the first page (up to 250 orders) is requested.
        """

        params: dict[str, str | int] = {
            "status": "any",
            "created_at_min": created_at_min.isoformat(),
            "limit": ORDERS_PAGE_LIMIT,
        }
        if customer_id:
            params["customer_id"] = customer_id
        elif email:
            params["email"] = email

        url = f"{self.base_url}/orders.json"
        try:
            resp = self._session.get(
                url,
                headers=self.headers,
                params=params,
                timeout=self._settings.timeout_seconds,
            )
        except requests.RequestException as exc:
            logger.warning("Shopify request to %s failed: %s", url, exc)
            raise OrderSourceError(f"Shopify request failed: {exc}") from exc

        if not resp.ok:
            raise OrderSourceError(
                f"Shopify API error: {resp.status_code} {resp.text}",
                status_code=resp.status_code,
            )

        try:
            data = resp.json()
            if not isinstance(data, dict):
                raise ValueError(f"expected a JSON object, got {type(data).__name__}")
            orders = [ShopifyOrder.model_validate(order) for order in data.get("orders") or []]
        except (ValueError, TypeError) as exc:
            logger.warning("Unreadable Shopify orders response from %s: %s", url, exc)
            raise OrderSourceError(f"Invalid Shopify orders response: {exc}") from exc

        logger.info(
            "Fetched %s Shopify orders created since %s",
            len(orders),
            params["created_at_min"],
        )
        return orders

    def close(self) -> None:
        self._session.close()

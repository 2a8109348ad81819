from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict


class ShopifyLineItem(BaseModel):
    model_config = ConfigDict(extra="ignore")

    variant_id: Optional[Union[int, str]] = None
    product_id: Optional[Union[int, str]] = None
    name: Optional[str] = None
    title: Optional[str] = None
    quantity: Optional[int] = None


class ShopifyCustomerRef(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[Union[int, str]] = None
    email: Optional[str] = None


class ShopifyOrder(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: Optional[Union[int, str]] = None
    created_at: datetime
    customer: Optional[ShopifyCustomerRef] = None
    line_items: list[ShopifyLineItem] = []

from __future__ import annotations

from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class ForecastRequest(BaseModel):
    customer_id: Optional[Union[int, str]] = None
    email: Optional[str] = None
    recent_months: Optional[int] = Field(None, ge=1, le=36)
    seasonal_years: Optional[int] = Field(None, ge=1, le=10)


class ForecastItemSchema(BaseModel):
    variant_id: str
    qty: int
    title: str


class ForecastResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    cart_url: str = Field(alias="cartUrl")
    items: list[ForecastItemSchema]
    message: Optional[str] = None


class ForecastSinkPayload(BaseModel):
    """Body forwarded to the webhook listener."""

    model_config = ConfigDict(populate_by_name=True)

    shop: str
    customer_id: Optional[str] = None
    email: Optional[str] = None
    forecast_items: list[ForecastItemSchema] = Field(alias="forecastItems")
    cart_url: str = Field(alias="cartUrl")
    timestamp: str

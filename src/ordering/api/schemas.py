"""Pydantic request/response schemas for the Ordering API.

These are external contracts (anti-corruption layer): separate from
internal Protean commands.
"""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


# ---------------------------------------------------------------------------
# Order Request Schemas
# ---------------------------------------------------------------------------
class CartItemSchema(BaseModel):
    """One cart line. Prices are never accepted from the client."""

    model_config = ConfigDict(populate_by_name=True)

    product_id: str | None = Field(default=None, alias="productId")
    quantity: int | None = None


class PlaceOrderRequest(BaseModel):
    items: list[CartItemSchema] = Field(default_factory=list)

    model_config = ConfigDict(
        json_schema_extra={
            "examples": [
                {
                    "items": [
                        {"productId": "prod-001", "quantity": 2},
                    ]
                }
            ]
        }
    )


class UpdateStatusRequest(BaseModel):
    status: str
    reason: str | None = None


# ---------------------------------------------------------------------------
# Response Schemas
# ---------------------------------------------------------------------------
class LineItemResponse(BaseModel):
    product_id: str
    title: str
    unit_price: float
    quantity: int


class OrderResponse(BaseModel):
    id: str
    owner_id: str
    items: list[LineItemResponse]
    total_amount: float
    currency: str
    status: str
    payment_status: str
    created_at: datetime | None = None
    updated_at: datetime | None = None


class OrderSummaryResponse(BaseModel):
    order_id: str
    owner_id: str
    status: str
    payment_status: str
    item_count: int
    total_amount: float
    currency: str
    placed_at: datetime | None = None
    updated_at: datetime | None = None


class CheckoutResponse(BaseModel):
    merchant_id: str
    return_url: str
    cancel_url: str
    notify_url: str
    order_id: str
    items: str
    currency: str
    amount: str
    first_name: str
    last_name: str
    email: str
    phone: str
    address: str
    city: str
    country: str
    hash: str

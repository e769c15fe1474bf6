# storefront/schemas/cart.py
from datetime import datetime
from typing import Literal

from pydantic import ConfigDict, field_validator
from sqlmodel import SQLModel, Field

CartItemStatus = Literal["valid", "insufficient_stock"]


def _reject_bool(v):
    # JSON true/false would otherwise coerce to 1/0
    if isinstance(v, bool):
        raise ValueError("must be an integer, not a boolean")
    return v


class CartItemCreate(SQLModel):
    """
    Payload for adding to cart.

    Numeric strings ("3") are accepted; anything that is not a positive
    integer is rejected before reaching the service.
    """

    model_config = ConfigDict(extra="forbid")

    product_id: int = Field(gt=0)
    quantity: int = Field(default=1, gt=0)

    @field_validator("product_id", "quantity", mode="before")
    @classmethod
    def reject_bool(cls, v):
        return _reject_bool(v)


class CartItemUpdate(SQLModel):
    """
    Payload for updating quantity of a cart item.
    """

    model_config = ConfigDict(extra="forbid")

    quantity: int = Field(gt=0)

    @field_validator("quantity", mode="before")
    @classmethod
    def reject_bool(cls, v):
        return _reject_bool(v)


class CartLine(SQLModel):
    """
    A cart row joined with the current product data, including subtotal.
    """

    cart_item_id: int
    product_id: int
    name: str
    description: str | None = None
    price: float
    category: str
    stock: int
    image_url: str | None = None
    quantity: int
    added_at: datetime
    subtotal: float


class CartTotals(SQLModel):
    total_items: int
    total_amount: float


class CartRead(SQLModel):
    """
    Full cart response model with totals.
    """

    items: list[CartLine]
    summary: CartTotals


class CartSummary(SQLModel):
    """
    Aggregates only:
      - total_items: number of distinct rows
      - total_quantity: sum of quantities
      - total_amount: sum of price * quantity, 2 decimals
    """

    total_items: int
    total_quantity: int
    total_amount: float


class CartMessage(SQLModel):
    message: str
    cart_item_id: int | None = None
    quantity: int | None = None


class CartClearResult(SQLModel):
    message: str
    removed_count: int


class CartValidationLine(SQLModel):
    cart_item_id: int
    product_id: int
    name: str
    price: float
    stock: int
    quantity: int
    status: CartItemStatus


class CartValidation(SQLModel):
    is_valid: bool
    items: list[CartValidationLine]
    invalid_items: list[CartValidationLine]
    total_items: int
    invalid_count: int

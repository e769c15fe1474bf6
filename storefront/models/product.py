# storefront/models/product.py
from datetime import datetime, timezone

from sqlmodel import SQLModel, Field


class Product(SQLModel, table=True):
    """
    Product catalog entry for the paint shop.

    Rows are created by the seed routine only; no endpoint updates them,
    so `stock` is read-only from the API's point of view.
    """

    __tablename__ = "products"

    id: int | None = Field(
        default=None,
        primary_key=True,
    )

    name: str = Field(
        max_length=200,
        index=True,
        description="Display name of the product",
    )

    description: str | None = Field(
        default=None,
        description="Optional long description",
    )

    price: float = Field(
        ge=0,
        description="Unit price",
    )

    # Free-text label, e.g. "Pinturas", "Pinceles"
    category: str = Field(
        max_length=100,
        index=True,
    )

    stock: int = Field(
        default=0,
        ge=0,
        description="How many units currently in stock",
    )

    image_url: str | None = Field(
        default=None,
        description="Product image URL",
    )

    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        description="Creation timestamp (UTC)",
    )

# storefront/schemas/product.py
from datetime import datetime

from pydantic import BaseModel, ConfigDict
from pydantic.alias_generators import to_camel
from sqlmodel import SQLModel


class ProductRead(SQLModel):
    """
    Product representation for clients.
    """

    id: int
    name: str
    description: str | None = None
    price: float
    category: str
    stock: int
    image_url: str | None = None
    created_at: datetime


class CategoryCount(SQLModel):
    """One row of the category aggregation."""

    category: str
    product_count: int


class PriceRange(BaseModel):
    """
    Catalog price statistics.

    Serialized in camelCase (minPrice, maxPrice, avgPrice, totalProducts)
    to match what the storefront front end reads.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    min_price: float | None = None
    max_price: float | None = None
    avg_price: float | None = None
    total_products: int = 0

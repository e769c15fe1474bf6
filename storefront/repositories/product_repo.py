# storefront/repositories/product_repo.py
from typing import Iterable

from sqlalchemy import case, func
from sqlmodel import Session, select

from storefront.models.product import Product


def _like_pattern(term: str) -> str:
    """Wrap `term` in % wildcards, escaping LIKE metacharacters."""
    escaped = term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


class ProductRepository:
    """
    Data access layer for Product.

    - Pure DB operations (queries + seed inserts).
    - No FastAPI, no business logic.
    """

    def get_by_id(self, session: Session, product_id: int) -> Product | None:
        return session.get(Product, product_id)

    def list_all(self, session: Session) -> list[Product]:
        """All products, newest first."""
        stmt = select(Product).order_by(Product.created_at.desc(), Product.id.desc())
        return list(session.exec(stmt).all())

    def search(self, session: Session, term: str) -> list[Product]:
        """
        Case-insensitive substring search over name, description and category.

        Ranking:
          1. name matches
          2. category matches
          3. description-only matches
        Alphabetical by name within a tier.
        """
        pattern = _like_pattern(term)
        name_hit = Product.name.ilike(pattern, escape="\\")
        category_hit = Product.category.ilike(pattern, escape="\\")
        description_hit = Product.description.ilike(pattern, escape="\\")

        rank = case(
            (name_hit, 1),
            (category_hit, 2),
            else_=3,
        )
        stmt = (
            select(Product)
            .where(name_hit | category_hit | description_hit)
            .order_by(rank, Product.name)
        )
        return list(session.exec(stmt).all())

    def filter(
        self,
        session: Session,
        category: str | None = None,
        min_price: float | None = None,
        max_price: float | None = None,
    ) -> list[Product]:
        """Conjunctive filter; sorted by price ascending, then name."""
        stmt = select(Product)
        if category is not None:
            stmt = stmt.where(Product.category == category)
        if min_price is not None:
            stmt = stmt.where(Product.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(Product.price <= max_price)
        stmt = stmt.order_by(Product.price, Product.name)
        return list(session.exec(stmt).all())

    def category_counts(self, session: Session) -> list[tuple[str, int]]:
        stmt = (
            select(Product.category, func.count(Product.id).label("product_count"))
            .group_by(Product.category)
            .order_by(Product.category)
        )
        return list(session.exec(stmt).all())

    def price_stats(self, session: Session) -> tuple:
        """(min, max, avg, count) over the whole catalog."""
        stmt = select(
            func.min(Product.price),
            func.max(Product.price),
            func.avg(Product.price),
            func.count(Product.id),
        )
        return session.exec(stmt).one()

    def count(self, session: Session) -> int:
        value = session.exec(select(func.count()).select_from(Product)).one()
        return int(value or 0)

    def create_many(self, session: Session, products: Iterable[Product]) -> int:
        created = 0
        for product in products:
            session.add(product)
            created += 1
        session.commit()
        return created

# storefront/services/product_service.py
import math

from fastapi import HTTPException, status
from sqlmodel import Session

from storefront.models.product import Product
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.product import CategoryCount, PriceRange


class ProductService:
    """
    Read-only catalog views.

    Responsibilities:
      - validate query input beyond what FastAPI parses (search term,
        price bounds)
      - shape aggregate rows into response models
    """

    def __init__(self, repo: ProductRepository):
        self.repo = repo

    # ----- Helpers -----

    @staticmethod
    def _parse_price(raw: str | None, name: str) -> float | None:
        """
        Parse an optional price bound.

        Blank or missing => None (no predicate). Anything else must be a
        finite, non-negative number.
        """
        if raw is None or not raw.strip():
            return None
        try:
            value = float(raw)
        except ValueError:
            value = math.nan
        if not math.isfinite(value) or value < 0:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail=f"{name} must be a valid non-negative number",
            )
        return value

    # ----- Products -----

    def list_products(self, session: Session) -> list[Product]:
        return self.repo.list_all(session)

    def get_product(self, session: Session, product_id: int) -> Product:
        product = self.repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"No product found with id {product_id}",
            )
        return product

    def search(self, session: Session, q: str | None) -> list[Product]:
        term = (q or "").strip()
        if not term:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail='A search term is required in the "q" parameter',
            )
        return self.repo.search(session, term)

    def filter(
        self,
        session: Session,
        category: str | None = None,
        min_price: str | None = None,
        max_price: str | None = None,
    ) -> list[Product]:
        """
        Conjunctive filter over category (exact) and price range.
        No criteria => whole catalog, cheapest first.
        """
        low = self._parse_price(min_price, "minPrice")
        high = self._parse_price(max_price, "maxPrice")
        if low is not None and high is not None and low > high:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="minPrice cannot be greater than maxPrice",
            )

        category = category.strip() if category else None
        return self.repo.filter(
            session,
            category=category or None,
            min_price=low,
            max_price=high,
        )

    # ----- Aggregates -----

    def categories(self, session: Session) -> list[CategoryCount]:
        return [
            CategoryCount(category=category, product_count=int(count))
            for category, count in self.repo.category_counts(session)
        ]

    def price_range(self, session: Session) -> PriceRange:
        low, high, avg, total = self.repo.price_stats(session)
        return PriceRange(
            min_price=float(low) if low is not None else None,
            max_price=float(high) if high is not None else None,
            avg_price=round(float(avg), 2) if avg is not None else None,
            total_products=int(total or 0),
        )

# storefront/routers/products.py
from fastapi import APIRouter, Depends, Path, Query
from sqlmodel import Session

from storefront.database import get_session
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.product import CategoryCount, PriceRange, ProductRead
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/products", tags=["Products"])

repo = ProductRepository()
service = ProductService(repo)

# Fixed paths are declared before "/{product_id}" so they are not
# captured as ids.


@router.get("", response_model=list[ProductRead])
def list_products(session: Session = Depends(get_session)):
    """
    List the whole catalog, newest first.
    """
    return service.list_products(session)


@router.get("/search", response_model=list[ProductRead])
def search_products(
    q: str | None = None,
    session: Session = Depends(get_session),
):
    """
    Case-insensitive search over name, description and category.

    Name matches come first, then category matches, then description-only
    matches; alphabetical within each group.
    """
    return service.search(session, q)


@router.get("/filter", response_model=list[ProductRead])
def filter_products(
    category: str | None = None,
    min_price: str | None = Query(default=None, alias="minPrice"),
    max_price: str | None = Query(default=None, alias="maxPrice"),
    session: Session = Depends(get_session),
):
    """
    Filter by exact category and/or price range, cheapest first.
    """
    return service.filter(
        session,
        category=category,
        min_price=min_price,
        max_price=max_price,
    )


@router.get("/categories", response_model=list[CategoryCount])
def list_categories(session: Session = Depends(get_session)):
    """Categories with their product counts."""
    return service.categories(session)


@router.get("/price-range", response_model=PriceRange)
def price_range(session: Session = Depends(get_session)):
    """Min / max / average price over the catalog."""
    return service.price_range(session)


@router.get("/{product_id}", response_model=ProductRead)
def get_product(
    product_id: int = Path(gt=0),
    session: Session = Depends(get_session),
):
    """
    Get a single product by id.
    """
    return service.get_product(session, product_id)

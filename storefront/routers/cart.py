# storefront/routers/cart.py
from fastapi import APIRouter, Depends, Path, Response, status
from sqlmodel import Session

from storefront.core.auth import require_auth
from storefront.database import get_session
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.cart import (
    CartClearResult,
    CartItemCreate,
    CartItemUpdate,
    CartMessage,
    CartRead,
    CartSummary,
    CartValidation,
)
from storefront.schemas.user import UserRead
from storefront.services.cart_service import CartService

router = APIRouter(prefix="/cart", tags=["Cart"])

cart_repo = CartRepository()
product_repo = ProductRepository()
service = CartService(cart_repo, product_repo)


@router.get("", response_model=CartRead)
def get_my_cart(
    session: Session = Depends(get_session),
    current_user: UserRead = Depends(require_auth),
):
    """
    Get current user's cart with per-line subtotals and totals.
    """
    return service.get_cart(session, current_user.id)


@router.post("/add", response_model=CartMessage)
def add_to_cart(
    payload: CartItemCreate,
    response: Response,
    session: Session = Depends(get_session),
    current_user: UserRead = Depends(require_auth),
):
    """
    Add product to the current user's cart.

    - 201 when a new row is created
    - 200 when the quantity is merged into an existing row
    """
    message, created = service.add_item(session, current_user.id, payload)
    if created:
        response.status_code = status.HTTP_201_CREATED
    return message


@router.put("/update/{cart_item_id}", response_model=CartMessage)
def update_cart_item(
    payload: CartItemUpdate,
    cart_item_id: int = Path(gt=0),
    session: Session = Depends(get_session),
    current_user: UserRead = Depends(require_auth),
):
    """
    Replace the quantity of a cart row (no merge).
    """
    return service.update_item(
        session=session,
        user_id=current_user.id,
        item_id=cart_item_id,
        payload=payload,
    )


@router.delete("/remove/{cart_item_id}", response_model=CartMessage)
def remove_cart_item(
    cart_item_id: int = Path(gt=0),
    session: Session = Depends(get_session),
    current_user: UserRead = Depends(require_auth),
):
    """
    Remove a row from the cart.
    """
    return service.remove_item(session, current_user.id, cart_item_id)


@router.delete("/clear", response_model=CartClearResult)
def clear_cart(
    session: Session = Depends(get_session),
    current_user: UserRead = Depends(require_auth),
):
    """
    Clear the entire cart. 404 if it is already empty.
    """
    return service.clear_cart(session, current_user.id)


@router.get("/summary", response_model=CartSummary)
def cart_summary(
    session: Session = Depends(get_session),
    current_user: UserRead = Depends(require_auth),
):
    """Row count, total quantity and total amount only."""
    return service.get_summary(session, current_user.id)


@router.post("/validate", response_model=CartValidation)
def validate_cart(
    session: Session = Depends(get_session),
    current_user: UserRead = Depends(require_auth),
):
    """
    Flag rows whose quantity exceeds current stock.
    """
    return service.validate_cart(session, current_user.id)

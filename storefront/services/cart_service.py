# storefront/services/cart_service.py
import logging

from fastapi import HTTPException, status
from sqlalchemy.exc import IntegrityError
from sqlmodel import Session

from storefront.models.cart import CartItem
from storefront.models.product import Product
from storefront.repositories.cart_repo import CartRepository
from storefront.repositories.product_repo import ProductRepository
from storefront.schemas.cart import (
    CartClearResult,
    CartItemCreate,
    CartItemUpdate,
    CartLine,
    CartMessage,
    CartRead,
    CartSummary,
    CartTotals,
    CartValidation,
    CartValidationLine,
)

logger = logging.getLogger(__name__)


def money(value: float) -> float:
    """Round a monetary amount to 2 decimals."""
    return round(float(value or 0.0), 2)


class CartService:
    """
    Business logic for cart operations.

    Responsibilities:
      - validate product existence
      - enforce quantity <= product.stock on add and update
      - merge repeated adds of the same product into one row
      - compute line subtotals and cart totals from current prices

    Stock checks are folded into single conditional UPDATE statements
    (see CartRepository), so two concurrent adds for the same row cannot
    both pass the check and overshoot stock.
    """

    def __init__(self, cart_repo: CartRepository, product_repo: ProductRepository):
        self.cart_repo = cart_repo
        self.product_repo = product_repo

    # ---- internal helpers ----

    def _get_product(self, session: Session, product_id: int) -> Product:
        product = self.product_repo.get_by_id(session, product_id)
        if not product:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Product not found",
            )
        return product

    def _get_owned(self, session: Session, user_id: int, item_id: int) -> tuple[CartItem, Product]:
        row = self.cart_repo.get_owned(session, user_id, item_id)
        if row is None:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Item not found in cart",
            )
        return row

    @staticmethod
    def _not_enough_stock(detail: str) -> HTTPException:
        return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=detail)

    # ---- reads ----

    def get_cart(self, session: Session, user_id: int) -> CartRead:
        """
        Return the cart items joined with current product data, plus:
          - total_items: sum of quantities
          - total_amount: sum of subtotals, 2 decimals
        """
        lines: list[CartLine] = []
        total_qty = 0
        total_amount = 0.0

        for item, product in self.cart_repo.list_with_products(session, user_id):
            subtotal = product.price * item.quantity
            total_qty += item.quantity
            total_amount += subtotal

            lines.append(
                CartLine(
                    cart_item_id=item.id,
                    product_id=product.id,
                    name=product.name,
                    description=product.description,
                    price=product.price,
                    category=product.category,
                    stock=product.stock,
                    image_url=product.image_url,
                    quantity=item.quantity,
                    added_at=item.created_at,
                    subtotal=money(subtotal),
                )
            )

        return CartRead(
            items=lines,
            summary=CartTotals(total_items=total_qty, total_amount=money(total_amount)),
        )

    def get_summary(self, session: Session, user_id: int) -> CartSummary:
        rows, quantity, amount = self.cart_repo.totals_for_user(session, user_id)
        return CartSummary(
            total_items=int(rows or 0),
            total_quantity=int(quantity or 0),
            total_amount=money(amount),
        )

    def validate_cart(self, session: Session, user_id: int) -> CartValidation:
        """
        Compare every cart quantity against current stock.
        Read-only: nothing is corrected, only reported.
        """
        lines: list[CartValidationLine] = []
        for item, product in self.cart_repo.list_with_products(session, user_id):
            lines.append(
                CartValidationLine(
                    cart_item_id=item.id,
                    product_id=product.id,
                    name=product.name,
                    price=product.price,
                    stock=product.stock,
                    quantity=item.quantity,
                    status="insufficient_stock" if item.quantity > product.stock else "valid",
                )
            )

        invalid = [line for line in lines if line.status != "valid"]
        return CartValidation(
            is_valid=not invalid,
            items=lines,
            invalid_items=invalid,
            total_items=len(lines),
            invalid_count=len(invalid),
        )

    # ---- mutations ----

    def add_item(
        self,
        session: Session,
        user_id: int,
        payload: CartItemCreate,
    ) -> tuple[CartMessage, bool]:
        """
        Add a product to the user's cart.

        Rules:
          - product must exist
          - requested quantity <= stock
          - if already in cart: existing + requested <= stock, else the
            row is left untouched and the error says how many more fit

        Returns (message, created) where `created` is True for a new row.
        """
        product = self._get_product(session, payload.product_id)

        if payload.quantity > product.stock:
            raise self._not_enough_stock(f"Only {product.stock} units available")

        existing = self.cart_repo.get_item(session, user_id, product.id)

        if existing is None:
            try:
                item = self.cart_repo.create(
                    session,
                    CartItem(user_id=user_id, product_id=product.id, quantity=payload.quantity),
                )
            except IntegrityError:
                # Another request inserted the same (user, product) first.
                session.rollback()
                existing = self.cart_repo.get_item(session, user_id, product.id)
                if existing is None:
                    raise HTTPException(
                        status_code=status.HTTP_409_CONFLICT,
                        detail="Cart was modified concurrently, please try again",
                    )
            else:
                logger.info(
                    "cart add: user=%s product=%s qty=%s (new row %s)",
                    user_id, product.id, item.quantity, item.id,
                )
                return (
                    CartMessage(
                        message=f"{product.name} added to cart",
                        cart_item_id=item.id,
                        quantity=item.quantity,
                    ),
                    True,
                )

        if not self.cart_repo.increment_within_stock(session, existing.id, payload.quantity):
            session.refresh(existing)
            remaining = max(product.stock - existing.quantity, 0)
            raise self._not_enough_stock(f"You can only add {remaining} more units")

        session.refresh(existing)
        logger.info(
            "cart add: user=%s product=%s merged to qty=%s",
            user_id, product.id, existing.quantity,
        )
        return (
            CartMessage(
                message=f"Quantity updated - {existing.quantity} units of {product.name}",
                cart_item_id=existing.id,
                quantity=existing.quantity,
            ),
            False,
        )

    def update_item(
        self,
        session: Session,
        user_id: int,
        item_id: int,
        payload: CartItemUpdate,
    ) -> CartMessage:
        """
        Replace the quantity of an owned cart row.

        If quantity exceeds current stock => 400.
        """
        item, product = self._get_owned(session, user_id, item_id)

        if payload.quantity > product.stock:
            raise self._not_enough_stock(f"Only {product.stock} units available")

        if not self.cart_repo.set_quantity_within_stock(session, item.id, payload.quantity):
            session.refresh(product)
            raise self._not_enough_stock(f"Only {product.stock} units available")

        logger.info("cart update: user=%s item=%s qty=%s", user_id, item_id, payload.quantity)
        return CartMessage(
            message=f"Quantity updated - {payload.quantity} units of {product.name}",
            cart_item_id=item.id,
            quantity=payload.quantity,
        )

    def remove_item(self, session: Session, user_id: int, item_id: int) -> CartMessage:
        """
        Remove an owned row from the cart.
        Rows owned by other users are reported as not found.
        """
        item, product = self._get_owned(session, user_id, item_id)
        self.cart_repo.delete(session, item)

        logger.info("cart remove: user=%s item=%s", user_id, item_id)
        return CartMessage(message=f"{product.name} removed from cart", cart_item_id=item_id)

    def clear_cart(self, session: Session, user_id: int) -> CartClearResult:
        """
        Delete every row of the user's cart.
        An already-empty cart is a 404.
        """
        if self.cart_repo.count_for_user(session, user_id) == 0:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail="Your cart is empty",
            )

        removed = self.cart_repo.clear_user_cart(session, user_id)
        logger.info("cart clear: user=%s removed=%s", user_id, removed)
        return CartClearResult(
            message=f"Cart cleared - {removed} items removed",
            removed_count=removed,
        )

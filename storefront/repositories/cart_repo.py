# storefront/repositories/cart_repo.py
from sqlalchemy import delete, func, update
from sqlmodel import Session, select

from storefront.models.cart import CartItem
from storefront.models.product import Product


def _stock_of_row_product():
    # correlated to the cart_items row being updated
    return (
        select(Product.stock)
        .where(Product.id == CartItem.product_id)
        .scalar_subquery()
    )


class CartRepository:

    # Get items for a user, joined with current product data
    def list_with_products(
        self, session: Session, user_id: int
    ) -> list[tuple[CartItem, Product]]:
        stmt = (
            select(CartItem, Product)
            .join(Product, Product.id == CartItem.product_id)
            .where(CartItem.user_id == user_id)
            .order_by(CartItem.created_at.desc(), CartItem.id.desc())
        )
        return list(session.exec(stmt).all())

    def get_item(
        self, session: Session, user_id: int, product_id: int
    ) -> CartItem | None:
        stmt = select(CartItem).where(
            CartItem.user_id == user_id, CartItem.product_id == product_id
        )
        return session.exec(stmt).first()

    def get_owned(
        self, session: Session, user_id: int, item_id: int
    ) -> tuple[CartItem, Product] | None:
        """Cart row + product, only if the row belongs to `user_id`."""
        stmt = (
            select(CartItem, Product)
            .join(Product, Product.id == CartItem.product_id)
            .where(CartItem.id == item_id, CartItem.user_id == user_id)
        )
        return session.exec(stmt).first()

    def count_for_user(self, session: Session, user_id: int) -> int:
        stmt = select(func.count()).select_from(CartItem).where(CartItem.user_id == user_id)
        return int(session.exec(stmt).one() or 0)

    def totals_for_user(self, session: Session, user_id: int) -> tuple:
        """(row count, sum of quantities, sum of price * quantity)."""
        stmt = (
            select(
                func.count(CartItem.id),
                func.coalesce(func.sum(CartItem.quantity), 0),
                func.coalesce(func.sum(Product.price * CartItem.quantity), 0.0),
            )
            .join(Product, Product.id == CartItem.product_id)
            .where(CartItem.user_id == user_id)
        )
        return session.exec(stmt).one()

    # CRUD
    def create(self, session: Session, item: CartItem) -> CartItem:
        """Insert a row; raises IntegrityError if (user, product) already exists."""
        session.add(item)
        session.commit()
        session.refresh(item)
        return item

    def increment_within_stock(self, session: Session, item_id: int, delta: int) -> bool:
        """
        quantity += delta, in one statement, only while the result stays
        within the product's stock. Returns False if no row was changed.
        """
        stmt = (
            update(CartItem)
            .where(
                CartItem.id == item_id,
                CartItem.quantity + delta <= _stock_of_row_product(),
            )
            .values(quantity=CartItem.quantity + delta)
            .execution_options(synchronize_session=False)
        )
        result = session.execute(stmt)
        session.commit()
        return result.rowcount == 1

    def set_quantity_within_stock(self, session: Session, item_id: int, quantity: int) -> bool:
        """quantity = `quantity`, only if it does not exceed the product's stock."""
        stmt = (
            update(CartItem)
            .where(
                CartItem.id == item_id,
                _stock_of_row_product() >= quantity,
            )
            .values(quantity=quantity)
            .execution_options(synchronize_session=False)
        )
        result = session.execute(stmt)
        session.commit()
        return result.rowcount == 1

    def delete(self, session: Session, item: CartItem) -> None:
        session.delete(item)
        session.commit()

    def clear_user_cart(self, session: Session, user_id: int) -> int:
        """Delete every row for `user_id`; returns how many were removed."""
        stmt = (
            delete(CartItem)
            .where(CartItem.user_id == user_id)
            .execution_options(synchronize_session=False)
        )
        result = session.execute(stmt)
        session.commit()
        return result.rowcount

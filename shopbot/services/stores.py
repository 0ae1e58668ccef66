# Filename: shopbot/services/stores.py
# Thin CRUD wrappers over one SQLAlchemy session.
#  - Every write commits on its own; on SQLAlchemyError we roll back, log and re-raise
#  - Nothing here retries

import logging
from typing import List, Optional, Tuple

from sqlalchemy import delete, select, update
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from shopbot.models import CartLine, Order, Product

logger = logging.getLogger(__name__)

# dialects with INSERT ... ON CONFLICT DO UPDATE
_UPSERT_INSERTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def upsert_statement(dialect: str, user_id: int, product_id: int, quantity: int):
    try:
        insert = _UPSERT_INSERTS[dialect]
    except KeyError:
        raise ValueError(f"Unsupported database dialect for cart upsert: {dialect}") from None
    stmt = insert(CartLine).values(user_id=user_id, product_id=product_id, quantity=quantity)
    return stmt.on_conflict_do_update(
        index_elements=[CartLine.user_id, CartLine.product_id],
        set_={"quantity": stmt.excluded.quantity},
    )


class _Store:
    def __init__(self, db: Session):
        self.db = db

    def _commit(self, what: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"DB {what} failed: {e}")
            raise


class CatalogStore(_Store):
    def list_products(self) -> List[Product]:
        return list(self.db.scalars(select(Product).order_by(Product.id)))

    def get(self, product_id: int) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def create(self, name: str, description: str, image_id: str) -> Product:
        product = Product(name=name, description=description, image_id=image_id)
        self.db.add(product)
        self._commit("product create")
        logger.info(f"Product created id={product.id} name={name!r}")
        return product

    def update(self, product_id: int, name: str, description: str, image_id: str) -> bool:
        """Overwrite all editable fields. Returns False when no such product exists."""
        result = self.db.execute(
            update(Product)
            .where(Product.id == product_id)
            .values(name=name, description=description, image_id=image_id)
        )
        self._commit("product update")
        logger.info(f"Product update id={product_id} matched={result.rowcount}")
        return result.rowcount > 0

    def delete(self, product_id: int) -> bool:
        result = self.db.execute(delete(Product).where(Product.id == product_id))
        self._commit("product delete")
        logger.info(f"Product delete id={product_id} matched={result.rowcount}")
        return result.rowcount > 0


class CartStore(_Store):
    def upsert(self, user_id: int, product_id: int, quantity: int) -> None:
        """
        Set the quantity of (user, product), creating the line if needed.
        Overwrites; repeating the same call leaves the same state.
        """
        stmt = upsert_statement(self.db.get_bind().dialect.name, user_id, product_id, quantity)
        self.db.execute(stmt)
        self._commit("cart upsert")

    def lines(self, user_id: int) -> List[CartLine]:
        return list(self.db.scalars(select(CartLine).where(CartLine.user_id == user_id).order_by(CartLine.id)))

    def resolved_lines(self, user_id: int) -> List[Tuple[Product, int]]:
        # inner join: lines whose product is gone are skipped
        rows = self.db.execute(
            select(Product, CartLine.quantity)
            .join(CartLine, CartLine.product_id == Product.id)
            .where(CartLine.user_id == user_id)
            .order_by(CartLine.id)
        )
        return [(product, quantity) for product, quantity in rows]

    def clear(self, user_id: int) -> int:
        result = self.db.execute(delete(CartLine).where(CartLine.user_id == user_id))
        self._commit("cart clear")
        return result.rowcount


class OrderStore(_Store):
    def create(self, user_id: int, name: str, address: str, phone: str, products: str) -> Order:
        order = Order(user_id=user_id, name=name, address=address, phone=phone, products=products)
        self.db.add(order)
        self._commit("order create")
        logger.info(f"Order stored id={order.id} user={user_id}")
        return order

    def for_user(self, user_id: int) -> List[Order]:
        return list(self.db.scalars(select(Order).where(Order.user_id == user_id).order_by(Order.id)))

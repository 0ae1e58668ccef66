# Filename: shopbot/models.py
# Catalog, cart and order tables.
#  - Product.image_id is the platform file reference of the best photo variant
#  - CartLine is unique per (user, product); the surrogate id keeps insertion order
#  - Order.products is a rendered snapshot, not a reference to Product rows

from sqlalchemy import BigInteger, Column, DateTime, Integer, String, Text, UniqueConstraint, func
from shopbot.database import Base


class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    image_id = Column(String, nullable=True)

    def __repr__(self) -> str:
        return f"<Product id={self.id} name={self.name!r}>"


class CartLine(Base):
    """
    One product/quantity pairing held for a user until the order is placed.
    No foreign key to products: a deleted product leaves the line orphaned and
    the order flow skips it.
    """
    __tablename__ = "cart_lines"
    __table_args__ = (UniqueConstraint("user_id", "product_id", name="uq_cart_user_product"),)

    id = Column(Integer, primary_key=True)
    user_id = Column(BigInteger, index=True, nullable=False)
    product_id = Column(Integer, nullable=False)
    quantity = Column(Integer, nullable=False)

    def __repr__(self) -> str:
        return f"<CartLine user={self.user_id} product={self.product_id} qty={self.quantity}>"


class Order(Base):
    __tablename__ = "orders"

    id = Column(Integer, primary_key=True)
    user_id = Column(BigInteger, index=True, nullable=False)
    name = Column(String, nullable=False)
    address = Column(String, nullable=False)
    phone = Column(String, nullable=False)
    products = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    def __repr__(self) -> str:
        return f"<Order id={self.id} user={self.user_id}>"

# Filename: shopbot/ordering.py
# Customer side: /start greeting, add_to_cart and order payloads from the mini app.

import logging
from typing import List, Optional, Tuple

from shopbot.events import AppPayload, Command
from shopbot.models import Product
from shopbot.schemas import AddToCartPayload, PlaceOrderPayload, decode_app_payload
from shopbot.services.stores import CartStore, CatalogStore, OrderStore
from shopbot.services.telegram import web_app_keyboard
from shopbot.utils import send_safely

logger = logging.getLogger(__name__)

WELCOME = "Welcome to our shop!"
OPEN_SHOP = "Products"
CART_EMPTY = "Your cart is empty!"
PRODUCT_GONE = "This product is no longer available."
ORDER_ACCEPTED = "Your order has been accepted!"


def render_lines(lines: List[Tuple[Product, int]]) -> str:
    return "\n".join(f"{product.name} × {quantity}" for product, quantity in lines)


def render_notification(user_id: int, order: PlaceOrderPayload, products: str) -> str:
    return (
        "New order!\n"
        "\n"
        f"Name: {order.name}\n"
        f"Address: {order.address}\n"
        f"Phone: {order.phone}\n"
        f"User ID: {user_id}\n"
        "\n"
        "Products:\n"
        f"{products}"
    )


class OrderingWorkflow:
    def __init__(self, admin_id: int, catalog: CatalogStore, carts: CartStore, orders: OrderStore, gateway,
                 mini_app_url: Optional[str] = None):
        self.admin_id = admin_id
        self.catalog = catalog
        self.carts = carts
        self.orders = orders
        self.gateway = gateway
        self.mini_app_url = mini_app_url

    def start(self, event: Command) -> None:
        if self.mini_app_url:
            markup = web_app_keyboard(OPEN_SHOP, self.mini_app_url)
            send_safely(self.gateway.send_text, event.chat_id, WELCOME, reply_markup=markup)
        else:
            send_safely(self.gateway.send_text, event.chat_id, WELCOME)

    def handle_payload(self, event: AppPayload) -> None:
        payload = decode_app_payload(event.data)
        if payload is None:
            logger.info(f"Ignoring mini app payload with unknown action from {event.user_id}")
            return
        if isinstance(payload, AddToCartPayload):
            self.add_to_cart(event, payload)
        else:
            self.place_order(event, payload)

    def add_to_cart(self, event: AppPayload, payload: AddToCartPayload) -> None:
        product = self.catalog.get(payload.product_id)
        if product is None:
            logger.warning(f"add_to_cart for unknown product {payload.product_id} from {event.user_id}")
            send_safely(self.gateway.send_text, event.chat_id, PRODUCT_GONE)
            return
        self.carts.upsert(event.user_id, product.id, payload.qty)
        logger.info(f"Cart {event.user_id}: product={product.id} qty={payload.qty}")
        send_safely(self.gateway.send_text, event.chat_id, f"{product.name} × {payload.qty} is in your cart.")

    def place_order(self, event: AppPayload, payload: PlaceOrderPayload) -> None:
        """
        Snapshot the cart into an Order, tell the admin, clear the cart.

        The order row is written before the cart is cleared. Admin notification
        is best-effort and never undoes either write.
        """
        lines = self.carts.resolved_lines(event.user_id)
        if not lines:
            send_safely(self.gateway.send_text, event.chat_id, CART_EMPTY)
            return

        products = render_lines(lines)
        order = self.orders.create(
            user_id=event.user_id,
            name=payload.name,
            address=payload.address,
            phone=payload.phone,
            products=products,
        )

        notified = send_safely(
            self.gateway.send_text, self.admin_id, render_notification(event.user_id, payload, products)
        )
        if not notified:
            logger.error(f"Order {order.id} stored but the admin was not notified")

        cleared = self.carts.clear(event.user_id)
        logger.info(f"Order {order.id} placed by {event.user_id}, {cleared} cart lines cleared")
        send_safely(self.gateway.send_text, event.chat_id, ORDER_ACCEPTED)

# phonedeals/services/checkout_service.py
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from phonedeals.data.models.order import OrderModel, OrderItemModel
from phonedeals.domain import errors
from phonedeals.domain.errors import ConcurrencyConflict
from phonedeals.domain.schemas import OrderOut
from phonedeals.repos.order_repo import OrderRepo
from phonedeals.services.cart_service import CartService
from phonedeals.services.catalog_service import CatalogService
from phonedeals.services.notification_service import NotificationBroadcaster, OrderMailer
from phonedeals.services.serializers import money, order_out
from phonedeals.services.transaction import db_errors
from phonedeals.services.validation import require_int
from phonedeals.utils.retry import conflict_retry
from phonedeals.utils.logging import get_logger

logger = get_logger(__name__)


class CheckoutService:
    """
    Turns a list of {phone_id, quantity} into an order.

    Stages: validating -> stock_checking -> committing -> notifying -> done.
    Only committing touches the database and it is one transaction
    (stock decrements, the order row and the cart clear land together or not at all).
    Notifying runs after the commit and can never fail the checkout.
    """

    def __init__(
        self,
        db: Session,
        broadcaster: NotificationBroadcaster | None = None,
        mailer: OrderMailer | None = None,
    ):
        self.db = db
        self.catalog = CatalogService(db)
        self.carts = CartService(db)
        self.orders = OrderRepo(db)
        self.broadcaster = broadcaster
        self.mailer = mailer

    def checkout(self, user_id: int, items: List[Dict[str, Any]]) -> Dict[str, Any]:
        logger.info(f"Checkout for user {user_id}: validating")
        lines = self._validate(items)

        order_id = self._commit(user_id, lines)

        logger.info(f"Checkout for user {user_id}: notifying (order {order_id})")
        self._notify(order_id)

        logger.info(f"Checkout for user {user_id}: done (order {order_id})")
        return {"success": True, "message": "Checkout successful", "order_id": order_id}

    def _validate(self, items: Any) -> Dict[int, int]:
        if not isinstance(items, list) or not items:
            raise errors.ValidationError("Checkout requires a non-empty list of items.")

        #phone_id -> quantity, repeated ids are summed
        lines: Dict[int, int] = {}
        for item in items:
            if not isinstance(item, dict):
                raise errors.ValidationError("Each item must be an object with phone_id and quantity.")
            phone_id = require_int(item.get("phone_id"), "phone_id", minimum=1)
            quantity = require_int(item.get("quantity"), "quantity", minimum=1)
            lines[phone_id] = lines.get(phone_id, 0) + quantity
        return lines

    @conflict_retry()
    def _commit(self, user_id: int, lines: Dict[int, int]) -> int:
        with db_errors(self.db, "Checkout", retryable=True, user_id=user_id):
            logger.info(f"Checkout for user {user_id}: stock_checking")

            snapshot = []
            for phone_id, quantity in lines.items():
                phone = self.catalog.get_by_id(phone_id)
                if phone.stock < quantity:
                    raise errors.InsufficientStock(phone.id, phone.title, phone.stock, quantity)
                snapshot.append((phone_id, quantity, money(phone.price)))

            total = money(sum((money(price * quantity) for _, quantity, price in snapshot), Decimal("0.00")))

            cart = self.carts.ensure_cart(user_id)
            version = cart.version

            logger.info(f"Checkout for user {user_id}: committing {len(snapshot)} lines, total {total}")
            for phone_id, quantity, _ in snapshot:
                # raises InsufficientStock with a fresh count if another buyer got there first
                self.catalog.decrement_stock(phone_id, quantity)

            order = self.orders.add_order(
                OrderModel(
                    user_id=user_id,
                    total_amount=total,
                    status="completed",
                    payment_method="credit_card",
                    items=[
                        OrderItemModel(phone_id=phone_id, quantity=quantity, price=price)
                        for phone_id, quantity, price in snapshot
                    ],
                )
            )

            self.carts.repo.clear_cart_items(cart.id)
            if self.carts.repo.update_cart_version(cart.id, version) == 0:
                raise ConcurrencyConflict(f"Cart {cart.id} was modified during checkout")

            self.db.flush()
            order_id = order.id
            self.db.commit()

        logger.info(f"Order {order_id} created for user {user_id}")
        return order_id

    def _notify(self, order_id: int) -> None:
        if self.broadcaster is not None:
            try:
                order = self.orders.get_populated_order(order_id)
                data = OrderOut.model_validate(order_out(order)).model_dump(mode="json")
                delivered = self.broadcaster.broadcast({"type": "NEW_ORDER", "data": data})
                logger.info(f"NEW_ORDER {order_id} delivered to {delivered} listeners")
            except Exception as e:
                logger.warning(f"Broadcasting order {order_id} failed: {e}")

        if self.mailer is not None:
            try:
                self.mailer.send_order_confirmation(order_id)
            except Exception as e:
                logger.warning(f"Queueing confirmation email for order {order_id} failed: {e}")

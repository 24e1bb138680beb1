# phonedeals/services/cart_service.py
from decimal import Decimal
from typing import Any, Callable, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from phonedeals.data.models.cart import CartModel
from phonedeals.data.models.cart_item import CartItemModel
from phonedeals.domain import errors
from phonedeals.domain.errors import ConcurrencyConflict
from phonedeals.repos.cart_repo import CartRepo
from phonedeals.services.catalog_service import CatalogService
from phonedeals.services.serializers import money, phone_summary
from phonedeals.services.transaction import db_errors
from phonedeals.services.validation import require_int
from phonedeals.utils.retry import conflict_retry
from phonedeals.utils.logging import get_logger

logger = get_logger(__name__)


class CartService:
    """
    Simple command/query split for the cart domain
    commands (set quantity, remove, clear) change state and bump the version
    query (get) only reads, apart from creating the cart on first access
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = CartRepo(db)
        self.catalog = CatalogService(db)

    def ensure_cart(self, user_id: int) -> CartModel:
        cart = self.repo.get_cart_by_user(user_id)
        if cart:
            return cart

        try:
            created = self.repo.create_cart(CartModel(user_id=user_id, version=1))
            logger.info(f"Created cart {created.id} for user {user_id}")
            return created
        except IntegrityError:
            # lost the race against another request creating the same cart
            # (or the user does not exist)
            self.repo.rollback()
            cart = self.repo.get_cart_by_user(user_id)
            if not cart:
                raise errors.NotFound(f"User with ID {user_id} not found.", user_id=user_id)
            return cart

    #query
    def view(self, cart_id: int) -> Dict[str, Any]:
        cart = self.repo.get_cart_with_phones(cart_id)

        items = [
            {"phone_id": i.phone_id, "quantity": i.quantity, "phone": phone_summary(i.phone)}
            for i in cart.items
        ]
        total = sum(
            (money(i.phone.price) * i.quantity for i in cart.items if i.phone is not None),
            Decimal("0.00"),
        )

        return {
            "cart_id": cart.id,
            "user_id": cart.user_id,
            "items": items,
            "total": money(total),
            "updated_at": cart.updated_at,
        }

    def get(self, user_id: int) -> Dict[str, Any]:
        with db_errors(self.db, "Reading cart", user_id=user_id):
            return self.view(self.ensure_cart(user_id).id)

    #commands
    def set_item_quantity(self, user_id: int, phone_id: int, quantity: int) -> Dict[str, Any]:
        require_int(phone_id, "phone_id", minimum=1)
        require_int(quantity, "quantity", minimum=0)

        if quantity == 0:
            return self.remove_item(user_id, phone_id)

        def upsert(cart: CartModel) -> bool:
            phone = self.catalog.get_by_id(phone_id)
            #advisory only, checkout re-checks with the conditional decrement
            if quantity > phone.stock:
                raise errors.InsufficientStock(phone.id, phone.title, phone.stock, quantity)

            item = self.repo.get_cart_item(cart.id, phone_id)
            if item:
                logger.info(f"Phone {phone_id} quantity in cart {cart.id}: {item.quantity} -> {quantity}")
                item.quantity = quantity
            else:
                logger.info(f"Adding phone {phone_id} x{quantity} to cart {cart.id}")
                self.repo.add_cart_item(CartItemModel(cart_id=cart.id, phone_id=phone_id, quantity=quantity))
            return True

        return self._apply(user_id, upsert)

    def remove_item(self, user_id: int, phone_id: int) -> Dict[str, Any]:
        require_int(phone_id, "phone_id", minimum=1)

        def remove(cart: CartModel) -> bool:
            return self.repo.delete_cart_item(cart.id, phone_id) > 0

        return self._apply(user_id, remove)

    def clear(self, user_id: int) -> Dict[str, Any]:
        def clear_all(cart: CartModel) -> bool:
            return self.repo.clear_cart_items(cart.id) > 0

        return self._apply(user_id, clear_all)

    @conflict_retry()
    def _apply(self, user_id: int, change: Callable[[CartModel], bool]) -> Dict[str, Any]:
        """
        Runs one cart mutation as a unit of work.
        change() returns False when there was nothing to do, then the version is left alone.
        """
        with db_errors(self.db, "Cart update", retryable=True, user_id=user_id):
            cart = self.ensure_cart(user_id)
            version = cart.version

            try:
                if not change(cart):
                    self.repo.rollback()
                    return self.view(cart.id)

                # Optimistic locking
                # UPDATE carts SET version = 2 WHERE id = 1 AND version = 1
                rowcount = self.repo.update_cart_version(cart.id, version)
                if rowcount == 0:
                    raise ConcurrencyConflict(f"Cart {cart.id} was modified by another request")

                self.repo.commit()
            except IntegrityError as e:
                # concurrent insert of the same line, the retry will see it
                raise ConcurrencyConflict(str(e)) from e

            logger.info(f"Cart {cart.id} updated, new version: {version + 1}")
            return self.view(cart.id)

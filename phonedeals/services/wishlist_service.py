# phonedeals/services/wishlist_service.py
from typing import Any, Dict

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from phonedeals.data.models.cart_item import CartItemModel
from phonedeals.data.models.wishlist import WishlistModel, WishlistItemModel
from phonedeals.domain import errors
from phonedeals.domain.errors import ConcurrencyConflict
from phonedeals.repos.wishlist_repo import WishlistRepo
from phonedeals.services.cart_service import CartService
from phonedeals.services.catalog_service import CatalogService
from phonedeals.services.serializers import phone_summary
from phonedeals.services.transaction import db_errors
from phonedeals.services.validation import require_int
from phonedeals.utils.retry import conflict_retry
from phonedeals.utils.logging import get_logger

logger = get_logger(__name__)


class WishlistService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = WishlistRepo(db)
        self.catalog = CatalogService(db)
        self.carts = CartService(db)

    def ensure_wishlist(self, user_id: int) -> WishlistModel:
        wishlist = self.repo.get_wishlist_by_user(user_id)
        if wishlist:
            return wishlist

        try:
            created = self.repo.create_wishlist(WishlistModel(user_id=user_id))
            logger.info(f"Created wishlist {created.id} for user {user_id}")
            return created
        except IntegrityError:
            self.db.rollback()
            wishlist = self.repo.get_wishlist_by_user(user_id)
            if not wishlist:
                raise errors.NotFound(f"User with ID {user_id} not found.", user_id=user_id)
            return wishlist

    def view(self, wishlist_id: int) -> Dict[str, Any]:
        wishlist = self.repo.get_wishlist_with_phones(wishlist_id)
        return {
            "wishlist_id": wishlist.id,
            "user_id": wishlist.user_id,
            "items": [{"phone_id": i.phone_id, "phone": phone_summary(i.phone)} for i in wishlist.items],
        }

    def get(self, user_id: int) -> Dict[str, Any]:
        with db_errors(self.db, "Reading wishlist", user_id=user_id):
            return self.view(self.ensure_wishlist(user_id).id)

    def add(self, user_id: int, phone_id: int) -> Dict[str, Any]:
        require_int(phone_id, "phone_id", minimum=1)

        with db_errors(self.db, "Wishlist add", user_id=user_id, phone_id=phone_id):
            self.catalog.get_by_id(phone_id)

            wishlist = self.ensure_wishlist(user_id)
            if self.repo.has_item(wishlist.id, phone_id):
                raise errors.DuplicateItem("Phone is already in the wishlist.", phone_id=phone_id)

            try:
                self.repo.add_item(WishlistItemModel(wishlist_id=wishlist.id, phone_id=phone_id))
                self.db.commit()
            except IntegrityError as e:
                # unique (wishlist_id, phone_id) caught a concurrent add
                raise errors.DuplicateItem("Phone is already in the wishlist.", phone_id=phone_id) from e

            logger.info(f"Phone {phone_id} added to wishlist {wishlist.id}")
            return self.view(wishlist.id)

    def remove(self, user_id: int, phone_id: int) -> Dict[str, Any]:
        require_int(phone_id, "phone_id", minimum=1)

        with db_errors(self.db, "Wishlist remove", user_id=user_id, phone_id=phone_id):
            wishlist = self.ensure_wishlist(user_id)

            removed = self.repo.delete_item(wishlist.id, phone_id)
            self.db.commit()

            if removed:
                logger.info(f"Phone {phone_id} removed from wishlist {wishlist.id}")
            return self.view(wishlist.id)

    @conflict_retry()
    def move_to_cart(self, user_id: int, phone_id: int) -> Dict[str, Any]:
        """
        Moves one unit of a phone from the wishlist into the cart.

        The cart line and the wishlist removal commit together; if any step
        fails the session is rolled back and both documents stay as they were.
        Returns the updated wishlist and cart.
        """
        require_int(phone_id, "phone_id", minimum=1)

        with db_errors(self.db, "Move to cart", retryable=True, user_id=user_id, phone_id=phone_id):
            phone = self.catalog.get_by_id(phone_id)
            if phone.stock < 1:
                raise errors.InsufficientStock(phone.id, phone.title, phone.stock, 1)

            wishlist = self.ensure_wishlist(user_id)
            cart = self.carts.ensure_cart(user_id)
            version = cart.version

            try:
                item = self.carts.repo.get_cart_item(cart.id, phone_id)
                if item:
                    item.quantity += 1
                else:
                    self.carts.repo.add_cart_item(CartItemModel(cart_id=cart.id, phone_id=phone_id, quantity=1))
                self.db.flush()

                self.repo.delete_item(wishlist.id, phone_id)

                if self.carts.repo.update_cart_version(cart.id, version) == 0:
                    raise ConcurrencyConflict(f"Cart {cart.id} was modified by another request")

                self.db.commit()
            except IntegrityError as e:
                raise ConcurrencyConflict(str(e)) from e

            logger.info(f"Phone {phone_id} moved from wishlist {wishlist.id} to cart {cart.id}")
            return {"wishlist": self.view(wishlist.id), "cart": self.carts.view(cart.id)}

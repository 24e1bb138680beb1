# phonedeals/services/user_service.py
from typing import Dict, List

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from phonedeals.data.models.user import UserModel
from phonedeals.domain import errors
from phonedeals.domain.schemas import ProfileUpdate, UserCreate, UserRead, UserUpdate
from phonedeals.repos.cart_repo import CartRepo
from phonedeals.repos.order_repo import OrderRepo
from phonedeals.repos.phone_repo import PhoneRepo
from phonedeals.repos.user_repo import UserRepo
from phonedeals.repos.wishlist_repo import WishlistRepo
from phonedeals.services.transaction import db_errors
from phonedeals.utils.logging import get_logger

logger = get_logger(__name__)


class UserService:
    def __init__(self, db: Session):
        self.db = db
        self.repo = UserRepo(db)

    def create_user(self, payload: UserCreate) -> UserRead:
        email = payload.email.strip().lower()
        if self.repo.get_user_by_email(email):
            raise errors.DuplicateItem("A user with this email already exists.", email=email)

        user = UserModel(
            firstname=payload.firstname,
            lastname=payload.lastname,
            email=email,
            role=payload.role,
            status="active",
        )
        try:
            created = self.repo.create_user(user)
        except IntegrityError as e:
            self.db.rollback()
            raise errors.DuplicateItem("A user with this email already exists.", email=email) from e

        logger.info(f"User {created.id} created with role {created.role}")
        return UserRead.model_validate(created)

    def get_user(self, user_id: int) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise errors.NotFound(f"User with ID {user_id} not found.", user_id=user_id)
        return UserRead.model_validate(user)

    def list_users(self) -> List[UserRead]:
        return [UserRead.model_validate(u) for u in self.repo.list_users()]

    def update_user(self, user_id: int, payload: UserUpdate) -> UserRead:
        user = self.repo.get_user(user_id)
        if not user:
            raise errors.NotFound(f"User with ID {user_id} not found.", user_id=user_id)

        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        for field, value in changes.items():
            setattr(user, field, value)

        updated = self.repo.save(user)
        logger.info(f"User {user_id} updated: {sorted(changes)}")
        return UserRead.model_validate(updated)

    def update_profile(self, user_id: int, payload: ProfileUpdate) -> UserRead:
        """Self-service edit of name and email. Email stays unique across users."""
        user = self.repo.get_user(user_id)
        if not user:
            raise errors.NotFound(f"User with ID {user_id} not found.", user_id=user_id)

        changes = payload.model_dump(exclude_unset=True, exclude_none=True)
        if "email" in changes:
            changes["email"] = changes["email"].strip().lower()
            owner = self.repo.get_user_by_email(changes["email"])
            if owner and owner.id != user_id:
                raise errors.DuplicateItem("A user with this email already exists.", email=changes["email"])

        for field, value in changes.items():
            setattr(user, field, value)

        try:
            updated = self.repo.save(user)
        except IntegrityError as e:
            self.db.rollback()
            raise errors.DuplicateItem("A user with this email already exists.", email=changes.get("email")) from e

        logger.info(f"User {user_id} updated their profile: {sorted(changes)}")
        return UserRead.model_validate(updated)

    def delete_user(self, user_id: int) -> Dict[str, int]:
        """
        Removes the account together with its listings, the reviews it wrote,
        its cart and its wishlist. Orders stay as history without a buyer.
        """
        with db_errors(self.db, "Deleting user", user_id=user_id):
            user = self.repo.get_user(user_id)
            if not user:
                raise errors.NotFound(f"User with ID {user_id} not found.", user_id=user_id)

            phones = PhoneRepo(self.db)
            carts = CartRepo(self.db)
            wishlists = WishlistRepo(self.db)

            listings = phones.list_by_seller(user_id)
            for phone in listings:
                carts.delete_items_for_phone(phone.id)
                wishlists.delete_items_for_phone(phone.id)
                phones.delete(phone)
            self.db.flush()

            reviews = phones.delete_reviews_by_reviewer(user_id)

            carts.delete_cart_for_user(user_id)
            wishlists.delete_wishlist_for_user(user_id)
            orders = OrderRepo(self.db).detach_user(user_id)

            self.repo.delete(user)
            self.db.commit()

        logger.info(f"User {user_id} deleted with {len(listings)} listings and {reviews} reviews, {orders} orders kept")
        return {"listings": len(listings), "reviews": reviews, "orders": orders}

# phonedeals/services/catalog_service.py
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict, List

from sqlalchemy.orm import Session

from phonedeals.data.models.phone import PhoneModel, ReviewModel
from phonedeals.domain import errors
from phonedeals.domain.schemas import SessionUser
from phonedeals.repos.cart_repo import CartRepo
from phonedeals.repos.phone_repo import PhoneRepo
from phonedeals.repos.wishlist_repo import WishlistRepo
from phonedeals.services.serializers import phone_out, review_out
from phonedeals.utils.pagination import page_window, pagination
from phonedeals.utils.logging import get_logger

logger = get_logger(__name__)


class CatalogService:
    """
    Listings, their stock counter and embedded reviews.

    Reads are side-effect free. decrement_stock is the only mutation the
    checkout relies on and it never commits, the caller owns the transaction.
    """

    def __init__(self, db: Session):
        self.db = db
        self.repo = PhoneRepo(db)

    # core contract

    def get_by_id(self, phone_id: int, include_disabled: bool = False) -> PhoneModel:
        phone = self.repo.get(phone_id) if include_disabled else self.repo.get_active(phone_id)
        if not phone:
            raise errors.NotFound(f"Phone with ID {phone_id} not found.", phone_id=phone_id)
        return phone

    def decrement_stock(self, phone_id: int, amount: int) -> None:
        if amount < 1:
            raise errors.ValidationError("Decrement amount must be at least 1.", phone_id=phone_id)

        if self.repo.decrement_stock(phone_id, amount):
            return

        # zero rows matched, find out why from a fresh read
        current = self.repo.current_stock(phone_id)
        if current is None or current[2]:
            raise errors.NotFound(f"Phone with ID {phone_id} not found.", phone_id=phone_id)

        title, stock, _ = current
        raise errors.InsufficientStock(phone_id, title, stock, amount)

    # queries

    def search(
        self,
        term: str | None = None,
        brand: str | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        page: int | None = 1,
        limit: int | None = None,
    ) -> Dict[str, Any]:
        if min_price is not None and max_price is not None and min_price > max_price:
            raise errors.ValidationError("min_price cannot be greater than max_price.")

        page, limit, offset = page_window(page, limit)
        phones, total = self.repo.search(
            term=term,
            brand=brand,
            min_price=min_price,
            max_price=max_price,
            disabled=False,
            offset=offset,
            limit=limit,
        )
        logger.info(f"Search term={term!r} brand={brand!r} found {total} phones")

        return {
            "phones": [phone_out(p) for p in phones],
            "brands": self.repo.brands(),
            "pagination": pagination(total, page, limit),
        }

    def admin_list(
        self,
        term: str | None = None,
        brand: str | None = None,
        disabled: bool | None = None,
        page: int | None = 1,
        limit: int | None = None,
    ) -> Dict[str, Any]:
        page, limit, offset = page_window(page, limit)
        phones, total = self.repo.search(term=term, brand=brand, disabled=disabled, offset=offset, limit=limit)
        return {
            "phones": [phone_out(p) for p in phones],
            "pagination": pagination(total, page, limit),
        }

    def brands(self) -> List[str]:
        return self.repo.brands()

    def sold_out_soon(self) -> List[Dict[str, Any]]:
        return [
            {"id": p.id, "title": p.title, "image": p.image, "price": p.price, "stock": p.stock}
            for p in self.repo.sold_out_soon()
        ]

    def best_sellers(self) -> List[Dict[str, Any]]:
        return [
            {"id": p.id, "title": p.title, "image": p.image, "average_rating": round(avg, 2)}
            for p, avg in self.repo.best_sellers()
        ]

    def list_by_seller(self, seller_id: int) -> List[Dict[str, Any]]:
        return [phone_out(p, with_seller=False) for p in self.repo.list_by_seller(seller_id)]

    def get_detail(self, phone_id: int, viewer: SessionUser | None = None) -> Dict[str, Any]:
        phone = self.repo.get_detail(phone_id)
        is_privileged = viewer is not None and (viewer.is_admin or viewer.id == getattr(phone, "seller_id", None))

        if not phone or (phone.is_disabled and not is_privileged):
            raise errors.NotFound(f"Phone with ID {phone_id} not found.", phone_id=phone_id)

        #hidden reviews are only shown to the seller, the reviewer and admins
        reviews = [
            r for r in phone.reviews
            if not r.is_hidden or is_privileged or (viewer is not None and viewer.id == r.reviewer_id)
        ]
        ratings = [r.rating for r in phone.reviews]

        return {
            **phone_out(phone),
            "reviews": [review_out(r) for r in reviews],
            "average_rating": round(sum(ratings) / len(ratings), 2) if ratings else None,
        }

    # reviews

    def add_review(self, phone_id: int, reviewer_id: int, rating: int, comment: str) -> Dict[str, Any]:
        if not 1 <= rating <= 5:
            raise errors.ValidationError("Rating must be between 1 and 5.")
        if not comment or not comment.strip():
            raise errors.ValidationError("Comment cannot be empty.")

        self.get_by_id(phone_id)

        review = self.repo.add_review(
            ReviewModel(phone_id=phone_id, reviewer_id=reviewer_id, rating=rating, comment=comment.strip())
        )
        self.db.commit()
        self.db.refresh(review)

        logger.info(f"Review {review.id} added to phone {phone_id} by user {reviewer_id}")
        return review_out(review)

    def set_review_visibility(
        self, actor: SessionUser, phone_id: int, review_id: int, hidden: bool
    ) -> Dict[str, Any]:
        phone = self.get_by_id(phone_id, include_disabled=True)
        review = self.repo.get_review(phone_id, review_id)
        if not review:
            raise errors.NotFound(f"Review {review_id} not found on phone {phone_id}.", review_id=review_id)

        if not (actor.is_admin or actor.id == phone.seller_id or actor.id == review.reviewer_id):
            logger.warning(f"User {actor.id} may not change visibility of review {review_id}")
            raise errors.Unauthorized("Only the seller, the reviewer or an admin can change review visibility.")

        review.hidden_at = datetime.now(timezone.utc) if hidden else None
        self.db.commit()
        self.db.refresh(review)

        logger.info(f"Review {review_id} on phone {phone_id} hidden={hidden} by user {actor.id}")
        return review_out(review)

    def list_reviews(
        self,
        brand: str | None = None,
        hidden: bool | None = None,
        term: str | None = None,
        reviewer_id: int | None = None,
        page: int | None = 1,
        limit: int | None = None,
    ) -> Dict[str, Any]:
        page, limit, offset = page_window(page, limit)
        reviews, total = self.repo.list_reviews(
            brand=brand, hidden=hidden, term=term, reviewer_id=reviewer_id, offset=offset, limit=limit
        )
        return {
            "reviews": [
                {**review_out(r), "phone_id": r.phone_id, "phone_title": r.phone.title, "brand": r.phone.brand}
                for r in reviews
            ],
            "pagination": pagination(total, page, limit),
        }

    def seller_comments(self, seller_id: int) -> List[Dict[str, Any]]:
        return [
            {
                "id": p.id,
                "title": p.title,
                "brand": p.brand,
                "status": p.status,
                "reviews": [review_out(r) for r in p.reviews],
            }
            for p in self.repo.list_by_seller_with_reviews(seller_id)
        ]

    # seller listings

    def create_listing(self, seller_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        phone = self.repo.add(
            PhoneModel(
                title=data["title"],
                brand=data["brand"],
                image=data.get("image") or "",
                price=data["price"],
                stock=data["stock"],
                seller_id=seller_id,
                status="available",
            )
        )
        self.db.commit()
        self.db.refresh(phone)

        logger.info(f"Listing {phone.id} created by seller {seller_id}")
        return phone_out(phone, with_seller=False)

    def _owned_listing(self, actor: SessionUser, phone_id: int) -> PhoneModel:
        phone = self.get_by_id(phone_id, include_disabled=True)
        if phone.seller_id != actor.id and not actor.is_admin:
            logger.warning(f"User {actor.id} tried to modify listing {phone_id} owned by {phone.seller_id}")
            raise errors.Unauthorized("You can only modify your own listings.")
        return phone

    def update_listing(self, actor: SessionUser, phone_id: int, data: Dict[str, Any]) -> Dict[str, Any]:
        phone = self._owned_listing(actor, phone_id)

        phone.title = data["title"]
        phone.brand = data["brand"]
        phone.image = data.get("image") or phone.image
        phone.price = data["price"]
        phone.stock = data["stock"]

        self.db.commit()
        self.db.refresh(phone)

        logger.info(f"Listing {phone_id} updated by user {actor.id}")
        return phone_out(phone, with_seller=False)

    def set_listing_status(self, actor: SessionUser, phone_id: int, status: str) -> Dict[str, Any]:
        phone = self._owned_listing(actor, phone_id)

        if status == "disabled":
            phone.disable()
        elif status == "available":
            phone.enable()
        else:
            raise errors.ValidationError(f"Unknown listing status {status!r}.")

        self.db.commit()
        self.db.refresh(phone)

        logger.info(f"Listing {phone_id} is now {phone.status}")
        return phone_out(phone, with_seller=False)

    def delete_listing(self, actor: SessionUser, phone_id: int) -> None:
        phone = self._owned_listing(actor, phone_id)

        removed_cart = CartRepo(self.db).delete_items_for_phone(phone_id)
        removed_wish = WishlistRepo(self.db).delete_items_for_phone(phone_id)
        self.repo.delete(phone)
        self.db.commit()

        logger.info(
            f"Listing {phone_id} deleted by user {actor.id}, "
            f"dropped {removed_cart} cart lines and {removed_wish} wishlist lines"
        )

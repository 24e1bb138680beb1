# phonedeals/repos/phone_repo.py
from decimal import Decimal
from typing import List, Tuple

from sqlalchemy import select, update, delete, func, or_
from sqlalchemy.orm import Session, selectinload

from phonedeals.data.models.phone import PhoneModel, ReviewModel


class PhoneRepo:
    def __init__(self, db: Session):
        self.db = db

    def get(self, phone_id: int) -> PhoneModel | None:
        return self.db.get(PhoneModel, phone_id)

    def get_active(self, phone_id: int) -> PhoneModel | None:
        return self.db.execute(
            select(PhoneModel).where(
                PhoneModel.id == phone_id,
                PhoneModel.disabled_at.is_(None),
            )
        ).scalar_one_or_none()

    def get_detail(self, phone_id: int) -> PhoneModel | None:
        return self.db.execute(
            select(PhoneModel)
            .where(PhoneModel.id == phone_id)
            .options(
                selectinload(PhoneModel.seller),
                selectinload(PhoneModel.reviews).selectinload(ReviewModel.reviewer),
            )
        ).scalar_one_or_none()

    def decrement_stock(self, phone_id: int, amount: int) -> bool:
        """
        Compare-and-decrement in a single statement.
        The row only matches while it still has enough stock and is not disabled,
        so concurrent buyers serialize on the row lock and nobody drives stock below zero.
        """
        result = self.db.execute(
            update(PhoneModel)
            .where(
                PhoneModel.id == phone_id,
                PhoneModel.stock >= amount,
                PhoneModel.disabled_at.is_(None),
            )
            .values(stock=PhoneModel.stock - amount)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount == 1

    def current_stock(self, phone_id: int) -> Tuple[str, int, bool] | None:
        """Fresh (title, stock, disabled) read that bypasses the identity map."""
        row = self.db.execute(
            select(PhoneModel.title, PhoneModel.stock, PhoneModel.disabled_at).where(PhoneModel.id == phone_id)
        ).first()
        if row is None:
            return None
        return row.title, row.stock, row.disabled_at is not None

    def add(self, phone: PhoneModel) -> PhoneModel:
        self.db.add(phone)
        return phone

    def delete(self, phone: PhoneModel) -> None:
        self.db.delete(phone)

    def list_by_seller(self, seller_id: int) -> List[PhoneModel]:
        return list(
            self.db.execute(
                select(PhoneModel)
                .where(PhoneModel.seller_id == seller_id)
                .order_by(PhoneModel.created_at.desc(), PhoneModel.id.desc())
            ).scalars()
        )

    def list_by_seller_with_reviews(self, seller_id: int) -> List[PhoneModel]:
        return list(
            self.db.execute(
                select(PhoneModel)
                .where(PhoneModel.seller_id == seller_id)
                .options(selectinload(PhoneModel.reviews).selectinload(ReviewModel.reviewer))
                .order_by(PhoneModel.id)
            ).scalars()
        )

    def search(
        self,
        term: str | None = None,
        brand: str | None = None,
        min_price: Decimal | None = None,
        max_price: Decimal | None = None,
        disabled: bool | None = False,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[PhoneModel], int]:
        stmt = select(PhoneModel)

        if disabled is True:
            stmt = stmt.where(PhoneModel.disabled_at.is_not(None))
        elif disabled is False:
            stmt = stmt.where(PhoneModel.disabled_at.is_(None))

        if term:
            pattern = f"%{term}%"
            stmt = stmt.where(or_(PhoneModel.title.ilike(pattern), PhoneModel.brand.ilike(pattern)))
        if brand:
            stmt = stmt.where(PhoneModel.brand == brand)
        if min_price is not None:
            stmt = stmt.where(PhoneModel.price >= min_price)
        if max_price is not None:
            stmt = stmt.where(PhoneModel.price <= max_price)

        total = self.db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()

        phones = self.db.execute(
            stmt.options(selectinload(PhoneModel.seller))
            .order_by(PhoneModel.created_at.desc(), PhoneModel.id.desc())
            .offset(offset)
            .limit(limit)
        ).scalars()

        return list(phones), total

    def brands(self) -> List[str]:
        rows = self.db.execute(
            select(PhoneModel.brand).where(PhoneModel.brand != "").distinct().order_by(PhoneModel.brand)
        ).scalars()
        return list(rows)

    def sold_out_soon(self, limit: int = 5) -> List[PhoneModel]:
        return list(
            self.db.execute(
                select(PhoneModel)
                .where(PhoneModel.stock > 0, PhoneModel.disabled_at.is_(None))
                .order_by(PhoneModel.stock.asc(), PhoneModel.id)
                .limit(limit)
            ).scalars()
        )

    def best_sellers(self, limit: int = 5, min_reviews: int = 2) -> List[Tuple[PhoneModel, float]]:
        avg_rating = func.avg(ReviewModel.rating).label("average_rating")
        rows = self.db.execute(
            select(PhoneModel, avg_rating)
            .join(ReviewModel, ReviewModel.phone_id == PhoneModel.id)
            .where(PhoneModel.disabled_at.is_(None))
            .group_by(PhoneModel.id)
            .having(func.count(ReviewModel.id) >= min_reviews)
            .order_by(avg_rating.desc(), PhoneModel.id)
            .limit(limit)
        ).all()
        return [(phone, float(avg)) for phone, avg in rows]

    # reviews

    def get_review(self, phone_id: int, review_id: int) -> ReviewModel | None:
        return self.db.execute(
            select(ReviewModel).where(ReviewModel.id == review_id, ReviewModel.phone_id == phone_id)
        ).scalar_one_or_none()

    def add_review(self, review: ReviewModel) -> ReviewModel:
        self.db.add(review)
        return review

    def list_reviews(
        self,
        brand: str | None = None,
        hidden: bool | None = None,
        term: str | None = None,
        reviewer_id: int | None = None,
        offset: int = 0,
        limit: int = 10,
    ) -> Tuple[List[ReviewModel], int]:
        stmt = select(ReviewModel).join(PhoneModel, PhoneModel.id == ReviewModel.phone_id)

        if brand:
            stmt = stmt.where(PhoneModel.brand == brand)
        if hidden is True:
            stmt = stmt.where(ReviewModel.hidden_at.is_not(None))
        elif hidden is False:
            stmt = stmt.where(ReviewModel.hidden_at.is_(None))
        if term:
            stmt = stmt.where(ReviewModel.comment.ilike(f"%{term}%"))
        if reviewer_id is not None:
            stmt = stmt.where(ReviewModel.reviewer_id == reviewer_id)

        total = self.db.execute(select(func.count()).select_from(stmt.subquery())).scalar_one()

        reviews = self.db.execute(
            stmt.options(selectinload(ReviewModel.phone), selectinload(ReviewModel.reviewer))
            .order_by(ReviewModel.created_at.desc(), ReviewModel.id.desc())
            .offset(offset)
            .limit(limit)
        ).scalars()

        return list(reviews), total

    def delete_reviews_by_reviewer(self, reviewer_id: int) -> int:
        result = self.db.execute(
            delete(ReviewModel)
            .where(ReviewModel.reviewer_id == reviewer_id)
            .execution_options(synchronize_session=False)
        )
        return result.rowcount

#phonedeals/data/models/phone.py
from datetime import datetime, timezone

from sqlalchemy import Column, Integer, ForeignKey, String, DateTime, Numeric, Text, CheckConstraint
from sqlalchemy.orm import relationship

from phonedeals.data.database import Base


def _now():
    return datetime.now(timezone.utc)


class PhoneModel(Base):
    __tablename__ = "phones"
    __table_args__ = (
        CheckConstraint("stock >= 0", name="ck_phones_stock_non_negative"),
        CheckConstraint("price >= 0", name="ck_phones_price_non_negative"),
    )

    id = Column(Integer, primary_key=True)
    title = Column(String, nullable=False)
    brand = Column(String, nullable=False, index=True)
    image = Column(String, nullable=False, default="")

    price = Column(Numeric(10, 2), nullable=False)
    stock = Column(Integer, nullable=False, default=0)

    seller_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    # available | disabled, disabled_at is the tombstone
    status = Column(String, nullable=False, default="available")
    disabled_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=_now, onupdate=_now)

    seller = relationship("UserModel")
    reviews = relationship(
        "ReviewModel",
        back_populates="phone",
        cascade="all, delete-orphan",
        order_by="ReviewModel.id",
    )

    @property
    def is_disabled(self) -> bool:
        return self.disabled_at is not None

    def disable(self) -> None:
        self.status = "disabled"
        self.disabled_at = _now()

    def enable(self) -> None:
        self.status = "available"
        self.disabled_at = None


class ReviewModel(Base):
    __tablename__ = "reviews"
    __table_args__ = (
        CheckConstraint("rating >= 1 AND rating <= 5", name="ck_reviews_rating_range"),
    )

    id = Column(Integer, primary_key=True)
    phone_id = Column(Integer, ForeignKey("phones.id", ondelete="CASCADE"), nullable=False, index=True)
    reviewer_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)

    rating = Column(Integer, nullable=False)
    comment = Column(Text, nullable=False)
    hidden_at = Column(DateTime(timezone=True), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_now)

    phone = relationship("PhoneModel", back_populates="reviews")
    reviewer = relationship("UserModel")

    @property
    def is_hidden(self) -> bool:
        return self.hidden_at is not None

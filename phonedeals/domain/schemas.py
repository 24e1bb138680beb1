# phonedeals/domain/schemas.py
from pydantic import BaseModel, Field, ConfigDict
from typing import List, Literal
from decimal import Decimal
from datetime import datetime


OrderStatus = Literal["pending", "completed", "cancelled"]
PaymentMethod = Literal["credit_card", "paypal", "bank_transfer"]
ListingStatus = Literal["available", "disabled"]
UserRole = Literal["user", "admin", "superAdmin"]
UserStatus = Literal["active", "inactive", "pending"]


class Pagination(BaseModel):
    total: int
    page: int
    limit: int
    pages: int


# users

class SessionUser(BaseModel):
    """Identity stored by the session service under the session key."""

    id: int
    role: UserRole = "user"

    @property
    def is_admin(self) -> bool:
        return self.role in ("admin", "superAdmin")


class UserBrief(BaseModel):
    id: int
    firstname: str
    lastname: str
    email: str

    model_config = ConfigDict(from_attributes=True)


class UserCreate(BaseModel):
    """Schema for creating a user profile."""

    firstname: str = Field(..., min_length=1, max_length=100)
    lastname: str = Field(..., min_length=1, max_length=100)
    email: str = Field(..., min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")
    role: UserRole = "user"


class UserUpdate(BaseModel):
    firstname: str | None = Field(None, min_length=1, max_length=100)
    lastname: str | None = Field(None, min_length=1, max_length=100)
    role: UserRole | None = None
    status: UserStatus | None = None


class ProfileUpdate(BaseModel):
    """Fields a user may change on their own profile."""

    firstname: str | None = Field(None, min_length=1, max_length=100)
    lastname: str | None = Field(None, min_length=1, max_length=100)
    email: str | None = Field(None, min_length=3, max_length=254, pattern=r"^[^@\s]+@[^@\s]+$")


class UserRead(BaseModel):
    id: int
    firstname: str
    lastname: str
    email: str
    role: str
    status: str
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


# catalog

class PhoneSummary(BaseModel):
    """Display projection joined into cart and wishlist lines."""

    id: int
    title: str
    brand: str
    image: str
    price: Decimal
    stock: int

    model_config = ConfigDict(from_attributes=True)


class PhoneOut(BaseModel):
    id: int
    title: str
    brand: str
    image: str
    price: Decimal
    stock: int
    status: str
    seller: UserBrief | None = None
    created_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ReviewOut(BaseModel):
    id: int
    reviewer: UserBrief | None = None
    rating: int
    comment: str
    hidden: bool
    created_at: datetime


class PhoneDetailOut(PhoneOut):
    reviews: List[ReviewOut]
    average_rating: float | None = None


class PhoneSearchOut(BaseModel):
    phones: List[PhoneOut]
    brands: List[str]
    pagination: Pagination


class PhonePage(BaseModel):
    phones: List[PhoneOut]
    pagination: Pagination


class SoldOutSoonOut(BaseModel):
    id: int
    title: str
    image: str
    price: Decimal
    stock: int


class BestSellerOut(BaseModel):
    id: int
    title: str
    image: str
    average_rating: float


class ListingIn(BaseModel):
    """Schema for creating or replacing a listing."""

    title: str = Field(..., min_length=1, max_length=200)
    brand: str = Field(..., min_length=1, max_length=100)
    image: str = ""
    price: Decimal = Field(..., ge=0, max_digits=10, decimal_places=2)
    stock: int = Field(..., ge=0, strict=True)


class ListingStatusIn(BaseModel):
    status: ListingStatus


class ReviewIn(BaseModel):
    rating: int = Field(..., ge=1, le=5, strict=True)
    comment: str = Field(..., min_length=1, max_length=2000)


class ReviewVisibilityIn(BaseModel):
    hidden: bool


class AdminReviewOut(ReviewOut):
    phone_id: int
    phone_title: str
    brand: str


class ReviewPage(BaseModel):
    reviews: List[AdminReviewOut]
    pagination: Pagination


class SellerListingComments(BaseModel):
    id: int
    title: str
    brand: str
    status: str
    reviews: List[ReviewOut]


# cart / wishlist

class CartQuantityIn(BaseModel):
    """Quantity 0 removes the line."""

    quantity: int = Field(..., ge=0, strict=True, description="New quantity, 0 removes the item")


class CartItemOut(BaseModel):
    phone_id: int
    quantity: int
    phone: PhoneSummary | None = None


class CartOut(BaseModel):
    cart_id: int | None
    user_id: int
    items: List[CartItemOut]
    total: Decimal
    updated_at: datetime | None = None


class WishlistItemOut(BaseModel):
    phone_id: int
    phone: PhoneSummary | None = None


class WishlistOut(BaseModel):
    wishlist_id: int | None
    user_id: int
    items: List[WishlistItemOut]


# checkout / orders

class CheckoutItemIn(BaseModel):
    phone_id: int = Field(..., gt=0, strict=True)
    quantity: int = Field(..., ge=1, strict=True)


class CheckoutIn(BaseModel):
    items: List[CheckoutItemIn] = Field(..., min_length=1)


class CheckoutOut(BaseModel):
    success: bool
    message: str
    order_id: int


class OrderPhoneOut(BaseModel):
    id: int
    title: str
    brand: str
    price: Decimal


class OrderItemOut(BaseModel):
    phone_id: int | None
    phone: OrderPhoneOut | None = None
    quantity: int
    price: Decimal


class OrderOut(BaseModel):
    id: int
    user: UserBrief | None = None
    items: List[OrderItemOut]
    total_amount: Decimal
    status: str
    payment_method: str
    note: str | None = None
    created_at: datetime
    updated_at: datetime


class OrderPage(BaseModel):
    orders: List[OrderOut]
    pagination: Pagination


class OrderStatusIn(BaseModel):
    status: OrderStatus


class MoveToCartOut(BaseModel):
    wishlist: WishlistOut
    cart: CartOut


class HealthOut(BaseModel):
    status: str
    database: str

# phonedeals/api/routers/admin.py
from datetime import datetime
from typing import List

from fastapi import APIRouter, Depends, Query, Response
from sqlalchemy.orm import Session

from phonedeals.api.deps import require_admin
from phonedeals.data.database import get_db
from phonedeals.domain.schemas import (
    ListingIn,
    ListingStatusIn,
    OrderOut,
    OrderPage,
    OrderStatus,
    OrderStatusIn,
    PhoneOut,
    PhonePage,
    ReviewPage,
    SessionUser,
    UserRead,
    UserUpdate,
)
from phonedeals.services.catalog_service import CatalogService
from phonedeals.services.order_service import OrderService
from phonedeals.services.user_service import UserService

router = APIRouter(prefix="/admin", tags=["admin"], dependencies=[Depends(require_admin)])


# orders

@router.get("/orders", response_model=OrderPage)
def list_orders(
    status: OrderStatus | None = Query(None),
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return OrderService(db).list_all(status, start_date, end_date, page, limit)


@router.get("/orders/export")
def export_orders(
    fmt: str = Query("csv", alias="format", pattern="^(csv|json)$"),
    status: OrderStatus | None = Query(None),
    start_date: datetime | None = Query(None),
    end_date: datetime | None = Query(None),
    db: Session = Depends(get_db),
):
    content, media_type = OrderService(db).export(fmt, status, start_date, end_date)
    return Response(
        content=content,
        media_type=media_type,
        headers={"Content-Disposition": f'attachment; filename="orders.{fmt}"'},
    )


@router.get("/orders/{order_id}", response_model=OrderOut)
def get_order(order_id: int, db: Session = Depends(get_db)):
    return OrderService(db).get_order(order_id)


@router.patch("/orders/{order_id}/status", response_model=OrderOut)
def update_order_status(order_id: int, payload: OrderStatusIn, db: Session = Depends(get_db)):
    return OrderService(db).update_status(order_id, payload.status)


# phones

@router.get("/phones", response_model=PhonePage)
def list_phones(
    term: str | None = Query(None, max_length=200),
    brand: str | None = Query(None),
    disabled: bool | None = Query(None),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return CatalogService(db).admin_list(term, brand, disabled, page, limit)


@router.put("/phones/{phone_id}", response_model=PhoneOut)
def update_phone(
    phone_id: int,
    payload: ListingIn,
    current: SessionUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return CatalogService(db).update_listing(current, phone_id, payload.model_dump())


@router.put("/phones/{phone_id}/status", response_model=PhoneOut)
def set_phone_status(
    phone_id: int,
    payload: ListingStatusIn,
    current: SessionUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return CatalogService(db).set_listing_status(current, phone_id, payload.status)


@router.delete("/phones/{phone_id}", status_code=204)
def delete_phone(
    phone_id: int,
    current: SessionUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    CatalogService(db).delete_listing(current, phone_id)
    return Response(status_code=204)


# reviews

@router.get("/reviews", response_model=ReviewPage)
def list_reviews(
    brand: str | None = Query(None),
    hidden: bool | None = Query(None),
    term: str | None = Query(None, max_length=200),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return CatalogService(db).list_reviews(brand=brand, hidden=hidden, term=term, page=page, limit=limit)


# users

@router.get("/users", response_model=List[UserRead])
def list_users(db: Session = Depends(get_db)):
    return UserService(db).list_users()


@router.put("/users/{user_id}", response_model=UserRead)
def update_user(user_id: int, payload: UserUpdate, db: Session = Depends(get_db)):
    return UserService(db).update_user(user_id, payload)


@router.delete("/users/{user_id}", status_code=204)
def delete_user(user_id: int, db: Session = Depends(get_db)):
    UserService(db).delete_user(user_id)
    return Response(status_code=204)


@router.get("/users/{user_id}/reviews", response_model=ReviewPage)
def list_user_reviews(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
):
    UserService(db).get_user(user_id)
    return CatalogService(db).list_reviews(reviewer_id=user_id, page=page, limit=limit)

# phonedeals/api/routers/carts.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from phonedeals.api.deps import get_broadcaster, get_mailer, require_owner_or_admin
from phonedeals.data.database import get_db
from phonedeals.domain.schemas import CartOut, CartQuantityIn, CheckoutIn, CheckoutOut, SessionUser
from phonedeals.services.cart_service import CartService
from phonedeals.services.checkout_service import CheckoutService
from phonedeals.services.notification_service import NotificationBroadcaster, OrderMailer

router = APIRouter(prefix="/users/{user_id}/cart", tags=["cart"])


def get_service(db: Session):
    return CartService(db)


@router.get("", response_model=CartOut)
def get_cart(
    user_id: int,
    _: SessionUser = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    return get_service(db).get(user_id)


@router.delete("", response_model=CartOut)
def clear_cart(
    user_id: int,
    _: SessionUser = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    return get_service(db).clear(user_id)


@router.post("/checkout", response_model=CheckoutOut, status_code=201)
def checkout(
    user_id: int,
    payload: CheckoutIn,
    _: SessionUser = Depends(require_owner_or_admin),
    broadcaster: NotificationBroadcaster = Depends(get_broadcaster),
    mailer: OrderMailer = Depends(get_mailer),
    db: Session = Depends(get_db),
):
    """
    Buys exactly the given items (not necessarily the whole cart).
    On success the whole cart is emptied.
    """
    svc = CheckoutService(db, broadcaster=broadcaster, mailer=mailer)
    return svc.checkout(user_id, [item.model_dump() for item in payload.items])


@router.put("/{phone_id}", response_model=CartOut)
def set_item_quantity(
    user_id: int,
    phone_id: int,
    payload: CartQuantityIn,
    _: SessionUser = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    return get_service(db).set_item_quantity(user_id, phone_id, payload.quantity)


@router.delete("/{phone_id}", response_model=CartOut)
def remove_item(
    user_id: int,
    phone_id: int,
    _: SessionUser = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    return get_service(db).remove_item(user_id, phone_id)

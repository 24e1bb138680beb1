# phonedeals/api/routers/wishlists.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from phonedeals.api.deps import require_owner_or_admin
from phonedeals.data.database import get_db
from phonedeals.domain.schemas import MoveToCartOut, SessionUser, WishlistOut
from phonedeals.services.wishlist_service import WishlistService

router = APIRouter(prefix="/users/{user_id}/wishlist", tags=["wishlist"])


def get_service(db: Session):
    return WishlistService(db)


@router.get("", response_model=WishlistOut)
def get_wishlist(
    user_id: int,
    _: SessionUser = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    return get_service(db).get(user_id)


@router.post("/{phone_id}", response_model=WishlistOut, status_code=201)
def add_to_wishlist(
    user_id: int,
    phone_id: int,
    _: SessionUser = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    return get_service(db).add(user_id, phone_id)


@router.delete("/{phone_id}", response_model=WishlistOut)
def remove_from_wishlist(
    user_id: int,
    phone_id: int,
    _: SessionUser = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    return get_service(db).remove(user_id, phone_id)


@router.post("/{phone_id}/cart", response_model=MoveToCartOut)
def move_to_cart(
    user_id: int,
    phone_id: int,
    _: SessionUser = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    return get_service(db).move_to_cart(user_id, phone_id)

# phonedeals/api/routers/listings.py
from typing import List

from fastapi import APIRouter, Depends, Response
from sqlalchemy.orm import Session

from phonedeals.api.deps import require_owner_or_admin
from phonedeals.data.database import get_db
from phonedeals.domain.schemas import (
    ListingIn,
    ListingStatusIn,
    PhoneOut,
    SellerListingComments,
    SessionUser,
)
from phonedeals.services.catalog_service import CatalogService

router = APIRouter(prefix="/users/{user_id}/listings", tags=["listings"])


def get_service(db: Session):
    return CatalogService(db)


@router.get("", response_model=List[PhoneOut])
def list_listings(
    user_id: int,
    _: SessionUser = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    return get_service(db).list_by_seller(user_id)


@router.get("/reviews", response_model=List[SellerListingComments])
def listing_reviews(
    user_id: int,
    _: SessionUser = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    """Every review left on the seller's listings, hidden ones included."""
    return get_service(db).seller_comments(user_id)


@router.post("", response_model=PhoneOut, status_code=201)
def create_listing(
    user_id: int,
    payload: ListingIn,
    _: SessionUser = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    return get_service(db).create_listing(user_id, payload.model_dump())


@router.put("/{phone_id}", response_model=PhoneOut)
def update_listing(
    user_id: int,
    phone_id: int,
    payload: ListingIn,
    current: SessionUser = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    return get_service(db).update_listing(current, phone_id, payload.model_dump())


@router.put("/{phone_id}/status", response_model=PhoneOut)
def set_listing_status(
    user_id: int,
    phone_id: int,
    payload: ListingStatusIn,
    current: SessionUser = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    return get_service(db).set_listing_status(current, phone_id, payload.status)


@router.delete("/{phone_id}", status_code=204)
def delete_listing(
    user_id: int,
    phone_id: int,
    current: SessionUser = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    get_service(db).delete_listing(current, phone_id)
    return Response(status_code=204)

# phonedeals/api/routers/phones.py
from decimal import Decimal
from typing import List

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from phonedeals.api.deps import get_current_user, get_optional_user
from phonedeals.data.database import get_db
from phonedeals.domain.schemas import (
    BestSellerOut,
    PhoneDetailOut,
    PhoneSearchOut,
    ReviewIn,
    ReviewOut,
    ReviewVisibilityIn,
    SessionUser,
    SoldOutSoonOut,
)
from phonedeals.services.catalog_service import CatalogService

router = APIRouter(prefix="/phones", tags=["phones"])


def get_service(db: Session):
    return CatalogService(db)


@router.get("/search", response_model=PhoneSearchOut)
def search_phones(
    term: str | None = Query(None, max_length=200),
    brand: str | None = Query(None),
    min_price: Decimal | None = Query(None, ge=0),
    max_price: Decimal | None = Query(None, ge=0),
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    db: Session = Depends(get_db),
):
    return get_service(db).search(term, brand, min_price, max_price, page, limit)


@router.get("/sold-out-soon", response_model=List[SoldOutSoonOut])
def sold_out_soon(db: Session = Depends(get_db)):
    return get_service(db).sold_out_soon()


@router.get("/best-sellers", response_model=List[BestSellerOut])
def best_sellers(db: Session = Depends(get_db)):
    return get_service(db).best_sellers()


@router.get("/brands", response_model=List[str])
def brands(db: Session = Depends(get_db)):
    return get_service(db).brands()


@router.get("/{phone_id}", response_model=PhoneDetailOut)
def get_phone(
    phone_id: int,
    viewer: SessionUser | None = Depends(get_optional_user),
    db: Session = Depends(get_db),
):
    return get_service(db).get_detail(phone_id, viewer)


@router.post("/{phone_id}/reviews", response_model=ReviewOut, status_code=201)
def add_review(
    phone_id: int,
    payload: ReviewIn,
    current: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    return get_service(db).add_review(phone_id, current.id, payload.rating, payload.comment)


@router.put("/{phone_id}/reviews/{review_id}/visibility", response_model=ReviewOut)
def set_review_visibility(
    phone_id: int,
    review_id: int,
    payload: ReviewVisibilityIn,
    current: SessionUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    """Hide or show a review, allowed for the seller, the reviewer and admins."""
    return get_service(db).set_review_visibility(current, phone_id, review_id, payload.hidden)

# phonedeals/api/routers/orders.py
from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from phonedeals.api.deps import require_owner_or_admin
from phonedeals.data.database import get_db
from phonedeals.domain.schemas import OrderPage, SessionUser
from phonedeals.services.order_service import OrderService

router = APIRouter(prefix="/users/{user_id}/orders", tags=["orders"])


@router.get("", response_model=OrderPage)
def order_history(
    user_id: int,
    page: int = Query(1, ge=1),
    limit: int | None = Query(None, ge=1, le=100),
    _: SessionUser = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    """Orders of the user, newest first."""
    return OrderService(db).list_for_user(user_id, page, limit)

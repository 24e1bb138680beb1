# phonedeals/api/routers/users.py
from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from phonedeals.api.deps import require_admin, require_owner_or_admin
from phonedeals.data.database import get_db
from phonedeals.domain.schemas import ProfileUpdate, SessionUser, UserCreate, UserRead
from phonedeals.services.user_service import UserService

router = APIRouter(prefix="/users", tags=["users"])


@router.post("", response_model=UserRead, status_code=201)
def create_user(
    payload: UserCreate,
    _: SessionUser = Depends(require_admin),
    db: Session = Depends(get_db),
):
    return UserService(db).create_user(payload)


@router.get("/{user_id}", response_model=UserRead)
def get_user(
    user_id: int,
    _: SessionUser = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    return UserService(db).get_user(user_id)


@router.put("/{user_id}", response_model=UserRead)
def update_profile(
    user_id: int,
    payload: ProfileUpdate,
    _: SessionUser = Depends(require_owner_or_admin),
    db: Session = Depends(get_db),
):
    return UserService(db).update_profile(user_id, payload)

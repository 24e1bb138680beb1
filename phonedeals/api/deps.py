# phonedeals/api/deps.py
from fastapi import Depends, HTTPException, Request, status
from redis.exceptions import RedisError

from phonedeals.domain import errors
from phonedeals.domain.errors import ErrorCode
from phonedeals.domain.schemas import SessionUser
from phonedeals.services.notification_service import NotificationBroadcaster, OrderMailer
from phonedeals.services.session_store import SessionStore
from phonedeals.utils.settings import SESSION_COOKIE_NAME
from phonedeals.utils.logging import get_logger

logger = get_logger(__name__)

SESSION_HEADER = "X-Session-Id"


def get_session_store(request: Request) -> SessionStore:
    return request.app.state.session_store


def get_broadcaster(request: Request) -> NotificationBroadcaster:
    return request.app.state.broadcaster


def get_mailer() -> OrderMailer:
    return OrderMailer()


def read_session_id(request: Request) -> str | None:
    return request.cookies.get(SESSION_COOKIE_NAME) or request.headers.get(SESSION_HEADER)


def _lookup(store: SessionStore, session_id: str) -> SessionUser | None:
    try:
        return store.get(session_id)
    except RedisError as e:
        logger.error(f"Session store unavailable: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": ErrorCode.TRANSACTION_FAILURE.value, "message": "Session store unavailable."},
        )


def get_current_user(request: Request, store: SessionStore = Depends(get_session_store)) -> SessionUser:
    """
    Resolve the caller from the session cookie (or X-Session-Id header).
    Missing or expired sessions are answered with 401.
    """
    session_id = read_session_id(request)
    user = _lookup(store, session_id) if session_id else None

    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"code": ErrorCode.UNAUTHORIZED.value, "message": "Authentication required."},
        )
    return user


def get_optional_user(request: Request, store: SessionStore = Depends(get_session_store)) -> SessionUser | None:
    session_id = read_session_id(request)
    return _lookup(store, session_id) if session_id else None


def require_owner_or_admin(user_id: int, current: SessionUser = Depends(get_current_user)) -> SessionUser:
    # user_id comes from the path of every /users/{user_id}/... route
    if current.id != user_id and not current.is_admin:
        logger.warning(f"User {current.id} denied access to resources of user {user_id}")
        raise errors.Unauthorized("You can only access your own resources.", user_id=user_id)
    return current


def require_admin(current: SessionUser = Depends(get_current_user)) -> SessionUser:
    if not current.is_admin:
        logger.warning(f"User {current.id} denied access to an admin route")
        raise errors.Unauthorized("Admin privileges required.")
    return current

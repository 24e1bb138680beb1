# phonedeals/api/routers/sessions.py
from fastapi import APIRouter, Depends, HTTPException, Request, Response, status
from redis.exceptions import RedisError

from phonedeals.api.deps import get_current_user, get_session_store, read_session_id
from phonedeals.domain.errors import ErrorCode
from phonedeals.domain.schemas import SessionUser
from phonedeals.services.session_store import SessionStore
from phonedeals.utils.settings import SESSION_COOKIE_NAME
from phonedeals.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/session", tags=["session"])


@router.delete("", status_code=204)
def logout(
    request: Request,
    current: SessionUser = Depends(get_current_user),
    store: SessionStore = Depends(get_session_store),
):
    """Revoke the caller's session and clear the cookie."""
    try:
        store.revoke(read_session_id(request))
    except RedisError as e:
        logger.error(f"Session store unavailable during logout of user {current.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail={"code": ErrorCode.TRANSACTION_FAILURE.value, "message": "Session store unavailable."},
        )

    logger.info(f"User {current.id} logged out")
    response = Response(status_code=204)
    response.delete_cookie(SESSION_COOKIE_NAME)
    return response

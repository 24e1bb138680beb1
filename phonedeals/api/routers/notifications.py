# phonedeals/api/routers/notifications.py
import asyncio

from fastapi import APIRouter, WebSocket, WebSocketDisconnect, status
from fastapi.concurrency import run_in_threadpool
from redis.exceptions import RedisError

from phonedeals.services.notification_service import WebSocketListener
from phonedeals.utils.settings import SESSION_COOKIE_NAME
from phonedeals.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(tags=["notifications"])


@router.websocket("/ws/orders")
async def order_feed(websocket: WebSocket):
    """
    Live NEW_ORDER events for admins.
    The session id is taken from the cookie, the X-Session-Id header or ?session_id=.
    """
    session_id = (
        websocket.cookies.get(SESSION_COOKIE_NAME)
        or websocket.headers.get("x-session-id")
        or websocket.query_params.get("session_id")
    )

    user = None
    if session_id:
        try:
            user = await run_in_threadpool(websocket.app.state.session_store.get, session_id)
        except RedisError as e:
            logger.error(f"Session store unavailable for websocket: {e}")

    if user is None or not user.is_admin:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()

    broadcaster = websocket.app.state.broadcaster
    listener = WebSocketListener(websocket, asyncio.get_running_loop())
    broadcaster.subscribe(listener)
    await websocket.send_json({"type": "SUBSCRIBED"})
    logger.info(f"Admin {user.id} subscribed to the order feed")

    try:
        while True:
            # nothing is expected from the client, this only detects the disconnect
            await websocket.receive_text()
    except WebSocketDisconnect:
        logger.info(f"Admin {user.id} left the order feed")
    finally:
        broadcaster.unsubscribe(listener)

# phonedeals/services/notification_service.py
import asyncio
import threading
from typing import Any, Dict, Protocol, Set

from fastapi.websockets import WebSocket, WebSocketState

from phonedeals.tasks.order_email import send_order_confirmation_task
from phonedeals.utils.logging import get_logger

logger = get_logger(__name__)


class Listener(Protocol):
    @property
    def is_open(self) -> bool: ...

    def send(self, event: Dict[str, Any]) -> None: ...

    def close(self) -> None: ...


class WebSocketListener:
    """
    Admin websocket subscribed to order events.
    send() is called from worker threads (sync endpoints), so the write is
    scheduled on the loop that owns the socket. A failed write marks the
    listener closed and the broadcaster drops it on the next broadcast.
    """

    def __init__(self, websocket: WebSocket, loop: asyncio.AbstractEventLoop):
        self.websocket = websocket
        self.loop = loop
        self.failed = False

    @property
    def is_open(self) -> bool:
        return (
            not self.failed
            and not self.loop.is_closed()
            and self.websocket.client_state == WebSocketState.CONNECTED
            and self.websocket.application_state == WebSocketState.CONNECTED
        )

    def send(self, event: Dict[str, Any]) -> None:
        future = asyncio.run_coroutine_threadsafe(self.websocket.send_json(event), self.loop)
        future.add_done_callback(self._on_sent)

    def _on_sent(self, future) -> None:
        if future.cancelled() or future.exception() is not None:
            self.failed = True

    def close(self) -> None:
        if self.is_open:
            asyncio.run_coroutine_threadsafe(self.websocket.close(code=1001), self.loop)


class NotificationBroadcaster:
    """
    Registry of live listeners, owned by the application (app.state.broadcaster).

    - subscribe / unsubscribe on connect and disconnect
    - broadcast(event) -> number of listeners the event was handed to
    - close() on shutdown

    Delivery is best effort: no retry, no ordering across listeners.
    """

    def __init__(self):
        self._listeners: Set[Listener] = set()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.add(listener)
        logger.info(f"Listener subscribed, {len(self)} active")

    def unsubscribe(self, listener: Listener) -> None:
        with self._lock:
            self._listeners.discard(listener)
        logger.info(f"Listener unsubscribed, {len(self)} active")

    def broadcast(self, event: Dict[str, Any]) -> int:
        with self._lock:
            listeners = list(self._listeners)

        delivered = 0
        for listener in listeners:
            if not listener.is_open:
                self.unsubscribe(listener)
                continue
            try:
                listener.send(event)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping listener after failed send: {e}")
                self.unsubscribe(listener)

        return delivered

    def close(self) -> None:
        with self._lock:
            listeners = list(self._listeners)
            self._listeners.clear()

        for listener in listeners:
            try:
                listener.close()
            except Exception as e:
                logger.warning(f"Closing listener failed: {e}")
        logger.info(f"Broadcaster closed, released {len(listeners)} listeners")


class OrderMailer:
    """
    Queues the buyer's order confirmation.
    Uses Celery so the request never waits on the mail relay.
    """

    def send_order_confirmation(self, order_id: int) -> None:
        send_order_confirmation_task.delay(order_id)
        logger.info(f"Confirmation email for order {order_id} queued")

# phonedeals/services/session_store.py
import json
import secrets

import redis

from phonedeals.domain.schemas import SessionUser
from phonedeals.utils.retry import redis_retry
from phonedeals.utils.settings import REDIS_URL, SESSION_TTL_SECONDS
from phonedeals.utils.logging import get_logger

logger = get_logger(__name__)


class SessionStore:
    """
    - session:{sid} -> {"id": ..., "role": ...}
    - keys expire on their own (EX), reads slide the expiry forward
    - login/registration live elsewhere, this only maps ids to identities
    """

    def __init__(self, url: str | None = None, ttl: int | None = None, client: redis.Redis | None = None):
        self.redis = client or redis.Redis.from_url(url or REDIS_URL, decode_responses=True)
        self.ttl = ttl or SESSION_TTL_SECONDS

    @staticmethod
    def _key(session_id: str) -> str:
        return f"session:{session_id}"

    @redis_retry()
    def get(self, session_id: str) -> SessionUser | None:
        key = self._key(session_id)
        raw = self.redis.get(key)
        if raw is None:
            return None

        self.redis.expire(key, self.ttl)
        return SessionUser.model_validate(json.loads(raw))

    @redis_retry()
    def create(self, user_id: int, role: str = "user", session_id: str | None = None) -> str:
        session_id = session_id or secrets.token_urlsafe(32)
        # SET session:abc '{"id": 1, "role": "user"}' EX 3600
        self.redis.set(self._key(session_id), json.dumps({"id": user_id, "role": role}), ex=self.ttl)
        logger.info(f"Session created for user {user_id}")
        return session_id

    @redis_retry()
    def revoke(self, session_id: str) -> bool:
        return bool(self.redis.delete(self._key(session_id)))

    def close(self) -> None:
        self.redis.close()

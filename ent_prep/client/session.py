# ent_prep/client/session.py
import logging
import time
from typing import Callable, Optional

from .models import StoredUser
from .storage import USER_STORAGE_KEY, KeyValueStorage, read_json_model

logger = logging.getLogger(__name__)

TOKEN_CACHE_SECONDS = 5 * 60


class Session:
    """Caches the auth token read from the stored user blob."""

    def __init__(
        self,
        storage: KeyValueStorage,
        cache_seconds: float = TOKEN_CACHE_SECONDS,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.storage = storage
        self.cache_seconds = cache_seconds
        self.clock = clock
        self._token: Optional[str] = None
        self._fetched_at = 0.0

    async def get_token(self) -> Optional[str]:
        now = self.clock()
        if self._token and now - self._fetched_at < self.cache_seconds:
            return self._token

        user = await read_json_model(self.storage, USER_STORAGE_KEY, StoredUser)
        self._token = user.token if user else None
        self._fetched_at = now
        return self._token

    def clear(self) -> None:
        self._token = None
        self._fetched_at = 0.0

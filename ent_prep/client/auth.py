# ent_prep/client/auth.py
import logging
from typing import List, Optional

from pydantic import ValidationError

from ..fixtures import load_bundled_users
from ..schemas.test_schemas import TestAttempt
from .api import ApiClient, ApiError
from .config import FeatureFlags
from .models import StoredUser
from .session import Session
from .storage import USER_STORAGE_KEY, KeyValueStorage, read_json_model, write_json_model

logger = logging.getLogger(__name__)


class AuthGateway:
    def __init__(self, api: ApiClient, storage: KeyValueStorage, flags: FeatureFlags, session: Session):
        self.api = api
        self.storage = storage
        self.flags = flags
        self.session = session

    def _local_users(self) -> List[StoredUser]:
        return [StoredUser.model_validate(u) for u in load_bundled_users()]

    async def _store_user(self, user: StoredUser) -> None:
        await write_json_model(self.storage, USER_STORAGE_KEY, user, StoredUser)
        self.session.clear()

    async def login(self, username: str, password: str) -> Optional[StoredUser]:
        config = await self.flags.get()

        if config.auth.useBackend:
            try:
                data = await self.api.call("/auth/login", "POST", json={"username": username, "password": password})
                user = StoredUser.model_validate(data)
            except (ApiError, ValidationError) as e:
                logger.error(f"Backend login error: {e}")
                return None
        else:
            user = next(
                (u for u in self._local_users() if u.username == username and u.password == password),
                None,
            )
            if user is None:
                return None

        await self._store_user(user)
        return user

    async def register(self, username: str, password: str, fullName: str, email: str) -> Optional[StoredUser]:
        config = await self.flags.get()
        payload = {"username": username, "password": password, "fullName": fullName, "email": email}

        if config.auth.useBackend:
            try:
                user = StoredUser.model_validate(await self.api.call("/auth/register", "POST", json=payload))
            except (ApiError, ValidationError) as e:
                logger.error(f"Registration error: {e}")
                return None
        else:
            users = self._local_users()
            if any(u.username == username for u in users):
                return None
            user = StoredUser(id=len(users) + 1, testHistory=[], **payload)

        await self._store_user(user)
        return user

    async def logout(self) -> bool:
        config = await self.flags.get()
        if config.auth.useBackend:
            try:
                await self.api.call("/auth/logout", "POST")
            except ApiError as e:
                # local logout proceeds regardless
                logger.info(f"Backend logout failed: {e}")

        self.session.clear()
        try:
            await self.storage.remove_item(USER_STORAGE_KEY)
        except OSError as e:
            logger.error(f"Logout error: {e}")
            return False
        return True

    async def get_current_user(self) -> Optional[StoredUser]:
        config = await self.flags.get()
        stored = await read_json_model(self.storage, USER_STORAGE_KEY, StoredUser)

        if not config.auth.useBackend:
            return stored
        if stored and stored.token:
            return stored

        try:
            user = StoredUser.model_validate(await self.api.call("/auth/current-user"))
        except (ApiError, ValidationError) as e:
            logger.info(f"Falling back to stored user: {e}")
            return stored

        await write_json_model(self.storage, USER_STORAGE_KEY, user, StoredUser)
        return user

    async def update_test_history(self, attempt: TestAttempt) -> bool:
        """Append an attempt to the cached user, then to the backend when enabled."""
        config = await self.flags.get()
        current = await self.get_current_user()
        if current is None:
            logger.error("Cannot update test history: No current user found")
            return False

        updated = current.model_copy(update={"testHistory": [*current.testHistory, attempt]})
        await write_json_model(self.storage, USER_STORAGE_KEY, updated, StoredUser)

        if config.auth.useBackend and config.tests.useBackend:
            try:
                await self.api.call(
                    "/auth/test-history",
                    "POST",
                    json=attempt.model_dump(exclude={"id"}),
                )
            except ApiError as e:
                logger.error(f"API call to update test history failed, but local update succeeded: {e}")
        return True

# ent_prep/client/__init__.py
import random
from typing import Optional

import httpx

from .api import ApiClient, ApiError, ApiTimeoutError
from .auth import AuthGateway
from .config import API_BASE_URL, API_TIMEOUT, FeatureFlags
from .feedback import FeedbackGateway
from .models import ApiConfig, ApiServiceConfig, StoredUser, TestResult
from .session import Session
from .storage import JsonFileStorage, KeyValueStorage, MemoryStorage
from .tests import TestGateway


class EntClient:
    """Wires storage, feature flags, session and the feature gateways together."""

    def __init__(
        self,
        storage: KeyValueStorage,
        base_url: str = API_BASE_URL,
        timeout: float = API_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        rng: Optional[random.Random] = None,
    ):
        self.storage = storage
        self.flags = FeatureFlags(storage)
        self.session = Session(storage)
        self.api = ApiClient(self.session, base_url=base_url, timeout=timeout, transport=transport)
        self.auth = AuthGateway(self.api, storage, self.flags, self.session)
        self.tests = TestGateway(self.api, storage, self.flags, self.auth, rng=rng)
        self.feedback = FeedbackGateway(self.api, self.flags, self.auth, self.tests)

    async def initialize(self) -> None:
        await self.flags.initialize()

    async def aclose(self) -> None:
        await self.api.aclose()

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, *exc):
        await self.aclose()


__all__ = [
    "ApiClient",
    "ApiConfig",
    "ApiError",
    "ApiServiceConfig",
    "ApiTimeoutError",
    "EntClient",
    "JsonFileStorage",
    "MemoryStorage",
    "StoredUser",
    "TestResult",
]

# ent_prep/client/config.py
import logging

from .models import ApiConfig, ApiServiceConfig
from .storage import API_MODE_KEY, KeyValueStorage, read_json_model, write_json_model

logger = logging.getLogger(__name__)

API_BASE_URL = "https://ent-backend-yllb.onrender.com"
API_TIMEOUT = 10.0  # seconds

FEATURES = ("auth", "tests", "aiHelper")


class FeatureFlags:
    """Per-feature switch between the backend and bundled local data."""

    def __init__(self, storage: KeyValueStorage):
        self.storage = storage

    async def initialize(self) -> None:
        if await self.storage.get_item(API_MODE_KEY) is None:
            await write_json_model(self.storage, API_MODE_KEY, ApiConfig(), ApiConfig)

    async def get(self) -> ApiConfig:
        config = await read_json_model(self.storage, API_MODE_KEY, ApiConfig)
        if config is None:
            config = ApiConfig()
            try:
                await write_json_model(self.storage, API_MODE_KEY, config, ApiConfig)
            except OSError as e:
                logger.error(f"Failed to store default API config: {e}")
        return config

    async def set(self, config: ApiConfig) -> bool:
        try:
            await write_json_model(self.storage, API_MODE_KEY, config, ApiConfig)
            return True
        except OSError as e:
            logger.error(f"Error setting API config: {e}")
            return False

    async def set_service(self, service: str, use_backend: bool) -> bool:
        if service not in FEATURES:
            raise ValueError(f"Unknown feature: {service}")
        config = await self.get()
        setattr(config, service, ApiServiceConfig(useBackend=use_backend))
        return await self.set(config)

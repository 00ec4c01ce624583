# ent_prep/client/storage.py
"""Device key-value storage holding JSON blobs.

Values are plain strings, as on the device. ``read_json_model`` is the
validated-decode step: a blob that is not valid JSON or does not match the
expected type is logged and treated as absent.
"""
import json
import logging
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional, Type, TypeVar, Union

from pydantic import TypeAdapter, ValidationError

logger = logging.getLogger(__name__)

USER_STORAGE_KEY = "ent_user"
TEST_RESULTS_KEY = "ent_test_results"
API_MODE_KEY = "ent_api_mode"

T = TypeVar("T")


class KeyValueStorage(ABC):
    @abstractmethod
    async def get_item(self, key: str) -> Optional[str]:
        pass

    @abstractmethod
    async def set_item(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    async def remove_item(self, key: str) -> None:
        pass


class MemoryStorage(KeyValueStorage):
    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._items: Dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> Optional[str]:
        return self._items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self._items[key] = value

    async def remove_item(self, key: str) -> None:
        self._items.pop(key, None)


class JsonFileStorage(KeyValueStorage):
    """One ``<key>.json`` file per key inside ``directory``."""

    def __init__(self, directory: Union[str, Path]):
        self.directory = Path(directory)
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, key: str) -> Path:
        return self.directory / f"{key}.json"

    async def get_item(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        return path.read_text(encoding="utf-8")

    async def set_item(self, key: str, value: str) -> None:
        path = self._path(key)
        tmp = path.with_suffix(".tmp")
        tmp.write_text(value, encoding="utf-8")
        tmp.replace(path)

    async def remove_item(self, key: str) -> None:
        self._path(key).unlink(missing_ok=True)


async def read_json_model(storage: KeyValueStorage, key: str, model: Union[Type[T], Any]) -> Optional[T]:
    raw = await storage.get_item(key)
    if raw is None:
        return None
    try:
        return TypeAdapter(model).validate_json(raw)
    except ValidationError as e:
        logger.warning(f"Discarding malformed value stored under {key}: {e.error_count()} error(s)")
        return None


async def write_json_model(storage: KeyValueStorage, key: str, value: Any, model: Union[Type[T], Any, None] = None) -> None:
    if model is not None:
        payload = TypeAdapter(model).dump_json(value, exclude_none=True).decode("utf-8")
    else:
        payload = json.dumps(value)
    await storage.set_item(key, payload)

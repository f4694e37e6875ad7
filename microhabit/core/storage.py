"""
Local key-value store.

String keys, JSON values. Backed by a single JSON file by default, or by Redis
when REDIS_URL is configured. Mirrors a mobile preferences store: no schema,
no migrations, last write wins.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import Any, Dict, Optional, Protocol, Union

import redis

from microhabit.core.config import settings
from microhabit.services.logger import logger


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[Any]: ...

    def set(self, key: str, value: Any) -> None: ...

    def delete(self, key: str) -> None: ...

    def clear(self) -> None: ...


class JsonFileStore:
    """Whole-file JSON dictionary. Every write rewrites the file atomically."""

    def __init__(self, path: Union[str, Path]):
        self.path = Path(path)

    def _read_all(self) -> Dict[str, Any]:
        if not self.path.exists():
            return {}
        try:
            with self.path.open("r", encoding="utf-8") as fh:
                data = json.load(fh)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error(f"Failed to read store file {self.path}: {exc}")
            return {}
        if not isinstance(data, dict):
            logger.error(f"Store file {self.path} does not hold a JSON object")
            return {}
        return data

    def _write_all(self, data: Dict[str, Any]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=str(self.path.parent), prefix=f".{self.path.name}.", suffix=".tmp"
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as fh:
                json.dump(data, fh, ensure_ascii=False, indent=2)
            os.replace(tmp_path, self.path)
        except Exception:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def get(self, key: str) -> Optional[Any]:
        return self._read_all().get(key)

    def set(self, key: str, value: Any) -> None:
        data = self._read_all()
        data[key] = value
        self._write_all(data)

    def delete(self, key: str) -> None:
        data = self._read_all()
        if key in data:
            del data[key]
            self._write_all(data)

    def clear(self) -> None:
        self._write_all({})


class RedisStore:
    """Redis-backed store. Values are JSON strings under a namespaced key."""

    def __init__(self, client: redis.Redis, namespace: str = "microhabit"):
        self.client = client
        self.namespace = namespace

    def _key(self, key: str) -> str:
        return f"{self.namespace}:{key}"

    def get(self, key: str) -> Optional[Any]:
        try:
            raw = self.client.get(self._key(key))
        except redis.exceptions.RedisError as exc:
            logger.error(f"Redis read failed for {self._key(key)}: {exc}")
            return None
        if raw is None:
            return None
        try:
            return json.loads(raw)
        except (TypeError, json.JSONDecodeError) as exc:
            logger.error(f"Corrupt value for {self._key(key)}: {exc}")
            return None

    def set(self, key: str, value: Any) -> None:
        self.client.set(self._key(key), json.dumps(value, ensure_ascii=False))

    def delete(self, key: str) -> None:
        self.client.delete(self._key(key))

    def clear(self) -> None:
        keys = list(self.client.scan_iter(match=f"{self.namespace}:*"))
        if keys:
            self.client.delete(*keys)


_store: Optional[KeyValueStore] = None


def get_store() -> KeyValueStore:
    """
    Lazily initialize and return the shared store. Uses Redis when REDIS_URL is
    set and reachable, otherwise the JSON file at STORAGE_PATH.
    """

    global _store

    if _store is not None:
        return _store

    if settings.REDIS_URL:
        try:
            client = redis.from_url(settings.REDIS_URL, decode_responses=True)
            client.ping()
            _store = RedisStore(client, namespace=settings.REDIS_NAMESPACE)
            logger.info("Using Redis key-value store")
            return _store
        except Exception as exc:
            logger.warning(
                f"Redis connection failed ({exc}). Falling back to JSON file store."
            )

    _store = JsonFileStore(settings.STORAGE_PATH)
    return _store


def reset_store(store: Optional[KeyValueStore] = None) -> None:
    """Replace the shared store (None forces re-initialization)."""
    global _store
    _store = store

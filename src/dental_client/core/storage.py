"""
Durable key/value storage for client state that must survive restarts.

Mirrors the browser's localStorage: string keys, string values, one flat
namespace. Backends never raise on read; a value that cannot be read is
reported as absent.
"""
import asyncio
import json
import logging
import tempfile
from pathlib import Path
from typing import Protocol

from dental_client.core.config import Settings
from dental_client.core.redis import RedisClient

logger = logging.getLogger(__name__)


class Storage(Protocol):
    """Protocol for durable storage backends."""

    async def get_item(self, key: str) -> str | None:
        """Return the stored value, or None if absent or unreadable."""

    async def set_item(self, key: str, value: str) -> None:
        """Store a value, replacing any previous one."""

    async def remove_item(self, key: str) -> None:
        """Delete a value without raising if it is absent."""

    async def close(self) -> None:
        """Release any held resources."""


class MemoryStorage:
    """In-process storage; state is lost when the process exits."""

    def __init__(self, initial: dict[str, str] | None = None) -> None:
        self.items: dict[str, str] = dict(initial or {})

    async def get_item(self, key: str) -> str | None:
        return self.items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        self.items[key] = value

    async def remove_item(self, key: str) -> None:
        self.items.pop(key, None)

    async def close(self) -> None:
        return None


class FileStorage:
    """
    Storage backed by a single JSON object on disk.

    The whole file is rewritten on every change. Changes made through one
    instance are serialized, and each write goes to its own temporary file
    that then replaces the target. A missing, unreadable or non-object file is
    treated as empty storage.
    """

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)
        self._lock = asyncio.Lock()

    def _read_all(self) -> dict[str, str]:
        try:
            raw = self._path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return {}
        except OSError as e:
            logger.warning("storage_read_failed", extra={"path": str(self._path), "error": str(e)})
            return {}
        try:
            data = json.loads(raw)
        except json.JSONDecodeError:
            logger.warning("storage_file_corrupt", extra={"path": str(self._path)})
            return {}
        if not isinstance(data, dict):
            logger.warning("storage_file_corrupt", extra={"path": str(self._path)})
            return {}
        return {k: v for k, v in data.items() if isinstance(v, str)}

    def _write_all(self, items: dict[str, str]) -> None:
        self._path.parent.mkdir(parents=True, exist_ok=True)
        with tempfile.NamedTemporaryFile(
            "w",
            encoding="utf-8",
            dir=self._path.parent,
            prefix=f".{self._path.name}.",
            suffix=".tmp",
            delete=False,
        ) as tmp:
            json.dump(items, tmp, indent=2)
        try:
            Path(tmp.name).replace(self._path)
        except OSError:
            Path(tmp.name).unlink(missing_ok=True)
            raise

    async def get_item(self, key: str) -> str | None:
        items = await asyncio.to_thread(self._read_all)
        return items.get(key)

    async def set_item(self, key: str, value: str) -> None:
        async with self._lock:
            items = await asyncio.to_thread(self._read_all)
            items[key] = value
            await asyncio.to_thread(self._write_all, items)

    async def remove_item(self, key: str) -> None:
        async with self._lock:
            items = await asyncio.to_thread(self._read_all)
            if items.pop(key, None) is not None:
                await asyncio.to_thread(self._write_all, items)

    async def close(self) -> None:
        return None


class RedisStorage:
    """Storage backed by Redis; degrades to empty storage when Redis is unavailable."""

    def __init__(self, client: RedisClient) -> None:
        self._client = client

    async def get_item(self, key: str) -> str | None:
        value = await self._client.get(key)
        if value is None:
            return None
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError:
            logger.warning("storage_value_undecodable", extra={"key": key})
            return None

    async def set_item(self, key: str, value: str) -> None:
        if not await self._client.set(key, value):
            logger.warning("storage_write_skipped", extra={"key": key, "backend": "redis"})

    async def remove_item(self, key: str) -> None:
        if not await self._client.delete(key):
            logger.warning("storage_delete_skipped", extra={"key": key, "backend": "redis"})

    async def close(self) -> None:
        await self._client.close()


async def build_storage(settings: Settings) -> Storage:
    """Create and connect the storage backend selected by configuration."""
    if settings.storage_backend == "memory":
        return MemoryStorage()
    if settings.storage_backend == "redis":
        client = RedisClient(
            settings.redis_url,
            enabled=settings.redis_enabled,
            key_prefix=settings.redis_key_prefix,
        )
        await client.connect()
        return RedisStorage(client)
    return FileStorage(settings.storage_path)

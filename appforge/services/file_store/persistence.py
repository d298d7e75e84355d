"""
Durable storage for the flat backend's state document.

The whole map is serialized as one JSON document and stored under a single
well-known key:

    {"version": 1, "entries": {"<normalized path>": {"kind": "file",
     "content": "...", "modified_at": 1700000000.0, "size": 42}}}

Older unversioned documents (a bare map using "type"/"modificationTime") are
still accepted on load.
"""

import json
import uuid
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, Optional

import aiofiles
import aiofiles.os

from appforge.core.exceptions import PersistenceFailureError
from appforge.core.logging_config import logger
from appforge.core.redis_client import RedisClient
from appforge.services.file_store.paths import normalize_path


STATE_VERSION = 1


def encode_state(entries: Dict[str, Dict[str, Any]]) -> str:
    return json.dumps({"version": STATE_VERSION, "entries": entries}, ensure_ascii=False)


def decode_state(document: Optional[str]) -> Dict[str, Dict[str, Any]]:
    """Parse a persisted document into the in-memory entry map"""
    if not document:
        return {}

    try:
        data = json.loads(document)
    except json.JSONDecodeError as e:
        raise PersistenceFailureError(f"Stored file system state is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise PersistenceFailureError("Stored file system state must be a JSON object")

    if "version" in data and isinstance(data.get("entries"), dict):
        if data["version"] > STATE_VERSION:
            raise PersistenceFailureError(
                f"Stored file system state version {data['version']} is newer than supported ({STATE_VERSION})"
            )
        raw_entries = data["entries"]
    else:
        raw_entries = data  # legacy unversioned map

    entries: Dict[str, Dict[str, Any]] = {}
    for key, record in raw_entries.items():
        if not isinstance(record, dict):
            logger.warning(f"[FlatState] Skipping malformed entry for {key}")
            continue

        kind = record.get("kind") or record.get("type")
        if kind not in ("file", "directory"):
            logger.warning(f"[FlatState] Skipping entry with unknown kind for {key}")
            continue

        if "modified_at" in record:
            modified_at = float(record["modified_at"])
        else:
            # Legacy documents store milliseconds
            modified_at = float(record.get("modificationTime", 0)) / 1000.0

        normalized = {"kind": kind, "modified_at": modified_at, "size": 0}
        if kind == "file":
            content = record.get("content") or ""
            normalized["content"] = content
            normalized["size"] = len(content.encode("utf-8"))
        entries[normalize_path(key)] = normalized

    return entries


class FlatStatePersistence(ABC):
    """Load/save the serialized state document"""

    @abstractmethod
    async def load(self) -> Optional[str]:
        """Return the stored document or None if nothing was saved yet"""

    @abstractmethod
    async def save(self, document: str) -> None:
        """Replace the stored document"""

    async def close(self) -> None:
        pass


class MemoryPersistence(FlatStatePersistence):
    """Keeps the document in process memory"""

    def __init__(self, document: Optional[str] = None):
        self.document = document
        self.save_count = 0

    async def load(self) -> Optional[str]:
        return self.document

    async def save(self, document: str) -> None:
        self.document = document
        self.save_count += 1


class JsonFilePersistence(FlatStatePersistence):
    """Stores the document in a single JSON file, replaced atomically"""

    def __init__(self, path: str):
        self.path = Path(path).expanduser()

    async def load(self) -> Optional[str]:
        try:
            async with aiofiles.open(self.path, "r", encoding="utf-8") as f:
                return await f.read()
        except FileNotFoundError:
            return None

    async def save(self, document: str) -> None:
        await aiofiles.os.makedirs(self.path.parent, exist_ok=True)
        temp_path = self.path.with_name(f".{self.path.name}.{uuid.uuid4().hex[:8]}.tmp")
        try:
            async with aiofiles.open(temp_path, "w", encoding="utf-8") as f:
                await f.write(document)
                await f.flush()
            await aiofiles.os.replace(temp_path, self.path)
        finally:
            if await aiofiles.os.path.exists(temp_path):
                await aiofiles.os.remove(temp_path)


class RedisPersistence(FlatStatePersistence):
    """Stores the document under one Redis key"""

    def __init__(self, client: RedisClient, key: str):
        self.client = client
        self.key = key

    async def load(self) -> Optional[str]:
        return await self.client.get(self.key)

    async def save(self, document: str) -> None:
        await self.client.set(self.key, document)

    async def close(self) -> None:
        await self.client.disconnect()

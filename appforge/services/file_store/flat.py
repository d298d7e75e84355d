"""
Flat key-value backend.

Entries live in one in-memory dict keyed by normalized path. Each mutation is
a single dict operation followed by a debounced flush: a pending flush is
cancelled and rescheduled on every write, so a burst of writes produces one
serialization. flush() and close() force persistence.
"""

import asyncio
import time
from typing import Any, Dict, List, Optional

from appforge.core.exceptions import EntryNotFoundError, IOFailureError, PersistenceFailureError
from appforge.core.logging_config import logger
from appforge.schemas.storage import EntryKind, ProjectEntry
from appforge.services.file_store.base import EntryInfo, StorageBackend
from appforge.services.file_store.paths import join_path, normalize_path, relative_to
from appforge.services.file_store.persistence import FlatStatePersistence, decode_state, encode_state


class FlatMapBackend(StorageBackend):
    """Flat map storage persisted as a single serialized document"""

    name = "flat"

    def __init__(
        self,
        base_dir: str,
        persistence: FlatStatePersistence,
        debounce_seconds: float = 1.0,
    ):
        self.base_dir = normalize_path(base_dir)
        self.persistence = persistence
        self.debounce_seconds = debounce_seconds

        self._entries: Dict[str, Dict[str, Any]] = {}
        self._loaded = False
        self._load_lock = asyncio.Lock()
        self._flush_lock = asyncio.Lock()
        self._flush_task: Optional[asyncio.Task] = None
        self._flush_error: Optional[PersistenceFailureError] = None
        self._dirty = False

    # =========================================================================
    # STATE LOADING
    # =========================================================================

    async def _ensure_loaded(self) -> None:
        if self._loaded:
            return
        async with self._load_lock:
            if self._loaded:
                return
            try:
                document = await self.persistence.load()
            except Exception as e:
                raise PersistenceFailureError(f"Failed to load file system state: {e}") from e
            self._entries = decode_state(document)
            self._loaded = True
            logger.info(f"[FlatMapBackend] Loaded {len(self._entries)} entries")

    # =========================================================================
    # DEBOUNCED PERSISTENCE
    # =========================================================================

    def _schedule_flush(self) -> None:
        self._dirty = True
        if self._flush_task and not self._flush_task.done():
            self._flush_task.cancel()
        self._flush_task = asyncio.get_running_loop().create_task(self._delayed_flush())

    async def _delayed_flush(self) -> None:
        await asyncio.sleep(self.debounce_seconds)
        try:
            # A write arriving mid-save must not cancel the save itself
            await asyncio.shield(self._persist())
        except PersistenceFailureError as e:
            self._flush_error = e
            logger.error(f"[FlatMapBackend] Background flush failed, keeping in-memory state: {e}")

    async def _persist(self) -> None:
        async with self._flush_lock:
            if not self._dirty:
                return
            document = encode_state(self._entries)
            self._dirty = False
            try:
                await self.persistence.save(document)
            except Exception as e:
                self._dirty = True
                raise PersistenceFailureError(f"Failed to persist file system state: {e}") from e
            logger.debug(f"[FlatMapBackend] Persisted {len(self._entries)} entries ({len(document)} bytes)")

    @property
    def has_pending_flush(self) -> bool:
        return self._flush_task is not None and not self._flush_task.done()

    async def flush(self) -> None:
        """
        Persist now. A failure from an earlier background flush is raised here
        even when this retry succeeds, so it is never lost silently.
        """
        if self.has_pending_flush:
            self._flush_task.cancel()

        background_error, self._flush_error = self._flush_error, None
        await self._persist()

        if background_error is not None:
            raise PersistenceFailureError(
                f"An earlier background flush failed (state has now been persisted): {background_error.message}"
            ) from background_error

    async def close(self) -> None:
        try:
            await self.flush()
        finally:
            await self.persistence.close()

    # =========================================================================
    # ENTRY OPERATIONS
    # =========================================================================

    def _set_directory(self, path: str) -> bool:
        record = self._entries.get(path)
        if record is not None:
            if record["kind"] != "directory":
                raise IOFailureError("create directory", path, "a file exists at this path")
            return False
        self._entries[path] = {"kind": "directory", "modified_at": time.time(), "size": 0}
        return True

    async def make_dirs(self, path: str) -> bool:
        await self._ensure_loaded()

        chain = [path]
        current = path
        while current != self.base_dir and "/" in current.strip("/"):
            current = current.rsplit("/", 1)[0] or "/"
            chain.append(current)
            if current == self.base_dir:
                break

        created = False
        for directory in reversed(chain):
            created = self._set_directory(directory) or created

        if created:
            self._schedule_flush()
        return created

    async def write_text(self, path: str, content: str) -> None:
        await self._ensure_loaded()

        existing = self._entries.get(path)
        if existing is not None and existing["kind"] == "directory":
            raise IOFailureError("write", path, "a directory exists at this path")

        self._entries[path] = {
            "kind": "file",
            "content": content,
            "modified_at": time.time(),
            "size": len(content.encode("utf-8")),
        }
        self._schedule_flush()

    async def read_text(self, path: str) -> str:
        await self._ensure_loaded()

        record = self._entries.get(path)
        if record is None or record["kind"] != "file":
            raise EntryNotFoundError(path)
        return record.get("content") or ""

    async def entry_info(self, path: str) -> Optional[EntryInfo]:
        await self._ensure_loaded()

        record = self._entries.get(path)
        if record is None:
            return None
        return EntryInfo(
            kind=EntryKind(record["kind"]),
            size=record.get("size", 0),
            modified_at=record.get("modified_at", 0.0),
        )

    def _build_tree(self, root: str) -> Dict[str, dict]:
        # Group keys on their first segment beyond the directory, recursively
        prefix = root.rstrip("/") + "/"
        tree: Dict[str, dict] = {}
        for key in self._entries:
            if not key.startswith(prefix):
                continue
            node = tree
            for segment in key[len(prefix):].split("/"):
                node = node.setdefault(segment, {})
        return tree

    def _emit_tree(self, root: str, directory: str, node: Dict[str, dict], entries: List[ProjectEntry]) -> None:
        for name in sorted(node):
            full_path = join_path(directory, name)
            record = self._entries.get(full_path)
            # Intermediate keys missing from legacy state are implicit directories
            kind = EntryKind(record["kind"]) if record else EntryKind.DIRECTORY

            entries.append(ProjectEntry(
                name=name,
                path=relative_to(full_path, root),
                kind=kind,
                size=record.get("size", 0) if record else 0,
                modified_at=record.get("modified_at", 0.0) if record else 0.0,
            ))
            if kind == EntryKind.DIRECTORY:
                self._emit_tree(root, full_path, node[name], entries)

    async def walk(self, root: str) -> List[ProjectEntry]:
        await self._ensure_loaded()

        entries: List[ProjectEntry] = []
        self._emit_tree(root, root, self._build_tree(root), entries)
        return entries

    async def remove_tree(self, path: str) -> bool:
        await self._ensure_loaded()

        prefix = path.rstrip("/") + "/"
        doomed = [key for key in self._entries if key == path or key.startswith(prefix)]
        for key in doomed:
            del self._entries[key]

        if doomed:
            self._schedule_flush()
        return bool(doomed)

    async def list_subdirectories(self, path: str) -> List[str]:
        await self._ensure_loaded()

        tree = self._build_tree(path)
        names = []
        for name in tree:
            record = self._entries.get(join_path(path, name))
            if record is None or record["kind"] == "directory":
                names.append(name)
        return sorted(names)

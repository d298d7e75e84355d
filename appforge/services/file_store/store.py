"""
FileStore - single entry point for project file operations.

Every project file is created, read, listed, copied and deleted through this
facade. It validates and normalizes paths, materializes missing ancestor
directories and delegates the storage itself to a StorageBackend:

- NativeFileBackend: a real directory tree (temp file + os.replace writes)
- FlatMapBackend: an in-memory path map persisted as one document

Usage:
    from appforge.services.file_store import build_file_store

    async with build_file_store(settings) as store:
        root = await store.create_project("todo-app")
        await store.write_file(root, "src/App.tsx", content)
        entries = await store.list_files(root)
"""

from typing import List, Optional

from appforge.core.config import Settings
from appforge.core.exceptions import (
    EntryNotFoundError,
    InvalidPathError,
    ProjectNotFoundError,
)
from appforge.core.logging_config import logger
from appforge.core.redis_client import RedisClient
from appforge.schemas.storage import EntryKind, ProjectEntry
from appforge.services.file_store.base import StorageBackend
from appforge.services.file_store.flat import FlatMapBackend
from appforge.services.file_store.native import NativeFileBackend
from appforge.services.file_store.paths import (
    check_reserved_names,
    is_within,
    join_path,
    normalize_path,
    parent_path,
    relative_to,
    validate_project_name,
)
from appforge.services.file_store.persistence import (
    FlatStatePersistence,
    JsonFilePersistence,
    MemoryPersistence,
    RedisPersistence,
)


# Directories every new project starts with
SCAFFOLD_DIRECTORIES = ("src", "assets", "components", "screens", "services")


class FileStore:
    """Project file operations over a pluggable storage backend"""

    def __init__(self, backend: StorageBackend):
        self.backend = backend

    @property
    def base_dir(self) -> str:
        return self.backend.base_dir

    async def __aenter__(self) -> "FileStore":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    # =========================================================================
    # PATH RESOLUTION
    # =========================================================================

    def project_root(self, name: str) -> str:
        """Store path of the project called name"""
        return join_path(self.base_dir, validate_project_name(name))

    def _check_root(self, root: str) -> str:
        normalized = normalize_path(root)
        if normalized == self.base_dir or not is_within(normalized, self.base_dir):
            raise InvalidPathError(root, "project root must lie inside the store")
        return normalized

    def _check_store_path(self, path: str) -> str:
        normalized = normalize_path(path)
        if normalized == self.base_dir or not is_within(normalized, self.base_dir):
            raise InvalidPathError(path, "path must lie inside the store")
        check_reserved_names(relative_to(normalized, self.base_dir))
        return normalized

    def _resolve(self, root: str, rel_path: str) -> str:
        root = self._check_root(root)
        relative = normalize_path(rel_path or "").lstrip("/")
        if not relative:
            raise InvalidPathError(rel_path or "", "relative path must not be empty")
        return join_path(root, check_reserved_names(relative))

    # =========================================================================
    # PROJECTS
    # =========================================================================

    async def create_project(self, name: str) -> str:
        """
        Create the project root with its scaffold directories.

        Idempotent: existing directories and files are left untouched.

        Returns:
            The project root path
        """
        root = self.project_root(name)
        await self.backend.make_dirs(root)
        for directory in SCAFFOLD_DIRECTORIES:
            await self.backend.make_dirs(join_path(root, directory))

        logger.info(f"[FileStore] Project ready at {root} ({self.backend.name} backend)")
        return root

    async def delete_project(self, name: str) -> None:
        """Remove a project and everything beneath it. Deleting twice is a no-op."""
        root = self.project_root(name)
        removed = await self.backend.remove_tree(root)
        if removed:
            logger.info(f"[FileStore] Deleted project {root}")
        else:
            logger.debug(f"[FileStore] Nothing to delete at {root}")

    async def list_projects(self) -> List[str]:
        return sorted(set(await self.backend.list_subdirectories(self.base_dir)))

    async def get_project_info(self, name: str) -> Optional[ProjectEntry]:
        root = self.project_root(name)
        info = await self.backend.entry_info(root)
        if info is None or not info.is_directory:
            return None
        return ProjectEntry(
            name=relative_to(root, self.base_dir),
            path=root,
            kind=info.kind,
            size=info.size,
            modified_at=info.modified_at,
        )

    # =========================================================================
    # FILES
    # =========================================================================

    async def write_file(self, root: str, rel_path: str, content: str) -> None:
        """Replace the file content atomically, creating missing parent directories"""
        path = self._resolve(root, rel_path)
        await self.backend.make_dirs(parent_path(path))
        await self.backend.write_text(path, content)
        logger.debug(f"[FileStore] Wrote {path} ({len(content)} chars)")

    async def read_file(self, root: str, rel_path: str) -> str:
        path = self._resolve(root, rel_path)
        try:
            return await self.backend.read_text(path)
        except EntryNotFoundError as e:
            raise EntryNotFoundError(relative_to(path, normalize_path(root)), normalize_path(root)) from e

    async def file_exists(self, root: str, rel_path: str) -> bool:
        path = self._resolve(root, rel_path)
        return await self.backend.entry_info(path) is not None

    async def create_directory(self, root: str, rel_path: str) -> None:
        await self.backend.make_dirs(self._resolve(root, rel_path))

    async def list_files(self, root: str) -> List[ProjectEntry]:
        """
        All descendants of root, depth-first with siblings sorted by name.

        Raises:
            ProjectNotFoundError: if root does not exist
        """
        root = self._check_root(root)
        info = await self.backend.entry_info(root)
        if info is None or not info.is_directory:
            raise ProjectNotFoundError(relative_to(root, self.base_dir))
        return await self.backend.walk(root)

    async def copy_file(self, src: str, dst: str) -> None:
        """Copy between full store paths; the source must be a file"""
        src = self._check_store_path(src)
        dst = self._check_store_path(dst)

        info = await self.backend.entry_info(src)
        if info is None or info.kind != EntryKind.FILE:
            raise EntryNotFoundError(src)

        content = await self.backend.read_text(src)
        await self.backend.make_dirs(parent_path(dst))
        await self.backend.write_text(dst, content)
        logger.debug(f"[FileStore] Copied {src} -> {dst}")

    # =========================================================================
    # LIFECYCLE
    # =========================================================================

    async def flush(self) -> None:
        await self.backend.flush()

    async def close(self) -> None:
        await self.backend.close()
        logger.info(f"[FileStore] Closed {self.backend.name} backend")


def build_persistence(
    settings: Settings,
    redis_client: Optional[RedisClient] = None,
) -> FlatStatePersistence:
    if settings.FLAT_PERSISTENCE == "redis":
        return RedisPersistence(redis_client or RedisClient(settings.REDIS_URL), settings.FLAT_STORAGE_KEY)
    if settings.FLAT_PERSISTENCE == "memory":
        return MemoryPersistence()
    return JsonFilePersistence(settings.FLAT_STATE_FILE)


def build_file_store(
    settings: Settings,
    redis_client: Optional[RedisClient] = None,
) -> FileStore:
    """Select the backend named by STORAGE_BACKEND"""
    if settings.STORAGE_BACKEND == "flat":
        backend: StorageBackend = FlatMapBackend(
            settings.FLAT_STORAGE_ROOT,
            build_persistence(settings, redis_client),
            debounce_seconds=settings.FLUSH_DEBOUNCE_SECONDS,
        )
    else:
        backend = NativeFileBackend(settings.STORAGE_BASE_DIR)
    return FileStore(backend)

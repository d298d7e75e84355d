from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional

from appforge.schemas.storage import EntryKind, ProjectEntry


@dataclass(frozen=True)
class EntryInfo:
    """Metadata for a single stored path"""
    kind: EntryKind
    size: int = 0
    modified_at: float = 0.0

    @property
    def is_directory(self) -> bool:
        return self.kind == EntryKind.DIRECTORY


class StorageBackend(ABC):
    """
    Storage interface shared by the native filesystem and the flat key-value map.

    All paths are normalized, store-absolute paths (already validated by
    FileStore). Implementations must produce identical walk() output for
    identical operation histories.
    """

    name: str = "abstract"
    base_dir: str

    @abstractmethod
    async def make_dirs(self, path: str) -> bool:
        """Create path and any missing ancestors below the base. Returns True if anything was created."""

    @abstractmethod
    async def write_text(self, path: str, content: str) -> None:
        """Atomically replace the content at path. The parent must exist."""

    @abstractmethod
    async def read_text(self, path: str) -> str:
        """Return file content; EntryNotFoundError for missing paths and directories."""

    @abstractmethod
    async def entry_info(self, path: str) -> Optional[EntryInfo]:
        """Metadata for path or None if absent."""

    @abstractmethod
    async def walk(self, root: str) -> List[ProjectEntry]:
        """All descendants of root, depth-first with siblings sorted by name."""

    @abstractmethod
    async def remove_tree(self, path: str) -> bool:
        """Remove path and everything below it. Returns False if nothing existed."""

    @abstractmethod
    async def list_subdirectories(self, path: str) -> List[str]:
        """Names of the immediate child directories of path, sorted."""

    async def flush(self) -> None:
        """Force pending state to durable storage."""

    async def close(self) -> None:
        """Flush and release resources."""

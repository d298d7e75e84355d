"""
Native filesystem backend.

Writes go to a uniquely named temp file next to the target and are moved into
place with os.replace, so a reader sees either the old or the new content.
"""

import asyncio
import contextlib
import shutil
import stat
import uuid
from pathlib import Path
from typing import List, Optional

import aiofiles
import aiofiles.os

from appforge.core.exceptions import EntryNotFoundError, IOFailureError
from appforge.core.logging_config import logger
from appforge.schemas.storage import EntryKind, ProjectEntry
from appforge.services.file_store.base import EntryInfo, StorageBackend
from appforge.services.file_store.paths import TEMP_SUFFIX, join_path, normalize_path, relative_to, split_path


class NativeFileBackend(StorageBackend):
    """Hierarchical filesystem storage rooted at base_dir"""

    name = "native"

    def __init__(self, base_dir: str):
        self.base_dir = normalize_path(Path(base_dir).expanduser().absolute().as_posix())
        logger.info(f"[NativeFileBackend] Initialized at {self.base_dir}")

    @staticmethod
    def _temp_path_for(path: str) -> str:
        directory, name = split_path(path)
        return join_path(directory, f".{name}.{uuid.uuid4().hex[:8]}{TEMP_SUFFIX}")

    async def make_dirs(self, path: str) -> bool:
        if await aiofiles.os.path.isdir(path):
            return False
        try:
            await aiofiles.os.makedirs(path, exist_ok=True)
        except FileExistsError as e:
            raise IOFailureError("create directory", path, "a file exists at this path") from e
        except OSError as e:
            raise IOFailureError("create directory", path, str(e)) from e
        return True

    async def write_text(self, path: str, content: str) -> None:
        temp_path = self._temp_path_for(path)
        try:
            # Write to temp file first, then atomic rename
            async with aiofiles.open(temp_path, "w", encoding="utf-8", newline="") as f:
                await f.write(content)
                await f.flush()
            await aiofiles.os.replace(temp_path, path)
        except OSError as e:
            raise IOFailureError("write", path, str(e)) from e
        finally:
            with contextlib.suppress(OSError):
                if await aiofiles.os.path.exists(temp_path):
                    await aiofiles.os.remove(temp_path)

    async def read_text(self, path: str) -> str:
        try:
            async with aiofiles.open(path, "r", encoding="utf-8", newline="") as f:
                return await f.read()
        except (FileNotFoundError, IsADirectoryError, NotADirectoryError) as e:
            raise EntryNotFoundError(path) from e
        except (OSError, UnicodeDecodeError) as e:
            raise IOFailureError("read", path, str(e)) from e

    async def entry_info(self, path: str) -> Optional[EntryInfo]:
        try:
            st = await aiofiles.os.stat(path)
        except (FileNotFoundError, NotADirectoryError):
            return None
        except OSError as e:
            raise IOFailureError("stat", path, str(e)) from e

        if stat.S_ISDIR(st.st_mode):
            return EntryInfo(kind=EntryKind.DIRECTORY, size=0, modified_at=st.st_mtime)
        return EntryInfo(kind=EntryKind.FILE, size=st.st_size, modified_at=st.st_mtime)

    async def _list_names(self, directory: str) -> List[str]:
        try:
            names = await aiofiles.os.listdir(directory)
        except (FileNotFoundError, NotADirectoryError):
            return []
        except OSError as e:
            raise IOFailureError("list", directory, str(e)) from e
        return sorted(name for name in names if not name.endswith(TEMP_SUFFIX))

    async def walk(self, root: str) -> List[ProjectEntry]:
        entries: List[ProjectEntry] = []
        await self._walk_directory(root, root, entries)
        return entries

    async def _walk_directory(self, root: str, directory: str, entries: List[ProjectEntry]) -> None:
        for name in await self._list_names(directory):
            full_path = join_path(directory, name)
            info = await self.entry_info(full_path)
            if info is None:
                continue  # removed while listing

            entries.append(ProjectEntry(
                name=name,
                path=relative_to(full_path, root),
                kind=info.kind,
                size=info.size,
                modified_at=info.modified_at,
            ))
            if info.is_directory:
                await self._walk_directory(root, full_path, entries)

    async def remove_tree(self, path: str) -> bool:
        info = await self.entry_info(path)
        if info is None:
            return False
        try:
            if info.is_directory:
                await asyncio.to_thread(shutil.rmtree, path)
            else:
                await aiofiles.os.remove(path)
        except FileNotFoundError:
            return False
        except OSError as e:
            raise IOFailureError("delete", path, str(e)) from e
        return True

    async def list_subdirectories(self, path: str) -> List[str]:
        names = []
        for name in await self._list_names(path):
            if await aiofiles.os.path.isdir(join_path(path, name)):
                names.append(name)
        return names

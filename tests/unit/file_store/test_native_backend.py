"""
Unit Tests for NativeFileBackend
"""
import pytest

from appforge.services.file_store import FileStore, NativeFileBackend
from appforge.services.file_store.native import TEMP_SUFFIX


class TestNativeFileBackend:
    """Tests for the filesystem backend"""

    @pytest.mark.asyncio
    async def test_writes_leave_no_temp_files(self, tmp_path):
        store = FileStore(NativeFileBackend(str(tmp_path)))
        root = await store.create_project("todo")

        await store.write_file(root, "src/App.tsx", "one")
        await store.write_file(root, "src/App.tsx", "two")

        leftovers = [p for p in tmp_path.rglob("*") if p.name.endswith(TEMP_SUFFIX)]
        assert leftovers == []
        assert (tmp_path / "todo" / "src" / "App.tsx").read_text(encoding="utf-8") == "two"

    @pytest.mark.asyncio
    async def test_listing_skips_stray_temp_files(self, tmp_path):
        """An interrupted write's temp file never shows up in listings"""
        store = FileStore(NativeFileBackend(str(tmp_path)))
        root = await store.create_project("todo")
        (tmp_path / "todo" / f".App.tsx.deadbeef{TEMP_SUFFIX}").write_text("partial")

        paths = [e.path for e in await store.list_files(root)]

        assert not any(path.endswith(TEMP_SUFFIX) for path in paths)

    @pytest.mark.asyncio
    async def test_newlines_preserved(self, tmp_path):
        store = FileStore(NativeFileBackend(str(tmp_path)))
        root = await store.create_project("todo")

        await store.write_file(root, "a.txt", "line1\r\nline2\n")

        assert await store.read_file(root, "a.txt") == "line1\r\nline2\n"
        assert (tmp_path / "todo" / "a.txt").read_bytes() == b"line1\r\nline2\n"

    @pytest.mark.asyncio
    async def test_base_dir_is_created_lazily(self, tmp_path):
        base = tmp_path / "does" / "not" / "exist"
        store = FileStore(NativeFileBackend(str(base)))

        assert await store.list_projects() == []
        await store.create_project("todo")
        assert await store.list_projects() == ["todo"]

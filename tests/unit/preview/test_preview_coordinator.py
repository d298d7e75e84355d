"""
Unit Tests for PreviewCoordinator
"""
import json

import pytest

from appforge.core.exceptions import EntryNotFoundError, PreviewNotActiveError
from appforge.modules.preview import PreviewCoordinator
from appforge.schemas.preview import PreviewConfig
from appforge.services.file_store.paths import join_path


@pytest.fixture
async def project(file_store):
    root = await file_store.create_project("todo")
    await file_store.write_file(root, "App.tsx", "export default function App() {}")
    return root


class TestPreviewLifecycle:
    """Tests for start/stop/status"""

    @pytest.mark.asyncio
    async def test_inactive_by_default(self, file_store):
        coordinator = PreviewCoordinator(file_store)

        status = coordinator.status()

        assert status.is_active is False
        assert status.project_root is None
        assert coordinator.notify_file_changed("anything", "x") is False

    @pytest.mark.asyncio
    async def test_start_and_stop(self, file_store, project):
        coordinator = PreviewCoordinator(file_store)

        status = await coordinator.start_preview(PreviewConfig(
            project_root=project + "/", entry_file_path="App.tsx",
        ))

        assert status.is_active
        assert status.project_root == project
        assert status.hot_reload_enabled
        assert status.reload_count == 0

        await coordinator.stop_preview()
        assert coordinator.active is None
        assert not coordinator.status().is_active

    @pytest.mark.asyncio
    async def test_missing_entry_file(self, file_store, project):
        coordinator = PreviewCoordinator(file_store)

        with pytest.raises(EntryNotFoundError):
            await coordinator.start_preview(PreviewConfig(project_root=project, entry_file_path="index.tsx"))
        assert coordinator.active is None

    @pytest.mark.asyncio
    async def test_restart_resets_reload_count(self, file_store, project):
        coordinator = PreviewCoordinator(file_store)
        config = PreviewConfig(project_root=project, entry_file_path="App.tsx")
        await coordinator.start_preview(config)
        coordinator.notify_file_changed(join_path(project, "App.tsx"), "x")

        status = await coordinator.start_preview(config)

        assert status.reload_count == 0


class TestFileChanges:
    """Tests for change notification"""

    @pytest.mark.asyncio
    async def test_changes_inside_project_count_as_reloads(self, file_store, project):
        coordinator = PreviewCoordinator(file_store)
        await coordinator.start_preview(PreviewConfig(project_root=project, entry_file_path="App.tsx"))

        assert coordinator.notify_file_changed(join_path(project, "App.tsx"), "a")
        assert coordinator.notify_file_changed(join_path(project, "src/util.ts"), "b")
        assert not coordinator.notify_file_changed(project, "root itself")
        assert not coordinator.notify_file_changed(project + "2/App.tsx", "sibling")

        assert coordinator.status().reload_count == 2

    @pytest.mark.asyncio
    async def test_hot_reload_disabled(self, file_store, project):
        coordinator = PreviewCoordinator(file_store)
        await coordinator.start_preview(PreviewConfig(
            project_root=project, entry_file_path="App.tsx", hot_reload_enabled=False,
        ))

        assert coordinator.notify_file_changed(join_path(project, "App.tsx"), "a")
        assert coordinator.status().reload_count == 0

    @pytest.mark.asyncio
    async def test_update_file_writes_and_notifies(self, file_store, project):
        coordinator = PreviewCoordinator(file_store)
        await coordinator.start_preview(PreviewConfig(project_root=project, entry_file_path="App.tsx"))

        assert await coordinator.update_file("components/Header.tsx", "header")

        assert await file_store.read_file(project, "components/Header.tsx") == "header"
        assert coordinator.status().reload_count == 1

    @pytest.mark.asyncio
    async def test_update_file_without_preview(self, file_store):
        coordinator = PreviewCoordinator(file_store)

        with pytest.raises(PreviewNotActiveError):
            await coordinator.update_file("App.tsx", "x")


class TestValidateProject:
    """Tests for validate_project"""

    @pytest.mark.asyncio
    async def test_valid_project(self, file_store, project):
        await file_store.write_file(project, "app.json", "{}")
        await file_store.write_file(project, "package.json", json.dumps({
            "main": "expo-router/entry", "dependencies": {"expo": "^53.0.0"},
        }))

        validation = await PreviewCoordinator(file_store).validate_project(project)

        assert validation.is_valid
        assert validation.errors == []
        assert validation.warnings == []

    @pytest.mark.asyncio
    async def test_missing_files(self, file_store, project):
        validation = await PreviewCoordinator(file_store).validate_project(project)

        assert not validation.is_valid
        assert validation.errors == ["Missing required file: package.json", "Missing required file: app.json"]

    @pytest.mark.asyncio
    async def test_invalid_package_json(self, file_store, project):
        await file_store.write_file(project, "app.json", "{}")
        await file_store.write_file(project, "package.json", "{not json")

        validation = await PreviewCoordinator(file_store).validate_project(project)

        assert validation.errors == ["Invalid package.json format"]

    @pytest.mark.asyncio
    async def test_warnings(self, file_store, project):
        await file_store.write_file(project, "app.json", "{}")
        await file_store.write_file(project, "package.json", json.dumps({"name": "x"}))

        validation = await PreviewCoordinator(file_store).validate_project(project)

        assert validation.is_valid
        assert validation.warnings == [
            "No dependencies found in package.json",
            "No main entry point specified in package.json",
        ]

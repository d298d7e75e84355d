"""
Preview Coordinator

Tracks which project is being previewed so that post-generation edits can
invalidate it. Bundling is outside this process: the coordinator only records
the active preview, counts hot reloads and checks that a project has what a
preview needs.
"""

import json
from typing import Optional

from appforge.core.exceptions import EntryNotFoundError, PreviewNotActiveError
from appforge.core.logging_config import logger
from appforge.schemas.preview import PreviewConfig, PreviewStatus, PreviewValidation
from appforge.services.file_store import FileStore
from appforge.services.file_store.paths import is_within, join_path, normalize_path


REQUIRED_PREVIEW_FILES = ("package.json", "app.json")


class PreviewCoordinator:
    """Holds at most one active preview"""

    def __init__(self, file_store: FileStore):
        self.file_store = file_store
        self._active: Optional[PreviewConfig] = None
        self._reload_count = 0

    @property
    def active(self) -> Optional[PreviewConfig]:
        return self._active

    async def start_preview(self, config: PreviewConfig) -> PreviewStatus:
        """
        Record config as the active preview.

        Raises:
            EntryNotFoundError: if the entry file does not exist
        """
        root = normalize_path(config.project_root)
        if not await self.file_store.file_exists(root, config.entry_file_path):
            raise EntryNotFoundError(config.entry_file_path, root)

        if self._active is not None:
            logger.info(f"[PreviewCoordinator] Replacing active preview of {self._active.project_root}")

        self._active = config.model_copy(update={"project_root": root})
        self._reload_count = 0
        logger.info(f"[PreviewCoordinator] Preview started for {root} (entry: {config.entry_file_path})")
        return self.status()

    async def stop_preview(self) -> None:
        if self._active is not None:
            logger.info(f"[PreviewCoordinator] Preview stopped for {self._active.project_root}")
        self._active = None
        self._reload_count = 0

    def status(self) -> PreviewStatus:
        if self._active is None:
            return PreviewStatus()
        return PreviewStatus(
            is_active=True,
            project_root=self._active.project_root,
            entry_file_path=self._active.entry_file_path,
            hot_reload_enabled=self._active.hot_reload_enabled,
            reload_count=self._reload_count,
        )

    def notify_file_changed(self, path: str, content: str) -> bool:
        """
        Tell the preview a file under its project changed.

        Returns:
            True if the change belongs to the active preview
        """
        if self._active is None:
            return False

        path = normalize_path(path)
        if not is_within(path, self._active.project_root) or path == self._active.project_root:
            return False

        if self._active.hot_reload_enabled:
            self._reload_count += 1
            logger.info(f"[PreviewCoordinator] Hot reload #{self._reload_count}: {path} ({len(content)} chars)")
        else:
            logger.debug(f"[PreviewCoordinator] Change recorded without hot reload: {path}")
        return True

    async def update_file(self, rel_path: str, content: str) -> bool:
        """
        Write a file into the previewed project and notify the preview.

        Raises:
            PreviewNotActiveError: if no preview is active
        """
        if self._active is None:
            raise PreviewNotActiveError()

        root = self._active.project_root
        await self.file_store.write_file(root, rel_path, content)
        return self.notify_file_changed(join_path(root, rel_path), content)

    async def validate_project(self, root: str) -> PreviewValidation:
        errors = []
        warnings = []

        for name in REQUIRED_PREVIEW_FILES:
            if not await self.file_store.file_exists(root, name):
                errors.append(f"Missing required file: {name}")

        try:
            package_json = json.loads(await self.file_store.read_file(root, "package.json"))
        except EntryNotFoundError:
            package_json = None
        except json.JSONDecodeError:
            errors.append("Invalid package.json format")
            package_json = None

        if package_json is not None:
            if not isinstance(package_json, dict):
                errors.append("Invalid package.json format")
            else:
                if not package_json.get("dependencies"):
                    warnings.append("No dependencies found in package.json")
                if not package_json.get("main"):
                    warnings.append("No main entry point specified in package.json")

        return PreviewValidation(is_valid=not errors, errors=errors, warnings=warnings)

"""
Application service container.

Built once at startup (FastAPI lifespan or CLI command) and handed to every
consumer explicitly. Owns the background generation task so that only one
run is in flight per process.
"""

import asyncio
from dataclasses import dataclass, field
from typing import Optional

from appforge.core.config import Settings, settings as default_settings
from appforge.core.exceptions import GenerationInProgressError
from appforge.core.logging_config import generate_run_id, logger
from appforge.modules.orchestrator import (
    AIGateway,
    ClaudeGateway,
    GenerationOrchestrator,
    ProgressEventBus,
)
from appforge.modules.preview import PreviewCoordinator
from appforge.schemas.generation import GenerationRequest
from appforge.services.file_store import FileStore, build_file_store
from appforge.utils.claude_client import ClaudeClient


@dataclass
class AppServices:
    settings: Settings
    file_store: FileStore
    gateway: AIGateway
    orchestrator: GenerationOrchestrator
    event_bus: ProgressEventBus
    preview: PreviewCoordinator
    active_run_id: Optional[str] = None
    _task: Optional[asyncio.Task] = field(default=None, repr=False)

    @property
    def has_active_run(self) -> bool:
        return self._task is not None and not self._task.done()

    def start_generation(self, request: GenerationRequest) -> str:
        """
        Launch a background run and return its id.

        Raises:
            GenerationInProgressError: if a run is already in flight
        """
        if self.has_active_run:
            raise GenerationInProgressError(self.active_run_id)

        run_id = generate_run_id()
        self.event_bus.register_run(run_id)
        self.active_run_id = run_id
        self._task = asyncio.get_running_loop().create_task(self._run_generation(request, run_id))
        logger.info(f"[AppServices] Started generation run {run_id}")
        return run_id

    async def _run_generation(self, request: GenerationRequest, run_id: str) -> None:
        try:
            result = await self.orchestrator.generate(request, run_id=run_id)
            logger.info(f"[AppServices] Run {run_id} complete: {result.project_root}")
        except asyncio.CancelledError:
            logger.info(f"[AppServices] Run {run_id} task cancelled")
            raise
        except Exception as e:
            # Already reported to subscribers through the progress hook
            logger.warning(f"[AppServices] Run {run_id} ended in error: {e}")

    def cancel_run(self, run_id: str) -> bool:
        if run_id != self.active_run_id or not self.has_active_run:
            return False
        return self.orchestrator.cancel()

    async def wait_for_run(self) -> None:
        if self._task is not None:
            await asyncio.gather(self._task, return_exceptions=True)

    async def aclose(self) -> None:
        """Stop any in-flight run and flush the file store"""
        if self.has_active_run:
            self._task.cancel()
            await asyncio.gather(self._task, return_exceptions=True)

        try:
            await self.file_store.close()
        finally:
            close = getattr(self.gateway, "close", None)
            if close is not None:
                await close()
        logger.info("[AppServices] Closed")


def build_services(
    config: Optional[Settings] = None,
    gateway: Optional[AIGateway] = None,
    file_store: Optional[FileStore] = None,
) -> AppServices:
    config = config or default_settings

    file_store = file_store or build_file_store(config)
    gateway = gateway or ClaudeGateway(ClaudeClient(config))
    event_bus = ProgressEventBus()

    orchestrator = GenerationOrchestrator(
        file_store,
        gateway,
        max_attempts=config.GENERATION_MAX_ATTEMPTS,
        retry_base_delay=config.GENERATION_RETRY_BASE_DELAY,
        file_delay=config.GENERATION_FILE_DELAY,
        progress_callback=event_bus.publish,
    )

    logger.info(
        f"[AppServices] Built with {file_store.backend.name} storage at {file_store.base_dir}, "
        f"AI {'configured' if gateway.is_configured else 'NOT configured'}"
    )
    return AppServices(
        settings=config,
        file_store=file_store,
        gateway=gateway,
        orchestrator=orchestrator,
        event_bus=event_bus,
        preview=PreviewCoordinator(file_store),
    )

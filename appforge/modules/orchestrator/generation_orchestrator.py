"""
Generation Orchestrator

Drives one run from a GenerationRequest to a populated project:

    PLANNING     ask the gateway for a plan, default missing fields
    EXECUTION    generate files one at a time in dependency order
    INTEGRATION  write package.json, app.json (expo) and README.md
    COMPLETE

Any unrecoverable failure moves the run to ERROR from whatever phase it is
in. Per-file failures are retried with linear backoff before they become
fatal. Partially generated projects are left in place.

The progress callback is the only notification channel: it receives a deep
snapshot of GenerationProgress on every phase and per-file step.
"""

import asyncio
import inspect
import time
from typing import Any, Awaitable, Callable, Optional, TypeVar, Union

from appforge.core.exceptions import (
    AIServiceError,
    GenerationCancelledError,
    GenerationFailureError,
    GenerationInProgressError,
)
from appforge.core.logging_config import generate_run_id, logger, set_project_name, set_run_id
from appforge.modules.orchestrator.ai_gateway import AIGateway
from appforge.modules.orchestrator.dependency_order import order_file_specs
from appforge.modules.orchestrator.integration import integrate_project
from appforge.modules.orchestrator.plan_parser import parse_plan
from appforge.modules.orchestrator.prompts import build_file_prompt, build_planning_prompt
from appforge.modules.orchestrator.state_machine import GenerationStateMachine
from appforge.schemas.generation import (
    FileSpec,
    GenerationPhase,
    GenerationProgress,
    GenerationRequest,
    GenerationResult,
    ProjectPlan,
    SpecKind,
)
from appforge.services.file_store import FileStore
from appforge.utils.response_parser import ResponseParser


T = TypeVar("T")
ProgressCallback = Callable[[GenerationProgress], Union[None, Awaitable[None]]]


class GenerationOrchestrator:
    """Runs generation for one request at a time"""

    def __init__(
        self,
        file_store: FileStore,
        gateway: AIGateway,
        max_attempts: int = 3,
        retry_base_delay: float = 1.0,
        file_delay: float = 0.1,
        progress_callback: Optional[ProgressCallback] = None,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

        self.file_store = file_store
        self.gateway = gateway
        self.max_attempts = max_attempts
        self.retry_base_delay = retry_base_delay
        self.file_delay = file_delay
        self._progress_callback = progress_callback

        self._running = False
        self._cancel_requested = False
        self._progress: Optional[GenerationProgress] = None
        self._state = GenerationStateMachine()

    def set_progress_callback(self, callback: Optional[ProgressCallback]) -> None:
        self._progress_callback = callback

    @property
    def is_running(self) -> bool:
        return self._running

    @property
    def progress(self) -> Optional[GenerationProgress]:
        """Snapshot of the current (or last) run's progress"""
        return self._progress.snapshot() if self._progress else None

    @property
    def state_machine(self) -> GenerationStateMachine:
        return self._state

    def cancel(self) -> bool:
        """
        Request cooperative cancellation. Takes effect before the next file
        or retry attempt.

        Returns:
            False if no run is in flight
        """
        if not self._running:
            return False
        self._cancel_requested = True
        logger.info(f"[Orchestrator] Cancellation requested for run {self._progress.run_id}")
        return True

    # =========================================================================
    # RUN
    # =========================================================================

    async def generate(self, request: GenerationRequest, run_id: Optional[str] = None) -> GenerationResult:
        """
        Generate a complete project for request.

        Raises:
            GenerationInProgressError: if another run is in flight
            AIServiceError: if the gateway has no credential
            GenerationFailureError: if the gateway exhausts its attempts
            PlanningFailureError: if the plan is not a mapping
            GenerationCancelledError: if cancel() was called
        """
        if self._running:
            raise GenerationInProgressError(self._progress.run_id if self._progress else None)

        self._running = True
        self._cancel_requested = False

        run_id = run_id or generate_run_id()
        set_run_id(run_id)
        self._state = GenerationStateMachine(name=f"Generation:{run_id}")
        self._progress = GenerationProgress(run_id=run_id)

        started = time.perf_counter()
        try:
            result = await self._run(request)
            logger.log_performance(
                "generate_project",
                (time.perf_counter() - started) * 1000,
                threshold_ms=300_000,
                files=len(result.progress.completed_files),
            )
            return result
        except asyncio.CancelledError:
            await self._fail(GenerationCancelledError("Generation task was cancelled"))
            raise
        except Exception as e:
            await self._fail(e)
            raise
        finally:
            self._running = False

    async def _run(self, request: GenerationRequest) -> GenerationResult:
        if not self.gateway.is_configured:
            raise AIServiceError("API key not configured")

        # Phase 1: Planning
        await self._emit("Analyzing project requirements...")
        plan = await self._plan(request)

        root = await self.file_store.create_project(plan.name)
        self._progress.project_root = root
        set_project_name(plan.name)

        ordered = order_file_specs(plan.files)
        file_specs = [spec for spec in ordered if spec.kind == SpecKind.FILE]
        self._progress.total_files = len(file_specs)

        # Phase 2: Execution
        self._transition(GenerationPhase.EXECUTION, f"{len(file_specs)} files planned")
        for spec in ordered:
            if spec.kind == SpecKind.DIRECTORY:
                await self.file_store.create_directory(root, spec.path)

        if not file_specs:
            await self._emit("No files to generate")

        for spec in file_specs:
            self._check_cancelled()
            self._progress.current_file = spec.path
            await self._emit(f"Generating {spec.path}...")

            await self._generate_file(root, plan, spec)
            self._progress.completed_files.append(spec.path)

            if self.file_delay:
                # Throttle to stay under the provider's rate limits
                await asyncio.sleep(self.file_delay)

        self._progress.current_file = None

        # Phase 3: Integration
        self._transition(GenerationPhase.INTEGRATION)
        await self._emit("Integrating components and finalizing...")
        await integrate_project(self.file_store, root, plan)

        self._transition(GenerationPhase.COMPLETE)
        await self._emit("Project generation complete!")

        logger.log_agent_event(
            "Orchestrator",
            "project_complete",
            project_root=root,
            files=len(self._progress.completed_files),
        )
        return GenerationResult(project_root=root, plan=plan, progress=self._progress.snapshot())

    async def _plan(self, request: GenerationRequest) -> ProjectPlan:
        prompt = build_planning_prompt(request)
        data = await self._with_retry("planning", lambda: self.gateway.plan(prompt))
        return parse_plan(data, request)

    async def _generate_file(self, root: str, plan: ProjectPlan, spec: FileSpec) -> None:
        async def attempt() -> None:
            prompt = build_file_prompt(spec, plan, self._progress.completed_files)
            raw = await self.gateway.generate_file_content(prompt)
            await self.file_store.write_file(root, spec.path, ResponseParser.strip_code_fences(raw))

        await self._with_retry("file", attempt, file_path=spec.path)

    async def _with_retry(
        self,
        stage: str,
        operation: Callable[[], Awaitable[T]],
        file_path: Optional[str] = None,
    ) -> T:
        """Run operation up to max_attempts times, sleeping base * attempt between tries"""
        target = file_path or stage
        last_error: Optional[Exception] = None

        for attempt in range(1, self.max_attempts + 1):
            self._check_cancelled()
            try:
                return await operation()
            except Exception as e:
                last_error = e
                logger.warning(
                    f"[Orchestrator] {target} failed (attempt {attempt}/{self.max_attempts}): {e}",
                    extra={"event_type": "generation_retry", "stage": stage, "attempt": attempt},
                )
                if attempt < self.max_attempts:
                    await asyncio.sleep(self.retry_base_delay * attempt)

        raise GenerationFailureError(
            f"Failed to generate {target} after {self.max_attempts} attempts: {last_error}",
            stage=stage,
            attempts=self.max_attempts,
            file_path=file_path,
        ) from last_error

    # =========================================================================
    # STATE & PROGRESS
    # =========================================================================

    def _check_cancelled(self) -> None:
        if self._cancel_requested:
            raise GenerationCancelledError()

    def _transition(self, phase: GenerationPhase, reason: Optional[str] = None) -> None:
        self._state.transition(phase, reason)
        self._progress.phase = self._state.phase

    async def _fail(self, error: BaseException) -> None:
        logger.log_error_with_context(error, context="generation")

        self._state.fail(str(error))
        self._progress.phase = GenerationPhase.ERROR
        self._progress.error = str(error)
        await self._emit("Project generation failed")

    async def _emit(self, message: str) -> None:
        self._progress.message = message
        if self._progress_callback is None:
            return

        snapshot = self._progress.snapshot()
        try:
            result: Any = self._progress_callback(snapshot)
            if inspect.isawaitable(result):
                await result
        except Exception as e:
            logger.error(f"[Orchestrator] Progress callback error: {e}")

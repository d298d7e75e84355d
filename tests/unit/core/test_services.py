"""
Unit Tests for the application service container
"""
import asyncio
from unittest.mock import AsyncMock

import pytest

from conftest import FakeGateway
from appforge.core.exceptions import GenerationInProgressError
from appforge.core.services import build_services
from appforge.schemas.generation import GenerationPhase, GenerationRequest
from appforge.services.file_store import FlatMapBackend, NativeFileBackend


REQUEST = GenerationRequest(description="A todo app")


class TestBuildServices:
    """Tests for build_services"""

    @pytest.mark.asyncio
    async def test_wiring(self, services, fake_gateway):
        assert isinstance(services.file_store.backend, NativeFileBackend)
        assert services.orchestrator.gateway is fake_gateway
        assert services.orchestrator.file_store is services.file_store
        assert services.preview.file_store is services.file_store
        assert services.orchestrator.retry_base_delay == 0

    @pytest.mark.asyncio
    async def test_flat_backend_selection(self):
        from appforge.core.config import settings

        config = settings.model_copy(update={"STORAGE_BACKEND": "flat", "FLAT_PERSISTENCE": "memory"})
        services = build_services(config, gateway=FakeGateway())

        assert isinstance(services.file_store.backend, FlatMapBackend)
        await services.aclose()


class TestGenerationTask:
    """Tests for the background run"""

    @pytest.mark.asyncio
    async def test_run_publishes_to_event_bus(self, services):
        run_id = services.start_generation(REQUEST)

        assert services.event_bus.has_run(run_id)
        assert services.has_active_run
        await services.wait_for_run()

        assert not services.has_active_run
        assert services.event_bus.latest(run_id).phase == GenerationPhase.COMPLETE

    @pytest.mark.asyncio
    async def test_one_run_at_a_time(self, services, fake_gateway):
        release = asyncio.Event()

        async def blocking_plan(prompt):
            await release.wait()
            return {}

        fake_gateway.plan = blocking_plan
        first = services.start_generation(REQUEST)

        with pytest.raises(GenerationInProgressError) as exc_info:
            services.start_generation(REQUEST)
        assert exc_info.value.details["run_id"] == first

        release.set()
        await services.wait_for_run()
        assert services.start_generation(REQUEST) != first
        await services.wait_for_run()

    @pytest.mark.asyncio
    async def test_failed_run_does_not_raise(self, services, fake_gateway):
        fake_gateway.plan_failures = 3

        run_id = services.start_generation(REQUEST)
        await services.wait_for_run()

        assert services.event_bus.latest(run_id).phase == GenerationPhase.ERROR

    @pytest.mark.asyncio
    async def test_cancel_unknown_run(self, services):
        assert services.cancel_run("nope") is False

    @pytest.mark.asyncio
    async def test_aclose_cancels_run_and_closes_gateway(self, tmp_path):
        from appforge.core.config import settings

        started = asyncio.Event()
        gateway = FakeGateway()
        gateway.close = AsyncMock()

        async def hanging_plan(prompt):
            started.set()
            await asyncio.Event().wait()

        gateway.plan = hanging_plan
        services = build_services(
            settings.model_copy(update={"STORAGE_BASE_DIR": str(tmp_path)}), gateway=gateway,
        )
        run_id = services.start_generation(REQUEST)
        await started.wait()

        await services.aclose()

        assert not services.has_active_run
        assert services.event_bus.latest(run_id).phase == GenerationPhase.ERROR
        gateway.close.assert_awaited_once()

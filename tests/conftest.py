"""
AppForge - Test Configuration and Fixtures
"""
import os
from collections import defaultdict
from typing import Any, AsyncGenerator, Dict, List, Optional, Tuple

import pytest
from httpx import AsyncClient, ASGITransport

# Set testing environment before settings are imported
os.environ['ENVIRONMENT'] = 'testing'
os.environ['ANTHROPIC_API_KEY'] = 'test-api-key'
os.environ['STORAGE_BACKEND'] = 'native'
os.environ['FLAT_PERSISTENCE'] = 'memory'
os.environ['GENERATION_RETRY_BASE_DELAY'] = '0'
os.environ['GENERATION_FILE_DELAY'] = '0'

from appforge.core.config import settings
from appforge.core.services import AppServices, build_services
from appforge.main import create_app
from appforge.modules.orchestrator import GenerationOrchestrator
from appforge.services.file_store import (
    FileStore,
    FlatMapBackend,
    MemoryPersistence,
    NativeFileBackend,
)


FILE_PROMPT_MARKER = "Generate the complete content for:"

TODO_PLAN: Dict[str, Any] = {
    "name": "Todo App",
    "description": "A simple todo list",
    "framework": "expo",
    "files": [
        {"path": "app/_layout.tsx", "type": "file", "dependencies": []},
        {"path": "components/Button.tsx", "type": "file", "dependencies": []},
    ],
    "dependencies": ["expo", "react", "react-native", "expo-router"],
    "devDependencies": ["@types/react", "typescript"],
    "scripts": {"dev": "expo start", "build": "expo build"},
}


class FakeGateway:
    """
    In-memory AIGateway.

    failures maps a file path to how many calls fail before one succeeds;
    plan_failures does the same for planning.
    """

    def __init__(self, plan_data: Any = None, configured: bool = True):
        self.plan_data = TODO_PLAN if plan_data is None else plan_data
        self.is_configured = configured
        self.failures: Dict[str, int] = {}
        self.plan_failures = 0
        self.contents: Dict[str, str] = {}
        self.plan_prompts: List[str] = []
        self.file_prompts: List[Tuple[str, str]] = []
        self.calls: Dict[str, int] = defaultdict(int)

    @staticmethod
    def path_from_prompt(prompt: str) -> str:
        return prompt.split(FILE_PROMPT_MARKER, 1)[1].split("\n", 1)[0].strip()

    async def plan(self, prompt: str) -> Any:
        self.plan_prompts.append(prompt)
        if len(self.plan_prompts) <= self.plan_failures:
            raise RuntimeError(f"planning failure {len(self.plan_prompts)}")
        return self.plan_data

    async def generate_file_content(self, prompt: str) -> str:
        path = self.path_from_prompt(prompt)
        self.file_prompts.append((path, prompt))
        self.calls[path] += 1

        attempt = self.calls[path]
        if attempt <= self.failures.get(path, 0):
            raise RuntimeError(f"gateway failure {attempt} for {path}")
        return self.contents.get(path, f"// {path} (attempt {attempt})\nexport default {{}};")

    def prompt_for(self, path: str) -> Optional[str]:
        for prompt_path, prompt in reversed(self.file_prompts):
            if prompt_path == path:
                return prompt
        return None


@pytest.fixture
def native_store(tmp_path) -> FileStore:
    return FileStore(NativeFileBackend(str(tmp_path / "projects")))


@pytest.fixture
def memory_persistence() -> MemoryPersistence:
    return MemoryPersistence()


@pytest.fixture
async def flat_store(memory_persistence: MemoryPersistence) -> AsyncGenerator[FileStore, None]:
    store = FileStore(FlatMapBackend("web-storage", memory_persistence, debounce_seconds=0.01))
    yield store
    await store.close()


@pytest.fixture(params=["native", "flat"])
async def file_store(request, tmp_path) -> AsyncGenerator[FileStore, None]:
    """Runs the test once per backend"""
    if request.param == "native":
        store = FileStore(NativeFileBackend(str(tmp_path / "projects")))
    else:
        store = FileStore(FlatMapBackend("web-storage", MemoryPersistence(), debounce_seconds=0.01))
    yield store
    await store.close()


@pytest.fixture
def fake_gateway() -> FakeGateway:
    return FakeGateway()


@pytest.fixture
def progress_events() -> list:
    return []


@pytest.fixture
def orchestrator(flat_store: FileStore, fake_gateway: FakeGateway, progress_events: list) -> GenerationOrchestrator:
    return GenerationOrchestrator(
        flat_store,
        fake_gateway,
        max_attempts=3,
        retry_base_delay=0,
        file_delay=0,
        progress_callback=progress_events.append,
    )


@pytest.fixture
async def services(tmp_path, fake_gateway: FakeGateway) -> AsyncGenerator[AppServices, None]:
    config = settings.model_copy(update={"STORAGE_BASE_DIR": str(tmp_path / "projects")})
    app_services = build_services(config, gateway=fake_gateway)
    yield app_services
    await app_services.aclose()


@pytest.fixture
async def client(services: AppServices) -> AsyncGenerator[AsyncClient, None]:
    """Test client over the ASGI app with injected services"""
    app = create_app(services)
    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url='http://test') as ac:
        yield ac

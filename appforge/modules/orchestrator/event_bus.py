"""
Progress Event Bus

Fans generation progress snapshots out to subscribers of a run:
- the HTTP layer streams them as Server-Sent Events
- the run status endpoint reads the latest snapshot
- late subscribers replay the run's history before receiving live events

History is kept per run and trimmed to the most recent runs.
"""

from typing import Dict, List, Optional, AsyncIterator
from collections import OrderedDict
import asyncio

from appforge.core.logging_config import logger
from appforge.schemas.generation import GenerationProgress


def to_sse(progress: GenerationProgress) -> str:
    """Format for Server-Sent Events"""
    return f"data: {progress.model_dump_json()}\n\n"


class ProgressEventBus:
    """Per-run progress history and SSE queues"""

    def __init__(self, max_runs: int = 100, queue_size: int = 256):
        self._history: "OrderedDict[str, List[GenerationProgress]]" = OrderedDict()
        self._queues: Dict[str, List[asyncio.Queue]] = {}
        self._max_runs = max_runs
        self._queue_size = queue_size

    def register_run(self, run_id: str) -> None:
        if run_id in self._history:
            return
        self._history[run_id] = []
        while len(self._history) > self._max_runs:
            evicted, _ = self._history.popitem(last=False)
            self._queues.pop(evicted, None)
            logger.debug(f"[ProgressEventBus] Evicted history for run {evicted}")

    def has_run(self, run_id: str) -> bool:
        return run_id in self._history

    async def publish(self, progress: GenerationProgress) -> None:
        """Record a snapshot and push it to every live subscriber of its run"""
        run_id = progress.run_id
        if not run_id:
            logger.warning("[ProgressEventBus] Dropping progress without run_id")
            return

        self.register_run(run_id)
        snapshot = progress.snapshot()
        self._history[run_id].append(snapshot)

        for queue in self._queues.get(run_id, []):
            if queue.full():
                # Slow subscriber: drop its oldest snapshot so the newest, and the terminal one, always land
                queue.get_nowait()
                logger.warning(f"[ProgressEventBus] SSE queue full for run {run_id}, dropped oldest snapshot")
            queue.put_nowait(snapshot)

    def latest(self, run_id: str) -> Optional[GenerationProgress]:
        events = self._history.get(run_id)
        return events[-1] if events else None

    def get_history(self, run_id: str) -> List[GenerationProgress]:
        return list(self._history.get(run_id, []))

    # ========== SSE Streaming ==========

    def _subscribe(self, run_id: str) -> asyncio.Queue:
        queue: asyncio.Queue = asyncio.Queue(maxsize=self._queue_size)
        self._queues.setdefault(run_id, []).append(queue)
        return queue

    def _unsubscribe(self, run_id: str, queue: asyncio.Queue) -> None:
        queues = self._queues.get(run_id, [])
        if queue in queues:
            queues.remove(queue)
        if not queues:
            self._queues.pop(run_id, None)

    async def stream(self, run_id: str) -> AsyncIterator[GenerationProgress]:
        """
        Replay the run's history, then yield live snapshots until a terminal
        phase is seen.
        """
        queue = self._subscribe(run_id)
        try:
            for snapshot in self.get_history(run_id):
                yield snapshot
                if snapshot.is_terminal:
                    return

            while True:
                snapshot = await queue.get()
                yield snapshot
                if snapshot.is_terminal:
                    return
        finally:
            self._unsubscribe(run_id, queue)

    async def sse_stream(self, run_id: str) -> AsyncIterator[str]:
        """Async generator for FastAPI StreamingResponse"""
        async for snapshot in self.stream(run_id):
            yield to_sse(snapshot)

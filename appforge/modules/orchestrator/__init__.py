"""
Orchestration Module

Turns a GenerationRequest into a populated project:

- GenerationStateMachine: validated phase transitions with history
- order_file_specs: dependency-aware ordering of planned files
- GenerationOrchestrator: planning, ordered execution with retry, integration
- ProgressEventBus: per-run progress history and SSE streaming
- AIGateway / ClaudeGateway: the generation capability

Usage:
    from appforge.modules.orchestrator import GenerationOrchestrator

    orchestrator = GenerationOrchestrator(file_store, gateway, progress_callback=print)
    result = await orchestrator.generate(request)
"""

from appforge.modules.orchestrator.state_machine import (
    PHASE_TRANSITIONS,
    PhaseTransition,
    GenerationStateMachine,
)
from appforge.modules.orchestrator.event_bus import ProgressEventBus, to_sse
from appforge.modules.orchestrator.dependency_order import order_file_specs
from appforge.modules.orchestrator.ai_gateway import AIGateway, ClaudeGateway
from appforge.modules.orchestrator.plan_parser import parse_plan
from appforge.modules.orchestrator.generation_orchestrator import GenerationOrchestrator

__all__ = [
    "PHASE_TRANSITIONS",
    "PhaseTransition",
    "GenerationStateMachine",
    "ProgressEventBus",
    "to_sse",
    "order_file_specs",
    "AIGateway",
    "ClaudeGateway",
    "parse_plan",
    "GenerationOrchestrator",
]

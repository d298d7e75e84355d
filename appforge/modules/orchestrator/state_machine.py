"""
Phase state machine for generation runs.

    PLANNING -> EXECUTION -> INTEGRATION -> COMPLETE
        \___________\______________\______-> ERROR

COMPLETE and ERROR are terminal. Every accepted transition is recorded;
rejected transitions are logged and leave the phase unchanged.
"""

from typing import Dict, Any, Optional, Callable, List, Set
from dataclasses import dataclass, field
from datetime import datetime, timezone
from collections import deque

from appforge.core.logging_config import logger
from appforge.schemas.generation import GenerationPhase


PHASE_TRANSITIONS: Dict[GenerationPhase, Set[GenerationPhase]] = {
    GenerationPhase.PLANNING: {GenerationPhase.EXECUTION, GenerationPhase.ERROR},
    GenerationPhase.EXECUTION: {GenerationPhase.INTEGRATION, GenerationPhase.ERROR},
    GenerationPhase.INTEGRATION: {GenerationPhase.COMPLETE, GenerationPhase.ERROR},
    GenerationPhase.COMPLETE: set(),
    GenerationPhase.ERROR: set(),
}


@dataclass
class PhaseTransition:
    """Record of a phase transition"""
    from_phase: GenerationPhase
    to_phase: GenerationPhase
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    reason: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "from": self.from_phase.value,
            "to": self.to_phase.value,
            "timestamp": self.timestamp.isoformat(),
            "reason": self.reason,
        }


TransitionCallback = Callable[[GenerationPhase, GenerationPhase, PhaseTransition], None]


class GenerationStateMachine:
    """Validated phase transitions with history and callbacks"""

    def __init__(self, name: str = "Generation", max_history: int = 100):
        self.name = name
        self._phase = GenerationPhase.PLANNING
        self._history: deque = deque(maxlen=max_history)
        self._callbacks: List[TransitionCallback] = []

    @property
    def phase(self) -> GenerationPhase:
        return self._phase

    @property
    def is_terminal(self) -> bool:
        return self._phase.is_terminal

    def can_transition(self, to_phase: GenerationPhase) -> bool:
        return to_phase in PHASE_TRANSITIONS.get(self._phase, set())

    def transition(self, to_phase: GenerationPhase, reason: Optional[str] = None) -> bool:
        """
        Move to to_phase if allowed.

        Returns:
            True if the transition was accepted
        """
        if not self.can_transition(to_phase):
            allowed = PHASE_TRANSITIONS.get(self._phase, set())
            logger.warning(
                f"[{self.name}] Invalid transition: {self._phase.value} -> {to_phase.value}. "
                f"Allowed: {sorted(p.value for p in allowed)}"
            )
            return False

        record = PhaseTransition(from_phase=self._phase, to_phase=to_phase, reason=reason)
        self._history.append(record)

        old_phase = self._phase
        self._phase = to_phase
        logger.info(
            f"[{self.name}] Phase transition: {old_phase.value} -> {to_phase.value}"
            + (f" ({reason})" if reason else "")
        )

        for callback in self._callbacks:
            try:
                callback(old_phase, to_phase, record)
            except Exception as e:
                logger.error(f"[{self.name}] Callback error: {e}")

        return True

    def fail(self, error: str) -> bool:
        return self.transition(GenerationPhase.ERROR, reason=f"Failed: {error}")

    def on_transition(self, callback: TransitionCallback) -> None:
        self._callbacks.append(callback)

    def get_history(self, limit: int = 10) -> List[PhaseTransition]:
        return list(self._history)[-limit:]

    def reset(self) -> None:
        self._phase = GenerationPhase.PLANNING
        self._history.clear()

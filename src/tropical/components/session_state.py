"""Turn protocol state shared between the session and pacing systems."""
from dataclasses import dataclass
from enum import Enum, auto


class TurnPhase(Enum):
    """Where the session is in the select -> swap -> resolve loop."""
    IDLE = auto()
    AWAITING_SECOND_SELECTION = auto()
    RESOLVING = auto()
    REVERTING = auto()


@dataclass(slots=True)
class SessionState:
    """Singleton component storing the current turn phase."""
    phase: TurnPhase = TurnPhase.IDLE
    cascade_depth: int = 0

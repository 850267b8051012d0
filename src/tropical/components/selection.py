from dataclasses import dataclass, field
from typing import List

@dataclass(slots=True)
class Selection:
    """Token entities picked by the player for the next swap (at most two)."""
    entities: List[int] = field(default_factory=list)

    def clear(self) -> None:
        self.entities.clear()

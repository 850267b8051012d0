from dataclasses import dataclass, field
from typing import Iterable, List

@dataclass(slots=True)
class ScoreBoard:
    """Session score and the log of collected gems.

    score: one point per collected token.
    collected: original type of every collected token, in collection order.
    Both only grow; reset() is reserved for session start.
    """
    score: int = 0
    collected: List[str] = field(default_factory=list)

    def add(self, type_names: Iterable[str]) -> int:
        gained = 0
        for type_name in type_names:
            self.collected.append(type_name)
            gained += 1
        self.score += gained
        return gained

    def collected_string(self) -> str:
        return ''.join(self.collected)

    def reset(self) -> None:
        self.score = 0
        self.collected.clear()

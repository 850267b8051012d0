from dataclasses import dataclass, field
from typing import Dict, Tuple

@dataclass(slots=True)
class Board:
    """Square grid of token entities addressed by (row, col).

    cells maps every position to the entity holding its Token component.
    Rows and columns are computed from it on demand (see board_ops).
    """
    size: int
    cells: Dict[Tuple[int, int], int] = field(default_factory=dict)

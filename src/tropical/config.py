"""Immutable game configuration shared by every system of one world."""
from __future__ import annotations

from dataclasses import dataclass

from tropical.constants import (
    BOARD_SIZE,
    DELAY_AFTER_STARS_APPEAR,
    DELAY_DEFAULT,
    GEM_TYPES,
    MATCH_SYMBOL,
    MIN_MATCH_LENGTH,
)


@dataclass(frozen=True, slots=True)
class GameConfig:
    """Board geometry, gem palette and pacing for one game.

    ``palette`` lists the spawnable gem types. ``cleared_symbol`` is the
    sentinel written into cells emptied by a match and must not be a palette
    entry. ``require_adjacent`` makes a non-adjacent second selection replace
    the first one instead of swapping.
    """

    board_size: int = BOARD_SIZE
    palette: tuple[str, ...] = GEM_TYPES
    min_match_length: int = MIN_MATCH_LENGTH
    cleared_symbol: str = MATCH_SYMBOL
    require_adjacent: bool = False
    delay_default: float = DELAY_DEFAULT
    delay_after_stars: float = DELAY_AFTER_STARS_APPEAR

    def __post_init__(self) -> None:
        # Accept any iterable palette while keeping the dataclass hashable.
        object.__setattr__(self, "palette", tuple(self.palette))
        if self.min_match_length < 2:
            raise ValueError(f"min_match_length must be at least 2, got {self.min_match_length}")
        if self.board_size < self.min_match_length:
            raise ValueError(
                f"board_size {self.board_size} is smaller than min_match_length {self.min_match_length}"
            )
        if len(self.palette) < 2:
            raise ValueError("palette must contain at least two gem types")
        if len(set(self.palette)) != len(self.palette):
            raise ValueError(f"palette contains duplicates: {self.palette}")
        if self.cleared_symbol in self.palette:
            raise ValueError(f"cleared_symbol '{self.cleared_symbol}' must not be a palette entry")
        if self.delay_default < 0 or self.delay_after_stars < 0:
            raise ValueError("delays must be non-negative")

    def is_known_type(self, type_name: str) -> bool:
        return type_name == self.cleared_symbol or type_name in self.palette

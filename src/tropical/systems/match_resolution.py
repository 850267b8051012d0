from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Callable, Iterator, List, Optional, Sequence, Tuple

from esper import World

from tropical.config import GameConfig
from tropical.components.token import Token
from tropical.events.bus import (EventBus, EVENT_MATCH_CLEARED, EVENT_GRAVITY_APPLIED,
                                 EVENT_REFILL_COMPLETED, EVENT_CASCADE_STEP,
                                 EVENT_CASCADE_COMPLETE, EVENT_BOARD_CHANGED)
from tropical.systems.board_ops import get_board, get_column
from tropical.systems.match import find_all_matches, match_positions

logger = logging.getLogger(__name__)

Position = Tuple[int, int]


@dataclass(frozen=True, slots=True)
class GravityMove:
    source: Position
    target: Position
    type_name: str


@dataclass(frozen=True, slots=True)
class StepResult:
    """Everything one clear -> fall -> refill iteration did to the board.

    cleared holds (row, col, original type) for each collected token, once
    per token even when it sat in two crossing matches.
    """
    depth: int
    matches: Tuple[Tuple[Position, ...], ...]
    cleared: Tuple[Tuple[int, int, str], ...]
    moves: Tuple[GravityMove, ...]
    refilled: Tuple[Position, ...]

    @property
    def collected(self) -> Tuple[str, ...]:
        return tuple(type_name for _, _, type_name in self.cleared)


# ----------------------------------------------------------------------------
# Column helpers. A column is a top-to-bottom list of Tokens, index == row.
# ----------------------------------------------------------------------------

def find_lowest_cleared(column: Sequence[Token], cleared: str) -> Optional[Token]:
    """Lowest cleared cell below the top row; row 0 only ever refills."""
    for row in range(len(column) - 1, 0, -1):
        if column[row].type_name == cleared:
            return column[row]
    return None


def find_lowest_gem_above(column: Sequence[Token], star: Optional[Token], cleared: str) -> Optional[Token]:
    if star is None:
        return None
    for row in range(star.row - 1, -1, -1):
        if column[row].type_name != cleared:
            return column[row]
    return None


def make_one_gem_fall(star: Token, gem: Token, cleared: str) -> GravityMove:
    move = GravityMove(source=(gem.row, gem.col), target=(star.row, star.col), type_name=gem.type_name)
    star.set_type(gem.type_name)
    gem.set_type(cleared)
    return move


def make_all_gems_fall(column: Sequence[Token], cleared: str) -> List[GravityMove]:
    """Sink every gem through the gaps below it, one cell move at a time.

    Afterwards the cleared cells form a contiguous prefix starting at row 0.
    """
    moves: List[GravityMove] = []
    star = find_lowest_cleared(column, cleared)
    gem = find_lowest_gem_above(column, star, cleared)
    while star is not None and gem is not None:
        moves.append(make_one_gem_fall(star, gem, cleared))
        star = find_lowest_cleared(column, cleared)
        gem = find_lowest_gem_above(column, star, cleared)
    return moves


def add_random_gems_at_top(column: Sequence[Token], cleared: str, draw: Callable[[], str]) -> List[Position]:
    """Refill the cleared prefix of a fallen column; stops at the first gem."""
    spawned: List[Position] = []
    for token in column:
        if token.type_name != cleared:
            break
        token.set_type(draw())
        spawned.append((token.row, token.col))
    return spawned


class ResolutionEngine:
    """Clears matches, applies gravity and refills until the board is stable.

    The engine keeps no reference to the board: every call receives the world.
    Each iteration is exposed as a step so callers can pace them; nothing here
    waits on time.
    """
    def __init__(self, event_bus: EventBus, config: GameConfig, draw: Callable[[], str]):
        self.event_bus = event_bus
        self.config = config
        self.draw = draw

    def resolve_one_step(self, world: World, depth: int = 1) -> Optional[StepResult]:
        """Run one scan -> mark -> fall -> refill iteration; None at the fixed point."""
        matches = find_all_matches(world)
        if not matches:
            return None
        cleared = self.config.cleared_symbol
        groups = tuple(tuple(match_positions(match)) for match in matches)
        flat_positions = sorted({pos for group in groups for pos in group})
        self.event_bus.emit(EVENT_CASCADE_STEP, depth=depth, positions=flat_positions)

        # Mark
        typed: List[Tuple[int, int, str]] = []
        for match in matches:
            for token in match:
                if token.type_name == cleared:
                    continue
                typed.append((token.row, token.col, token.type_name))
                token.set_type(cleared)
        self.event_bus.emit(EVENT_MATCH_CLEARED, positions=flat_positions, types=list(typed))
        self.event_bus.emit(EVENT_BOARD_CHANGED, reason='clear', positions=flat_positions)

        # Gravity
        size = get_board(world).size
        columns = [get_column(world, col) for col in range(size)]
        moves: List[GravityMove] = []
        for column in columns:
            moves.extend(make_all_gems_fall(column, cleared))
        self.event_bus.emit(EVENT_GRAVITY_APPLIED, moves=list(moves))
        if moves:
            moved = sorted({pos for move in moves for pos in (move.source, move.target)})
            self.event_bus.emit(EVENT_BOARD_CHANGED, reason='fall', positions=moved)

        # Refill
        new_tiles: List[Position] = []
        for column in columns:
            new_tiles.extend(add_random_gems_at_top(column, cleared, self.draw))
        self.event_bus.emit(EVENT_REFILL_COMPLETED, new_tiles=list(new_tiles))
        self.event_bus.emit(EVENT_BOARD_CHANGED, reason='refill', positions=list(new_tiles))

        logger.debug(
            "cascade step %d: %d matches, %d cleared, %d moves, %d refilled",
            depth, len(groups), len(typed), len(moves), len(new_tiles),
        )
        return StepResult(
            depth=depth,
            matches=groups,
            cleared=tuple(typed),
            moves=tuple(moves),
            refilled=tuple(new_tiles),
        )

    def steps(self, world: World) -> Iterator[StepResult]:
        """Yield steps lazily until a scan finds nothing; stop iterating to cancel."""
        depth = 0
        while True:
            result = self.resolve_one_step(world, depth=depth + 1)
            if result is None:
                if depth:
                    self.event_bus.emit(EVENT_CASCADE_COMPLETE, depth=depth)
                return
            depth = result.depth
            yield result

    def resolve(self, world: World) -> List[StepResult]:
        return list(self.steps(world))

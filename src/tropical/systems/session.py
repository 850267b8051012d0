from __future__ import annotations

import logging
from typing import Iterator, Optional, Tuple

from esper import World
from tropical.events.bus import (
    EventBus,
    EVENT_BOARD_CHANGED,
    EVENT_MATCH_FOUND,
    EVENT_SCORE_CHANGED,
    EVENT_TILE_CLICK,
    EVENT_TILE_SELECTED,
    EVENT_TILE_SELECTION_REJECTED,
    EVENT_TILE_SWAPPED,
    EVENT_TILE_SWAP_INVALID,
    EVENT_TILE_SWAP_REVERTED,
    EVENT_TILE_SWAP_VALID,
)
from tropical.components.score_board import ScoreBoard
from tropical.components.selection import Selection
from tropical.components.session_state import SessionState, TurnPhase
from tropical.components.token import Token
from tropical.constants import MESSAGE_INVALID_SWAP, MESSAGE_MATCH_FOUND
from tropical.systems.board import BoardSystem
from tropical.systems.board_ops import get_entity_at, in_bounds, is_adjacent, swap_tokens
from tropical.systems.match import find_all_matches, has_matches, match_positions
from tropical.systems.match_resolution import ResolutionEngine, StepResult
from tropical.world import get_config

logger = logging.getLogger(__name__)


class GameSession:
    """Drives the turn protocol: select two tokens, swap, then resolve or revert.

    Flow:
      - select_token appends to the Selection until it holds two tokens.
      - The second selection swaps their types and scans the board once.
      - A match runs the ResolutionEngine to the fixed point and scores every
        collected token; no match swaps the pair back.
    With stepped=True the session stops after the swap verdict and the caller
    drives each resolution step (or the revert) through advance().
    """
    def __init__(self, world: World, event_bus: EventBus, board_system: BoardSystem, *, stepped: bool = False):
        self.world = world
        self.event_bus = event_bus
        self.config = get_config(world)
        self.engine = ResolutionEngine(event_bus, self.config, board_system.draw_random_type)
        self.stepped = stepped
        self._steps: Optional[Iterator[StepResult]] = None
        self._pending_revert: Optional[Tuple[int, int]] = None
        self.event_bus.subscribe(EVENT_TILE_CLICK, self.on_tile_click)

    # ------------------------------------------------------------------
    # Singletons
    # ------------------------------------------------------------------
    def _singleton(self, component_type):
        for _, comp in self.world.get_component(component_type):
            return comp
        comp = component_type()
        self.world.create_entity(comp)
        return comp

    @property
    def state(self) -> SessionState:
        return self._singleton(SessionState)

    @property
    def score_board(self) -> ScoreBoard:
        return self._singleton(ScoreBoard)

    @property
    def selection(self) -> Selection:
        return self._singleton(Selection)

    @property
    def is_busy(self) -> bool:
        return self.state.phase in (TurnPhase.RESOLVING, TurnPhase.REVERTING)

    # ------------------------------------------------------------------
    # Session lifecycle
    # ------------------------------------------------------------------
    def start(self) -> None:
        """Reset score and selection, then settle the initial board without scoring."""
        self._steps = None
        self._pending_revert = None
        self.selection.clear()
        self.score_board.reset()
        state = self.state
        state.phase = TurnPhase.IDLE
        state.cascade_depth = 0
        settled = self.engine.resolve(self.world)
        if settled:
            logger.debug("initial board settled in %d steps", len(settled))
        self.event_bus.emit(EVENT_SCORE_CHANGED, score=0, collected=[], delta=0)

    # ------------------------------------------------------------------
    # Input
    # ------------------------------------------------------------------
    def on_tile_click(self, sender, **kwargs):
        row = kwargs.get('row')
        col = kwargs.get('col')
        if row is None or col is None:
            return
        if not in_bounds(self.world, row, col):
            logger.warning("rejected selection outside the board at (%s, %s)", row, col)
            self.event_bus.emit(EVENT_TILE_SELECTION_REJECTED, row=row, col=col, reason='out_of_range')
            return
        self.select_token(row, col)

    def select_token(self, row: int, col: int) -> None:
        if not in_bounds(self.world, row, col):
            raise ValueError(f"Selection ({row}, {col}) is outside the board")
        state = self.state
        if self.is_busy:
            self.event_bus.emit(EVENT_TILE_SELECTION_REJECTED, row=row, col=col, reason='busy')
            return
        selection = self.selection
        entity = get_entity_at(self.world, row, col)
        if self.config.require_adjacent and len(selection.entities) == 1:
            first = self._token(selection.entities[0])
            if not is_adjacent((first.row, first.col), (row, col)):
                # Not a legal partner: the new token becomes the first selection.
                selection.entities[0] = entity
                self.event_bus.emit(EVENT_TILE_SELECTED, row=row, col=col, count=1)
                return
        selection.entities.append(entity)
        self.event_bus.emit(EVENT_TILE_SELECTED, row=row, col=col, count=len(selection.entities))
        if len(selection.entities) < 2:
            state.phase = TurnPhase.AWAITING_SECOND_SELECTION
            return
        self._attempt_swap()

    # ------------------------------------------------------------------
    # Swap verdict
    # ------------------------------------------------------------------
    def _attempt_swap(self) -> None:
        ent_a, ent_b = self.selection.entities
        a = self._token(ent_a)
        b = self._token(ent_b)
        src, dst = (a.row, a.col), (b.row, b.col)
        swap_tokens(a, b)
        self.event_bus.emit(EVENT_TILE_SWAPPED, src=src, dst=dst)
        self.event_bus.emit(EVENT_BOARD_CHANGED, reason='swap', positions=[src, dst])

        matches = find_all_matches(self.world)
        if matches:
            positions = sorted({pos for match in matches for pos in match_positions(match)})
            logger.info("swap %s <-> %s produced %d matches", src, dst, len(matches))
            self.event_bus.emit(EVENT_TILE_SWAP_VALID, src=src, dst=dst)
            self.event_bus.emit(EVENT_MATCH_FOUND, positions=positions, size=len(positions), message=MESSAGE_MATCH_FOUND)
            self.state.phase = TurnPhase.RESOLVING
            self.state.cascade_depth = 0
            self._steps = self.engine.steps(self.world)
        else:
            logger.info("swap %s <-> %s produced no match; reverting", src, dst)
            self.event_bus.emit(EVENT_TILE_SWAP_INVALID, src=src, dst=dst, message=MESSAGE_INVALID_SWAP)
            self.state.phase = TurnPhase.REVERTING
            self._pending_revert = (ent_a, ent_b)
        if not self.stepped:
            self._run_to_completion()

    # ------------------------------------------------------------------
    # Stepping
    # ------------------------------------------------------------------
    def advance(self) -> bool:
        """Perform the next pending unit of work; True while more remains."""
        phase = self.state.phase
        if phase == TurnPhase.REVERTING:
            self._revert()
            return False
        if phase != TurnPhase.RESOLVING or self._steps is None:
            return False
        result = next(self._steps, None)
        if result is None:
            self._finish_resolution()
            return False
        self.state.cascade_depth = result.depth
        self._collect(result)
        if not has_matches(self.world):
            # Drain the final empty scan so CASCADE_COMPLETE fires with this step.
            next(self._steps, None)
            self._finish_resolution()
            return False
        return True

    def _run_to_completion(self) -> None:
        while self.advance():
            pass

    def _collect(self, result: StepResult) -> None:
        score_board = self.score_board
        gained = score_board.add(result.collected)
        if gained:
            self.event_bus.emit(
                EVENT_SCORE_CHANGED,
                score=score_board.score,
                collected=list(score_board.collected),
                delta=gained,
            )

    def _finish_resolution(self) -> None:
        logger.info(
            "resolution finished after %d steps; score %d, collected %s",
            self.state.cascade_depth, self.score_board.score, self.score_board.collected_string(),
        )
        self._steps = None
        self.selection.clear()
        self.state.phase = TurnPhase.IDLE

    def _revert(self) -> None:
        if self._pending_revert is not None:
            ent_a, ent_b = self._pending_revert
            a = self._token(ent_a)
            b = self._token(ent_b)
            swap_tokens(a, b)
            src, dst = (a.row, a.col), (b.row, b.col)
            self.event_bus.emit(EVENT_TILE_SWAP_REVERTED, src=src, dst=dst)
            self.event_bus.emit(EVENT_BOARD_CHANGED, reason='revert', positions=[src, dst])
            self._pending_revert = None
        self.selection.clear()
        self.state.phase = TurnPhase.IDLE

    def _token(self, entity: int) -> Token:
        return self.world.component_for_entity(entity, Token)

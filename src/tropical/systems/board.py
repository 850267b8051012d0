from typing import List, Sequence

from esper import World
from tropical.events.bus import EventBus, EVENT_BOARD_CHANGED
from tropical.components.board import Board
from tropical.components.token import BoardPosition, Token
from tropical.world import get_config


class BoardSystem:
    """Creates the board and acts as the random token source.

    One Token entity is spawned per cell and kept for the whole game; later
    changes only rewrite Token.type_name.
    """
    def __init__(self, world: World, event_bus: EventBus):
        self.world = world
        self.event_bus = event_bus
        self.config = get_config(world)
        self.board_entity = self.world.create_entity()
        self.world.add_component(self.board_entity, Board(size=self.config.board_size))
        self._init_board()

    def _init_board(self):
        board: Board = self.world.component_for_entity(self.board_entity, Board)
        palette = list(self.config.palette)
        run = self.config.min_match_length
        for r in range(board.size):
            for c in range(board.size):
                available = palette.copy()
                # Prevent a horizontal run: exclude the type of the preceding cells when they all agree.
                if c >= run - 1:
                    left = {self._type_at(r, c - k) for k in range(1, run)}
                    if len(left) == 1:
                        available = [t for t in available if t not in left]
                # Same for the column above.
                if r >= run - 1:
                    up = {self._type_at(r - k, c) for k in range(1, run)}
                    if len(up) == 1:
                        available = [t for t in available if t not in up]
                type_name = self.world.random.choice(available) if available else self.draw_random_type()
                ent = self.world.create_entity(Token(position=BoardPosition(row=r, col=c), type_name=type_name))
                board.cells[(r, c)] = ent

    def draw_random_type(self) -> str:
        """Return one palette gem; called once per refilled cell."""
        return self.world.random.choice(self.config.palette)

    def fill_types(self, rows: Sequence[Sequence[str]]) -> None:
        """Load an explicit layout, row-major, onto the existing tokens."""
        board: Board = self.world.component_for_entity(self.board_entity, Board)
        if len(rows) != board.size or any(len(row) != board.size for row in rows):
            raise ValueError(f"Layout must be {board.size}x{board.size}")
        changed: List[tuple] = []
        for r, row in enumerate(rows):
            for c, type_name in enumerate(row):
                token = self.world.component_for_entity(board.cells[(r, c)], Token)
                token.set_type(type_name)
                changed.append((r, c))
        self.event_bus.emit(EVENT_BOARD_CHANGED, reason='fill', positions=changed)

    def _type_at(self, row: int, col: int) -> str:
        board: Board = self.world.component_for_entity(self.board_entity, Board)
        return self.world.component_for_entity(board.cells[(row, col)], Token).type_name

from __future__ import annotations

from typing import List, Tuple

from esper import World

from tropical.components.board import Board
from tropical.components.token import Token
from tropical.world import get_config

Position = Tuple[int, int]


def get_board(world: World) -> Board:
    for _, board in world.get_component(Board):
        return board
    raise RuntimeError("Board not found; create one with BoardSystem")


def in_bounds(world: World, row: int, col: int) -> bool:
    size = get_board(world).size
    return 0 <= row < size and 0 <= col < size


def get_entity_at(world: World, row: int, col: int) -> int | None:
    return get_board(world).cells.get((row, col))


def get_token(world: World, row: int, col: int) -> Token:
    entity = get_entity_at(world, row, col)
    if entity is None:
        raise RuntimeError(f"No token at ({row}, {col})")
    return world.component_for_entity(entity, Token)


def get_row(world: World, row: int) -> List[Token]:
    """Tokens of one row, left to right."""
    size = get_board(world).size
    return [get_token(world, row, col) for col in range(size)]


def get_column(world: World, col: int) -> List[Token]:
    """Tokens of one column, top (row 0) to bottom."""
    size = get_board(world).size
    return [get_token(world, row, col) for row in range(size)]


def get_all_lines(world: World) -> List[List[Token]]:
    """Every row followed by every column, in index order."""
    size = get_board(world).size
    rows = [get_row(world, r) for r in range(size)]
    cols = [get_column(world, c) for c in range(size)]
    return rows + cols


def swap_tokens(a: Token, b: Token) -> None:
    """Exchange the types of two tokens in place. Applying it twice is a no-op."""
    a.type_name, b.type_name = b.type_name, a.type_name


def is_adjacent(a: Position, b: Position) -> bool:
    ar, ac = a
    br, bc = b
    return (abs(ar - br) == 1 and ac == bc) or (abs(ac - bc) == 1 and ar == br)


def tile_type_grid(world: World) -> List[List[str]]:
    """Snapshot of the board's type names, row-major."""
    size = get_board(world).size
    return [[get_token(world, r, c).type_name for c in range(size)] for r in range(size)]


def validate_board(world: World) -> None:
    """Fail fast on a board that would break the gravity and refill invariants."""
    config = get_config(world)
    board = get_board(world)
    size = board.size
    if size != config.board_size:
        raise RuntimeError(f"Board size {size} does not match configured size {config.board_size}")
    if len(board.cells) != size * size:
        raise RuntimeError(f"Board holds {len(board.cells)} cells, expected {size * size}")
    for row in range(size):
        for col in range(size):
            entity = board.cells.get((row, col))
            if entity is None:
                raise RuntimeError(f"Board is missing a token at ({row}, {col})")
            token = world.component_for_entity(entity, Token)
            if (token.row, token.col) != (row, col):
                raise RuntimeError(f"Token {token!r} is registered at ({row}, {col})")
            if not config.is_known_type(token.type_name):
                raise RuntimeError(f"Unknown token type {token.type_name!r} at ({row}, {col})")

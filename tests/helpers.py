from __future__ import annotations

import itertools
import random
from typing import Callable, List, Sequence

from tropical.config import GameConfig
from tropical.events.bus import EventBus
from tropical.systems.board import BoardSystem
from tropical.systems.session import GameSession
from tropical.world import create_world

# The first five types build run-free layouts; the last two only come from refills.
PALETTE = ('coconut', 'melon', 'kiwi', 'berry', 'pineapple', 'filler_a', 'filler_b')
LAYOUT_TYPES = PALETTE[:5]
CLEARED = '*'


def make_game(size: int = 8, *, seed: int = 0, stepped: bool = False, **config_kwargs):
    """Build bus, world, board system and session around a test palette."""
    bus = EventBus()
    config = GameConfig(board_size=size, palette=PALETTE, cleared_symbol=CLEARED, **config_kwargs)
    world = create_world(bus, config, rng=random.Random(seed))
    board = BoardSystem(world, bus)
    session = GameSession(world, bus, board, stepped=stepped)
    return bus, world, board, session


def stable_layout(size: int = 8) -> List[List[str]]:
    """Layout without any two equal neighbours in a row or a column."""
    return [[LAYOUT_TYPES[(r + 2 * c) % 5] for c in range(size)] for r in range(size)]


def alternating_draw(types: Sequence[str] = PALETTE[5:]) -> Callable[[], str]:
    cycle = itertools.cycle(types)
    return lambda: next(cycle)


def collect(bus: EventBus, name: str) -> list:
    received: list = []
    bus.subscribe(name, lambda sender, **payload: received.append(payload))
    return received

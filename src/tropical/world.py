import random

from esper import World
from .events.bus import EventBus
from tropical.config import GameConfig
from tropical.components.score_board import ScoreBoard
from tropical.components.selection import Selection
from tropical.components.session_state import SessionState


def create_world(
    event_bus: EventBus,
    config: GameConfig | None = None,
    *,
    rng: random.Random | None = None,
) -> World:
    """Create a world carrying the game configuration, RNG and session singletons.

    The board itself is created by BoardSystem so callers choose when tokens spawn.
    """
    world = World()
    setattr(world, "random", rng or random.Random())
    setattr(world, "config", config or GameConfig())

    world.create_entity(SessionState(), ScoreBoard(), Selection())
    return world


def get_config(world: World) -> GameConfig:
    config = getattr(world, "config", None)
    if config is None:
        raise RuntimeError("World has no GameConfig; build it with create_world")
    return config

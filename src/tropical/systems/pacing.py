from __future__ import annotations

from typing import Optional

from esper import World

from tropical.components.session_state import TurnPhase
from tropical.events.bus import EventBus, EVENT_TICK
from tropical.systems.session import GameSession
from tropical.world import get_config


class PacingSystem:
    """Advances a stepped GameSession on tick events so a viewer can follow along.

    The revert of an invalid swap and the first resolution step wait
    ``delay_default`` seconds; each later cascade step waits ``delay_after_stars``.
    """

    def __init__(self, world: World, event_bus: EventBus, session: GameSession) -> None:
        self.world = world
        self.event_bus = event_bus
        self.session = session
        self.config = get_config(world)
        self.delay_remaining: Optional[float] = None
        event_bus.subscribe(EVENT_TICK, self.on_tick)

    def _next_delay(self) -> float:
        state = self.session.state
        if state.phase == TurnPhase.REVERTING or state.cascade_depth == 0:
            return self.config.delay_default
        return self.config.delay_after_stars

    def on_tick(self, sender, **payload) -> None:
        if not self.session.is_busy:
            self.delay_remaining = None
            return
        if self.delay_remaining is None:
            self.delay_remaining = self._next_delay()
        dt = float(payload.get("dt", 0.0))
        self.delay_remaining = max(0.0, self.delay_remaining - dt)
        if self.delay_remaining > 0.0:
            return
        self.delay_remaining = None
        self.session.advance()

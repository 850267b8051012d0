import sys, os
import logging
import random
ROOT = os.path.dirname(__file__)
SRC = os.path.join(ROOT, 'src')
if SRC not in sys.path:
    sys.path.insert(0, SRC)
from tropical.events.bus import EventBus
from tropical.events.bus import (EVENT_TICK, EVENT_MATCH_FOUND, EVENT_TILE_SWAP_INVALID,
                                 EVENT_SCORE_CHANGED, EVENT_CASCADE_STEP)
from tropical.constants import MESSAGE_WELCOME
from tropical.systems.board import BoardSystem
from tropical.systems.board_ops import tile_type_grid
from tropical.systems.pacing import PacingSystem
from tropical.systems.session import GameSession
from tropical.world import create_world

logging.basicConfig(level=logging.DEBUG, format='%(name)s %(levelname)s %(message)s')

def dump(world):
    for row in tile_type_grid(world):
        print(' '.join(row))
    print()

def drive(bus, ticks, dt=0.1):
    for _ in range(ticks):
        bus.emit(EVENT_TICK, dt=dt)

seed = int(sys.argv[1]) if len(sys.argv) > 1 else 7
bus = EventBus()
world = create_world(bus, rng=random.Random(seed))
board = BoardSystem(world, bus)
session = GameSession(world, bus, board, stepped=True)
PacingSystem(world, bus, session)
session.start()

received = []
for ev in [EVENT_MATCH_FOUND, EVENT_TILE_SWAP_INVALID, EVENT_CASCADE_STEP]:
    bus.subscribe(ev, lambda s, _ev=ev, **k: received.append(_ev))
bus.subscribe(EVENT_MATCH_FOUND, lambda s, **k: print(k['message']))
bus.subscribe(EVENT_TILE_SWAP_INVALID, lambda s, **k: print(k['message']))
bus.subscribe(EVENT_SCORE_CHANGED, lambda s, **k: print('SCORE:', k['score'], 'GEMS COLLECTED:', ''.join(k['collected'])))

print(MESSAGE_WELCOME)
dump(world)
picker = random.Random(seed)
size = world.config.board_size
for turn in range(5):
    r, c = picker.randrange(size), picker.randrange(size - 1)
    print(f'turn {turn}: swap ({r},{c}) <-> ({r},{c + 1})')
    session.select_token(r, c)
    session.select_token(r, c + 1)
    drive(bus, 200)
    dump(world)
print('events', received)

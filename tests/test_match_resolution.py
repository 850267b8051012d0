import random

from tropical.components.token import Token
from tropical.events.bus import (EVENT_BOARD_CHANGED, EVENT_CASCADE_COMPLETE, EVENT_CASCADE_STEP,
                                 EVENT_GRAVITY_APPLIED, EVENT_MATCH_CLEARED, EVENT_REFILL_COMPLETED)
from tropical.systems.board_ops import get_column, tile_type_grid
from tropical.systems.match import find_all_matches
from tropical.systems.match_resolution import ResolutionEngine
from tests.helpers import CLEARED, alternating_draw, collect, make_game, stable_layout


def sequence_draw(types):
    it = iter(types)
    return lambda: next(it)


def engine_for(bus, world, draw):
    return ResolutionEngine(bus, world.config, draw)


def test_vertical_run_resolves_to_fixed_point():
    bus, world, board, _ = make_game(8)
    layout = stable_layout(8)
    for r in range(3):
        layout[r][3] = 'coconut'
    board.fill_types(layout)
    # Refill hands back the column's original gems, top to bottom.
    engine = engine_for(bus, world, sequence_draw(['melon', 'kiwi', 'berry']))
    steps = engine.resolve(world)
    assert len(steps) == 1
    step = steps[0]
    assert step.matches == (((0, 3), (1, 3), (2, 3)),)
    assert step.collected == ('coconut', 'coconut', 'coconut')
    assert step.moves == ()
    assert step.refilled == ((0, 3), (1, 3), (2, 3))
    assert find_all_matches(world) == []
    assert tile_type_grid(world) == stable_layout(8)


def test_horizontal_run_makes_columns_fall():
    bus, world, board, _ = make_game(8)
    layout = stable_layout(8)
    for c in range(3):
        layout[5][c] = 'filler_a'
    board.fill_types(layout)
    before = tile_type_grid(world)
    gravity = collect(bus, EVENT_GRAVITY_APPLIED)
    refill = collect(bus, EVENT_REFILL_COMPLETED)
    engine = engine_for(bus, world, alternating_draw())
    steps = engine.resolve(world)
    after = tile_type_grid(world)
    assert len(steps) == 1
    assert len(steps[0].moves) == 15
    assert len(gravity[0]['moves']) == 15
    assert refill[0]['new_tiles'] == [(0, 0), (0, 1), (0, 2)]
    for c in range(3):
        assert [after[r][c] for r in range(1, 6)] == [before[r][c] for r in range(0, 5)]
        assert [after[r][c] for r in range(6, 8)] == [before[r][c] for r in range(6, 8)]
    assert [after[0][c] for c in range(3)] == ['filler_a', 'filler_b', 'filler_a']
    # Untouched columns stay put.
    for c in range(3, 8):
        assert [after[r][c] for r in range(8)] == [before[r][c] for r in range(8)]
    assert find_all_matches(world) == []


def test_refill_match_cascades_until_stable():
    bus, world, board, _ = make_game(8)
    layout = stable_layout(8)
    for c in range(3):
        layout[7][c] = 'filler_a'
    board.fill_types(layout)
    steps_seen = collect(bus, EVENT_CASCADE_STEP)
    complete = collect(bus, EVENT_CASCADE_COMPLETE)
    draw = sequence_draw(['filler_b'] * 3 + ['filler_a', 'melon', 'filler_a'])
    steps = engine_for(bus, world, draw).resolve(world)
    assert [s.depth for s in steps] == [1, 2]
    assert steps[1].matches == (((0, 0), (0, 1), (0, 2)),)
    assert steps[1].collected == ('filler_b',) * 3
    assert [k['depth'] for k in steps_seen] == [1, 2]
    assert complete == [{'depth': 2}]
    assert find_all_matches(world) == []


def test_crossing_runs_collect_each_token_once():
    bus, world, board, _ = make_game(8)
    layout = stable_layout(8)
    for c in range(2, 5):
        layout[3][c] = 'filler_a'
    for r in range(2, 5):
        layout[r][3] = 'filler_a'
    board.fill_types(layout)
    step = engine_for(bus, world, alternating_draw(['melon', 'pineapple'])).resolve_one_step(world)
    assert step is not None
    assert len(step.matches) == 2
    assert len(step.cleared) == 5
    assert sorted((r, c) for r, c, _ in step.cleared) == [(2, 3), (3, 2), (3, 3), (3, 4), (4, 3)]


def test_step_events_follow_clear_fall_refill():
    bus, world, board, _ = make_game(8)
    layout = stable_layout(8)
    for c in range(3):
        layout[5][c] = 'filler_a'
    board.fill_types(layout)
    changes = collect(bus, EVENT_BOARD_CHANGED)
    cleared = collect(bus, EVENT_MATCH_CLEARED)
    engine_for(bus, world, alternating_draw()).resolve_one_step(world)
    assert [c['reason'] for c in changes] == ['clear', 'fall', 'refill']
    assert cleared[0]['positions'] == [(5, 0), (5, 1), (5, 2)]
    assert cleared[0]['types'] == [(5, 0, 'filler_a'), (5, 1, 'filler_a'), (5, 2, 'filler_a')]


def test_stable_board_is_already_fixed_point():
    bus, world, board, _ = make_game(8)
    board.fill_types(stable_layout(8))
    complete = collect(bus, EVENT_CASCADE_COMPLETE)
    engine = engine_for(bus, world, alternating_draw())
    assert engine.resolve_one_step(world) is None
    assert engine.resolve(world) == []
    assert complete == []


def test_steps_can_be_stopped_between_iterations():
    bus, world, board, _ = make_game(8)
    layout = stable_layout(8)
    for c in range(3):
        layout[7][c] = 'filler_a'
    board.fill_types(layout)
    complete = collect(bus, EVENT_CASCADE_COMPLETE)
    draw = sequence_draw(['filler_b'] * 3)
    steps = engine_for(bus, world, draw).steps(world)
    first = next(steps)
    assert first.depth == 1
    steps.close()
    grid = tile_type_grid(world)
    assert all(CLEARED not in row for row in grid)
    # The refill match is still waiting for the next step.
    assert len(find_all_matches(world)) == 1
    assert complete == []


def test_random_boards_reach_fixed_point_and_conserve_tokens():
    for seed in range(10):
        bus, world, board, _ = make_game(8, seed=seed)
        rng = random.Random(seed)
        board.fill_types([[rng.choice(world.config.palette[:3]) for _ in range(8)] for _ in range(8)])
        token_ids = sorted(id(tok) for _, tok in world.get_component(Token))
        column_ids = [[id(tok) for tok in get_column(world, c)] for c in range(8)]
        engine = engine_for(bus, world, board.draw_random_type)
        steps = engine.resolve(world)
        assert steps, f'seed {seed} board had no matches to resolve'
        assert find_all_matches(world) == []
        assert sorted(id(tok) for _, tok in world.get_component(Token)) == token_ids
        assert [[id(tok) for tok in get_column(world, c)] for c in range(8)] == column_ids
        assert all(CLEARED not in row for row in tile_type_grid(world))

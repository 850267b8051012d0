"""Run detection over board lines.

A Match is a list of Tokens of one type, contiguous along a single row or
column and at least ``min_length`` long. Crossing runs are reported as two
separate matches; callers that count tokens must skip cells they already
cleared.
"""
from __future__ import annotations

from typing import List, Sequence

from esper import World

from tropical.components.token import Token
from tropical.constants import MATCH_SYMBOL, MIN_MATCH_LENGTH
from tropical.systems.board_ops import get_all_lines, validate_board
from tropical.world import get_config

Match = List[Token]


def find_matches_in_sequence(
    seq: Sequence[Token],
    min_length: int = MIN_MATCH_LENGTH,
    cleared: str = MATCH_SYMBOL,
) -> List[Match]:
    """Return the maximal runs of ``seq`` that are at least ``min_length`` long.

    Single pass; runs are never split and a token lands in at most one match.
    Runs of the cleared sentinel are holes, not gems, and never match.
    """
    matches: List[Match] = []
    run: Match = []
    for token in seq:
        if run and token.type_name == run[0].type_name:
            run.append(token)
            continue
        if len(run) >= min_length and run[0].type_name != cleared:
            matches.append(run)
        run = [token]
    if len(run) >= min_length and run[0].type_name != cleared:
        matches.append(run)
    return matches


def find_all_matches(world: World) -> List[Match]:
    """Scan every row, then every column, concatenating their matches in that order."""
    validate_board(world)
    config = get_config(world)
    matches: List[Match] = []
    for line in get_all_lines(world):
        matches.extend(
            find_matches_in_sequence(line, config.min_match_length, config.cleared_symbol)
        )
    return matches


def has_matches(world: World) -> bool:
    return bool(find_all_matches(world))


def match_positions(match: Match) -> List[tuple[int, int]]:
    return [(token.row, token.col) for token in match]

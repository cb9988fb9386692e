"""
Move ordering, root move limiting, and depth selection.

Alpha-beta only prunes well when the best reply is searched first. The
priority below pushes forcing moves to the front:

    captures:   CAPTURE_BONUS + victim_value - attacker_value  (MVV-LVA)
    promotions: PROMOTION_BONUS + value of the new piece
    checks:     CHECK_BONUS
    quiet:      0

Bonuses add up, so a capture that also checks outranks a plain capture of the
same piece. PxQ comes before QxP; a king counts as the cheapest attacker
because it can only take undefended pieces.

The same priority also trims the root: on wide positions only the top-scored
root moves get a full search, and the root branching factor picks the depth.
There is no clock; these two tables are what keeps a move computation bounded.
"""

from __future__ import annotations

from collections.abc import Iterable

import chess

from opponent.constants import (
    BASE_DEPTH,
    CAPTURE_BONUS,
    CHECK_BONUS,
    ENDGAME_NARROW_ROOT_MOVES,
    NARROW_ROOT_MOVES,
    PIECE_VALUES,
    PROMOTION_BONUS,
    ROOT_FULL_WIDTH,
    ROOT_MOVE_CAP,
    ROOT_MOVE_CAP_WIDE,
    ROOT_VERY_WIDE,
    SHALLOW_DEPTH,
    WIDE_ROOT_MOVES,
)
from opponent.evaluate import is_endgame
from opponent.position import Position


def capture_value(position: Position, move: chess.Move) -> int:
    """MVV-LVA score of a capture, 0 for a quiet move."""
    victim = position.captured_piece_type(move)
    if victim is None:
        return 0
    attacker = position.piece_type_at(move.from_square)
    attacker_value = 0 if attacker in (None, chess.KING) else PIECE_VALUES[attacker]
    return CAPTURE_BONUS + PIECE_VALUES[victim] - attacker_value


def move_priority(position: Position, move: chess.Move) -> int:
    """Ordering key for ``move`` in ``position``; higher is searched earlier."""
    priority = capture_value(position, move)
    if move.promotion is not None:
        priority += PROMOTION_BONUS + PIECE_VALUES[move.promotion]
    if position.gives_check(move):
        priority += CHECK_BONUS
    return priority


def order_moves(position: Position, moves: Iterable[chess.Move]) -> list[chess.Move]:
    """
    Sort ``moves`` by descending priority for the side to move.

    Scores in the search are always relative to the side to move, so the
    mover always wants its most forcing moves first. The sort is stable:
    moves with equal priority keep the rules engine's order.
    """
    return sorted(moves, key=lambda move: move_priority(position, move), reverse=True)


def tactical_moves(position: Position, moves: Iterable[chess.Move]) -> list[chess.Move]:
    """
    Captures and checking moves only, most valuable victim first.

    This is the move set of the quiescence search.
    """
    scored = []
    for move in moves:
        victim = capture_value(position, move)
        if victim or position.gives_check(move):
            scored.append((victim, move))
    scored.sort(key=lambda item: item[0], reverse=True)
    return [move for _, move in scored]


def root_move_limit(move_count: int) -> int:
    """
    How many of the ordered root moves receive a full search.

    All of them below ROOT_FULL_WIDTH, ROOT_MOVE_CAP up to ROOT_VERY_WIDE,
    ROOT_MOVE_CAP_WIDE beyond that.
    """
    if move_count < ROOT_FULL_WIDTH:
        return move_count
    if move_count <= ROOT_VERY_WIDE:
        return ROOT_MOVE_CAP
    return ROOT_MOVE_CAP_WIDE


def select_depth(position: Position, move_count: int) -> int:
    """
    Search depth for a root with ``move_count`` legal moves.

    Starts from BASE_DEPTH. Narrow roots (fewer than NARROW_ROOT_MOVES, or
    fewer than ENDGAME_NARROW_ROOT_MOVES in an endgame) get one extra ply;
    very wide roots (more than WIDE_ROOT_MOVES) drop to SHALLOW_DEPTH.
    """
    if move_count > WIDE_ROOT_MOVES:
        return SHALLOW_DEPTH
    if move_count < NARROW_ROOT_MOVES:
        return BASE_DEPTH + 1
    if move_count < ENDGAME_NARROW_ROOT_MOVES and is_endgame(position):
        return BASE_DEPTH + 1
    return BASE_DEPTH

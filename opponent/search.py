"""
Search entry point: negamax with alpha-beta pruning, quiescence search,
MVV-LVA move ordering, root move limiting, and table-driven depth selection.

select_move() is the only function the match layer calls. It receives the
position of the computer's turn and returns one move plus the root score,
or None when the side to move has no legal move at all.

How a move is chosen:

1. Depth: picked from the root branching factor and the game phase
   (see ordering.select_depth), unless SearchConfig.depth pins it.
2. Root limiting: root moves are ordered by priority and only the first
   few get a full search on wide positions (ordering.root_move_limit).
   Moves that mate on the spot are moved to the front first.
3. Negamax: every node orders its moves, recurses with the negated and
   swapped window, and stops as soon as alpha >= beta.
4. Quiescence: at the horizon, captures and checks are searched for a few
   more plies so a position is never judged in the middle of an exchange.
5. Early exit: the root loop ends once a move reaches the best score still
   possible (mate on the spot, or mate in two when no such move exists).

There is no clock. The depth table and root limiting keep the node count
bounded; callers that need a hard latency limit run select_move on a worker
and stop waiting for it (see web.app).

Failure policy:
    select_move never raises for a position it can enumerate. Any exception
    from the rules engine during the search is logged and the engine falls
    back to a single-ply greedy choice, or to a random legal move if even
    that fails. Evaluation failures on individual nodes only cost that node.

Stack discipline:
    The position is mutated in place. Every apply_move() is followed by
    undo_move() in a ``finally`` block, so cutoffs, early exits, and
    exceptions all leave the position as it was received.
"""

from __future__ import annotations

import logging
import random
from collections.abc import Sequence
from dataclasses import dataclass, field

import chess

from opponent.constants import (
    CHECK_BONUS,
    DRAW_SCORE,
    EVAL_FAILURE_SCORE,
    INFINITY,
    MATE_SCORE,
    QUIESCENCE_MAX_DEPTH,
)
from opponent.errors import SearchError
from opponent.evaluate import evaluate
from opponent.ordering import (
    capture_value,
    order_moves,
    root_move_limit,
    select_depth,
    tactical_moves,
)
from opponent.position import Position

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SearchConfig:
    """
    Tunables for one search.

    Attributes:
        depth:            Fixed main-search depth in plies. None lets the
                          depth table decide from the root position.
        quiescence_depth: Maximum number of capture/check plies searched
                          beyond the horizon.
        use_pruning:      Alpha-beta cutoffs on or off. With cutoffs off the
                          search is a plain minimax and returns the same move
                          and score, only slower.
        limit_root:       Search only the best-ordered subset of root moves on
                          wide positions.
    """

    depth: int | None = None
    quiescence_depth: int = QUIESCENCE_MAX_DEPTH
    use_pruning: bool = True
    limit_root: bool = True

    def __post_init__(self) -> None:
        if self.depth is not None and self.depth < 1:
            raise ValueError("Search depth must be >= 1")
        if self.quiescence_depth < 0:
            raise ValueError("Quiescence depth must be >= 0")


@dataclass(frozen=True)
class SearchResult:
    """
    Move chosen for the side to move.

    Attributes:
        move:     A member of position.legal_moves() at call time.
        score:    Root evaluation in centipawns from White's perspective,
                  same convention as evaluate(). 0 for fallback choices.
        depth:    Main-search depth used; 0 when no search ran.
        nodes:    Number of nodes visited, quiescence included.
        fallback: True when the move came from the single-ply fallback.
    """

    move: chess.Move
    score: int
    depth: int
    nodes: int
    fallback: bool = False


@dataclass
class SearchState:
    """Per-call mutable bookkeeping shared by the recursive functions."""

    config: SearchConfig = field(default_factory=SearchConfig)
    node_count: int = 0


def _static_eval(position: Position, moves: Sequence[chess.Move] | None = None) -> int:
    """
    Evaluation from the side-to-move's perspective (negamax convention).

    A node whose evaluation raises is scored as very bad for the side to
    move; the search continues with its siblings.
    """
    try:
        score = evaluate(position, moves)
    except Exception:
        logger.warning("Evaluation failed at %s", position, exc_info=True)
        return -EVAL_FAILURE_SCORE
    return score if position.side_to_move() == chess.WHITE else -score


def quiescence(
    position: Position,
    alpha: int,
    beta: int,
    ply: int,
    qdepth: int,
    state: SearchState,
) -> int:
    """
    Capture/check-only search run at the horizon of the main search.

    The side to move may always decline to capture, so the static evaluation
    ("stand pat") is a floor for its score. If the floor already reaches beta
    the node is cut at once. Otherwise captures and checking moves are tried,
    most valuable victim first, until the position is quiet or the
    quiescence depth cap is hit.

    Args:
        position: Position to resolve. Restored before returning.
        alpha:    Lower bound of the window.
        beta:     Upper bound of the window.
        ply:      Distance from the root, used to score mates by distance.
        qdepth:   Quiescence plies already spent below the horizon.
        state:    Node counter and configuration.

    Returns:
        Score from the side-to-move's perspective.
    """
    state.node_count += 1
    pruning = state.config.use_pruning

    moves = position.legal_moves()
    if not moves:
        return -(MATE_SCORE - ply) if position.is_check() else DRAW_SCORE
    if position.is_draw():
        return DRAW_SCORE

    best = _static_eval(position, moves)
    if qdepth >= state.config.quiescence_depth:
        return best
    if pruning and best >= beta:
        return best
    if best > alpha:
        alpha = best

    for move in tactical_moves(position, moves):
        position.apply_move(move)
        try:
            score = -quiescence(position, -beta, -alpha, ply + 1, qdepth + 1, state)
        finally:
            position.undo_move()

        if score > best:
            best = score
        if best > alpha:
            alpha = best
        if pruning and alpha >= beta:
            break

    return best


def negamax(
    position: Position,
    depth: int,
    alpha: int,
    beta: int,
    ply: int,
    state: SearchState,
) -> int:
    """
    Negamax search with alpha-beta pruning; quiescence at the horizon.

    Args:
        position: Current position, mutated in place and restored on return.
        depth:    Remaining plies. At 0 the node is handed to quiescence().
        alpha:    Best score the side to move is already guaranteed.
        beta:     Best score the opponent will allow.
        ply:      Distance from the root.
        state:    Node counter and configuration.

    Returns:
        Score from the side-to-move's perspective. Mates are scored
        MATE_SCORE - ply so nearer mates are preferred and farther ones
        are resisted longer.

    Raises:
        SearchError: The rules engine reported no legal moves for a position
            it does not consider terminal.
    """
    if depth <= 0:
        return quiescence(position, alpha, beta, ply, 0, state)

    moves = position.legal_moves()
    if not moves or position.is_draw():
        if not moves and not (position.is_checkmate() or position.is_stalemate()):
            raise SearchError(f"No legal moves in non-terminal position {position}")
        return quiescence(position, alpha, beta, ply, 0, state)

    state.node_count += 1
    best = -INFINITY

    for move in order_moves(position, moves):
        position.apply_move(move)
        try:
            score = -negamax(position, depth - 1, -beta, -alpha, ply + 1, state)
        finally:
            position.undo_move()

        if score > best:
            best = score
        if best > alpha:
            alpha = best
        # Cutoff: the opponent already has a better line elsewhere.
        if state.config.use_pruning and beta <= alpha:
            break

    return best


def search_score(position: Position, depth: int, config: SearchConfig | None = None) -> int:
    """
    Search value of ``position`` from White's perspective.

    depth=0 runs quiescence alone, which is the static evaluation corrected
    for any exchange in progress.
    """
    if depth < 0:
        raise ValueError("Search depth must be >= 0")
    state = SearchState(config or SearchConfig())
    score = negamax(position, depth, -INFINITY, INFINITY, 0, state)
    return score if position.side_to_move() == chess.WHITE else -score


def greedy_move(
    position: Position,
    moves: Sequence[chess.Move] | None = None,
) -> SearchResult | None:
    """
    Single-ply fallback: the move with the best capture value plus check bonus.

    Used when the full search fails or when a caller stops waiting for it.
    Ties go to the earliest move. If scoring itself fails, a uniformly random
    legal move is returned; degraded play beats no move.

    Args:
        position: Position to move in. Not modified.
        moves:    Legal moves if the caller already has them.

    Returns:
        A fallback SearchResult, or None if there are no legal moves or they
        cannot be enumerated.
    """
    if moves is None:
        try:
            moves = position.legal_moves()
        except Exception:
            logger.exception("Rules engine could not enumerate moves for %s", position)
            return None
    if not moves:
        return None

    try:
        move = max(
            moves,
            key=lambda m: capture_value(position, m)
            + (CHECK_BONUS if position.gives_check(m) else 0),
        )
    except Exception:
        logger.warning("Greedy scoring failed at %s; playing a random move", position, exc_info=True)
        move = random.choice(list(moves))

    return SearchResult(move=move, score=0, depth=0, nodes=0, fallback=True)


def _mating_moves(position: Position, moves: Sequence[chess.Move]) -> list[chess.Move]:
    """Moves that checkmate the opponent on the spot, in the given order."""
    mating = []
    for move in moves:
        if not position.gives_check(move):
            continue
        position.apply_move(move)
        try:
            if position.is_checkmate():
                mating.append(move)
        finally:
            position.undo_move()
    return mating


def _search_root(
    position: Position,
    root_moves: Sequence[chess.Move],
    config: SearchConfig,
) -> SearchResult:
    """
    Search the root moves and keep the best one.

    Moves that mate at once are put in front before root limiting, so a
    quiet mate is never cut in favour of captures. The loop stops as soon as
    a move reaches the best score still achievable: a mate on the spot, or a
    mate in two when no move mates on the spot. Stopping on any mate score
    could trade a short mate for a longer one.
    """
    depth = config.depth if config.depth is not None else select_depth(position, len(root_moves))
    ordered = order_moves(position, root_moves)
    mating = _mating_moves(position, ordered)
    if mating:
        ordered = mating + [move for move in ordered if move not in mating]
    limit = root_move_limit(len(ordered)) if config.limit_root else len(ordered)
    candidates = ordered[:limit]
    # Our mate on the spot is ply 1; without one, the next possible mate is ply 3.
    stop_score = MATE_SCORE - 1 if mating else MATE_SCORE - 3

    logger.debug(
        "Analyzing %d of %d root moves at depth %d",
        len(candidates),
        len(root_moves),
        depth,
    )

    state = SearchState(config)
    best_move = candidates[0]
    best_score = -INFINITY
    alpha = -INFINITY
    beta = INFINITY

    for move in candidates:
        position.apply_move(move)
        try:
            score = -negamax(position, depth - 1, -beta, -alpha, 1, state)
        finally:
            position.undo_move()

        # Strictly better only: on ties the earlier, more forcing move stays.
        if score > best_score:
            best_score = score
            best_move = move
        if score > alpha:
            alpha = score

        if score >= stop_score:
            logger.debug("Mating move found: %s", move.uci())
            break

    white_score = best_score if position.side_to_move() == chess.WHITE else -best_score
    logger.debug(
        "Selected %s score=%d depth=%d nodes=%d",
        best_move.uci(),
        white_score,
        depth,
        state.node_count,
    )
    return SearchResult(
        move=best_move,
        score=white_score,
        depth=depth,
        nodes=state.node_count,
    )


def select_move(position: Position, config: SearchConfig | None = None) -> SearchResult | None:
    """
    Choose a move for the side to move in ``position``.

    This is the stable interface used by the match layer. It blocks until the
    search completes and always returns a move when one exists.

    Args:
        position: The position to move in. Owned exclusively by this call;
                  it is restored to its original state before returning.
        config:   Optional search tunables.

    Returns:
        - None when there is no legal move (checkmate or stalemate; the
          caller tells which through the position's own queries).
        - The only legal move, without searching, when there is just one.
        - Otherwise the best searched move, or a fallback move with
          ``fallback=True`` if the search failed.
    """
    config = config or SearchConfig()

    try:
        root_moves = position.legal_moves()
    except Exception:
        logger.exception("Rules engine could not enumerate root moves for %s", position)
        return greedy_move(position)

    if not root_moves:
        return None

    if len(root_moves) == 1:
        return SearchResult(
            move=root_moves[0],
            score=_white_static_eval(position),
            depth=0,
            nodes=0,
        )

    try:
        return _search_root(position, root_moves, config)
    except Exception:
        logger.exception("Search failed for %s; using single-ply fallback", position)
        return greedy_move(position, root_moves)


def _white_static_eval(position: Position) -> int:
    try:
        return evaluate(position)
    except Exception:
        logger.warning("Evaluation failed at %s", position, exc_info=True)
        return 0

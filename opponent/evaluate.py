"""
Static evaluation: material, piece-square tables, mobility, pawn structure,
and king safety.

The search compares positions through one number. evaluate() produces it as
a centipawn score from White's point of view (positive = White is better).
The search driver converts it to the side-to-move's perspective before using
it in negamax.

Terms, each summed as White minus Black:

- Material: fixed per-piece values; the king is never counted.
- Placement: piece-square tables, looked up after normalising the rank so
  both colours read the same table. The king switches from the middlegame
  table to the endgame table once the position is an endgame.
- Mobility: number of legal moves for the side to move, signed by that side.
- Check: a flat penalty for the side to move when it is in check.
- Pawn structure: doubled and isolated pawns are penalised, passed pawns
  earn a bonus that grows as they advance.
- King safety: pawns on the rank directly in front of the king, on the
  king's file or a neighbouring one, earn a shield bonus. In the middlegame
  a king standing in the centre is penalised.

Every term is colour-symmetric, so for any position p
``evaluate(p) == -evaluate(p.mirror())``. Only integers are used, so the
equality is exact.
"""

from __future__ import annotations

from collections.abc import Sequence

import chess

from opponent.constants import (
    CHECK_PENALTY,
    DOUBLED_PAWN_PENALTY,
    DRAW_SCORE,
    ENDGAME_MATERIAL_THRESHOLD,
    ISOLATED_PAWN_PENALTY,
    KING_CENTER_PENALTY,
    KING_ENDGAME_TABLE,
    KING_MIDDLEGAME_TABLE,
    KING_SHIELD_BONUS,
    MATE_SCORE,
    MOBILITY_WEIGHT,
    PASSED_PAWN_BONUS,
    PIECE_SQUARE_TABLES,
    PIECE_VALUES,
)
from opponent.position import Position

_CENTER_FILES = (3, 4)
_CENTER_RANKS = (3, 4)


def is_endgame(position: Position) -> bool:
    """
    True once the king should come out and fight.

    The position is an endgame when no queens remain for either side, or when
    the non-king material of both sides together has dropped to
    ENDGAME_MATERIAL_THRESHOLD or below.
    """
    material = 0
    queens = 0
    for piece in position.piece_map().values():
        if piece.piece_type == chess.KING:
            continue
        if piece.piece_type == chess.QUEEN:
            queens += 1
        material += PIECE_VALUES[piece.piece_type]
    return queens == 0 or material <= ENDGAME_MATERIAL_THRESHOLD


def piece_square_value(
    piece_type: chess.PieceType,
    color: chess.Color,
    square: chess.Square,
    endgame: bool = False,
) -> int:
    """
    Table bonus for a piece of ``color`` standing on ``square``.

    Tables are printed with row 0 as the far rank. A White piece on rank r
    reads row 7 - r; a Black piece on rank r reads row r, which is the same
    square seen from Black's side of the board.
    """
    rank = chess.square_rank(square)
    file = chess.square_file(square)
    row = 7 - rank if color == chess.WHITE else rank

    if piece_type == chess.KING:
        table = KING_ENDGAME_TABLE if endgame else KING_MIDDLEGAME_TABLE
    else:
        table = PIECE_SQUARE_TABLES[piece_type]
    return table[row][file]


def pawn_structure(pawns: dict[chess.Color, list[chess.Square]], color: chess.Color) -> int:
    """Doubled, isolated, and passed pawn terms for one side (positive = good)."""
    own = pawns[color]
    enemy = pawns[not color]
    score = 0

    files: dict[int, int] = {}
    for square in own:
        file = chess.square_file(square)
        files[file] = files.get(file, 0) + 1

    for count in files.values():
        if count > 1:
            score -= DOUBLED_PAWN_PENALTY * (count - 1)

    for square in own:
        file = chess.square_file(square)
        rank = chess.square_rank(square)

        if files.get(file - 1, 0) == 0 and files.get(file + 1, 0) == 0:
            score -= ISOLATED_PAWN_PENALTY

        if _is_passed(rank, file, color, enemy):
            relative_rank = rank if color == chess.WHITE else 7 - rank
            score += PASSED_PAWN_BONUS[relative_rank]

    return score


def _is_passed(
    rank: int,
    file: int,
    color: chess.Color,
    enemy_pawns: list[chess.Square],
) -> bool:
    for square in enemy_pawns:
        if abs(chess.square_file(square) - file) > 1:
            continue
        enemy_rank = chess.square_rank(square)
        ahead = enemy_rank > rank if color == chess.WHITE else enemy_rank < rank
        if ahead:
            return False
    return True


def king_safety(
    king_square: chess.Square | None,
    own_pawns: list[chess.Square],
    color: chess.Color,
    endgame: bool,
) -> int:
    """Pawn-shield bonus, plus a centre penalty while queens are still around."""
    if king_square is None:
        return 0

    king_rank = chess.square_rank(king_square)
    king_file = chess.square_file(king_square)
    shield_rank = king_rank + 1 if color == chess.WHITE else king_rank - 1

    score = 0
    if 0 <= shield_rank <= 7:
        for square in own_pawns:
            if (
                chess.square_rank(square) == shield_rank
                and abs(chess.square_file(square) - king_file) <= 1
            ):
                score += KING_SHIELD_BONUS

    if not endgame and king_file in _CENTER_FILES and king_rank in _CENTER_RANKS:
        score -= KING_CENTER_PENALTY

    return score


def evaluate(
    position: Position,
    legal_moves: Sequence[chess.Move] | None = None,
) -> int:
    """
    Centipawn score of ``position`` from White's perspective.

    Terminal positions short-circuit: a checkmated side to move scores
    -MATE_SCORE if it is White and +MATE_SCORE if it is Black; stalemate and
    draws score 0. Everything else is the sum of the terms described in the
    module docstring.

    The function reads the position only through its public capabilities and
    leaves it unchanged.

    Args:
        position:    Any position, terminal or not.
        legal_moves: The legal moves of the side to move, when the caller has
                     already generated them. Terminal detection and the
                     mobility term then reuse the list instead of asking the
                     rules engine again.

    Returns:
        Integer score, positive when White is better.

    Example:
        >>> from opponent.position import BoardPosition
        >>> evaluate(BoardPosition())  # start position: only the tempo term
        20
    """
    white_to_move = position.side_to_move() == chess.WHITE
    moves = position.legal_moves() if legal_moves is None else legal_moves

    if not moves:
        if position.is_check():
            return -MATE_SCORE if white_to_move else MATE_SCORE
        return DRAW_SCORE
    if position.is_draw():
        return DRAW_SCORE

    endgame = is_endgame(position)
    pawns: dict[chess.Color, list[chess.Square]] = {chess.WHITE: [], chess.BLACK: []}
    kings: dict[chess.Color, chess.Square | None] = {chess.WHITE: None, chess.BLACK: None}

    score = 0
    for square, piece in position.piece_map().items():
        pt = piece.piece_type
        value = piece_square_value(pt, piece.color, square, endgame)
        if pt != chess.KING:
            value += PIECE_VALUES[pt]
        else:
            kings[piece.color] = square
        if pt == chess.PAWN:
            pawns[piece.color].append(square)

        score += value if piece.color == chess.WHITE else -value

    mobility = len(moves) * MOBILITY_WEIGHT
    score += mobility if white_to_move else -mobility

    if position.is_check():
        score += -CHECK_PENALTY if white_to_move else CHECK_PENALTY

    score += pawn_structure(pawns, chess.WHITE) - pawn_structure(pawns, chess.BLACK)
    score += king_safety(kings[chess.WHITE], pawns[chess.WHITE], chess.WHITE, endgame)
    score -= king_safety(kings[chess.BLACK], pawns[chess.BLACK], chess.BLACK, endgame)

    return score

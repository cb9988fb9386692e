"""
Engine constants: piece values, piece-square tables, and search parameters.

Every number the evaluator and the search driver depend on lives here. The
tables are tuples, not lists, so nothing can retune the engine at runtime:
they are process-wide, read-only configuration.

Piece values follow the standard centipawn convention (1 pawn = 100 cp).

Piece-square tables are written the way a board is printed: row 0 is the
far rank (rank 8 for White), row 7 is the home rank. Both colours read the
same table after rank normalisation, see ``opponent.evaluate``.
"""

import chess

# ---------------------------------------------------------------------------
# Piece values (centipawns)
# ---------------------------------------------------------------------------

PAWN_VALUE: int = 100
KNIGHT_VALUE: int = 320
BISHOP_VALUE: int = 330
ROOK_VALUE: int = 500
QUEEN_VALUE: int = 900
KING_VALUE: int = 20_000  # Ordering and detection only; never summed into material

PIECE_VALUES: dict[int, int] = {
    chess.PAWN:   PAWN_VALUE,
    chess.KNIGHT: KNIGHT_VALUE,
    chess.BISHOP: BISHOP_VALUE,
    chess.ROOK:   ROOK_VALUE,
    chess.QUEEN:  QUEEN_VALUE,
    chess.KING:   KING_VALUE,
}

# ---------------------------------------------------------------------------
# Special scores
# ---------------------------------------------------------------------------
# A mate found `ply` half-moves below the root scores MATE_SCORE - ply, so
# every mate lies above MATE_THRESHOLD and above every positional score.

MATE_SCORE: int = 100_000
MAX_PLY: int = 1_000
MATE_THRESHOLD: int = MATE_SCORE - MAX_PLY
DRAW_SCORE: int = 0

# Score given to the side to move when the evaluator fails on a node. Well
# below any real evaluation, well above the mate band.
EVAL_FAILURE_SCORE: int = 50_000

# Search window bound, strictly outside every reachable score.
INFINITY: int = MATE_SCORE + 1

# ---------------------------------------------------------------------------
# Evaluation weights
# ---------------------------------------------------------------------------

MOBILITY_WEIGHT: int = 1
CHECK_PENALTY: int = 30

DOUBLED_PAWN_PENALTY: int = 20   # per extra pawn on a file
ISOLATED_PAWN_PENALTY: int = 15  # per pawn with no friendly neighbour file

# Indexed by relative rank (0 = own back rank, 7 = promotion rank).
PASSED_PAWN_BONUS: tuple[int, ...] = (0, 5, 10, 20, 35, 60, 100, 0)

KING_SHIELD_BONUS: int = 10        # per pawn directly in front of the king
KING_CENTER_PENALTY: int = 20      # middlegame only, king on d4/e4/d5/e5

# Endgame when the non-king material of both sides together is at or below
# this, or when both queens are gone.
ENDGAME_MATERIAL_THRESHOLD: int = 2_600

# ---------------------------------------------------------------------------
# Piece-square tables (row 0 = far rank, row 7 = home rank)
# ---------------------------------------------------------------------------

PAWN_TABLE: tuple[tuple[int, ...], ...] = (
    (  0,   0,   0,   0,   0,   0,   0,   0),
    ( 50,  50,  50,  50,  50,  50,  50,  50),
    ( 10,  10,  20,  30,  30,  20,  10,  10),
    (  5,   5,  10,  25,  25,  10,   5,   5),
    (  0,   0,   0,  20,  20,   0,   0,   0),
    (  5,  -5, -10,   0,   0, -10,  -5,   5),
    (  5,  10,  10, -20, -20,  10,  10,   5),
    (  0,   0,   0,   0,   0,   0,   0,   0),
)

KNIGHT_TABLE: tuple[tuple[int, ...], ...] = (
    (-50, -40, -30, -30, -30, -30, -40, -50),
    (-40, -20,   0,   0,   0,   0, -20, -40),
    (-30,   0,  10,  15,  15,  10,   0, -30),
    (-30,   5,  15,  20,  20,  15,   5, -30),
    (-30,   0,  15,  20,  20,  15,   0, -30),
    (-30,   5,  10,  15,  15,  10,   5, -30),
    (-40, -20,   0,   5,   5,   0, -20, -40),
    (-50, -40, -30, -30, -30, -30, -40, -50),
)

BISHOP_TABLE: tuple[tuple[int, ...], ...] = (
    (-20, -10, -10, -10, -10, -10, -10, -20),
    (-10,   0,   0,   0,   0,   0,   0, -10),
    (-10,   0,   5,  10,  10,   5,   0, -10),
    (-10,   5,   5,  10,  10,   5,   5, -10),
    (-10,   0,  10,  10,  10,  10,   0, -10),
    (-10,  10,  10,  10,  10,  10,  10, -10),
    (-10,   5,   0,   0,   0,   0,   5, -10),
    (-20, -10, -10, -10, -10, -10, -10, -20),
)

ROOK_TABLE: tuple[tuple[int, ...], ...] = (
    (  0,   0,   0,   0,   0,   0,   0,   0),
    (  5,  10,  10,  10,  10,  10,  10,   5),
    ( -5,   0,   0,   0,   0,   0,   0,  -5),
    ( -5,   0,   0,   0,   0,   0,   0,  -5),
    ( -5,   0,   0,   0,   0,   0,   0,  -5),
    ( -5,   0,   0,   0,   0,   0,   0,  -5),
    ( -5,   0,   0,   0,   0,   0,   0,  -5),
    (  0,   0,   0,   5,   5,   0,   0,   0),
)

QUEEN_TABLE: tuple[tuple[int, ...], ...] = (
    (-20, -10, -10,  -5,  -5, -10, -10, -20),
    (-10,   0,   0,   0,   0,   0,   0, -10),
    (-10,   0,   5,   5,   5,   5,   0, -10),
    ( -5,   0,   5,   5,   5,   5,   0,  -5),
    (  0,   0,   5,   5,   5,   5,   0,   0),
    (-10,   5,   5,   5,   5,   5,   0, -10),
    (-10,   0,   5,   0,   0,   0,   0, -10),
    (-20, -10, -10,  -5,  -5, -10, -10, -20),
)

KING_MIDDLEGAME_TABLE: tuple[tuple[int, ...], ...] = (
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-30, -40, -40, -50, -50, -40, -40, -30),
    (-20, -30, -30, -40, -40, -30, -30, -20),
    (-10, -20, -20, -20, -20, -20, -20, -10),
    ( 20,  20,   0,   0,   0,   0,  20,  20),
    ( 20,  30,  10,   0,   0,  10,  30,  20),
)

KING_ENDGAME_TABLE: tuple[tuple[int, ...], ...] = (
    (-50, -30, -30, -30, -30, -30, -30, -50),
    (-30, -20, -10,   0,   0, -10, -20, -30),
    (-30, -10,  20,  30,  30,  20, -10, -30),
    (-30, -10,  30,  40,  40,  30, -10, -30),
    (-30, -10,  30,  40,  40,  30, -10, -30),
    (-30, -10,  20,  30,  30,  20, -10, -30),
    (-30, -20, -10,   0,   0, -10, -20, -30),
    (-50, -30, -30, -30, -30, -30, -30, -50),
)

PIECE_SQUARE_TABLES: dict[int, tuple[tuple[int, ...], ...]] = {
    chess.PAWN:   PAWN_TABLE,
    chess.KNIGHT: KNIGHT_TABLE,
    chess.BISHOP: BISHOP_TABLE,
    chess.ROOK:   ROOK_TABLE,
    chess.QUEEN:  QUEEN_TABLE,
}

# ---------------------------------------------------------------------------
# Search parameters
# ---------------------------------------------------------------------------

BASE_DEPTH: int = 4
SHALLOW_DEPTH: int = 3          # used when the root is very wide
WIDE_ROOT_MOVES: int = 25       # more root moves than this: SHALLOW_DEPTH
NARROW_ROOT_MOVES: int = 10     # fewer root moves than this: one ply deeper
ENDGAME_NARROW_ROOT_MOVES: int = 15

QUIESCENCE_MAX_DEPTH: int = 3

# Root move limiting: every move is searched below ROOT_FULL_WIDTH moves,
# ROOT_MOVE_CAP up to ROOT_VERY_WIDE moves, ROOT_MOVE_CAP_WIDE beyond.
ROOT_FULL_WIDTH: int = 15
ROOT_MOVE_CAP: int = 12
ROOT_VERY_WIDE: int = 30
ROOT_MOVE_CAP_WIDE: int = 8

# ---------------------------------------------------------------------------
# Move ordering
# ---------------------------------------------------------------------------
# Captures always outrank promotions, promotions outrank plain checks, and
# all three outrank quiet moves (priority 0).

CAPTURE_BONUS: int = 10_000
PROMOTION_BONUS: int = 8_000
CHECK_BONUS: int = 5_000

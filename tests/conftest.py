"""Shared pytest fixtures and position doubles used across the test suite."""

from __future__ import annotations

from collections.abc import Callable

import chess
import pytest

from opponent.position import BoardPosition

# Positions reused by several test modules.
START_FEN = chess.STARTING_FEN
ITALIAN_FEN = "r1bqkbnr/pppp1ppp/2n5/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R b KQkq - 3 3"
COMPLEX_FEN = "r2q1rk1/ppp2ppp/2np1n2/2b1p1B1/2B1P1b1/2NP1N2/PPP2PPP/R2Q1RK1 w - - 0 8"
HANGING_ROOK_FEN = "6k1/5ppp/8/3r4/8/8/5PPP/3Q2K1 w - - 0 1"
MATE_IN_ONE_FEN = "6k1/7Q/6K1/8/8/8/8/8 w - - 0 1"
FOOLS_MATE_FEN = "rnbqkbnr/pppp1ppp/8/4p3/6Pq/5P2/PPPPP2P/RNBQKBNR w KQkq - 1 3"
STALEMATE_FEN = "7k/5Q2/6K1/8/8/8/8/8 b - - 0 1"
SINGLE_REPLY_FEN = "R6k/7p/8/8/8/8/8/K7 b - - 0 1"
ROOK_ENDING_FEN = "8/5pk1/6p1/7p/7P/6P1/5PK1/8 w - - 0 1"
# A dozen knight captures outrank the only mate, Ra8#, in move order.
CROWDED_MATE_FEN = "6k1/5ppp/8/2nnn1p1/2nQn3/2nnn1n1/1P3P1P/R5K1 w - - 0 1"


class FlakyPosition(BoardPosition):
    """
    BoardPosition whose rules engine breaks on demand.

    ``fail_apply_after`` makes apply_move() raise once that many moves have
    been applied successfully. ``fail_gives_check`` makes gives_check()
    raise. ``empty_below_root`` reports no legal moves below the root while
    still claiming the position is not terminal. ``legal_move_calls`` counts
    how often the search asked for the move list.
    """

    def __init__(
        self,
        fen: str,
        fail_apply_after: int | None = None,
        fail_gives_check: bool = False,
        empty_below_root: bool = False,
    ) -> None:
        super().__init__(chess.Board(fen))
        self.fail_apply_after = fail_apply_after
        self.fail_gives_check = fail_gives_check
        self.empty_below_root = empty_below_root
        self.applied = 0
        self.undone = 0
        self.legal_move_calls = 0

    def apply_move(self, move: chess.Move) -> None:
        if self.fail_apply_after is not None and self.applied >= self.fail_apply_after:
            raise RuntimeError("rules engine unavailable")
        super().apply_move(move)
        self.applied += 1

    def undo_move(self) -> None:
        super().undo_move()
        self.undone += 1

    def legal_moves(self) -> list[chess.Move]:
        self.legal_move_calls += 1
        if self.empty_below_root and self.board.move_stack:
            return []
        return super().legal_moves()

    def is_checkmate(self) -> bool:
        if self.empty_below_root and self.board.move_stack:
            return False
        return super().is_checkmate()

    def is_stalemate(self) -> bool:
        if self.empty_below_root and self.board.move_stack:
            return False
        return super().is_stalemate()

    def gives_check(self, move: chess.Move) -> bool:
        if self.fail_gives_check:
            raise RuntimeError("check detection unavailable")
        return super().gives_check(move)


@pytest.fixture
def position_from_fen() -> Callable[[str], BoardPosition]:
    """Factory building a fresh BoardPosition from FEN."""
    return BoardPosition.from_fen


@pytest.fixture
def start_position() -> BoardPosition:
    return BoardPosition()

"""
Position capabilities consumed by the engine, and the python-chess adapter.

The engine never builds positions and never enforces rules itself. It only
navigates a position it was handed through the capabilities below: enumerate
legal moves, apply one, undo it, and ask terminal-state questions. Legal-move
generation, check detection and draw rules all belong to the rules engine,
which in this project is python-chess.

Stack discipline:
    Every apply_move() is paired with exactly one undo_move(). After any
    balanced sequence the position's FEN is unchanged. The search depends on
    this to backtrack through one mutable object instead of copying a new
    position for every node.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Protocol

import chess


class Position(Protocol):
    """Board state as seen by the search driver and the evaluator."""

    def side_to_move(self) -> chess.Color: ...

    def legal_moves(self) -> Sequence[chess.Move]: ...

    def apply_move(self, move: chess.Move) -> None: ...

    def undo_move(self) -> None: ...

    def is_check(self) -> bool: ...

    def is_checkmate(self) -> bool: ...

    def is_stalemate(self) -> bool: ...

    def is_draw(self) -> bool: ...

    def piece_map(self) -> Mapping[chess.Square, chess.Piece]: ...

    def piece_type_at(self, square: chess.Square) -> chess.PieceType | None: ...

    def is_capture(self, move: chess.Move) -> bool: ...

    def captured_piece_type(self, move: chess.Move) -> chess.PieceType | None: ...

    def gives_check(self, move: chess.Move) -> bool: ...

    def fen(self) -> str: ...


class BoardPosition:
    """
    Position backed by a ``chess.Board``.

    The board is mutated in place with push/pop. Callers that must keep their
    own board untouched (a request handler holding the canonical game, for
    example) should pass ``board.copy()``.

    Draws cover the automatic rules only: insufficient material, the
    fifty-move rule, and threefold repetition. Stalemate is reported
    separately through is_stalemate().
    """

    __slots__ = ("board",)

    def __init__(self, board: chess.Board | None = None) -> None:
        self.board = board if board is not None else chess.Board()

    @classmethod
    def from_fen(cls, fen: str) -> BoardPosition:
        """Build a position from FEN. Raises ValueError on malformed input."""
        return cls(chess.Board(fen))

    def side_to_move(self) -> chess.Color:
        return self.board.turn

    def legal_moves(self) -> list[chess.Move]:
        return list(self.board.legal_moves)

    def apply_move(self, move: chess.Move) -> None:
        self.board.push(move)

    def undo_move(self) -> None:
        self.board.pop()

    def is_check(self) -> bool:
        return self.board.is_check()

    def is_checkmate(self) -> bool:
        return self.board.is_checkmate()

    def is_stalemate(self) -> bool:
        return self.board.is_stalemate()

    def is_draw(self) -> bool:
        return (
            self.board.is_insufficient_material()
            or self.board.is_fifty_moves()
            or self.board.is_repetition(3)
        )

    def piece_map(self) -> dict[chess.Square, chess.Piece]:
        return self.board.piece_map()

    def piece_type_at(self, square: chess.Square) -> chess.PieceType | None:
        return self.board.piece_type_at(square)

    def is_capture(self, move: chess.Move) -> bool:
        return self.board.is_capture(move)

    def captured_piece_type(self, move: chess.Move) -> chess.PieceType | None:
        """Type of the piece removed by ``move``, or None for a quiet move."""
        if self.board.is_en_passant(move):
            return chess.PAWN
        if not self.board.is_capture(move):
            return None
        return self.board.piece_type_at(move.to_square)

    def gives_check(self, move: chess.Move) -> bool:
        return self.board.gives_check(move)

    def fen(self) -> str:
        return self.board.fen()

    def mirror(self) -> BoardPosition:
        """Colour-reflected copy: ranks flipped, colours and side to move swapped."""
        return BoardPosition(self.board.mirror())

    def __repr__(self) -> str:
        return f"BoardPosition({self.board.fen()!r})"

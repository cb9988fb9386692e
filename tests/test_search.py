"""Tests for the search driver."""

import chess
import pytest

import opponent.search as search_module
from conftest import (
    COMPLEX_FEN,
    CROWDED_MATE_FEN,
    FOOLS_MATE_FEN,
    HANGING_ROOK_FEN,
    ITALIAN_FEN,
    MATE_IN_ONE_FEN,
    SINGLE_REPLY_FEN,
    STALEMATE_FEN,
    FlakyPosition,
)
from opponent import SearchConfig, evaluate, greedy_move, select_move
from opponent.constants import EVAL_FAILURE_SCORE, MATE_SCORE, MATE_THRESHOLD
from opponent.ordering import root_move_limit
from opponent.search import search_score


def _snapshot(position) -> tuple:
    return (
        position.fen(),
        sorted(m.uci() for m in position.legal_moves()),
        position.side_to_move(),
        position.is_checkmate(),
        position.is_stalemate(),
        position.is_draw(),
    )


class TestSelectMove:
    def test_start_position_default_depth(self, start_position) -> None:
        legal = start_position.legal_moves()

        result = select_move(start_position)

        assert result is not None
        assert result.move in legal
        assert result.depth == 4
        assert 0 < result.nodes < 2_000_000
        assert not result.fallback

    @pytest.mark.parametrize("fen", [ITALIAN_FEN, COMPLEX_FEN, HANGING_ROOK_FEN])
    def test_returns_legal_move(self, position_from_fen, fen: str) -> None:
        position = position_from_fen(fen)
        legal = position.legal_moves()

        result = select_move(position, SearchConfig(depth=2))

        assert result is not None
        assert result.move in legal

    @pytest.mark.parametrize("fen", [ITALIAN_FEN, HANGING_ROOK_FEN, MATE_IN_ONE_FEN])
    def test_position_restored_after_search(self, position_from_fen, fen: str) -> None:
        position = position_from_fen(fen)
        before = _snapshot(position)

        select_move(position, SearchConfig(depth=3))

        assert _snapshot(position) == before
        assert position.board.move_stack == []

    def test_checkmated_side_gets_no_move(self, position_from_fen) -> None:
        assert select_move(position_from_fen(FOOLS_MATE_FEN)) is None

    def test_stalemated_side_gets_no_move(self, position_from_fen) -> None:
        assert select_move(position_from_fen(STALEMATE_FEN)) is None

    @pytest.mark.parametrize("depth", [2, 3, 4])
    def test_finds_mate_in_one(self, position_from_fen, depth: int) -> None:
        position = position_from_fen(MATE_IN_ONE_FEN)

        result = select_move(position, SearchConfig(depth=depth))

        assert result is not None
        assert result.score == MATE_SCORE - 1
        position.apply_move(result.move)
        assert position.is_checkmate()

    def test_finds_mate_in_one_for_black(self, position_from_fen) -> None:
        position = position_from_fen(MATE_IN_ONE_FEN).mirror()

        result = select_move(position, SearchConfig(depth=2))

        assert result is not None
        assert result.score <= -MATE_THRESHOLD
        position.apply_move(result.move)
        assert position.is_checkmate()

    def test_wins_hanging_rook(self, position_from_fen) -> None:
        position = position_from_fen(HANGING_ROOK_FEN)

        result = select_move(position, SearchConfig(depth=2))

        assert result is not None
        assert result.move == chess.Move.from_uci("d1d5")

    def test_single_legal_move_skips_search(self, position_from_fen, monkeypatch) -> None:
        calls = []
        monkeypatch.setattr(search_module, "negamax", lambda *args: calls.append(args))
        position = position_from_fen(SINGLE_REPLY_FEN)

        result = select_move(position)

        assert result is not None
        assert result.move == chess.Move.from_uci("h8g7")
        assert result.depth == 0
        assert result.nodes == 0
        assert not result.fallback
        assert calls == []

    def test_mate_survives_root_limiting(self, position_from_fen) -> None:
        position = position_from_fen(CROWDED_MATE_FEN)

        result = select_move(position, SearchConfig(depth=2))

        assert result is not None
        assert result.move == chess.Move.from_uci("a1a8")
        assert result.score == MATE_SCORE - 1


class TestEarlyExit:
    def test_mate_on_the_spot_ends_root_loop(self, position_from_fen, monkeypatch) -> None:
        searched = []
        real_negamax = search_module.negamax

        def recording_negamax(position, depth, alpha, beta, ply, state):
            if ply == 1:
                searched.append(position.board.peek())
            return real_negamax(position, depth, alpha, beta, ply, state)

        monkeypatch.setattr(search_module, "negamax", recording_negamax)
        position = position_from_fen(MATE_IN_ONE_FEN)
        assert len(position.legal_moves()) > 1

        result = select_move(position, SearchConfig(depth=3))

        assert result is not None
        assert searched == [chess.Move.from_uci("h7g7")]
        assert result.move == chess.Move.from_uci("h7g7")

    @pytest.mark.parametrize(("mate_ply", "searched_all"), [(3, False), (5, True)])
    def test_mate_in_two_ends_root_loop_only_without_mate_on_the_spot(
        self, position_from_fen, monkeypatch, mate_ply: int, searched_all: bool
    ) -> None:
        searched = []

        def mating_negamax(position, depth, alpha, beta, ply, state):
            searched.append(position.board.peek())
            return -(MATE_SCORE - mate_ply)

        monkeypatch.setattr(search_module, "negamax", mating_negamax)
        position = position_from_fen(ITALIAN_FEN)
        root_moves = position.legal_moves()

        result = select_move(position, SearchConfig(depth=2))

        assert result is not None
        assert result.move == searched[0]
        # Black to move: a mate for Black is negative for White.
        assert result.score == -(MATE_SCORE - mate_ply)
        if searched_all:
            assert len(searched) == root_move_limit(len(root_moves))
        else:
            assert len(searched) == 1


class TestPruning:
    @pytest.mark.parametrize(
        ("fen", "depth"),
        [(HANGING_ROOK_FEN, 2), (ITALIAN_FEN, 2), ("8/5pk1/6p1/7p/7P/6P1/5PK1/8 w - - 0 1", 3)],
    )
    def test_pruning_does_not_change_result(self, position_from_fen, fen: str, depth: int) -> None:
        pruned = select_move(position_from_fen(fen), SearchConfig(depth=depth))
        full = select_move(position_from_fen(fen), SearchConfig(depth=depth, use_pruning=False))

        assert pruned is not None and full is not None
        assert pruned.move == full.move
        assert pruned.score == full.score
        assert pruned.nodes <= full.nodes

    def test_cutoffs_skip_nodes(self, position_from_fen) -> None:
        pruned = select_move(position_from_fen(ITALIAN_FEN), SearchConfig(depth=2))
        full = select_move(position_from_fen(ITALIAN_FEN), SearchConfig(depth=2, use_pruning=False))

        assert pruned is not None and full is not None
        assert pruned.nodes < full.nodes

    def test_pruning_does_not_change_search_score(self, position_from_fen) -> None:
        pruned = search_score(position_from_fen(ITALIAN_FEN), 2)
        full = search_score(position_from_fen(ITALIAN_FEN), 2, SearchConfig(use_pruning=False))

        assert pruned == full


class TestQuiescence:
    def test_resolves_capture_in_progress(self, position_from_fen) -> None:
        position = position_from_fen(HANGING_ROOK_FEN)
        static = evaluate(position)

        resolved = position_from_fen(HANGING_ROOK_FEN)
        resolved.apply_move(chess.Move.from_uci("d1d5"))
        expected = evaluate(resolved)

        score = search_score(position, 0)

        assert score != static
        assert score == expected
        assert position.board.move_stack == []

    def test_zero_quiescence_depth_is_static_eval(self, position_from_fen) -> None:
        position = position_from_fen(HANGING_ROOK_FEN)

    def test_generates_moves_once_per_node(self) -> None:
        position = FlakyPosition(ITALIAN_FEN)

        search_score(position, 0, SearchConfig(quiescence_depth=0))

        assert position.legal_move_calls == 1

        assert search_score(position, 0, SearchConfig(quiescence_depth=0)) == evaluate(position)


class TestFailureRecovery:
    def test_collaborator_failure_at_root_falls_back(self) -> None:
        position = FlakyPosition(HANGING_ROOK_FEN, fail_apply_after=0)

        result = select_move(position, SearchConfig(depth=2))

        assert result is not None
        assert result.fallback
        # Greedy choice: the only capture on the board.
        assert result.move == chess.Move.from_uci("d1d5")
        assert position.board.move_stack == []

    def test_collaborator_failure_mid_search_restores_position(self) -> None:
        position = FlakyPosition(ITALIAN_FEN, fail_apply_after=7)
        before = position.fen()
        legal = position.legal_moves()

        result = select_move(position, SearchConfig(depth=3))

        assert result is not None
        assert result.fallback
        assert result.move in legal
        assert position.applied == position.undone
        assert position.fen() == before

    def test_random_move_when_greedy_scoring_fails(self) -> None:
        position = FlakyPosition(ITALIAN_FEN, fail_apply_after=0, fail_gives_check=True)
        legal = position.legal_moves()

        result = select_move(position)

        assert result is not None
        assert result.fallback
        assert result.move in legal

    def test_inconsistent_empty_move_list_falls_back(self) -> None:
        position = FlakyPosition(ITALIAN_FEN, empty_below_root=True)
        legal = position.legal_moves()

        result = select_move(position, SearchConfig(depth=2))

        assert result is not None
        assert result.fallback
        assert result.move in legal

    def test_evaluation_failure_does_not_abort_search(self, position_from_fen, monkeypatch) -> None:
        def broken(position, legal_moves=None):
            raise KeyError("bad square")

        monkeypatch.setattr(search_module, "evaluate", broken)
        position = position_from_fen(ITALIAN_FEN)
        legal = position.legal_moves()

        result = select_move(position, SearchConfig(depth=2))

        assert result is not None
        assert result.move in legal
        assert not result.fallback

    def test_failed_evaluation_scores_badly_for_side_to_move(self, position_from_fen, monkeypatch) -> None:
        def broken(position, legal_moves=None):
            raise KeyError("bad square")

        monkeypatch.setattr(search_module, "evaluate", broken)

        assert search_module._static_eval(position_from_fen(ITALIAN_FEN)) == -EVAL_FAILURE_SCORE


class TestGreedyMove:
    def test_prefers_captures(self, position_from_fen) -> None:
        result = greedy_move(position_from_fen(HANGING_ROOK_FEN))

        assert result is not None
        assert result.move == chess.Move.from_uci("d1d5")
        assert result.fallback

    def test_no_moves(self, position_from_fen) -> None:
        assert greedy_move(position_from_fen(STALEMATE_FEN)) is None


class TestSearchConfig:
    def test_rejects_zero_depth(self) -> None:
        with pytest.raises(ValueError):
            SearchConfig(depth=0)

    def test_rejects_negative_quiescence_depth(self) -> None:
        with pytest.raises(ValueError):
            SearchConfig(quiescence_depth=-1)

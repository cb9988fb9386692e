"""
Computer opponent package.

This package implements the automated opponent of the wagering site: a
classical chess searcher using negamax with alpha-beta pruning, quiescence
search, and a hand-crafted evaluation function. Rules (legal moves, check,
mate, draws) come from python-chess through the Position adapter.

Modules:
    constants — Piece values, piece-square tables, and search parameters
    position  — Position protocol and the python-chess BoardPosition adapter
    evaluate  — Static evaluation (material, tables, mobility, pawns, king)
    ordering  — MVV-LVA move ordering, root move limiting, depth selection
    search    — select_move(), negamax, quiescence, and the fallback policy
    errors    — Engine exceptions
"""

from opponent.errors import SearchError
from opponent.evaluate import evaluate
from opponent.position import BoardPosition, Position
from opponent.search import SearchConfig, SearchResult, greedy_move, select_move

__version__ = "1.0.0"

__all__ = [
    "BoardPosition",
    "Position",
    "SearchConfig",
    "SearchError",
    "SearchResult",
    "evaluate",
    "greedy_move",
    "select_move",
]

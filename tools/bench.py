#!/usr/bin/env python3
"""
Benchmark: nodes visited and time per move for a fixed set of positions.

Run before and after any change to ordering, pruning, or the depth tables.
There is no clock in the engine, so node count is the number that bounds
response time; a lower count at the same chosen move means better pruning.

Usage: python3 tools/bench.py [--depth N] [--no-pruning]
"""
import argparse
import logging
import time

import chess

from opponent import BoardPosition, SearchConfig, select_move

# Same positions for every comparison: opening, middlegame, endgame, tactics.
POSITIONS = [
    ("Start",        chess.STARTING_FEN),
    ("After 1.e4",   "rnbqkbnr/pppppppp/8/8/4P3/8/PPPP1PPP/RNBQKBNR b KQkq - 0 1"),
    ("Italian",      "r1bqkbnr/pppp1ppp/2n5/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R b KQkq - 3 3"),
    ("Mid-open",     "r1bqkb1r/pppp1ppp/2n2n2/4p3/2B1P3/5N2/PPPP1PPP/RNBQK2R w KQkq - 4 4"),
    ("Complex mid",  "r2q1rk1/ppp2ppp/2np1n2/2b1p1B1/2B1P1b1/2NP1N2/PPP2PPP/R2Q1RK1 w - - 0 8"),
    ("Hanging rook", "6k1/5ppp/8/3r4/8/8/5PPP/3Q2K1 w - - 0 1"),
    ("Mate in one",  "6k1/7Q/6K1/8/8/8/8/8 w - - 0 1"),
    ("Pawn ending",  "6k1/ppp2ppp/8/3p4/3P4/8/PPP2PPP/6K1 w - - 0 1"),
    ("Rook ending",  "8/5pk1/6p1/7p/7P/6P1/5PK1/8 w - - 0 1"),
    ("Pawn race",    "8/1p4k1/p7/P1K5/8/8/8/8 w - - 0 1"),
]


def run_position(label: str, fen: str, config: SearchConfig) -> dict:
    """Search one position and return its metrics."""
    position = BoardPosition.from_fen(fen)
    start = time.perf_counter()
    result = select_move(position, config)
    time_ms = max(1, int((time.perf_counter() - start) * 1000))

    if result is None:
        return {"label": label, "move": "(none)", "depth": 0, "score": 0,
                "nodes": 0, "nps": 0, "time_ms": time_ms}
    return {
        "label": label,
        "move": result.move.uci(),
        "depth": result.depth,
        "score": result.score,
        "nodes": result.nodes,
        "nps": result.nodes * 1000 // time_ms,
        "time_ms": time_ms,
    }


def main() -> None:
    """Run all benchmark positions and print a summary table."""
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[1])
    parser.add_argument("--depth", type=int, default=None, help="fixed search depth")
    parser.add_argument("--no-pruning", action="store_true", help="disable alpha-beta cutoffs")
    parser.add_argument("-v", "--verbose", action="store_true", help="engine debug logging")
    args = parser.parse_args()

    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING)
    config = SearchConfig(depth=args.depth, use_pruning=not args.no_pruning)

    print(
        f"{'Position':<14} {'Move':<7} {'Depth':>5} {'Score':>7} "
        f"{'Nodes':>9} {'NPS':>8} {'Time(ms)':>9}"
    )
    print("-" * 70)

    results = []
    for label, fen in POSITIONS:
        r = run_position(label, fen, config)
        results.append(r)
        print(
            f"{r['label']:<14} {r['move']:<7} {r['depth']:>5} {r['score']:>7} "
            f"{r['nodes']:>9,} {r['nps']:>8,} {r['time_ms']:>9,}"
        )

    valid = [r for r in results if r["nodes"] > 0]
    if valid:
        avg_nodes = sum(r["nodes"] for r in valid) // len(valid)
        avg_time = sum(r["time_ms"] for r in valid) // len(valid)
        avg_nps = sum(r["nps"] for r in valid) // len(valid)
        print("-" * 70)
        print(
            f"{'AVERAGE':<14} {'':<7} {'':<5} {'':<7} "
            f"{avg_nodes:>9,} {avg_nps:>8,} {avg_time:>9,}"
        )


if __name__ == "__main__":
    main()

"""
FastAPI service exposing the computer opponent to the match layer.

The match orchestration code (outside this repository) posts the FEN of a
computer match whenever it is the computer's turn, applies the returned
move to its canonical game, and broadcasts it to the players.

Architecture notes:
- Sync endpoint (not async): FastAPI runs sync handlers in its own thread
  pool, so a blocked request never stalls the event loop.
- Searches run on a separate bounded ThreadPoolExecutor. A semaphore admits
  at most ``search_workers + search_backlog`` searches at a time; requests
  beyond that get the single-ply fallback move at once.
- The handler waits at most ``move_timeout_s`` for the result; past that it
  answers with the fallback move. A search still waiting in the queue is
  cancelled. The engine has no cancellation, so a running search finishes
  in the background and its result is dropped.
- Stateless per request: the caller sends the full FEN every time; the
  engine searches a private copy of the board.
"""

from __future__ import annotations

import logging
import threading
from collections.abc import AsyncIterator
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from contextlib import asynccontextmanager

import chess
from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, field_validator

from opponent import BoardPosition, SearchResult, __version__, greedy_move, select_move
from web.settings import Settings

_log = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Request / response models
# ---------------------------------------------------------------------------


class ComputerMoveRequest(BaseModel):
    """
    Fields:
        fen: Full FEN of the current position; the computer is to move.
        match_id: Optional match identifier, echoed back and logged.
    """

    fen: str
    match_id: str | None = None

    @field_validator("fen")
    @classmethod
    def strip_fen(cls, v: str) -> str:
        return v.strip()


class ComputerMoveResponse(BaseModel):
    """
    Fields:
        move: Move in UCI notation (e.g. "e2e4", "e7e8q").
        san: Same move in SAN, for move lists shown to players.
        from_square / to_square: Square names, e.g. "e2".
        promotion: Promotion piece letter ("q", "r", "b", "n") or None.
        fen: Position after the move.
        score: Root evaluation in centipawns, positive = White is better.
        depth: Main-search depth; 0 when no search ran.
        nodes: Nodes visited by the search.
        fallback: True when the move is the single-ply fallback.
        match_id: Echo of the request's match_id.
    """

    move: str
    san: str
    from_square: str
    to_square: str
    promotion: str | None
    fen: str
    score: int
    depth: int
    nodes: int
    fallback: bool
    match_id: str | None = None


class HealthResponse(BaseModel):
    status: str
    engine: str


# ---------------------------------------------------------------------------
# Search dispatch
# ---------------------------------------------------------------------------


def _search(app: FastAPI, board: chess.Board, match_id: str | None) -> SearchResult | None:
    """
    Run select_move on the search pool and wait for it.

    Falls back to greedy_move when every worker and backlog slot is taken, or
    when the search overruns ``move_timeout_s``. A timed-out search that is
    still queued is cancelled; one already running finishes in the
    background and its result is dropped.
    """
    state = app.state
    slots = state.search_slots
    if not slots.acquire(blocking=False):
        _log.warning("Search pool saturated for match=%s; using fallback", match_id)
        return greedy_move(BoardPosition(board.copy()))

    try:
        future = state.executor.submit(select_move, BoardPosition(board.copy()))
    except Exception:
        slots.release()
        raise
    # Fires on completion and on cancel alike.
    future.add_done_callback(lambda _: slots.release())

    timeout = state.settings.move_timeout_s
    try:
        return future.result(timeout=timeout)
    except FutureTimeoutError:
        cancelled = future.cancel()
        _log.warning(
            "Search exceeded %.1fs for match=%s fen=%s (cancelled=%s); using fallback",
            timeout,
            match_id,
            board.fen(),
            cancelled,
        )
        return greedy_move(BoardPosition(board.copy()))


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the service with its own search pool."""
    settings = settings or Settings.from_env()
    executor = ThreadPoolExecutor(
        max_workers=settings.search_workers,
        thread_name_prefix="search",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        yield
        executor.shutdown(wait=False, cancel_futures=True)

    app = FastAPI(title="Chess AI opponent", version=__version__, lifespan=lifespan)
    app.state.settings = settings
    app.state.executor = executor
    app.state.search_slots = threading.BoundedSemaphore(
        settings.search_workers + settings.search_backlog
    )

    @app.get("/api/health", response_model=HealthResponse)
    def health() -> HealthResponse:
        return HealthResponse(status="ok", engine=__version__)

    @app.post("/api/computer-move", response_model=ComputerMoveResponse)
    def computer_move(body: ComputerMoveRequest, request: Request) -> ComputerMoveResponse:
        """
        Compute the computer's move for the posted position.

        Raises:
            HTTPException 400: Malformed FEN.
            HTTPException 409: The game is already over; the caller decides
                               between checkmate and stalemate itself.
            HTTPException 500: Engine produced no move.
        """
        try:
            board = chess.Board(body.fen)
        except ValueError as exc:
            raise HTTPException(status_code=400, detail=f"Invalid FEN: {exc}") from exc

        if board.is_game_over():
            raise HTTPException(
                status_code=409,
                detail=f"Game is already over: {board.result()}",
            )

        try:
            result = _search(request.app, board, body.match_id)
        except Exception as exc:
            _log.exception("Engine search failed for FEN=%s", body.fen)
            raise HTTPException(status_code=500, detail=f"Engine error: {exc}") from exc

        if result is None:
            raise HTTPException(status_code=500, detail="Engine returned no move")

        move = result.move
        san = board.san(move)
        _log.info(
            "match=%s move=%s score=%d depth=%d nodes=%d fallback=%s",
            body.match_id,
            move.uci(),
            result.score,
            result.depth,
            result.nodes,
            result.fallback,
        )

        board.push(move)
        return ComputerMoveResponse(
            move=move.uci(),
            san=san,
            from_square=chess.square_name(move.from_square),
            to_square=chess.square_name(move.to_square),
            promotion=chess.piece_symbol(move.promotion) if move.promotion else None,
            fen=board.fen(),
            score=result.score,
            depth=result.depth,
            nodes=result.nodes,
            fallback=result.fallback,
            match_id=body.match_id,
        )

    return app


def main() -> None:
    """Run the service with uvicorn using environment settings."""
    import uvicorn

    settings = Settings.from_env()
    logging.basicConfig(level=settings.log_level)
    uvicorn.run(create_app(settings), host=settings.host, port=settings.port)


if __name__ == "__main__":
    main()

"""Engine exceptions."""


class SearchError(Exception):
    """
    The rules engine answered inconsistently during a search.

    Raised when a node reports no legal moves while claiming it is neither
    checkmate, stalemate nor a draw. select_move() catches it together with
    any other collaborator failure and falls back to a single-ply choice, so
    it never reaches the caller.
    """

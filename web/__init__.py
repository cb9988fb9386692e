"""
Web service package for the computer opponent.

Provides a FastAPI REST API the match layer calls on the computer's turn
(POST /api/computer-move) and a health check. Run with
``python -m web.app`` or ``uvicorn --factory web.app:create_app``.
"""

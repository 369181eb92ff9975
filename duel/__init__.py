"""Local websocket front door for the seven-card duel engine."""

from .server import DuelServerError, DuelSession, handle_connection, run_server

__all__ = ["DuelServerError", "DuelSession", "handle_connection", "run_server"]

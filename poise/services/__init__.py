"""Services layer for Poise application logic."""

from .session_manager import SessionManager

__all__ = [
    "SessionManager",
]

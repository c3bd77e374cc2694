"""Durable storage of recorded sessions."""

from .session_store import SessionStore

__all__ = ["SessionStore"]

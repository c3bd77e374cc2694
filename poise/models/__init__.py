"""Data models for the Poise application."""

from .session import Sample, SessionSummary, RecorderStats
from .events import SensorReading, SessionEvent, SignalKind, AuthorizationStatus
from .scoring import ScoreResult

__all__ = [
    "Sample",
    "SessionSummary",
    "RecorderStats",
    "SensorReading",
    "SessionEvent",
    "SignalKind",
    "AuthorizationStatus",
    "ScoreResult",
]

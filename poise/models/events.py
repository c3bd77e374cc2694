"""Event models for pub/sub sensor processing architecture."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Sequence, Union

ReadingValue = Union[float, Sequence[float]]


class SignalKind(Enum):
    """How raw readings of a channel are turned into a current value."""
    MOTION = "motion"  # positional readings, current value is speed
    LEVEL = "level"    # amplitude readings, passed through directly


class AuthorizationStatus(Enum):
    """Result of asking a sensor for permission to record."""
    GRANTED = "granted"
    DENIED = "denied"


@dataclass(frozen=True)
class SensorReading:
    """One raw update from a sensor provider."""
    channel: str
    value: ReadingValue  # 3-vector position for motion, scalar for level
    timestamp: float     # Seconds, on the provider's monotonic clock


@dataclass
class SessionEvent:
    """Session lifecycle event."""
    event_id: str
    event_type: str  # "started", "stopped", "empty"
    timestamp: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)

"""Per-channel trackers turning raw readings into current values."""

import logging
from typing import Optional, Sequence

import numpy as np

from ..models.events import ReadingValue, SignalKind

logger = logging.getLogger(__name__)

DEFAULT_MIN_INTERVAL_SECONDS = 0.001


class ChannelTracker:
    """Tracks the previous reading of one channel and its current value.

    Motion channels report speed: distance between consecutive positions
    divided by the elapsed time between their timestamps. Level channels
    pass the raw reading through. Motion updates closer together than
    ``min_interval`` leave the current value unchanged.
    """

    def __init__(self, name: str, kind: SignalKind,
                 min_interval: float = DEFAULT_MIN_INTERVAL_SECONDS):
        self.name = name
        self.kind = kind
        self.min_interval = min_interval
        self.current_value = 0.0
        self.updates = 0
        self._prev_value: Optional[np.ndarray] = None
        self._prev_time: Optional[float] = None

    def reset(self) -> None:
        self.current_value = 0.0
        self.updates = 0
        self._prev_value = None
        self._prev_time = None

    def update(self, value: ReadingValue, timestamp: float) -> float:
        """Process one reading and return the channel's current value."""
        self.updates += 1
        if self.kind is SignalKind.LEVEL:
            self._update_level(value, timestamp)
        else:
            self._update_motion(value, timestamp)
        return self.current_value

    def _update_level(self, value: ReadingValue, timestamp: float) -> None:
        self.current_value = float(value)
        self._prev_time = timestamp

    def _update_motion(self, value: ReadingValue, timestamp: float) -> None:
        position = _as_vector(value)
        if self._prev_value is not None and self._prev_time is not None:
            elapsed = timestamp - self._prev_time
            if elapsed > self.min_interval:
                distance = float(np.linalg.norm(position - self._prev_value))
                self.current_value = distance / elapsed
        self._prev_value = position
        self._prev_time = timestamp


def _as_vector(value: ReadingValue) -> np.ndarray:
    if isinstance(value, (int, float)):
        return np.array([float(value)])
    return np.asarray(value, dtype=float)


def make_trackers(names: Sequence[str], kind: SignalKind,
                  min_interval: float = DEFAULT_MIN_INTERVAL_SECONDS):
    """Create one tracker per channel name, keyed by name."""
    return {name: ChannelTracker(name, kind, min_interval) for name in names}

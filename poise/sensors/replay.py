"""Replay of recorded sensor streams stored as JSON lines.

Each line holds one reading::

    {"channel": "left", "value": [0.1, 1.2, -0.4], "timestamp": 12.345}

Readings are delivered in file order from a background thread, spaced by
the gaps between their timestamps divided by ``speed``. The original
timestamps are passed through so motion speeds match the recording.
"""

import json
import os
import time
import logging
from pathlib import Path
from threading import Event, Thread
from typing import Callable, Iterable, List, Optional, Sequence

from ..models.events import AuthorizationStatus, SensorReading, SignalKind
from .base import AbstractSensorProvider, ReadingCallback

logger = logging.getLogger(__name__)


def load_readings(file_path: str) -> List[SensorReading]:
    """Load readings from a JSON-lines file, skipping malformed lines."""
    readings = []
    with open(file_path, 'r', encoding='utf-8') as f:
        for line_number, line in enumerate(f, 1):
            line = line.strip()
            if not line:
                continue
            try:
                record = json.loads(line)
                value = record["value"]
                if isinstance(value, list):
                    value = tuple(float(v) for v in value)
                else:
                    value = float(value)
                readings.append(SensorReading(
                    channel=str(record["channel"]),
                    value=value,
                    timestamp=float(record["timestamp"]),
                ))
            except (ValueError, KeyError, TypeError) as e:
                logger.warning(f"Skipping malformed reading at {file_path}:{line_number}: {e}")
    return readings


def save_readings(file_path: str, readings: Iterable[SensorReading]) -> int:
    """Write readings as JSON lines and return how many were written."""
    count = 0
    Path(file_path).parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, 'w', encoding='utf-8') as f:
        for reading in readings:
            value = reading.value
            if not isinstance(value, (int, float)):
                value = [float(v) for v in value]
            f.write(json.dumps({
                "channel": reading.channel,
                "value": value,
                "timestamp": reading.timestamp,
            }) + "\n")
            count += 1
    logger.info(f"Saved {count} readings to {file_path}")
    return count


class ReplaySensorProvider(AbstractSensorProvider):
    """Replays a recorded reading stream as if it came from a live sensor."""

    def __init__(
        self,
        file_path: str,
        channel_names: Sequence[str] = ("left", "right"),
        signal_kind: SignalKind = SignalKind.MOTION,
        session_kind: str = "hands",
        speed: float = 1.0,
        clock: Callable[[], float] = time.monotonic,
    ):
        if speed <= 0:
            raise ValueError(f"Replay speed must be positive, got {speed}")

        self.file_path = Path(file_path)
        self.channel_names = tuple(channel_names)
        self.signal_kind = signal_kind
        self.session_kind = session_kind
        self.speed = speed
        self.clock = clock

        self.replay_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.finished = Event()
        self.delivered = 0

    @property
    def is_subscribed(self) -> bool:
        return self.replay_thread is not None and self.replay_thread.is_alive()

    def request_authorization(self) -> AuthorizationStatus:
        if self.file_path.is_file() and os.access(self.file_path, os.R_OK):
            return AuthorizationStatus.GRANTED
        logger.warning(f"Replay file not readable: {self.file_path}")
        return AuthorizationStatus.DENIED

    def subscribe(self, callback: ReadingCallback) -> None:
        if self.is_subscribed:
            logger.warning("Replay already in progress")
            return

        readings = load_readings(str(self.file_path))
        logger.info(f"Replaying {len(readings)} readings from {self.file_path} at {self.speed}x")

        self.stop_event.clear()
        self.finished.clear()
        self.delivered = 0
        self.replay_thread = Thread(
            target=self._replay, args=(readings, callback), daemon=True
        )
        self.replay_thread.name = "SensorReplayThread"
        self.replay_thread.start()

    def unsubscribe(self) -> None:
        if self.replay_thread is None:
            return

        self.stop_event.set()
        self.replay_thread.join(timeout=2.0)
        if self.replay_thread.is_alive():
            logger.warning("Replay thread did not stop cleanly")
        self.replay_thread = None
        logger.info(f"Replay stopped after {self.delivered} readings")

    def _replay(self, readings: List[SensorReading], callback: ReadingCallback) -> None:
        if not readings:
            self.finished.set()
            return

        first_timestamp = readings[0].timestamp
        started = self.clock()
        for reading in readings:
            due = (reading.timestamp - first_timestamp) / self.speed
            wait = due - (self.clock() - started)
            if wait > 0 and self.stop_event.wait(wait):
                break
            if self.stop_event.is_set():
                break
            callback(reading)
            self.delivered += 1
        self.finished.set()

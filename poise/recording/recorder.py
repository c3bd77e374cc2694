"""Streaming session recorder: live channel values plus a fixed-rate timeline.

While running, two activities share the recorder state:

* readings from the sensor provider arrive on the provider's thread (via a
  pubsub topic) and update the per-channel current values;
* a timer thread calls :meth:`StreamingSessionRecorder.tick` every
  ``sample_period`` seconds, snapshotting the current values into a new
  :class:`Sample` and into the running sums and maxima.

Both take ``_state_lock``. ``_lifecycle_lock`` serialises start() and
stop(); stop() joins the timer and releases the provider before it reads
the accumulators, so no sample lands after the summary is built.
"""

import time
import uuid
import logging
import threading
from datetime import datetime
from typing import Callable, List, Optional, Tuple

from pubsub import pub

from ..models.events import AuthorizationStatus, SensorReading, SessionEvent
from ..models.session import RecorderStats, Sample, SessionSummary
from ..sensors.base import AbstractSensorProvider
from ..sensors.publisher import SensorPublisher
from ..storage.session_store import SessionStore
from .channels import DEFAULT_MIN_INTERVAL_SECONDS, make_trackers
from .errors import AlreadyRunningError, PermissionDeniedError

logger = logging.getLogger(__name__)

DEFAULT_SAMPLE_PERIOD_SECONDS = 0.2   # 5 Hz
DEFAULT_WARMUP_SECONDS = 0.5


def local_now() -> datetime:
    """Current local time with its UTC offset."""
    return datetime.now().astimezone()


class StreamingSessionRecorder:
    """Records one sensor session at a time and summarizes it on stop."""

    def __init__(
        self,
        provider: AbstractSensorProvider,
        store: Optional[SessionStore] = None,
        sample_period: float = DEFAULT_SAMPLE_PERIOD_SECONDS,
        warmup_seconds: float = DEFAULT_WARMUP_SECONDS,
        min_update_interval: float = DEFAULT_MIN_INTERVAL_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        wall_clock: Callable[[], datetime] = local_now,
        auto_tick: bool = True,
        topic_prefix: str = "recorder",
    ):
        """Initialize the recorder.

        Args:
            provider: Sensor provider supplying readings
            store: Where finished summaries are saved, None to skip saving
            sample_period: Seconds between timeline samples
            warmup_seconds: Initial period whose ticks are discarded
            min_update_interval: Minimum seconds between motion readings
            clock: Monotonic clock for elapsed times
            wall_clock: Clock for the summary's created_at
            auto_tick: Run the timer thread; when False the caller drives tick()
            topic_prefix: Root of the pubsub topics used by this recorder
        """
        if sample_period <= 0:
            raise ValueError("sample_period must be positive")
        if warmup_seconds < 0:
            raise ValueError("warmup_seconds must not be negative")

        self.provider = provider
        self.store = store
        self.sample_period = sample_period
        self.warmup_seconds = warmup_seconds
        self.clock = clock
        self.wall_clock = wall_clock
        self.auto_tick = auto_tick

        self.kind = provider.session_kind or "session"
        names = tuple(provider.channel_names)
        if not 1 <= len(names) <= 2:
            raise ValueError(f"Provider must expose one or two channels, got {names}")
        self.channel_a = names[0]
        self.channel_b = names[1] if len(names) > 1 else None
        self.trackers = make_trackers(names, provider.signal_kind, min_update_interval)

        # Pub/sub topics
        self.reading_topic = f"{topic_prefix}.{self.kind}.reading"
        self.summary_topic = f"{topic_prefix}.{self.kind}.summary"
        self.lifecycle_topic = f"{topic_prefix}.{self.kind}.lifecycle"
        self.publisher = SensorPublisher(self.reading_topic)

        self._lifecycle_lock = threading.Lock()
        self._state_lock = threading.Lock()
        self._stop_event = threading.Event()
        self._timer_thread: Optional[threading.Thread] = None

        # Recording state
        self._running = False
        self._sampling = False
        self._start_ref = 0.0
        self._readings_received = 0

        # Running accumulators for session stats
        self._samples: List[Sample] = []
        self._sum_a = 0.0
        self._sum_b = 0.0
        self._max_a: Optional[float] = None
        self._max_b: Optional[float] = None
        self._count = 0

    # -- lifecycle ---------------------------------------------------------

    @property
    def is_running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Start a recording.

        Raises:
            PermissionDeniedError: If the provider refuses authorization
            AlreadyRunningError: If a recording is already in progress
        """
        with self._lifecycle_lock:
            if self._running:
                raise AlreadyRunningError(f"{self.kind} recorder is already running")

            status = self.provider.request_authorization()
            logger.info(f"{self.kind} sensor authorization: {status.value}")
            if status is not AuthorizationStatus.GRANTED:
                raise PermissionDeniedError(f"{self.kind} sensor not authorized")

            with self._state_lock:
                self._reset()
                self._start_ref = self.clock()
                self._sampling = self.warmup_seconds == 0
                self._running = True

            pub.subscribe(self.on_reading, self.reading_topic)
            try:
                self.provider.subscribe(self.publisher.publish_reading)
            except Exception:
                logger.error(f"Failed to start {self.kind} sensor", exc_info=True)
                with self._state_lock:
                    self._running = False
                pub.unsubscribe(self.on_reading, self.reading_topic)
                raise

            if self.auto_tick:
                self._stop_event.clear()
                self._timer_thread = threading.Thread(target=self._run_timer, daemon=True)
                self._timer_thread.name = f"{self.kind}SampleTimer"
                self._timer_thread.start()

        logger.info(f"Started {self.kind} recording "
                    f"({1.0 / self.sample_period:.1f} Hz, warm-up {self.warmup_seconds}s)")
        self._publish_lifecycle("started")

    def stop(self) -> Optional[SessionSummary]:
        """Stop the recording and summarize it.

        Returns:
            The session summary, or None when not running or no sample was
            recorded
        """
        with self._lifecycle_lock:
            with self._state_lock:
                if not self._running:
                    return None
                self._running = False

            self._stop_event.set()
            if self._timer_thread is not None:
                self._timer_thread.join()
                self._timer_thread = None

            try:
                self.provider.unsubscribe()
            finally:
                pub.unsubscribe(self.on_reading, self.reading_topic)

            with self._state_lock:
                duration = max(0.0, self.clock() - self._start_ref)
                summary = self._build_summary(duration)

        if summary is None:
            logger.info(f"No {self.kind} samples recorded ({duration:.2f}s)")
            self._publish_lifecycle("empty", duration=duration)
            return None

        logger.info(f"{self.kind} session {summary.id} done: {duration:.2f}s, "
                    f"{summary.sample_count} samples, avg_a={summary.avg_a:.4f}, "
                    f"avg_b={summary.avg_b:.4f}")

        self._persist(summary)
        self._publish_lifecycle("stopped", session_id=summary.id, duration=duration,
                                sample_count=summary.sample_count)
        self._notify(self.summary_topic, summary=summary)
        return summary

    # -- activities --------------------------------------------------------

    def on_reading(self, reading: SensorReading) -> None:
        """Consume one raw reading; called from the provider's thread."""
        tracker = self.trackers.get(reading.channel)
        if tracker is None:
            logger.debug(f"Ignoring reading for unknown channel '{reading.channel}'")
            return

        with self._state_lock:
            if not self._running:
                return
            self._readings_received += 1
            tracker.update(reading.value, reading.timestamp)

    def tick(self) -> Optional[Sample]:
        """Append a sample of the current channel values.

        Ticks during warm-up are discarded; the first tick after warm-up
        becomes t=0.

        Returns:
            The recorded sample, or None if nothing was recorded
        """
        with self._state_lock:
            if not self._running:
                return None

            now = self.clock()
            if not self._sampling:
                if now - self._start_ref < self.warmup_seconds:
                    return None
                self._sampling = True
                self._start_ref = now

            value_a, value_b = self._current_values()
            sample = Sample(t=max(0.0, now - self._start_ref), channel_a=value_a, channel_b=value_b)
            self._samples.append(sample)

            self._sum_a += value_a
            self._sum_b += value_b
            self._max_a = value_a if self._max_a is None else max(self._max_a, value_a)
            self._max_b = value_b if self._max_b is None else max(self._max_b, value_b)
            self._count += 1
            return sample

    def _run_timer(self) -> None:
        while not self._stop_event.wait(self.sample_period):
            self.tick()

    # -- live reads --------------------------------------------------------

    @property
    def live_values(self) -> Tuple[float, float]:
        """Current (channel A, channel B) values for live display."""
        with self._state_lock:
            return self._current_values()

    def live_samples(self) -> List[Sample]:
        """Copy of the timeline recorded so far."""
        with self._state_lock:
            return list(self._samples)

    def get_stats(self) -> RecorderStats:
        with self._state_lock:
            value_a, value_b = self._current_values()
            elapsed = max(0.0, self.clock() - self._start_ref) if self._running else 0.0
            return RecorderStats(
                is_running=self._running,
                sample_count=self._count,
                elapsed_seconds=elapsed,
                live_a=value_a,
                live_b=value_b,
                readings_received=self._readings_received,
                warming_up=self._running and not self._sampling,
            )

    # -- internals ---------------------------------------------------------

    def _current_values(self) -> Tuple[float, float]:
        value_a = self.trackers[self.channel_a].current_value
        value_b = self.trackers[self.channel_b].current_value if self.channel_b else 0.0
        return value_a, value_b

    def _reset(self) -> None:
        for tracker in self.trackers.values():
            tracker.reset()
        self._samples = []
        self._sum_a = 0.0
        self._sum_b = 0.0
        self._max_a = None
        self._max_b = None
        self._count = 0
        self._readings_received = 0

    def _build_summary(self, duration: float) -> Optional[SessionSummary]:
        if self._count == 0:
            return None

        return SessionSummary(
            id=str(uuid.uuid4()),
            created_at=self.wall_clock(),
            duration=duration,
            avg_a=self._sum_a / self._count,
            avg_b=self._sum_b / self._count,
            max_a=self._max_a,
            max_b=self._max_b,
            samples=tuple(self._samples),
            kind=self.kind,
            channel_names=(self.channel_a, self.channel_b or ""),
        )

    def _persist(self, summary: SessionSummary) -> None:
        if self.store is None:
            return
        try:
            self.store.save(summary)
        except Exception as e:
            logger.error(f"Could not save {self.kind} session {summary.id}: {e}")

    def _publish_lifecycle(self, event_type: str, **metadata) -> None:
        event = SessionEvent(
            event_id=str(uuid.uuid4()),
            event_type=event_type,
            metadata={"kind": self.kind, **metadata},
        )
        self._notify(self.lifecycle_topic, event=event)

    def _notify(self, topic: str, **data) -> None:
        """Send a pubsub message; listener errors are logged, never raised."""
        try:
            pub.sendMessage(topic, **data)
        except Exception:
            logger.error(f"Listener on {topic} failed", exc_info=True)

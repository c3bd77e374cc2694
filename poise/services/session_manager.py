"""Session manager wiring sensors, recorder and storage together."""

import logging
import threading
from typing import Any, Dict, List, Optional

from ..config import PoiseConfig
from ..models.scoring import ScoreResult
from ..models.session import Sample, SessionSummary
from ..recording.downsample import downsample
from ..recording.errors import AlreadyRunningError
from ..recording.recorder import StreamingSessionRecorder
from ..scoring.base import AbstractScoringBackend
from ..scoring.features import build_body_language_features, build_vocal_features
from ..sensors.base import AbstractSensorProvider
from ..sensors.replay import ReplaySensorProvider
from ..storage.session_store import SessionStore

logger = logging.getLogger(__name__)

# Session kind -> record filename prefix
KIND_PREFIXES = {
    "hands": "bodylang",
    "voice": "voice",
}


class SessionManager:
    """Manages recording sessions, their providers and session history."""

    def __init__(self, config: PoiseConfig):
        """Initialize session manager.

        Args:
            config: Application configuration
        """
        self.config = config
        self.sessions_dir = config.get_sessions_directory()
        self.stores = {
            kind: SessionStore(self.sessions_dir, prefix)
            for kind, prefix in KIND_PREFIXES.items()
        }
        self.recorder: Optional[StreamingSessionRecorder] = None
        self._recording_lock = threading.Lock()
        logger.info(f"SessionManager initialized with sessions dir: {self.sessions_dir}")

    def get_store(self, kind: str) -> SessionStore:
        if kind not in self.stores:
            raise ValueError(f"Unknown session kind '{kind}', expected one of {sorted(self.stores)}")
        return self.stores[kind]

    def create_provider(self, kind: str, replay_file: Optional[str] = None) -> AbstractSensorProvider:
        """Build the sensor provider for a session kind from configuration.

        Args:
            kind: "hands" (replayed hand-tracking stream) or "voice" (microphone)
            replay_file: Overrides sensors.replay.file_path for hand sessions

        Returns:
            Configured sensor provider
        """
        if kind == "hands":
            file_path = replay_file or self.config.get('sensors.replay.file_path')
            if not file_path:
                raise ValueError("No hand-tracking replay file configured (sensors.replay.file_path)")
            return ReplaySensorProvider(
                file_path,
                speed=self.config.get('sensors.replay.speed', 1.0),
            )

        if kind == "voice":
            from ..sensors.microphone import MicrophoneLevelProvider

            return MicrophoneLevelProvider(
                sample_rate=self.config.get('sensors.microphone.sample_rate', 16000),
                chunk_size=self.config.get('sensors.microphone.chunk_size', 1024),
                channels=self.config.get('sensors.microphone.channels', 1),
                device_index=self.config.get('sensors.microphone.device_index'),
            )

        raise ValueError(f"Unknown session kind '{kind}'")

    def create_recorder(self, provider: AbstractSensorProvider, **overrides) -> StreamingSessionRecorder:
        """Build a recorder for provider using the recorder settings."""
        settings = {
            "sample_period": self.config.get('recorder.sample_period_seconds', 0.2),
            "warmup_seconds": self.config.get('recorder.warmup_seconds', 0.5),
            "min_update_interval": self.config.get('recorder.min_update_interval_seconds', 0.001),
        }
        settings.update(overrides)
        return StreamingSessionRecorder(
            provider,
            store=self.get_store(provider.session_kind),
            **settings,
        )

    def start_recording(self, kind: str, provider: Optional[AbstractSensorProvider] = None,
                        **recorder_overrides) -> StreamingSessionRecorder:
        """Start recording a new session.

        Raises:
            AlreadyRunningError: If a session is already being recorded
            PermissionDeniedError: If the sensor refuses authorization
        """
        with self._recording_lock:
            if self.recorder is not None and self.recorder.is_running:
                raise AlreadyRunningError(f"A {self.recorder.kind} session is already recording")

            provider = provider or self.create_provider(kind)
            recorder = self.create_recorder(provider, **recorder_overrides)
            recorder.start()
            self.recorder = recorder

        logger.info(f"Recording {kind} session")
        return recorder

    def stop_recording(self) -> Optional[SessionSummary]:
        """Stop the current recording, returning its summary if one was produced."""
        with self._recording_lock:
            if self.recorder is None:
                return None
            return self.recorder.stop()

    def list_sessions(self, kind: Optional[str] = None) -> List[SessionSummary]:
        """List stored sessions, newest first.

        Args:
            kind: Restrict to one session kind; None lists all kinds
        """
        if kind is not None:
            return self.get_store(kind).load_all()

        sessions = []
        for store in self.stores.values():
            sessions.extend(store.load_all())
        sessions.sort(key=lambda s: s.created_at, reverse=True)
        return sessions

    def load_session(self, kind: str, session_id: str) -> Optional[SessionSummary]:
        return self.get_store(kind).load(session_id)

    def find_session(self, session_id: str) -> Optional[SessionSummary]:
        """Look a session up by id across all kinds."""
        for store in self.stores.values():
            if store.record_path(session_id).exists():
                return store.load(session_id)
        return None

    def delete_session(self, kind: str, session_id: str) -> bool:
        return self.get_store(kind).delete_by_id(session_id)

    def chart_series(self, summary: SessionSummary, points: Optional[int] = None) -> List[Sample]:
        """Downsample a session for charting."""
        target = points or self.config.get('chart.downsample_points', 180)
        return downsample(summary.samples, target)

    def score_session(self, summary: SessionSummary, backend: AbstractScoringBackend,
                      transcript: str = "") -> ScoreResult:
        """Hand a finished session to a scoring backend."""
        points = self.config.get('chart.downsample_points', 180)
        if summary.kind == "voice":
            features = build_vocal_features(summary, transcript=transcript, points=points)
        else:
            features = build_body_language_features(summary, points=points)

        result = backend.score(features)
        logger.info(f"Session {summary.id} scored {result.score}/10 by {backend.name}")
        return result

    def cleanup_old_sessions(self, max_age_days: Optional[int] = None) -> int:
        max_age = max_age_days if max_age_days is not None else self.config.get('storage.max_age_days', 30)
        return sum(store.cleanup_old_sessions(max_age) for store in self.stores.values())

    def get_storage_stats(self) -> Dict[str, Any]:
        return {kind: store.get_storage_stats() for kind, store in self.stores.items()}

"""Pytest configuration and fixtures for Poise tests."""

import logging
import tempfile
import time
from datetime import datetime
from typing import Optional
from unittest.mock import Mock, patch

import numpy as np
import pytest
from pubsub import pub

from poise.models.events import AuthorizationStatus, SensorReading, SignalKind
from poise.models.session import Sample, SessionSummary
from poise.recording.recorder import StreamingSessionRecorder
from poise.sensors.base import AbstractSensorProvider


# Configure logging for tests
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests without threads or devices")
    config.addinivalue_line("markers", "integration: end-to-end tests with real threads and files")


@pytest.fixture(autouse=True)
def reset_pubsub():
    """Drop pub/sub listeners left behind by a test."""
    yield
    pub.unsubAll()


@pytest.fixture
def restore_root_logging():
    """Undo handler changes made by setup_logging()."""
    root_logger = logging.getLogger()
    handlers = list(root_logger.handlers)
    level = root_logger.level
    yield
    for handler in root_logger.handlers:
        if handler not in handlers:
            handler.close()
    root_logger.handlers[:] = handlers
    root_logger.setLevel(level)


@pytest.fixture
def temp_data_dir():
    """Create temporary directory for test data."""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield temp_dir


class FakeClock:
    """Manually advanced monotonic clock."""

    def __init__(self, start: float = 0.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def set(self, value: float) -> None:
        self.now = value

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FakeSensorProvider(AbstractSensorProvider):
    """Provider whose readings are pushed by the test through emit()."""

    def __init__(self, channel_names=("left", "right"), signal_kind=SignalKind.MOTION,
                 session_kind="hands", authorized=True,
                 subscribe_error: Optional[Exception] = None):
        self.channel_names = tuple(channel_names)
        self.signal_kind = signal_kind
        self.session_kind = session_kind
        self.authorized = authorized
        self.subscribe_error = subscribe_error
        self.callback = None
        self.subscribe_calls = 0
        self.unsubscribe_calls = 0

    @property
    def is_subscribed(self) -> bool:
        return self.callback is not None

    def request_authorization(self) -> AuthorizationStatus:
        return AuthorizationStatus.GRANTED if self.authorized else AuthorizationStatus.DENIED

    def subscribe(self, callback) -> None:
        if self.subscribe_error is not None:
            raise self.subscribe_error
        self.subscribe_calls += 1
        self.callback = callback

    def unsubscribe(self) -> None:
        self.unsubscribe_calls += 1
        self.callback = None

    def emit(self, channel, value, timestamp) -> None:
        if self.callback is not None:
            self.callback(SensorReading(channel=channel, value=value, timestamp=timestamp))


@pytest.fixture
def fake_clock():
    return FakeClock()


@pytest.fixture
def hand_provider():
    return FakeSensorProvider()


@pytest.fixture
def level_provider():
    return FakeSensorProvider(channel_names=("rms", "peak"), signal_kind=SignalKind.LEVEL,
                              session_kind="voice")


@pytest.fixture
def make_summary():
    """Factory for stored-session summaries."""
    def _make(session_id="session-1", created_at=None, kind="hands", values=(0.1, 0.3, 0.2)):
        samples = tuple(
            Sample(t=i * 0.2, channel_a=value, channel_b=value / 2)
            for i, value in enumerate(values)
        )
        count = max(len(samples), 1)
        return SessionSummary(
            id=session_id,
            created_at=created_at or datetime(2026, 3, 1, 10, 0, 0),
            duration=len(samples) * 0.2,
            avg_a=sum(s.channel_a for s in samples) / count,
            avg_b=sum(s.channel_b for s in samples) / count,
            max_a=max((s.channel_a for s in samples), default=0.0),
            max_b=max((s.channel_b for s in samples), default=0.0),
            samples=samples,
            kind=kind,
            channel_names=("left", "right") if kind == "hands" else ("rms", "peak"),
        )
    return _make


@pytest.fixture
def sample_audio_chunk():
    """Generate a full-scale sine audio chunk for testing."""
    sample_rate = 16000
    duration = 1024 / sample_rate  # ~0.064 seconds
    freq = 440  # A4 note

    t = np.linspace(0, duration, 1024, False)
    wave_data = np.sin(2 * np.pi * freq * t)

    # Convert to 16-bit integers
    audio_data = (wave_data * 32767).astype(np.int16)
    return audio_data.tobytes()


@pytest.fixture
def mock_pyaudio():
    """Mock PyAudio for testing without actual audio hardware."""
    with patch('pyaudio.PyAudio') as mock_pyaudio_class:
        mock_pyaudio_instance = Mock()
        mock_stream = Mock()

        # Configure mock stream
        def _read(*args, **kwargs):
            time.sleep(0.005)  # paces the capture loop like a real device
            return mock_stream.read_data

        mock_stream.read_data = b"\x00" * 2048  # Silent audio
        mock_stream.read.side_effect = _read
        mock_stream.stop_stream.return_value = None
        mock_stream.close.return_value = None

        # Configure mock PyAudio instance
        mock_pyaudio_instance.open.return_value = mock_stream
        mock_pyaudio_instance.terminate.return_value = None

        mock_pyaudio_class.return_value = mock_pyaudio_instance

        yield {
            'class': mock_pyaudio_class,
            'instance': mock_pyaudio_instance,
            'stream': mock_stream
        }


@pytest.fixture
def write_config(tmp_path):
    """Write a poise.yaml into tmp_path and return its path."""
    def _write(text: str):
        config_file = tmp_path / "poise.yaml"
        config_file.write_text(text, encoding="utf-8")
        return str(config_file)
    return _write


@pytest.fixture
def provider_factory():
    """The fake provider class, for tests needing custom channels or failures."""
    return FakeSensorProvider


@pytest.fixture
def make_recorder(fake_clock):
    """Build a recorder driven by fake_clock with manual ticks and no warm-up."""
    def _make(provider, **kwargs):
        kwargs.setdefault("warmup_seconds", 0.0)
        kwargs.setdefault("auto_tick", False)
        kwargs.setdefault("clock", fake_clock)
        return StreamingSessionRecorder(provider, **kwargs)
    return _make

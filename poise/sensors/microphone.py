"""Microphone loudness provider with continuous capture in a background thread."""

import math
import time
import logging
from threading import Thread, Event
from typing import Callable, Optional, Tuple

import numpy as np
import pyaudio

from ..models.events import AuthorizationStatus, SensorReading, SignalKind
from .base import AbstractSensorProvider, ReadingCallback

logger = logging.getLogger(__name__)

DB_MIN = -80.0
DB_MAX = 0.0
INT16_FULL_SCALE = 32768.0


def to_db(value: float) -> float:
    """Convert a normalized amplitude to dBFS clamped to [DB_MIN, DB_MAX]."""
    if value <= 0:
        return DB_MIN
    return max(DB_MIN, min(DB_MAX, 20.0 * math.log10(value)))


def chunk_levels(audio_chunk: bytes) -> Tuple[float, float]:
    """Return (rms_db, peak_db) of a chunk of 16-bit PCM audio."""
    samples = np.frombuffer(audio_chunk, dtype=np.int16).astype(np.float32) / INT16_FULL_SCALE
    if samples.size == 0:
        return DB_MIN, DB_MIN

    rms = float(np.sqrt(np.mean(np.square(samples), dtype=np.float32)))
    peak = float(np.max(np.abs(samples)))
    return to_db(rms), to_db(peak)


class MicrophoneLevelProvider(AbstractSensorProvider):
    """Publishes RMS and peak loudness of the microphone, one pair per chunk."""

    channel_names = ("rms", "peak")
    signal_kind = SignalKind.LEVEL
    session_kind = "voice"

    def __init__(
        self,
        sample_rate: int = 16000,
        chunk_size: int = 1024,
        channels: int = 1,
        device_index: Optional[int] = None,
        format: int = pyaudio.paInt16,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize microphone provider with specified parameters.

        Args:
            sample_rate: Audio sample rate
            chunk_size: Size of each audio chunk in samples
            channels: Number of audio channels (1 for mono)
            device_index: PyAudio input device, None for the default device
            format: Audio format (16-bit signed int)
            clock: Monotonic clock used to timestamp readings
        """
        self.sample_rate = sample_rate
        self.chunk_size = chunk_size
        self.channels = channels
        self.device_index = device_index
        self.format = format
        self.clock = clock

        # Capture thread management
        self.capture_thread: Optional[Thread] = None
        self.stop_event = Event()
        self.callback: Optional[ReadingCallback] = None
        self.total_chunks = 0

    @property
    def is_subscribed(self) -> bool:
        return self.capture_thread is not None and self.capture_thread.is_alive()

    def request_authorization(self) -> AuthorizationStatus:
        """Probe the input device by opening and closing a stream."""
        try:
            audio, stream = self._open_stream()
        except OSError as e:
            logger.warning(f"Microphone not available: {e}")
            return AuthorizationStatus.DENIED

        self._close_stream(audio, stream)
        return AuthorizationStatus.GRANTED

    def subscribe(self, callback: ReadingCallback) -> None:
        """Open the input stream and start capturing in a background thread."""
        if self.is_subscribed:
            logger.warning("Microphone capture already in progress")
            return

        # Open here so device errors reach the caller
        audio, stream = self._open_stream()

        self.callback = callback
        self.stop_event.clear()
        self.total_chunks = 0

        self.capture_thread = Thread(
            target=self._capture_continuously, args=(audio, stream, callback), daemon=True
        )
        self.capture_thread.name = "MicrophoneCaptureThread"
        self.capture_thread.start()
        logger.info("Microphone capture started")

    def unsubscribe(self) -> None:
        """Stop capturing and release the audio device.

        Returns only once the capture thread has exited.
        """
        if self.capture_thread is None:
            return

        self.stop_event.set()
        self.capture_thread.join(timeout=2.0)
        if self.capture_thread.is_alive():
            logger.warning("Microphone capture thread slow to stop, waiting for current read")
            self.capture_thread.join()

        self.capture_thread = None
        self.callback = None
        logger.info(f"Microphone capture stopped. Total chunks: {self.total_chunks}")

    def _open_stream(self):
        audio = pyaudio.PyAudio()
        try:
            stream = audio.open(
                format=self.format,
                channels=self.channels,
                rate=self.sample_rate,
                input=True,
                input_device_index=self.device_index,
                frames_per_buffer=self.chunk_size,
            )
        except OSError:
            audio.terminate()
            raise

        logger.info(f"Audio stream opened: {self.sample_rate}Hz, "
                    f"{self.chunk_size} samples/chunk")
        return audio, stream

    @staticmethod
    def _close_stream(audio, stream) -> None:
        stream.stop_stream()
        stream.close()
        audio.terminate()

    def _capture_continuously(self, audio, stream, callback: ReadingCallback) -> None:
        """Internal method: continuous capture loop in background thread.

        Owns the stream it was started with and closes it on exit.
        """
        try:
            while not self.stop_event.is_set():
                audio_chunk = stream.read(self.chunk_size, exception_on_overflow=False)
                self.total_chunks += 1
                timestamp = self.clock()

                rms_db, peak_db = chunk_levels(audio_chunk)
                callback(SensorReading(channel="rms", value=rms_db, timestamp=timestamp))
                callback(SensorReading(channel="peak", value=peak_db, timestamp=timestamp))
        except OSError as e:
            logger.error(f"Microphone capture failed: {e}")
        finally:
            self._close_stream(audio, stream)

"""Sensor providers feeding the session recorder.

The pyaudio-backed microphone provider lives in
:mod:`poise.sensors.microphone` and is imported on demand.
"""

from .base import AbstractSensorProvider
from .publisher import SensorPublisher
from .replay import ReplaySensorProvider, load_readings, save_readings

__all__ = [
    'AbstractSensorProvider',
    'SensorPublisher',
    'ReplaySensorProvider',
    'load_readings',
    'save_readings',
]

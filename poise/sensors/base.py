"""Abstract base class for sensor providers."""

from abc import ABC, abstractmethod
from typing import Callable, Tuple
import logging

from ..models.events import AuthorizationStatus, SensorReading, SignalKind

logger = logging.getLogger(__name__)

ReadingCallback = Callable[[SensorReading], None]


class AbstractSensorProvider(ABC):
    """A source of timestamped readings for up to two channels.

    Providers deliver readings from their own producer thread through the
    callback given to :meth:`subscribe`. The callback must return quickly.
    """

    #: Channel names in (channel A, channel B) order
    channel_names: Tuple[str, ...] = ()
    #: How the recorder turns this provider's readings into current values
    signal_kind: SignalKind = SignalKind.MOTION
    #: Session kind recorded in summaries ("hands", "voice")
    session_kind: str = ""

    @abstractmethod
    def request_authorization(self) -> AuthorizationStatus:
        """Ask the underlying sensor for permission to record."""
        pass

    @abstractmethod
    def subscribe(self, callback: ReadingCallback) -> None:
        """Start delivering readings to callback.

        Raises:
            Exception: If the sensor cannot be started. Failures are not retried.
        """
        pass

    @abstractmethod
    def unsubscribe(self) -> None:
        """Stop delivering readings and release the sensor.

        Must not return while the producer can still invoke the callback.
        """
        pass

    @property
    def is_subscribed(self) -> bool:
        return False

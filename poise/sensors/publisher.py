"""Sensor publisher module for pub/sub event publishing."""

import logging
from pubsub import pub
from ..models.events import SensorReading

logger = logging.getLogger(__name__)


class SensorPublisher:
    """Publishes sensor readings using pubsub.pub for pub/sub architecture."""

    def __init__(self, topic: str):
        """Initialize sensor publisher.

        Args:
            topic: Pub/sub topic name for sensor readings
        """
        self.topic = topic
        self.published = 0
        logger.info(f"SensorPublisher initialized with topic: {topic}")

    def publish_reading(self, reading: SensorReading) -> None:
        """Publish a sensor reading to the pub/sub topic.

        Args:
            reading: SensorReading to publish
        """
        self.published += 1
        pub.sendMessage(self.topic, reading=reading)

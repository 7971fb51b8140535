"""Message publisher for the transcription channel."""

import logging
from typing import Any
from pubsub import pub

logger = logging.getLogger(__name__)


class MessagePublisher:
    """Publishes channel messages using pubsub.pub."""

    def __init__(self, topic: str):
        """Initialize message publisher.

        Args:
            topic: Pub/sub topic name that callers subscribe to
        """
        self.topic = topic
        logger.info(f"MessagePublisher initialized with topic: {topic}")

    def publish(self, message: Any) -> None:
        """Publish a message to the pub/sub topic.

        Args:
            message: One of the message dataclasses from ``scribeflow.models.messages``
        """
        pub.sendMessage(self.topic, message=message)
        logger.debug(f"Published {getattr(message, 'type', None) or getattr(message, 'status', '?')} on {self.topic}")

"""
Kafka Audit Publisher Adapter.

Publishes audit events produced by the analytics services to a Kafka topic.
Delivery is fire-and-forget: failures are logged, never raised.
"""

import json
import logging

from confluent_kafka import KafkaException, Producer

from fleetyield.config.schema import KafkaSettings
from fleetyield.core.domain.audit import AuditEvent
from fleetyield.core.ports.audit import AuditPublisher

logger = logging.getLogger(__name__)


class KafkaAuditPublisher(AuditPublisher):
    """
    Audit publisher producing JSON messages keyed by entity type.
    """

    def __init__(self, settings: KafkaSettings):
        """
        Initialize the publisher. The producer is created on first publish.

        Args:
            settings: Broker addresses, topic and client id
        """
        self.bootstrap_servers = settings.bootstrap_servers
        self.topic = settings.topic
        self.client_id = settings.client_id
        self.producer = None

    def _get_producer(self) -> Producer:
        """Lazy initialization of Kafka producer."""
        if self.producer is None:
            config = {
                'bootstrap.servers': self.bootstrap_servers,
                'client.id': self.client_id,
                'acks': 'all',
                'retries': 3,
                'max.in.flight.requests.per.connection': 1,
            }
            self.producer = Producer(config)
        return self.producer

    def _delivery_callback(self, err, msg):
        """Callback for message delivery reports."""
        if err:
            logger.error(f"Audit message delivery failed: {err}")
        else:
            logger.debug(f"Audit message delivered to {msg.topic()} [{msg.partition()}]")

    def publish(self, event: AuditEvent) -> None:
        try:
            payload = json.dumps(event.to_message(), default=str)

            producer = self._get_producer()
            producer.produce(
                topic=self.topic,
                value=payload.encode('utf-8'),
                key=event.entity_type.encode('utf-8'),
                callback=self._delivery_callback
            )
            # Trigger delivery callbacks
            producer.poll(0)

            logger.info(f"Published audit event '{event.action}' for {event.entity_type} {event.entity_id}")

        except KafkaException as e:
            logger.error(f"Failed to publish audit event: {e}")
        except (BufferError, TypeError, ValueError) as e:
            logger.error(f"Unexpected error publishing audit event: {e}")

    def flush(self, timeout: float = 10.0):
        """
        Wait for all messages to be delivered.

        Args:
            timeout: Maximum time to wait in seconds
        """
        if self.producer:
            remaining = self.producer.flush(timeout)
            if remaining > 0:
                logger.warning(f"{remaining} audit messages were not delivered within timeout")

    def close(self):
        """Close the producer and flush remaining messages."""
        if self.producer:
            self.producer.flush(10.0)
            self.producer = None

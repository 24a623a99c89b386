import logging
from typing import Callable

from aiokafka import AIOKafkaProducer

from core.config import settings

logger = logging.getLogger(__name__)


ProducerFactory = Callable[[], AIOKafkaProducer]


def create_kafka_producer(client_id: str) -> AIOKafkaProducer:
    """
    Build (but do not start) the process-wide producer for a service.

    acks='all' plus idempotence keeps messages of one key in order on the
    partition; compression and batching come from settings.
    """
    return AIOKafkaProducer(
        bootstrap_servers=settings.kafka_bootstrap_servers,
        client_id=client_id,
        acks="all",
        enable_idempotence=settings.KAFKA_ENABLE_IDEMPOTENCE,
        request_timeout_ms=settings.KAFKA_REQUEST_TIMEOUT_MS,
        retry_backoff_ms=settings.KAFKA_RETRY_BACKOFF_MS,
        compression_type=settings.KAFKA_COMPRESSION_TYPE,
        max_batch_size=settings.KAFKA_MAX_BATCH_SIZE,
        linger_ms=settings.KAFKA_LINGER_MS,
    )


def kafka_producer_factory(client_id: str) -> ProducerFactory:
    """Factory handed to EventPublisher; a fresh client is built on every connect."""

    def factory() -> AIOKafkaProducer:
        logger.debug(f"Creating Kafka producer for {client_id} -> {settings.kafka_bootstrap_servers}")
        return create_kafka_producer(client_id)

    return factory

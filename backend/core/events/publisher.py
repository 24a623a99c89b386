"""
Event Publisher Module - owns the broker connection and enforces the publish policy
"""
import asyncio
import logging
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Dict, Optional

from aiokafka.errors import KafkaError

from .circuit_breaker import CircuitBreaker
from .errors import BrokerConnectionError, PublishError, PublishFailed, PublishUnavailable
from .message import TransportMessage

logger = logging.getLogger(__name__)

# Exceptions treated as transport failures. asyncio.TimeoutError covers the
# bounded waits around start() and send().
TRANSPORT_ERRORS = (KafkaError, OSError, asyncio.TimeoutError)


class ProducerClosed(Exception):
    """The producer was taken away by disconnect() while a send waited for the lock."""


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    DISCONNECTING = "disconnecting"


class PublishOutcome(str, Enum):
    SUCCESS = "success"
    DEGRADED = "degraded"
    FAILED = "failed"


@dataclass(frozen=True)
class PublishPolicy:
    """Per-call publish configuration."""

    critical: bool = False
    correlation_id: Optional[str] = None


@dataclass(frozen=True)
class PublishResult:
    """
    Outcome of a publish call.

    SUCCESS: the broker acknowledged the message.
    DEGRADED: a non-critical event could not be sent; `error` holds the
        observed failure and the calling operation stays successful.
    FAILED: a critical event could not be sent; only ever seen attached to
        the PublishError that was raised.
    """

    outcome: PublishOutcome
    topic: str
    key: str
    correlation_id: Optional[str] = None
    event_type: Optional[str] = None
    error: Optional[BaseException] = None
    partition: Optional[int] = None
    offset: Optional[int] = None

    @property
    def ok(self) -> bool:
        return self.outcome is not PublishOutcome.FAILED

    @property
    def degraded(self) -> bool:
        return self.outcome is PublishOutcome.DEGRADED


class EventPublisher:
    """
    Event publisher for publishing transport messages to Kafka.

    The producer is an explicitly owned resource: `producer_factory` builds a
    client on connect(), and the client lives until disconnect(). Concurrent
    publish() calls share it; the enqueue step is serialized so messages with
    the same key reach the client in call order, while delivery
    acknowledgements are awaited concurrently.
    """

    def __init__(
        self,
        service_name: str,
        producer_factory: Callable[[], Any],
        connect_timeout: float = 10.0,
        publish_timeout: float = 10.0,
        circuit_breaker: Optional[CircuitBreaker] = None,
    ):
        if not service_name:
            raise ValueError("service_name is required for EventPublisher")
        self.service_name = service_name
        self.connect_timeout = connect_timeout
        self.publish_timeout = publish_timeout
        self.circuit_breaker = circuit_breaker or CircuitBreaker(name=service_name)
        self._producer_factory = producer_factory
        self._producer: Optional[Any] = None
        self._state = ConnectionState.DISCONNECTED
        self._lifecycle_lock = asyncio.Lock()
        self._send_lock = asyncio.Lock()
        self._stats = {"published": 0, "degraded": 0, "failed": 0}

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_connected(self) -> bool:
        return self._state is ConnectionState.CONNECTED and self._producer is not None

    @property
    def stats(self) -> Dict[str, int]:
        return dict(self._stats)

    async def connect(self) -> None:
        """Start the Kafka producer; a no-op when already connected."""
        async with self._lifecycle_lock:
            if self.is_connected:
                return
            if not self.circuit_breaker.allow_request():
                raise BrokerConnectionError(
                    f"Circuit breaker is OPEN - Kafka unavailable for {self.service_name}"
                )

            self._state = ConnectionState.CONNECTING
            try:
                producer = self._producer_factory()
            except Exception as e:
                self._state = ConnectionState.DISCONNECTED
                self.circuit_breaker.record_failure()
                logger.error(f"Kafka producer for {self.service_name} could not be created: {e!r}")
                raise BrokerConnectionError(
                    f"Could not create Kafka producer for {self.service_name}: {e!r}"
                ) from e

            try:
                await asyncio.wait_for(producer.start(), timeout=self.connect_timeout)
            except Exception as e:
                self._state = ConnectionState.DISCONNECTED
                self.circuit_breaker.record_failure()
                await self._close_quietly(producer)
                logger.error(f"Kafka producer for {self.service_name} failed to connect: {e!r}")
                raise BrokerConnectionError(
                    f"Could not connect Kafka producer for {self.service_name}: {e!r}"
                ) from e
            except BaseException:
                self._state = ConnectionState.DISCONNECTED
                self.circuit_breaker.release_trial()
                await self._close_quietly(producer)
                raise

            self._producer = producer
            self._state = ConnectionState.CONNECTED
            self.circuit_breaker.record_success()
            logger.info(f"Kafka producer connected - {self.service_name}")

    async def disconnect(self) -> None:
        """Stop the Kafka producer; safe to call when already disconnected."""
        async with self._lifecycle_lock:
            producer = self._producer
            if producer is None:
                self._state = ConnectionState.DISCONNECTED
                return

            self._state = ConnectionState.DISCONNECTING
            # Let enqueues already holding or waiting for the send lock go first.
            drained = await self._acquire_send_lock()
            try:
                await asyncio.wait_for(producer.stop(), timeout=self.connect_timeout)
            except TRANSPORT_ERRORS as e:
                logger.warning(f"Error disconnecting Kafka producer for {self.service_name}: {e!r}")
            finally:
                self._producer = None
                self._state = ConnectionState.DISCONNECTED
                if drained:
                    self._send_lock.release()
            logger.info(f"Kafka producer disconnected - {self.service_name}")

    async def publish(
        self,
        topic: str,
        message: TransportMessage,
        policy: Optional[PublishPolicy] = None,
    ) -> PublishResult:
        """
        Send one message under the given policy. Exactly one attempt is made.

        Returns:
            PublishResult with outcome SUCCESS, or DEGRADED for a non-critical
            event that could not be sent.

        Raises:
            PublishUnavailable: critical event while not connected / circuit open
            PublishFailed: critical event whose send failed or timed out
        """
        policy = policy or PublishPolicy()
        correlation_id = policy.correlation_id or message.correlation_id

        if not self.is_connected:
            return self._unavailable(topic, message, policy, correlation_id, "producer is not connected")
        if not self.circuit_breaker.allow_request():
            return self._unavailable(topic, message, policy, correlation_id, "circuit breaker is open")

        try:
            metadata = await asyncio.wait_for(self._send(topic, message), timeout=self.publish_timeout)
        except ProducerClosed:
            self.circuit_breaker.release_trial()
            return self._unavailable(topic, message, policy, correlation_id, "producer was disconnected")
        except TRANSPORT_ERRORS as e:
            self.circuit_breaker.record_failure()
            error = PublishFailed(
                f"Failed to publish {message.event_type or 'event'} to {topic}: {e!r}",
                topic=topic,
                key=message.key,
                correlation_id=correlation_id,
            )
            error.__cause__ = e
            return self._handle_failure(topic, message, policy, correlation_id, error)
        except BaseException:
            self.circuit_breaker.release_trial()
            raise

        self.circuit_breaker.record_success()
        self._stats["published"] += 1
        logger.info(
            f"Published event: {message.event_type} to topic: {topic} "
            f"key: {message.key} with correlation_id: {correlation_id}"
        )
        return PublishResult(
            outcome=PublishOutcome.SUCCESS,
            topic=topic,
            key=message.key,
            correlation_id=correlation_id,
            event_type=message.event_type,
            partition=getattr(metadata, "partition", None),
            offset=getattr(metadata, "offset", None),
        )

    def health(self) -> Dict[str, Any]:
        return {
            "service": self.service_name,
            "state": self._state.value,
            "circuit_breaker": self.circuit_breaker.snapshot(),
            "stats": self.stats,
        }

    async def _send(self, topic: str, message: TransportMessage):
        async with self._send_lock:
            producer = self._producer
            if producer is None:
                raise ProducerClosed()
            delivery = await producer.send(
                topic,
                value=message.value,
                key=message.kafka_key(),
                headers=message.kafka_headers(),
            )
        # A caller timing out must not cancel a send that already left the lock.
        return await asyncio.shield(delivery)

    async def _acquire_send_lock(self) -> bool:
        try:
            await asyncio.wait_for(self._send_lock.acquire(), timeout=self.connect_timeout)
        except asyncio.TimeoutError:
            logger.warning(
                f"Sends still in flight after {self.connect_timeout}s, "
                f"stopping Kafka producer for {self.service_name} anyway"
            )
            return False
        return True

    def _unavailable(
        self,
        topic: str,
        message: TransportMessage,
        policy: PublishPolicy,
        correlation_id: Optional[str],
        reason: str,
    ) -> PublishResult:
        error = PublishUnavailable(
            f"Cannot publish {message.event_type or 'event'} to {topic}: {reason}",
            topic=topic,
            key=message.key,
            correlation_id=correlation_id,
        )
        return self._handle_failure(topic, message, policy, correlation_id, error)

    def _handle_failure(
        self,
        topic: str,
        message: TransportMessage,
        policy: PublishPolicy,
        correlation_id: Optional[str],
        error: PublishError,
    ) -> PublishResult:
        if policy.critical:
            self._stats["failed"] += 1
            error.result = PublishResult(
                outcome=PublishOutcome.FAILED,
                topic=topic,
                key=message.key,
                correlation_id=correlation_id,
                event_type=message.event_type,
                error=error,
            )
            logger.error(f"{error} (critical, correlation_id: {correlation_id})")
            raise error

        self._stats["degraded"] += 1
        logger.warning(f"{error} (non-critical, continuing degraded, correlation_id: {correlation_id})")
        return PublishResult(
            outcome=PublishOutcome.DEGRADED,
            topic=topic,
            key=message.key,
            correlation_id=correlation_id,
            event_type=message.event_type,
            error=error,
        )

    async def _close_quietly(self, producer: Any) -> None:
        try:
            await asyncio.wait_for(producer.stop(), timeout=self.connect_timeout)
        except TRANSPORT_ERRORS as e:
            logger.debug(f"Ignoring error while closing a producer that failed to start: {e!r}")

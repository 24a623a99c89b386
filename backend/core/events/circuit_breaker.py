"""
Circuit breaker guarding the broker connection.

After `failure_threshold` consecutive transport failures the circuit opens and
no send or connect is attempted for `reset_timeout` seconds. After the cool-down
a single trial request runs half-open while every other request is refused:
success closes the circuit, failure re-opens it for another full cool-down.
"""
import logging
import time
from enum import Enum
from typing import Any, Callable, Dict, Optional

logger = logging.getLogger(__name__)


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half_open"


class CircuitBreaker:
    def __init__(
        self,
        failure_threshold: int = 5,
        reset_timeout: float = 60.0,
        clock: Callable[[], float] = time.monotonic,
        name: str = "kafka",
    ):
        if failure_threshold < 1:
            raise ValueError("failure_threshold must be at least 1")
        self.failure_threshold = failure_threshold
        self.reset_timeout = reset_timeout
        self.name = name
        self._clock = clock
        self._failures = 0
        self._opened_at: Optional[float] = None
        self._half_open = False
        self._trial_in_flight = False

    @property
    def failures(self) -> int:
        return self._failures

    @property
    def state(self) -> CircuitState:
        if self._opened_at is None:
            return CircuitState.HALF_OPEN if self._half_open else CircuitState.CLOSED
        if self._clock() - self._opened_at >= self.reset_timeout:
            return CircuitState.HALF_OPEN
        return CircuitState.OPEN

    def allow_request(self) -> bool:
        """
        False while the circuit is open. An expired open circuit moves to
        half-open and grants exactly one trial; further requests are refused
        until that trial is recorded or released.
        """
        state = self.state
        if state is CircuitState.OPEN:
            return False
        if state is CircuitState.HALF_OPEN:
            if self._trial_in_flight:
                return False
            self._opened_at = None
            self._half_open = True
            self._trial_in_flight = True
            logger.info(f"Circuit breaker '{self.name}' half-open, allowing a trial request")
        return True

    def release_trial(self) -> None:
        """Give back a granted trial that ended without reaching the broker."""
        self._trial_in_flight = False

    def record_success(self) -> None:
        if self._half_open or self._failures:
            logger.info(f"Circuit breaker '{self.name}' closed")
        self._failures = 0
        self._opened_at = None
        self._half_open = False
        self._trial_in_flight = False

    def record_failure(self) -> None:
        self._failures += 1
        self._trial_in_flight = False
        if self._half_open or self._failures >= self.failure_threshold:
            self._opened_at = self._clock()
            self._half_open = False
            logger.error(
                f"Circuit breaker '{self.name}' OPEN after {self._failures} consecutive failure(s); "
                f"retrying in {self.reset_timeout}s"
            )

    def snapshot(self) -> Dict[str, Any]:
        return {"state": self.state.value, "failures": self._failures}

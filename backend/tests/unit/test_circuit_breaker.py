"""
Tests for the broker circuit breaker
"""
import pytest

from core.events import CircuitBreaker, CircuitState


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def breaker(clock):
    return CircuitBreaker(failure_threshold=3, reset_timeout=30, clock=clock)


class TestCircuitBreaker:
    def test_starts_closed(self, breaker):
        assert breaker.state is CircuitState.CLOSED
        assert breaker.allow_request()

    def test_opens_after_consecutive_failures(self, breaker):
        breaker.record_failure()
        breaker.record_failure()
        assert breaker.state is CircuitState.CLOSED

        breaker.record_failure()
        assert breaker.state is CircuitState.OPEN
        assert not breaker.allow_request()

    def test_success_resets_the_count(self, breaker):
        breaker.record_failure()
        breaker.record_failure()
        breaker.record_success()
        breaker.record_failure()

        assert breaker.failures == 1
        assert breaker.state is CircuitState.CLOSED

    def test_half_open_after_reset_timeout(self, breaker, clock):
        for _ in range(3):
            breaker.record_failure()

        clock.advance(29)
        assert not breaker.allow_request()

        clock.advance(1)
        assert breaker.state is CircuitState.HALF_OPEN
        assert breaker.allow_request()

    def test_half_open_grants_a_single_trial(self, breaker, clock):
        for _ in range(3):
            breaker.record_failure()
        clock.advance(30)

        assert breaker.allow_request()
        assert not breaker.allow_request()
        assert not breaker.allow_request()
        assert breaker.state is CircuitState.HALF_OPEN

    def test_released_trial_is_granted_again(self, breaker, clock):
        for _ in range(3):
            breaker.record_failure()
        clock.advance(30)
        assert breaker.allow_request()

        breaker.release_trial()

        assert breaker.allow_request()
        assert not breaker.allow_request()

    def test_trial_success_closes(self, breaker, clock):
        for _ in range(3):
            breaker.record_failure()
        clock.advance(30)
        breaker.allow_request()

        breaker.record_success()

        assert breaker.state is CircuitState.CLOSED
        assert breaker.failures == 0
        assert breaker.allow_request() and breaker.allow_request()

    def test_trial_failure_reopens_for_a_full_timeout(self, breaker, clock):
        for _ in range(3):
            breaker.record_failure()
        clock.advance(30)
        breaker.allow_request()

        breaker.record_failure()

        assert breaker.state is CircuitState.OPEN
        clock.advance(29)
        assert not breaker.allow_request()
        clock.advance(1)
        assert breaker.allow_request()

    def test_snapshot(self, breaker):
        breaker.record_failure()
        assert breaker.snapshot() == {"state": "closed", "failures": 1}

    def test_threshold_must_be_positive(self):
        with pytest.raises(ValueError):
            CircuitBreaker(failure_threshold=0)

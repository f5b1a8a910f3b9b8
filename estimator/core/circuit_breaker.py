"""Three-state circuit breaker for calls to flaky external services."""

from __future__ import annotations

import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from enum import StrEnum
from typing import TypeVar

from loguru import logger

T = TypeVar("T")


class BreakerState(StrEnum):
    closed = "closed"
    open = "open"
    half_open = "half_open"


class CircuitOpenError(RuntimeError):
    """Raised instead of calling the wrapped operation while the breaker is open."""


@dataclass(frozen=True)
class BreakerSnapshot:
    state: BreakerState
    failure_count: int
    last_failure_time: float | None


class CircuitBreaker:
    """Stop calling a dependency after repeated failures, retry after a cool-down.

    closed: calls go through; consecutive failures are counted.
    open: calls fail fast with CircuitOpenError until reset_timeout elapses.
    half_open: exactly one call is let through as a probe while other callers
        fail fast; success closes, failure re-opens.
    """

    def __init__(
        self,
        name: str,
        max_failures: int = 3,
        reset_timeout: float = 300.0,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        if max_failures < 1:
            raise ValueError("max_failures must be at least 1")
        self.name = name
        self.max_failures = max_failures
        self.reset_timeout = reset_timeout
        self._clock = clock
        self._lock = threading.Lock()
        self._state = BreakerState.closed
        self._failure_count = 0
        self._last_failure_time: float | None = None
        self._probe_in_flight = False

    def call(self, operation: Callable[[], T]) -> T:
        with self._lock:
            if self._state == BreakerState.open and self._should_attempt_reset():
                self._state = BreakerState.half_open
                logger.info(f"[BREAKER] {self.name} half-open, probing")
            if self._state == BreakerState.open:
                raise CircuitOpenError(f"Circuit breaker '{self.name}' is open - service temporarily disabled")
            if self._state == BreakerState.half_open:
                if self._probe_in_flight:
                    raise CircuitOpenError(f"Circuit breaker '{self.name}' is half-open - probe in progress")
                self._probe_in_flight = True

        try:
            result = operation()
        except Exception:
            self._on_failure()
            raise
        self._on_success()
        return result

    def state(self) -> BreakerSnapshot:
        with self._lock:
            return BreakerSnapshot(
                state=self._state,
                failure_count=self._failure_count,
                last_failure_time=self._last_failure_time,
            )

    def reset(self) -> None:
        with self._lock:
            self._state = BreakerState.closed
            self._failure_count = 0
            self._last_failure_time = None
            self._probe_in_flight = False

    def _should_attempt_reset(self) -> bool:
        if self._last_failure_time is None:
            return False
        return self._clock() - self._last_failure_time >= self.reset_timeout

    def _on_success(self) -> None:
        with self._lock:
            if self._state != BreakerState.closed:
                logger.info(f"[BREAKER] {self.name} closed after successful call")
            self._failure_count = 0
            self._probe_in_flight = False
            self._state = BreakerState.closed

    def _on_failure(self) -> None:
        with self._lock:
            self._probe_in_flight = False
            self._failure_count += 1
            self._last_failure_time = self._clock()
            if self._state == BreakerState.half_open or self._failure_count >= self.max_failures:
                self._state = BreakerState.open
                logger.error(f"[BREAKER] {self.name} open after {self._failure_count} failures")

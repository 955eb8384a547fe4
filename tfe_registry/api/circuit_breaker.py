"""
Circuit breaker for the registry transport.
Stops sending requests after N consecutive transport failures
and lets a trial request through after a timeout.
"""

from __future__ import annotations

import logging
import time
from enum import Enum
from threading import Lock
from typing import Callable, TypeVar

from tfe_registry.errors import RegistryError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class CircuitOpenError(RegistryError):
    """Request refused locally because the circuit is open."""


class CircuitState(Enum):
    """Circuit breaker states."""

    CLOSED = "closed"  # Normal operation
    OPEN = "open"  # Failing, reject requests
    HALF_OPEN = "half_open"  # Testing if service recovered


class CircuitBreaker:
    """
    Circuit breaker that opens after N consecutive failures and auto-recovers after timeout.
    Only exceptions accepted by is_failure count; the rest pass through without affecting state.
    Thread-safe.
    """

    def __init__(
        self,
        failure_threshold: int = 5,
        recovery_timeout_sec: float = 60.0,
        name: str = "circuit",
        is_failure: Callable[[Exception], bool] | None = None,
    ) -> None:
        """
        Args:
            failure_threshold: Number of consecutive failures before opening circuit
            recovery_timeout_sec: Seconds to wait before attempting recovery (half-open)
            name: Name for logging
            is_failure: Decides whether an exception counts as a failure (default: all)
        """
        self._failure_threshold = max(1, failure_threshold)
        self._recovery_timeout_sec = max(1.0, recovery_timeout_sec)
        self._name = name
        self._is_failure = is_failure or (lambda e: True)

        self._state = CircuitState.CLOSED
        self._failure_count = 0
        self._last_failure_time: float | None = None
        self._lock = Lock()

    def call(self, func: Callable[[], T]) -> T:
        """
        Execute a function with circuit breaker protection.

        Raises:
            CircuitOpenError: If the circuit is open
            Exception: Whatever func raises
        """
        with self._lock:
            if self._state == CircuitState.OPEN:
                elapsed = time.time() - (self._last_failure_time or 0.0)
                if elapsed >= self._recovery_timeout_sec:
                    self._state = CircuitState.HALF_OPEN
                    logger.info(
                        "%s: Circuit entering HALF_OPEN state (testing recovery)",
                        self._name,
                    )
                else:
                    raise CircuitOpenError(
                        f"Circuit breaker is OPEN (failed {self._failure_count} times, "
                        f"retry in {self._recovery_timeout_sec - elapsed:.1f}s)"
                    )

        try:
            result = func()
        except Exception as e:
            if self._is_failure(e):
                self._record_failure()
            raise
        self._record_success()
        return result

    def _record_success(self) -> None:
        with self._lock:
            if self._state == CircuitState.HALF_OPEN:
                logger.info("%s: Circuit CLOSED (recovered)", self._name)
            self._state = CircuitState.CLOSED
            self._failure_count = 0
            self._last_failure_time = None

    def _record_failure(self) -> None:
        with self._lock:
            self._failure_count += 1
            self._last_failure_time = time.time()
            if self._state == CircuitState.HALF_OPEN:
                self._state = CircuitState.OPEN
                logger.warning(
                    "%s: Circuit OPEN (failed during recovery)",
                    self._name,
                )
            elif (
                self._state == CircuitState.CLOSED
                and self._failure_count >= self._failure_threshold
            ):
                self._state = CircuitState.OPEN
                logger.warning(
                    "%s: Circuit OPEN (failed %d times)",
                    self._name,
                    self._failure_count,
                )

    def get_state(self) -> CircuitState:
        """Get current circuit state."""
        with self._lock:
            return self._state

    def reset(self) -> None:
        """Manually reset circuit to CLOSED state."""
        with self._lock:
            self._state = CircuitState.CLOSED
            self._failure_count = 0
            self._last_failure_time = None
            logger.info("%s: Circuit manually reset", self._name)

"""
Retry logic with exponential backoff for the registry transport.
Backoff waits go through the caller's Context so cancellation interrupts them.
"""

from __future__ import annotations

import logging
from typing import Callable, TypeVar

from tfe_registry.context import Context
from tfe_registry.errors import OperationCancelled

logger = logging.getLogger(__name__)

T = TypeVar("T")


class RetryPolicy:
    """
    Retry policy with exponential backoff.
    """

    def __init__(
        self,
        max_retries: int = 3,
        initial_delay_sec: float = 1.0,
        max_delay_sec: float = 30.0,
        backoff_multiplier: float = 2.0,
    ) -> None:
        """
        Args:
            max_retries: Maximum number of retry attempts (0 = no retries)
            initial_delay_sec: Delay before the first retry
            max_delay_sec: Maximum delay between retries
            backoff_multiplier: Multiplier for exponential backoff
        """
        self._max_retries = max(0, max_retries)
        self._initial_delay = max(0.0, initial_delay_sec)
        self._max_delay = max(self._initial_delay, max_delay_sec)
        self._backoff_multiplier = max(1.0, backoff_multiplier)

    @property
    def max_retries(self) -> int:
        return self._max_retries

    def execute(
        self,
        func: Callable[[], T],
        ctx: Context | None = None,
        should_retry: Callable[[Exception], bool] | None = None,
    ) -> T:
        """
        Execute a function with retry logic.

        Args:
            func: Function to execute (no arguments)
            ctx: Caller context; cancellation stops further attempts
            should_retry: Returns True if the exception may be retried.
                         If None, retries on all exceptions except cancellation.

        Returns:
            Function result

        Raises:
            Last exception if all retries exhausted, or OperationCancelled from ctx
        """
        ctx = ctx or Context.background()
        delay = self._initial_delay

        for attempt in range(self._max_retries + 1):
            try:
                return func()
            except OperationCancelled:
                raise
            except Exception as e:
                if should_retry is not None and not should_retry(e):
                    raise

                if attempt >= self._max_retries:
                    logger.debug(
                        "Retry exhausted after %d attempts: %s",
                        attempt + 1,
                        e,
                    )
                    raise

                logger.debug(
                    "Retry attempt %d/%d after %.2fs: %s",
                    attempt + 1,
                    self._max_retries,
                    delay,
                    e,
                )
                ctx.sleep(delay)
                delay = min(delay * self._backoff_multiplier, self._max_delay)

        raise RuntimeError("Retry logic error")

"""Bounded retry policy for provider calls."""

import asyncio
import logging
from dataclasses import dataclass
from typing import Awaitable, Callable, TypeVar

logger = logging.getLogger(__name__)

T = TypeVar("T")

Backoff = Callable[[int], float]


def linear_backoff(base_delay: float) -> Backoff:
    """Delay grows with the attempt number (attempt * base)."""
    return lambda attempt: base_delay * attempt


def fixed_backoff(delay: float) -> Backoff:
    """Same delay after every failed attempt."""
    return lambda attempt: delay


@dataclass(frozen=True)
class RetryPolicy:
    """Max attempts plus the delay applied after each failed attempt.

    ``backoff`` receives the 1-based number of the attempt that just failed.
    No delay follows the final attempt.
    """

    max_attempts: int = 3
    backoff: Backoff = fixed_backoff(1.0)

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    async def run(
        self,
        operation: Callable[[], Awaitable[T]],
        description: str,
        give_up_on: tuple[type[BaseException], ...] = (),
    ) -> T:
        """Run ``operation`` until it succeeds or attempts are exhausted.

        Exceptions listed in ``give_up_on`` propagate immediately. The last
        error is re-raised once the budget is spent.
        """
        for attempt in range(1, self.max_attempts + 1):
            try:
                return await operation()
            except give_up_on:
                raise
            except Exception as e:
                if attempt >= self.max_attempts:
                    logger.error(
                        f"{description} failed after {attempt} attempts: {e}"
                    )
                    raise
                delay = self.backoff(attempt)
                logger.warning(
                    f"{description} attempt {attempt} failed: {e}; retrying in {delay}s"
                )
                await asyncio.sleep(delay)

        raise RuntimeError("unreachable")  # pragma: no cover

"""
Bounded polling strategy.

Repeats an async operation until its result satisfies a predicate or the
attempt budget runs out. Used for UserOperation receipt lookups and any other
wait-for-completion step.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Coroutine, Optional, Tuple, Type, TypeVar

from ..errors import PollExhaustedError

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[Any]]


def is_present(result: Any) -> bool:
    return result is not None


@dataclass
class PollConfig:
    """Configuration for polling behavior."""

    max_attempts: int = 10
    initial_delay_seconds: float = 3.0
    max_delay_seconds: float = 60.0
    exponential_base: float = 1.0  # 1.0 keeps the interval fixed
    jitter: bool = False
    jitter_factor: float = 0.1

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    @classmethod
    def fixed(cls, max_attempts: int, interval_seconds: float) -> "PollConfig":
        return cls(
            max_attempts=max_attempts,
            initial_delay_seconds=interval_seconds,
            max_delay_seconds=max(interval_seconds, 0.0),
        )

    def get_delay(self, wait_index: int) -> float:
        """Delay before the (wait_index + 2)-th attempt."""
        delay = min(
            self.initial_delay_seconds * (self.exponential_base ** wait_index),
            self.max_delay_seconds,
        )
        if self.jitter:
            jitter_range = delay * self.jitter_factor
            delay += random.uniform(-jitter_range, jitter_range)
        return max(delay, 0)


async def poll_until(
    operation: Callable[[], Coroutine[Any, Any, T]],
    is_done: Callable[[T], bool] = is_present,
    config: Optional[PollConfig] = None,
    *,
    retry_on: Tuple[Type[BaseException], ...] = (),
    exhausted_message: str = "Operation did not complete after polling",
    sleep: Sleep = asyncio.sleep,
    logger: Optional[logging.Logger] = None,
) -> T:
    """
    Call ``operation`` until ``is_done`` accepts its result.

    The first attempt runs immediately; later attempts wait ``get_delay``
    seconds first. Exceptions listed in ``retry_on`` count as a not-done
    result, anything else propagates. Raises PollExhaustedError when the
    budget is spent.
    """
    config = config or PollConfig()
    logger = logger or logging.getLogger(__name__)
    last_error: Optional[BaseException] = None

    for attempt in range(config.max_attempts):
        if attempt > 0:
            delay = config.get_delay(attempt - 1)
            logger.debug(
                "Polling attempt %d/%d in %.1fs", attempt + 1, config.max_attempts, delay
            )
            await sleep(delay)

        try:
            result = await operation()
        except retry_on as exc:
            last_error = exc
            logger.warning(
                "Polling attempt %d/%d failed: %s", attempt + 1, config.max_attempts, exc
            )
            continue

        if is_done(result):
            return result

    raise PollExhaustedError(exhausted_message, attempts=config.max_attempts) from last_error

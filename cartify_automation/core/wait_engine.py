"""Explicit-wait polling engine.

Turns asynchronous, eventually-consistent page state into a synchronous outcome:
either the value produced by a satisfied condition or a WaitTimeoutError raised
at the deadline. Failures that only mean "not ready yet" are absorbed while the
clock runs; anything else aborts the wait on the spot.
"""

import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

from cartify_automation.core.exceptions import (ElementNotFoundError,
                                                StaleElementError,
                                                WaitTimeoutError)
from cartify_automation.core.locator import Locator
from cartify_automation.core.resolver import ElementResolver
from cartify_automation.tools.constants import (DEFAULT_TIMEOUT,
                                                DETACHED_MESSAGE_MARKERS,
                                                POLL_INTERVAL)

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Transience(Enum):
    """How a failure observed during polling is treated."""
    TRANSIENT = "transient"
    FATAL = "fatal"


def classify(error: BaseException) -> Transience:
    """Decide whether an error raised while evaluating a condition means 'not yet'."""
    if isinstance(error, (ElementNotFoundError, StaleElementError)):
        return Transience.TRANSIENT
    message = str(error).lower()
    if any(marker in message for marker in DETACHED_MESSAGE_MARKERS):
        return Transience.TRANSIENT
    return Transience.FATAL


@dataclass(frozen=True)
class WaitCondition(Generic[T]):
    """A named predicate over the resolver, with optional per-condition bounds."""
    name: str
    predicate: Callable[[ElementResolver], Optional[T]]
    locator: Optional[Locator] = None
    timeout: Optional[float] = None
    poll_interval: Optional[float] = None

    def evaluate(self, resolver: ElementResolver) -> Optional[T]:
        return self.predicate(resolver)

    def describe(self) -> str:
        if self.locator is None:
            return self.name
        return f"{self.name}({self.locator})"


class WaitEngine:
    """Bounded polling loop evaluating conditions against a resolver."""

    def __init__(
        self,
        resolver: ElementResolver,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = POLL_INTERVAL,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Any] = time.sleep
    ):
        """Initialize the wait engine.

        Args:
            resolver: Resolver every condition is evaluated against
            timeout: Default bound in seconds when neither the call nor the condition gives one
            poll_interval: Default seconds between evaluations
            clock: Monotonic time source
            sleep: Blocking sleep function
        """
        if timeout < 0:
            raise ValueError(f"timeout must be >= 0, got {timeout}")
        if poll_interval <= 0:
            raise ValueError(f"poll_interval must be > 0, got {poll_interval}")
        self.resolver = resolver
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.clock = clock
        self.sleep = sleep
        self.logger = logger

    def until(self, condition: WaitCondition[T], timeout: Optional[float] = None) -> T:
        """Poll until the condition yields a truthy value and return it.

        Args:
            condition: Condition to evaluate on every tick
            timeout: Overrides the condition's and the engine's bound

        Returns:
            The first truthy value produced by the condition

        Raises:
            WaitTimeoutError: If the deadline passes first
            Exception: Any fatal error raised by the condition, unchanged
        """
        if timeout is None:
            timeout = condition.timeout if condition.timeout is not None else self.timeout
        interval = condition.poll_interval or self.poll_interval

        start = self.clock()
        deadline = start + timeout
        last_error: Optional[BaseException] = None
        attempts = 0

        while True:
            attempts += 1
            try:
                value = condition.evaluate(self.resolver)
                if value:
                    self.logger.debug(
                        f"Condition {condition.describe()} met after {self.clock() - start:.2f}s ({attempts} checks)"
                    )
                    return value
            except Exception as e:
                if classify(e) is Transience.FATAL:
                    self.logger.error(f"Fatal error while waiting for {condition.describe()}: {e}")
                    raise
                self.logger.debug(f"Condition {condition.describe()} not ready: {e}")
                last_error = e

            remaining = deadline - self.clock()
            if remaining <= 0:
                break
            self.sleep(min(interval, remaining))

        elapsed = self.clock() - start
        self.logger.warning(
            f"Timed out waiting for {condition.describe()} after {elapsed:.2f}s ({attempts} checks)"
        )
        error = WaitTimeoutError(
            condition.name,
            timeout,
            elapsed,
            locator=condition.locator,
            last_error=last_error
        )
        if last_error is not None:
            raise error from last_error
        raise error

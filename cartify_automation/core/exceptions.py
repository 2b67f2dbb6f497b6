"""Custom exceptions for the cartify automation layer."""

import traceback
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCategory(Enum):
    """Categories of failures that can surface from an interaction."""
    TIMEOUT = "timeout"
    INTERACTION = "interaction"
    STATE = "state"
    ELEMENT_NOT_FOUND = "element_not_found"
    STALE_ELEMENT = "stale_element"
    SESSION = "session"
    UNKNOWN = "unknown"


class AutomationError(Exception):
    """
    Base exception for interaction failures with additional context.
    """

    category = ErrorCategory.UNKNOWN

    def __init__(
        self,
        message: str,
        locator: Optional[Any] = None,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize an automation error.

        Args:
            message: Error message
            locator: Locator the failing operation targeted, if any
            context: Additional context information
        """
        self.message = message
        self.locator = locator
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert the error to a dictionary.

        Returns:
            Dictionary representation of the error
        """
        return {
            "type": type(self).__name__,
            "message": self.message,
            "category": self.category.value,
            "locator": str(self.locator) if self.locator is not None else None,
            "context": self.context,
            "traceback": "".join(traceback.format_exception(type(self), self, self.__traceback__))
        }


class WaitTimeoutError(AutomationError, TimeoutError):
    """A wait condition never became true within its bound."""

    category = ErrorCategory.TIMEOUT

    def __init__(
        self,
        condition: str,
        timeout: float,
        elapsed: float,
        locator: Optional[Any] = None,
        last_error: Optional[BaseException] = None
    ):
        self.condition = condition
        self.timeout = timeout
        self.elapsed = elapsed
        self.last_error = last_error
        target = f" for {locator}" if locator is not None else ""
        message = f"Timed out after {elapsed:.2f}s waiting for '{condition}'{target} (timeout {timeout}s)"
        if last_error is not None:
            message += f"; last error: {last_error}"
        super().__init__(
            message,
            locator=locator,
            context={"condition": condition, "timeout": timeout, "elapsed": round(elapsed, 3)}
        )


class InteractionError(AutomationError):
    """The precondition held but the action itself was rejected."""

    category = ErrorCategory.INTERACTION

    def __init__(self, verb: str, locator: Optional[Any] = None, details: Optional[str] = None):
        self.verb = verb
        target = f" on {locator}" if locator is not None else ""
        message = f"Failed to {verb}{target}"
        if details:
            message += f": {details}"
        super().__init__(message, locator=locator, context={"verb": verb})


class StateError(AutomationError):
    """An operation was invoked while its domain precondition does not hold."""

    category = ErrorCategory.STATE


class ElementNotFoundError(AutomationError):
    """Custom exception for when a required element is not found."""

    category = ErrorCategory.ELEMENT_NOT_FOUND


class StaleElementError(AutomationError):
    """The referenced node was detached from the document."""

    category = ErrorCategory.STALE_ELEMENT


class SessionError(AutomationError):
    """The browser session itself failed or was closed."""

    category = ErrorCategory.SESSION

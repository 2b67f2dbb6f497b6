"""Interaction verbs that fuse an explicit wait with the action it guards."""

import logging
import time
from contextlib import contextmanager
from enum import Enum
from typing import Any, Callable, List, Optional, Union

from cartify_automation.core import conditions
from cartify_automation.core.browser_interface import (Driver, ElementHandle,
                                                       SelectOption)
from cartify_automation.core.diagnostics_manager import DiagnosticsManager
from cartify_automation.core.exceptions import (InteractionError,
                                                SessionError,
                                                StaleElementError, StateError,
                                                WaitTimeoutError)
from cartify_automation.core.locator import Locator
from cartify_automation.core.resolver import ElementResolver
from cartify_automation.core.wait_engine import WaitEngine
from cartify_automation.tools.constants import (DEFAULT_TIMEOUT, POLL_INTERVAL,
                                                SCRIPT_CLICK,
                                                SCRIPT_SCROLL_INTO_VIEW,
                                                SCRIPT_SCROLL_TO_BOTTOM,
                                                SCRIPT_SCROLL_TO_TOP)
from cartify_automation.tools.option_matcher import (find_option_index,
                                                     suggest_options)

logger = logging.getLogger(__name__)


class SelectBy(Enum):
    """How select_option identifies the entry to choose."""
    TEXT = "text"
    VALUE = "value"
    INDEX = "index"


class InteractionController:
    """Verb set built on the wait engine and resolver.

    Each verb first waits for its precondition (visible, clickable) and then acts
    on the handle produced by the satisfying poll. The wait is the only retry
    boundary: a driver failure after it is reported as an InteractionError.
    """

    def __init__(
        self,
        driver: Driver,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = POLL_INTERVAL,
        diagnostics_manager: Optional[DiagnosticsManager] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Any] = time.sleep
    ):
        """Initialize the controller.

        Args:
            driver: Browser driver owned by the current test
            timeout: Default wait bound in seconds
            poll_interval: Seconds between condition evaluations
            diagnostics_manager: Optional recorder for verb outcomes
            clock: Monotonic time source for waits
            sleep: Sleep function for waits
        """
        self.driver = driver
        self.resolver = ElementResolver(driver)
        self.waits = WaitEngine(self.resolver, timeout=timeout, poll_interval=poll_interval, clock=clock, sleep=sleep)
        self.diagnostics_manager = diagnostics_manager
        self.logger = logger

    @property
    def timeout(self) -> float:
        return self.waits.timeout

    @contextmanager
    def _verb(self, verb: str, locator: Optional[Locator] = None):
        """Record a verb, its precondition wait included, in the diagnostics manager."""
        if self.diagnostics_manager:
            tracker = self.diagnostics_manager.track_action(verb, locator)
        else:
            tracker = _null_tracker()
        with tracker:
            yield

    @contextmanager
    def _acting(self, verb: str, locator: Optional[Locator] = None):
        """Scope of the action proper; untyped driver failures in it become InteractionError.

        Precondition waits stay outside this scope, so whatever they raise propagates unchanged.
        """
        try:
            yield
        except (WaitTimeoutError, StateError, InteractionError, SessionError):
            raise
        except Exception as e:
            self.logger.error(f"{verb} failed on {locator}: {e}")
            raise InteractionError(verb, locator, details=str(e)) from e

    # --- Waits ---

    def wait_until_visible(self, locator: Locator, timeout: Optional[float] = None) -> ElementHandle:
        return self.waits.until(conditions.element_visible(locator), timeout)

    def wait_until_clickable(self, locator: Locator, timeout: Optional[float] = None) -> ElementHandle:
        return self.waits.until(conditions.element_clickable(locator), timeout)

    def wait_until_invisible(self, locator: Locator, timeout: Optional[float] = None) -> bool:
        return self.waits.until(conditions.element_invisible_or_absent(locator), timeout)

    def wait_for_text(self, locator: Locator, text: str, timeout: Optional[float] = None) -> bool:
        return self.waits.until(conditions.text_present_in_element(locator, text), timeout)

    def wait_for_url_contains(self, *fragments: str, timeout: Optional[float] = None) -> str:
        return self.waits.until(conditions.url_contains(*fragments), timeout)

    def wait_for_count(self, locator: Locator, count: int, timeout: Optional[float] = None) -> List[ElementHandle]:
        return self.waits.until(conditions.element_count_at_least(locator, count), timeout)

    # --- Click Methods ---

    def click(self, locator: Locator) -> None:
        with self._verb("click", locator):
            element = self.wait_until_clickable(locator)
            with self._acting("click", locator):
                element.click()

    def click_via_script(self, locator: Locator) -> None:
        """Click through a script call, for elements covered by overlays."""
        with self._verb("click_via_script", locator):
            element = self.wait_until_visible(locator)
            with self._acting("click_via_script", locator):
                self.driver.run_script(SCRIPT_CLICK, element)

    def double_click(self, locator: Locator) -> None:
        with self._verb("double_click", locator):
            element = self.wait_until_clickable(locator)
            with self._acting("double_click", locator):
                element.double_click()

    # --- Input Methods ---

    def type_text(self, locator: Locator, text: str) -> None:
        with self._verb("type_text", locator):
            element = self.wait_until_visible(locator)
            with self._acting("type_text", locator):
                element.send_keys(text)

    def clear_and_type(self, locator: Locator, text: str) -> None:
        with self._verb("clear_and_type", locator):
            element = self.wait_until_visible(locator)
            with self._acting("clear_and_type", locator):
                element.clear()
                element.send_keys(text)

    # --- Dropdown Methods ---

    def select_option(self, locator: Locator, by: SelectBy, value: Union[str, int]) -> SelectOption:
        """Choose an entry of a select control.

        Args:
            locator: The select element
            by: Whether value is the visible text, the option value or a position
            value: Text, value or index of the entry

        Returns:
            The option that was selected

        Raises:
            StateError: If the element is not a select, or the entry does not exist
            WaitTimeoutError: If the control never becomes visible
            InteractionError: If the browser rejects the selection
        """
        verb = f"select_by_{by.value}"
        with self._verb(verb, locator):
            element = self.wait_until_visible(locator)
            with self._acting(verb, locator):
                tag = (element.tag_name() or "").lower()
                if tag != "select":
                    raise StateError(f"{locator} is a <{tag}>, not a select control", locator=locator)

                options = element.options()
                index = self._option_index(locator, options, by, value)
                element.select_index(index)
            self.logger.debug(f"Selected option {index} ('{options[index].text}') of {locator}")
            return options[index]

    def _option_index(self, locator: Locator, options: List[SelectOption], by: SelectBy, value: Union[str, int]) -> int:
        if by is SelectBy.INDEX:
            if not isinstance(value, int) or isinstance(value, bool):
                raise StateError(f"Option index must be an integer, got {value!r}", locator=locator)
            if not 0 <= value < len(options):
                raise StateError(
                    f"Option index {value} out of range for {locator} ({len(options)} options)",
                    locator=locator,
                    context={"index": value, "option_count": len(options)}
                )
            return value

        by_value = by is SelectBy.VALUE
        index = find_option_index(options, str(value), by_value=by_value)
        if index is None:
            available = [o.value if by_value else o.text for o in options]
            suggestions = suggest_options(str(value), available)
            hint = f"; closest: {', '.join(repr(s) for s in suggestions)}" if suggestions else ""
            raise StateError(
                f"No option with {by.value} '{value}' in {locator}{hint}",
                locator=locator,
                context={"requested": value, "available": available}
            )
        return index

    def selected_option(self, locator: Locator) -> Optional[SelectOption]:
        """The option currently chosen in a select control, read after waiting for visibility."""
        with self._verb("selected_option", locator):
            element = self.wait_until_visible(locator)
            with self._acting("selected_option", locator):
                current = element.get_attribute("value")
                options = element.options()
            for option in options:
                if option.value == current:
                    return option
            return None

    # --- Verification Methods ---

    def is_displayed(self, locator: Locator) -> bool:
        """Probe current visibility without waiting; absence counts as not displayed."""
        try:
            element = self.resolver.find(locator)
            return element is not None and bool(element.is_displayed())
        except StaleElementError:
            return False

    def is_enabled(self, locator: Locator) -> bool:
        """Probe current enabled state without waiting; absence counts as disabled."""
        try:
            element = self.resolver.find(locator)
            return element is not None and bool(element.is_enabled())
        except StaleElementError:
            return False

    def read_text(self, locator: Locator) -> str:
        with self._verb("read_text", locator):
            element = self.wait_until_visible(locator)
            with self._acting("read_text", locator):
                return element.get_text()

    def read_attribute(self, locator: Locator, name: str) -> Optional[str]:
        with self._verb("read_attribute", locator):
            element = self.wait_until_visible(locator)
            with self._acting("read_attribute", locator):
                return element.get_attribute(name)

    def enumerate(self, locator: Locator) -> List[ElementHandle]:
        """All elements currently matching, in document order. Never waits."""
        with self._verb("enumerate", locator), self._acting("enumerate", locator):
            return self.resolver.find_all(locator)

    def count(self, locator: Locator) -> int:
        return len(self.enumerate(locator))

    def evaluate_on(self, locator: Locator, script: str) -> Any:
        """Run a script taking the element as its argument, once the element is visible."""
        with self._verb("evaluate_on", locator):
            element = self.wait_until_visible(locator)
            with self._acting("evaluate_on", locator):
                return self.driver.run_script(script, element)

    # --- Scroll Methods ---

    def scroll_into_view(self, locator: Locator) -> bool:
        """Best-effort scroll; returns False when the element is missing or detached."""
        with self._verb("scroll_into_view", locator), self._acting("scroll_into_view", locator):
            try:
                element = self.resolver.find(locator)
                if element is None:
                    self.logger.debug(f"Nothing to scroll to for {locator}")
                    return False
                self.driver.run_script(SCRIPT_SCROLL_INTO_VIEW, element)
                return True
            except StaleElementError:
                self.logger.debug(f"{locator} detached before it could be scrolled into view")
                return False

    def scroll_to_top(self) -> None:
        with self._verb("scroll_to_top"), self._acting("scroll_to_top"):
            self.driver.run_script(SCRIPT_SCROLL_TO_TOP)

    def scroll_to_bottom(self) -> None:
        with self._verb("scroll_to_bottom"), self._acting("scroll_to_bottom"):
            self.driver.run_script(SCRIPT_SCROLL_TO_BOTTOM)

    # --- Page State ---

    def navigate(self, url: str) -> None:
        with self._verb("navigate"), self._acting("navigate"):
            self.driver.navigate(url)

    def current_url(self) -> str:
        return self.driver.current_url()

    def page_title(self) -> str:
        return self.driver.title()


@contextmanager
def _null_tracker():
    yield

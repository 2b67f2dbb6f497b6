"""Resolution of locators into live element handles."""

import logging
from typing import List, Optional

from cartify_automation.core.browser_interface import Driver, ElementHandle
from cartify_automation.core.exceptions import ElementNotFoundError
from cartify_automation.core.locator import Locator

logger = logging.getLogger(__name__)


class ElementResolver:
    """Turns a Locator into zero, one or many handles at the moment of use.

    Nothing is cached: every call goes back to the driver.
    """

    def __init__(self, driver: Driver):
        self.driver = driver

    def find(self, locator: Locator) -> Optional[ElementHandle]:
        """Return the element addressed by the locator, or None if absent."""
        if locator.index is None:
            return self.driver.locate_one(locator)

        handles = self.driver.locate_all(locator.base)
        if locator.index < len(handles):
            return handles[locator.index]
        logger.debug(f"Only {len(handles)} matches for {locator.base}, index {locator.index} not present")
        return None

    def find_all(self, locator: Locator) -> List[ElementHandle]:
        """Return every element matched by the locator (a positional locator yields at most one)."""
        if locator.index is not None:
            handle = self.find(locator)
            return [handle] if handle is not None else []
        return list(self.driver.locate_all(locator))

    def require(self, locator: Locator) -> ElementHandle:
        """Like find, but absence raises ElementNotFoundError."""
        handle = self.find(locator)
        if handle is None:
            raise ElementNotFoundError(f"No element matches {locator}", locator=locator)
        return handle

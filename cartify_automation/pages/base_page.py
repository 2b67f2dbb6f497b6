"""Page Object contract shared by every page of the store."""

import logging
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

from cartify_automation.core.browser_interface import Driver
from cartify_automation.core.diagnostics_manager import DiagnosticsManager
from cartify_automation.core.exceptions import WaitTimeoutError
from cartify_automation.core.interaction_controller import \
    InteractionController
from cartify_automation.core.locator import Locator
from cartify_automation.tools.constants import DEFAULT_TIMEOUT, POLL_INTERVAL


@dataclass(frozen=True)
class PageDescriptor:
    """What a page object was built with; read-only for the life of the page."""
    url: str
    default_timeout: float
    locators: Mapping[str, Locator]


class BasePage(ABC):
    """A page bound to one driver: its URL, its locator table and a load-verification contract.

    Subclasses declare LOCATORS and implement load_signal() and is_loaded(). Their operations go through
    self.actions and never resolve elements themselves.
    """

    LOCATORS: Mapping[str, Locator] = MappingProxyType({})

    def __init__(
        self,
        driver: Driver,
        url: str,
        timeout: float = DEFAULT_TIMEOUT,
        poll_interval: float = POLL_INTERVAL,
        diagnostics_manager: Optional[DiagnosticsManager] = None,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Any] = time.sleep
    ):
        """Initialize the page.

        Args:
            driver: Driver of the session owned by the current test
            url: Absolute URL of the page
            timeout: Default wait bound in seconds for this page
            poll_interval: Seconds between condition evaluations
            diagnostics_manager: Optional recorder for verb outcomes
            clock: Monotonic time source for waits
            sleep: Sleep function for waits
        """
        self.driver = driver
        self.descriptor = PageDescriptor(
            url=url,
            default_timeout=timeout,
            locators=MappingProxyType(dict(self.LOCATORS))
        )
        self.actions = InteractionController(
            driver,
            timeout=timeout,
            poll_interval=poll_interval,
            diagnostics_manager=diagnostics_manager,
            clock=clock,
            sleep=sleep
        )
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def url(self) -> str:
        return self.descriptor.url

    @property
    def timeout(self) -> float:
        return self.descriptor.default_timeout

    @property
    def locators(self) -> Mapping[str, Locator]:
        return self.descriptor.locators

    def open(self) -> "BasePage":
        """Navigate to the page. Load completion is checked through is_loaded()."""
        self.logger.info(f"Opening {self.url}")
        self.actions.navigate(self.url)
        return self

    @abstractmethod
    def is_loaded(self) -> bool:
        """Whether the page's own load signal is present within the page timeout."""

    @abstractmethod
    def load_signal(self) -> Locator:
        """Locator whose visibility marks the page as loaded."""

    def ensure_loaded(self) -> "BasePage":
        """Wait for the load signal; a missing signal raises WaitTimeoutError instead of returning False."""
        self.actions.wait_until_visible(self.load_signal())
        return self

    def _signal_visible(self, locator: Locator) -> bool:
        try:
            self.actions.wait_until_visible(locator)
            return True
        except WaitTimeoutError as e:
            self.logger.info(f"{self.__class__.__name__} not loaded: {e}")
            return False

    def wait_for_url_to_contain(self, *fragments: str, timeout: Optional[float] = None) -> str:
        """Wait until the current URL contains any of the fragments and return it."""
        return self.actions.wait_for_url_contains(*fragments, timeout=timeout)

    def get_page_title(self) -> str:
        return self.actions.page_title()

    def get_current_url(self) -> str:
        return self.actions.current_url()

"""Playwright-backed driver and browser session management."""

import logging
from contextlib import contextmanager
from typing import Any, Dict, List, Optional, Sequence

from playwright.sync_api import ElementHandle as PlaywrightElementHandle
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Keyboard, Page, sync_playwright

from cartify_automation.core.browser_interface import SelectOption
from cartify_automation.core.exceptions import SessionError, StaleElementError
from cartify_automation.core.locator import Locator, Strategy
from cartify_automation.tools.constants import (ACTION_TIMEOUT_MS,
                                                DETACHED_MESSAGE_MARKERS,
                                                NAVIGATION_TIMEOUT_MS)

logger = logging.getLogger(__name__)

CLOSED_MARKERS = (
    "has been closed",
    "target closed",
    "browser has disconnected",
)

SCRIPT_TAG_NAME = "(el) => el.tagName.toLowerCase()"
SCRIPT_OPTIONS = """(el) => Array.from(el.options || []).map(o => ({
    text: (o.textContent || '').trim(),
    value: o.value
}))"""


def _quote(value: str) -> str:
    return value.replace("\\", "\\\\").replace("'", "\\'")


def to_selector(locator: Locator) -> str:
    """Translate a Locator into a Playwright selector string."""
    strategy, value = locator.strategy, locator.value
    if strategy is Strategy.CSS:
        return value
    if strategy is Strategy.XPATH:
        return f"xpath={value}"
    if strategy is Strategy.ID:
        # attribute form also works for ids starting with a digit
        return f"[id='{_quote(value)}']"
    if strategy is Strategy.NAME:
        return f"[name='{_quote(value)}']"
    if strategy is Strategy.TEXT:
        return f"text={value}"
    if strategy is Strategy.CLASS_NAME:
        return f".{value}"
    if strategy is Strategy.TAG_NAME:
        return value
    raise ValueError(f"Unsupported locator strategy: {strategy}")


@contextmanager
def translate_errors(operation: str, target: Optional[Any] = None):
    """Map Playwright errors onto the automation error types.

    Detached nodes become StaleElementError and a closed page or browser becomes
    SessionError; any other Playwright error propagates unchanged.
    """
    try:
        yield
    except PlaywrightError as e:
        message = str(e)
        lowered = message.lower()
        if any(marker in lowered for marker in DETACHED_MESSAGE_MARKERS):
            raise StaleElementError(f"{operation}: element is stale ({message})", locator=target) from e
        if any(marker in lowered for marker in CLOSED_MARKERS):
            raise SessionError(f"{operation}: browser session is gone ({message})", locator=target) from e
        raise


class PlaywrightElement:
    """Element handle adapter over a Playwright ElementHandle."""

    def __init__(self, handle: PlaywrightElementHandle, locator: Optional[Locator] = None,
                 action_timeout_ms: int = ACTION_TIMEOUT_MS, keyboard: Optional[Keyboard] = None):
        self.handle = handle
        self.locator = locator
        self.action_timeout_ms = action_timeout_ms
        self.keyboard = keyboard

    def click(self) -> None:
        with translate_errors("click", self.locator):
            self.handle.click(timeout=self.action_timeout_ms)

    def double_click(self) -> None:
        with translate_errors("double_click", self.locator):
            self.handle.dblclick(timeout=self.action_timeout_ms)

    def send_keys(self, text: str) -> None:
        with translate_errors("send_keys", self.locator):
            self.handle.focus()
            keyboard = self.keyboard or self.handle.owner_frame().page.keyboard
            keyboard.type(text)

    def clear(self) -> None:
        with translate_errors("clear", self.locator):
            self.handle.fill("", timeout=self.action_timeout_ms)

    def get_text(self) -> str:
        with translate_errors("get_text", self.locator):
            return self.handle.inner_text()

    def get_attribute(self, name: str) -> Optional[str]:
        with translate_errors("get_attribute", self.locator):
            if name == "value":
                # the live property, not the markup attribute
                return self.handle.evaluate("(el) => el.value")
            return self.handle.get_attribute(name)

    def is_displayed(self) -> bool:
        with translate_errors("is_displayed", self.locator):
            return self.handle.is_visible()

    def is_enabled(self) -> bool:
        with translate_errors("is_enabled", self.locator):
            return self.handle.is_enabled()

    def tag_name(self) -> str:
        with translate_errors("tag_name", self.locator):
            return self.handle.evaluate(SCRIPT_TAG_NAME)

    def options(self) -> List[SelectOption]:
        with translate_errors("options", self.locator):
            raw = self.handle.evaluate(SCRIPT_OPTIONS)
        return [SelectOption(text=o["text"], value=o["value"]) for o in raw]

    def select_index(self, index: int) -> None:
        with translate_errors("select_index", self.locator):
            self.handle.select_option(index=index, timeout=self.action_timeout_ms)

    def __repr__(self) -> str:
        return f"PlaywrightElement({self.locator})"


class PlaywrightDriver:
    """Driver capability implementation over a Playwright sync Page."""

    def __init__(self, page: Page, action_timeout_ms: int = ACTION_TIMEOUT_MS):
        self.page = page
        self.action_timeout_ms = action_timeout_ms
        self.logger = logger

    def navigate(self, url: str) -> None:
        """Start navigation and return once the response is committed.

        Load completion is not awaited here; pages verify it through their own signal.
        """
        self.logger.info(f"Navigating to {url}")
        with translate_errors("navigate"):
            self.page.goto(url, wait_until="commit")

    def locate_one(self, locator: Locator) -> Optional[PlaywrightElement]:
        with translate_errors("locate_one", locator):
            handle = self.page.query_selector(to_selector(locator))
        if handle is None:
            return None
        return PlaywrightElement(handle, locator, self.action_timeout_ms, self.page.keyboard)

    def locate_all(self, locator: Locator) -> List[PlaywrightElement]:
        with translate_errors("locate_all", locator):
            handles = self.page.query_selector_all(to_selector(locator))
        return [PlaywrightElement(h, locator.nth(i), self.action_timeout_ms, self.page.keyboard)
                for i, h in enumerate(handles)]

    def run_script(self, script: str, *args: Any) -> Any:
        """Evaluate a function expression.

        One argument is passed as-is, several are passed as a single array.
        """
        unwrapped = [a.handle if isinstance(a, PlaywrightElement) else a for a in args]
        with translate_errors("run_script"):
            if not unwrapped:
                return self.page.evaluate(script)
            if len(unwrapped) == 1:
                return self.page.evaluate(script, unwrapped[0])
            return self.page.evaluate(script, unwrapped)

    def current_url(self) -> str:
        return self.page.url

    def title(self) -> str:
        with translate_errors("title"):
            return self.page.title()

    def screenshot(self, path: str) -> None:
        with translate_errors("screenshot"):
            self.page.screenshot(path=path, full_page=True)


class BrowserManager:
    """Owns one browser session: launched on initialize, released on close."""

    def __init__(
        self,
        browser_type: str = "chromium",
        headless: bool = True,
        viewport: Optional[Dict[str, int]] = None,
        launch_args: Optional[Sequence[str]] = None,
        navigation_timeout_ms: int = NAVIGATION_TIMEOUT_MS,
        action_timeout_ms: int = ACTION_TIMEOUT_MS
    ):
        """Initialize the browser manager.

        Args:
            browser_type: 'chromium', 'firefox' or 'webkit'
            headless: Whether to hide the browser window
            viewport: Viewport size, e.g. {'width': 1280, 'height': 1024}
            launch_args: Extra command-line arguments for the browser
            navigation_timeout_ms: Bound on a single navigation
            action_timeout_ms: Bound on a single element action
        """
        self.browser_type = browser_type
        self.headless = headless
        self.viewport = viewport or {"width": 1280, "height": 1024}
        self.launch_args = list(launch_args or [])
        self.navigation_timeout_ms = navigation_timeout_ms
        self.action_timeout_ms = action_timeout_ms
        self.logger = logging.getLogger(__name__)

        self.playwright = None
        self.browser = None
        self.context = None
        self.page = None
        self.driver: Optional[PlaywrightDriver] = None

    @classmethod
    def from_config(cls, config, headless: Optional[bool] = None) -> "BrowserManager":
        return cls(
            browser_type=config.get("browser.browser_type", "chromium"),
            headless=config.get("browser.headless", True) if headless is None else headless,
            viewport=config.get("browser.viewport"),
            launch_args=config.get("browser.launch_args", []),
            navigation_timeout_ms=config.get("browser.navigation_timeout_ms", NAVIGATION_TIMEOUT_MS),
            action_timeout_ms=config.get("browser.action_timeout_ms", ACTION_TIMEOUT_MS)
        )

    def initialize(self) -> PlaywrightDriver:
        """Launch the browser and open a page.

        Returns:
            Driver bound to the new page

        Raises:
            SessionError: If the browser cannot be started
        """
        if self.driver is not None:
            raise SessionError("Browser session already initialized")
        try:
            self.playwright = sync_playwright().start()
            launcher = getattr(self.playwright, self.browser_type, None)
            if launcher is None:
                raise ValueError(f"Unknown browser type '{self.browser_type}'")
            self.browser = launcher.launch(headless=self.headless, args=self.launch_args)
            self.context = self.browser.new_context(viewport=self.viewport)
            self.page = self.context.new_page()
            self.page.set_default_navigation_timeout(self.navigation_timeout_ms)
        except Exception as e:
            self.logger.error(f"Failed to start browser: {e}")
            self.close()
            raise SessionError(f"Failed to start {self.browser_type}: {e}") from e

        self.driver = PlaywrightDriver(self.page, self.action_timeout_ms)
        self.logger.info(f"Browser initialized ({self.browser_type}, headless={self.headless})")
        return self.driver

    def close(self) -> None:
        """Release every resource of the session; safe to call more than once."""
        for name in ("page", "context", "browser"):
            resource = getattr(self, name)
            if resource is None:
                continue
            try:
                resource.close()
            except Exception as e:
                self.logger.error(f"Error closing {name}: {e}")
            setattr(self, name, None)

        if self.playwright is not None:
            try:
                self.playwright.stop()
            except Exception as e:
                self.logger.error(f"Error stopping playwright: {e}")
            self.playwright = None

        if self.driver is not None:
            self.logger.info("Browser closed")
        self.driver = None

    def __enter__(self) -> PlaywrightDriver:
        return self.initialize()

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

"""Wait conditions over the resolver.

Each factory returns a WaitCondition whose predicate resolves its locator afresh
on every call; nothing observed on one tick is carried to the next.
"""

from typing import List, Optional

from cartify_automation.core.browser_interface import ElementHandle
from cartify_automation.core.exceptions import StaleElementError
from cartify_automation.core.locator import Locator
from cartify_automation.core.resolver import ElementResolver
from cartify_automation.core.wait_engine import WaitCondition


def element_visible(locator: Locator) -> WaitCondition[ElementHandle]:
    def predicate(resolver: ElementResolver) -> Optional[ElementHandle]:
        handle = resolver.require(locator)
        return handle if handle.is_displayed() else None

    return WaitCondition("element visible", predicate, locator=locator)


def element_clickable(locator: Locator) -> WaitCondition[ElementHandle]:
    def predicate(resolver: ElementResolver) -> Optional[ElementHandle]:
        handle = resolver.require(locator)
        if handle.is_displayed() and handle.is_enabled():
            return handle
        return None

    return WaitCondition("element clickable", predicate, locator=locator)


def element_invisible_or_absent(locator: Locator) -> WaitCondition[bool]:
    def predicate(resolver: ElementResolver) -> bool:
        handle = resolver.find(locator)
        if handle is None:
            return True
        try:
            return not handle.is_displayed()
        except StaleElementError:
            # detached between lookup and check: it is gone
            return True

    return WaitCondition("element invisible or absent", predicate, locator=locator)


def text_present_in_element(locator: Locator, text: str) -> WaitCondition[bool]:
    def predicate(resolver: ElementResolver) -> bool:
        handle = resolver.require(locator)
        return text in (handle.get_text() or "")

    return WaitCondition(f"text '{text}' present in element", predicate, locator=locator)


def url_contains(*fragments: str) -> WaitCondition[str]:
    """Satisfied when the current URL contains any of the fragments; yields the URL."""
    if not fragments:
        raise ValueError("url_contains needs at least one fragment")

    def predicate(resolver: ElementResolver) -> Optional[str]:
        url = resolver.driver.current_url()
        if any(fragment in url for fragment in fragments):
            return url
        return None

    return WaitCondition(f"url contains {' or '.join(repr(f) for f in fragments)}", predicate)


def element_count_at_least(locator: Locator, count: int) -> WaitCondition[List[ElementHandle]]:
    if count < 1:
        raise ValueError(f"count must be >= 1, got {count}")

    def predicate(resolver: ElementResolver) -> Optional[List[ElementHandle]]:
        handles = resolver.find_all(locator)
        return handles if len(handles) >= count else None

    return WaitCondition(f"at least {count} elements", predicate, locator=locator)

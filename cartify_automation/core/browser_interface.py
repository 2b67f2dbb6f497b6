"""Base interface for browser interactions."""

from dataclasses import dataclass
from typing import Any, List, Optional, Protocol

from cartify_automation.core.locator import Locator


@dataclass(frozen=True)
class SelectOption:
    """One entry of a select control."""
    text: str
    value: str


class ElementHandle(Protocol):
    """Ephemeral reference to a rendered node; invalid after navigation or DOM mutation."""

    def click(self) -> None:
        ...

    def double_click(self) -> None:
        ...

    def send_keys(self, text: str) -> None:
        ...

    def clear(self) -> None:
        ...

    def get_text(self) -> str:
        ...

    def get_attribute(self, name: str) -> Optional[str]:
        ...

    def is_displayed(self) -> bool:
        ...

    def is_enabled(self) -> bool:
        ...

    def tag_name(self) -> str:
        ...

    def options(self) -> List[SelectOption]:
        """Options of a select control, in document order."""
        ...

    def select_index(self, index: int) -> None:
        ...


class Driver(Protocol):
    """Protocol defining the capabilities the interaction layer needs from a browser."""

    def navigate(self, url: str) -> None:
        """Navigate to a URL."""
        ...

    def locate_one(self, locator: Locator) -> Optional[ElementHandle]:
        """First element matching the locator, or None."""
        ...

    def locate_all(self, locator: Locator) -> List[ElementHandle]:
        """All elements matching the locator, in document order."""
        ...

    def run_script(self, script: str, *args: Any) -> Any:
        """Evaluate a JavaScript function expression.

        With no arguments the function is called bare; a single argument is passed
        as-is; several arguments are packed into one array, so the function must
        destructure them, e.g. "([a, b]) => ...". Element handles are unwrapped.
        """
        ...

    def current_url(self) -> str:
        ...

    def title(self) -> str:
        ...

    def screenshot(self, path: str) -> None:
        """Capture the viewport. Used by reporting collaborators only."""
        ...

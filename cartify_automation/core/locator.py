"""Immutable element locators."""

from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional


class Strategy(Enum):
    """Lookup strategies understood by every driver."""
    CSS = "css"
    XPATH = "xpath"
    ID = "id"
    NAME = "name"
    TEXT = "text"
    CLASS_NAME = "class"
    TAG_NAME = "tag"


@dataclass(frozen=True)
class Locator:
    """Strategy and value identifying elements, optionally narrowed to one match by position."""
    strategy: Strategy
    value: str
    index: Optional[int] = None

    def __post_init__(self):
        if not self.value:
            raise ValueError("Locator value must be a non-empty string")
        if self.index is not None and self.index < 0:
            raise ValueError(f"Locator index must be >= 0, got {self.index}")

    @classmethod
    def css(cls, value: str) -> "Locator":
        return cls(Strategy.CSS, value)

    @classmethod
    def xpath(cls, value: str) -> "Locator":
        return cls(Strategy.XPATH, value)

    @classmethod
    def id(cls, value: str) -> "Locator":
        return cls(Strategy.ID, value)

    @classmethod
    def name(cls, value: str) -> "Locator":
        return cls(Strategy.NAME, value)

    @classmethod
    def text(cls, value: str) -> "Locator":
        return cls(Strategy.TEXT, value)

    def nth(self, index: int) -> "Locator":
        """Return a locator for the index-th element matched by this one."""
        return replace(self, index=index)

    @property
    def base(self) -> "Locator":
        """This locator without any positional narrowing."""
        if self.index is None:
            return self
        return replace(self, index=None)

    def describe(self) -> str:
        position = f"[{self.index}]" if self.index is not None else ""
        return f"{self.strategy.value}={self.value}{position}"

    def __str__(self) -> str:
        return self.describe()

"""Matching of requested select entries against the options a control offers."""

import logging
import re
from typing import List, Optional, Sequence

from thefuzz import fuzz, process

from cartify_automation.core.browser_interface import SelectOption
from cartify_automation.tools.constants import (OPTION_SUGGESTION_LIMIT,
                                                OPTION_SUGGESTION_THRESHOLD)

logger = logging.getLogger(__name__)


def normalize_text(text: str) -> str:
    """Basic text normalization."""
    return re.sub(r'\s+', ' ', (text or "").strip())


def find_option_index(options: Sequence[SelectOption], target: str, by_value: bool = False) -> Optional[int]:
    """Index of the option whose visible text (or value) equals target, or None.

    Text comparison ignores surrounding and repeated whitespace, like a browser's
    rendering of the option label; values are compared verbatim.
    """
    if by_value:
        for i, option in enumerate(options):
            if option.value == target:
                return i
        return None

    wanted = normalize_text(target)
    for i, option in enumerate(options):
        if normalize_text(option.text) == wanted:
            return i
    return None


def suggest_options(
    target: str,
    candidates: Sequence[str],
    limit: int = OPTION_SUGGESTION_LIMIT,
    threshold: int = OPTION_SUGGESTION_THRESHOLD
) -> List[str]:
    """
    Closest candidates to a requested entry, best first.

    Args:
        target: The text or value that was requested
        candidates: Texts or values actually available
        limit: Maximum number of suggestions
        threshold: Minimum similarity score (0-100)

    Returns:
        List of suggestions, possibly empty
    """
    choices = [c for c in candidates if c]
    if not target or not choices:
        return []

    matches = process.extract(target, choices, scorer=fuzz.ratio, limit=limit)
    suggestions = [choice for choice, score in matches if score >= threshold]
    logger.debug(f"Suggestions for '{target}': {suggestions}")
    return suggestions

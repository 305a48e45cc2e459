from collections import Counter
from typing import Dict, List, Optional, Sequence, Tuple

GENERIC_LINK_PHRASES = ("click here", "read more", "more", "link", "here", "more info")

LANDMARK_ROLES = (
    "banner",
    "navigation",
    "main",
    "complementary",
    "contentinfo",
    "search",
    "form",
    "region",
)

IMPLICIT_LANDMARK_ROLES = {
    "header": "banner",
    "nav": "navigation",
    "main": "main",
    "aside": "complementary",
    "footer": "contentinfo",
}


def heading_nesting_flags(levels: Sequence[int]) -> List[bool]:
    """
    Per-heading nesting verdicts for headings in document order.

    A heading is properly nested when it is the first heading or its level
    is at most one deeper than the heading before it. Climbing back up any
    number of levels is fine: [1, 2, 4] flags the h4, [2, 3, 2, 3] flags nothing.
    """
    flags: List[bool] = []
    previous: Optional[int] = None
    for level in levels:
        flags.append(previous is None or level <= previous + 1)
        previous = level
    return flags


def classify_landmark(tag_name: str, role: Optional[str]) -> str:
    """Explicit role wins, then the tag's implicit role, then plain region."""
    explicit = (role or "").strip().lower()
    if explicit in LANDMARK_ROLES:
        return explicit
    return IMPLICIT_LANDMARK_ROLES.get((tag_name or "").lower(), "region")


def landmark_label(attributes: Dict[str, str]) -> Optional[str]:
    return attributes.get("aria-label") or attributes.get("aria-labelledby") or None


def landmark_uniqueness(entries: Sequence[Tuple[str, Optional[str]]]) -> List[bool]:
    """A landmark is unique unless another one of the same kind has the same label."""
    counts = Counter(entries)
    return [counts[entry] == 1 for entry in entries]


def has_generic_text(text: str) -> bool:
    lowered = (text or "").lower()
    return any(phrase in lowered for phrase in GENERIC_LINK_PHRASES)


def parse_tab_index(raw: Optional[str]) -> Optional[int]:
    if raw is None:
        return None
    try:
        return int(str(raw).strip())
    except ValueError:
        return None

"""Helpers for reading retailer attribute tables.

Attribute names are free text ("Formato de disco", "Incluye cooler"), so every
lookup here matches the name against a pattern rather than a fixed key.
"""

import re
from typing import Iterator

from ..models import Attribute, Listing
from ..patterns import PatternTable

_YES_VALUES = frozenset({"si", "sí", "yes", "true", "included", "incluido", "incluida"})
_NO_VALUES = frozenset({
    "no", "false", "not included", "no incluido", "no incluida", "sin cooler", "sin fuente",
})


def attribute_text(attr: Attribute) -> str:
    """Name and value joined, so patterns can match either side."""
    return f"{attr.name} {attr.value}"


def iter_named(listing: Listing, name_pattern: re.Pattern[str]) -> Iterator[Attribute]:
    """Yield attributes whose name matches name_pattern."""
    for attr in listing.iter_attributes():
        if name_pattern.search(attr.name):
            yield attr


def yes_no(value: str) -> bool | None:
    """Interpret a yes/no attribute value. None when it is neither."""
    normalized = value.strip().lower()
    if normalized in _YES_VALUES:
        return True
    if normalized in _NO_VALUES:
        return False
    return None


def find_number(
    listing: Listing,
    context: re.Pattern[str],
    value_pattern: re.Pattern[str],
    low: float,
    high: float,
    match_name_only: bool = False,
) -> int | None:
    """First in-range number from an attribute whose text matches context.

    With match_name_only, context is tested against the attribute name alone;
    otherwise against "name value".
    """
    for attr in listing.iter_attributes():
        text = attribute_text(attr)
        if not context.search(attr.name if match_name_only else text):
            continue
        match = value_pattern.search(text)
        if not match:
            continue
        value = float(match.group(1).replace(",", "."))
        if low <= value <= high:
            return int(value)
    return None


def find_pattern(
    listing: Listing,
    table: PatternTable,
    name_pattern: re.Pattern[str] | None = None,
) -> str | None:
    """First table value matching an attribute (optionally name-filtered)."""
    for attr in listing.iter_attributes():
        if name_pattern is not None and not name_pattern.search(attr.name):
            continue
        text = attribute_text(attr)
        for value, patterns in table:
            if any(p.search(text) for p in patterns):
                return value
    return None


def find_patterns(listing: Listing, table: PatternTable) -> list[str]:
    """Every table value matching any attribute, in first-seen order."""
    found: list[str] = []
    for attr in listing.iter_attributes():
        text = attribute_text(attr)
        for value, patterns in table:
            if value not in found and any(p.search(text) for p in patterns):
                found.append(value)
    return found

# ABOUTME: Numeric-aware ordering of datasets and catalogs for stable diffs
# ABOUTME: "SCP-99" sorts before "SCP-100"; non-identifier values follow, lexicographically

from collections.abc import Iterable
from enum import Enum
from typing import Any, TypeVar

from acs_harvest.errors import InvalidFieldRequested
from acs_harvest.extraction.normalize import IDENTIFIER_PREFIX

T = TypeVar("T")


class SortField(str, Enum):
    """Fields a dataset can be sorted by, named as they appear in the JSON files."""

    IDENTIFIER = "actual_number"
    DISPLAY_IDENTIFIER = "display_number"
    NAME = "name"
    CLEARANCE = "clearance"
    CLEARANCE_TEXT = "clearance_text"
    CONTAINMENT = "contain"
    SECONDARY = "secondary"
    DISRUPTION = "disrupt"
    RISK = "risk"
    URL = "url"
    FRAGMENT = "fragment"
    STRATEGY = "scraper"

    @classmethod
    def parse(cls, name: str) -> "SortField":
        """Validate a user-supplied field name.

        Raises:
            InvalidFieldRequested: If the name is not a sortable field
        """
        try:
            return cls(name)
        except ValueError:
            valid = ", ".join(field.value for field in cls)
            raise InvalidFieldRequested(f"Invalid sort field: {name!r} (expected one of: {valid})") from None

    @property
    def attribute(self) -> str:
        return _ATTRIBUTES[self]

    def value_of(self, item: Any) -> str:
        """Read this field from a record or catalog entry as a string."""
        try:
            value = getattr(item, self.attribute)
        except AttributeError:
            raise InvalidFieldRequested(f"{type(item).__name__} has no field {self.value!r}") from None
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, bool):
            return str(value).lower()
        return str(value)


_ATTRIBUTES = {
    SortField.IDENTIFIER: "identifier",
    SortField.DISPLAY_IDENTIFIER: "display_identifier",
    SortField.NAME: "name",
    SortField.CLEARANCE: "clearance_level",
    SortField.CLEARANCE_TEXT: "clearance_text",
    SortField.CONTAINMENT: "containment_class",
    SortField.SECONDARY: "secondary_class",
    SortField.DISRUPTION: "disruption_class",
    SortField.RISK: "risk_class",
    SortField.URL: "source_url",
    SortField.FRAGMENT: "is_fragment",
    SortField.STRATEGY: "extraction_strategy",
}


def identifier_number(value: str) -> int | None:
    """Digits right after a case-insensitive ``SCP-`` prefix, or None."""
    if value[: len(IDENTIFIER_PREFIX)].upper() != IDENTIFIER_PREFIX:
        return None
    digits = ""
    for char in value[len(IDENTIFIER_PREFIX) :]:
        if not char.isascii() or not char.isdigit():
            break
        digits += char
    return int(digits) if digits else None


def sort_key(value: str) -> tuple[int, int] | tuple[int, str]:
    """Numbered identifiers first in numeric order, everything else after in string order."""
    number = identifier_number(value)
    if number is not None:
        return (0, number)
    return (1, value)


def sort_records(items: Iterable[T], field: SortField = SortField.IDENTIFIER) -> list[T]:
    """Return a new list ordered by ``field``. Ties keep their input order."""
    return sorted(items, key=lambda item: sort_key(field.value_of(item)))

# ABOUTME: Read-only mapping from canonical identifier to catalog name and display identifier
# ABOUTME: Loaded once per run from the catalog file built from the series index pages

from collections.abc import Iterable
from pathlib import Path

from acs_harvest.errors import MalformedCatalogLookup
from acs_harvest.models import CatalogEntry
from acs_harvest.persistence import catalog_file


class CatalogLookup:
    """Identifier -> CatalogEntry. The first entry wins when the catalog repeats an identifier."""

    def __init__(self, entries: Iterable[CatalogEntry] = ()):
        self._entries: dict[str, CatalogEntry] = {}
        for entry in entries:
            if entry.identifier:
                self._entries.setdefault(entry.identifier.upper(), entry)

    @classmethod
    def load(cls, path: Path | str) -> "CatalogLookup":
        return cls(catalog_file(path).load())

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, identifier: str) -> bool:
        return identifier.upper() in self._entries

    def get(self, identifier: str) -> CatalogEntry | None:
        return self._entries.get(identifier.upper())

    def lookup(self, identifier: str) -> CatalogEntry:
        """Return the entry for an identifier.

        Raises:
            MalformedCatalogLookup: If the catalog has no such identifier
        """
        entry = self.get(identifier)
        if entry is None:
            raise MalformedCatalogLookup(identifier)
        return entry

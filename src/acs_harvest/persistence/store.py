# ABOUTME: JSON list files for the catalog, discovery feed and harvested dataset
# ABOUTME: Pydantic TypeAdapter (de)serialization with write-to-temp-then-replace semantics

from __future__ import annotations

import os
import tempfile
from pathlib import Path
from typing import Generic, TypeVar

from pydantic import TypeAdapter, ValidationError

from acs_harvest.errors import DatasetFileError
from acs_harvest.models import CanonicalRecord, CatalogEntry, DiscoveryEntry
from acs_harvest.utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class JsonListFile(Generic[T]):
    """A JSON file holding a list of pydantic models, keyed by their aliases on disk."""

    def __init__(self, path: Path | str, item_type: type[T]):
        self.path = Path(path)
        self.type_adapter = TypeAdapter(list[item_type])  # type: ignore[valid-type]

    def exists(self) -> bool:
        return self.path.exists()

    def load(self) -> list[T]:
        """Read and validate the file.

        Raises:
            DatasetFileError: If the file is missing, unreadable or does not match the schema
        """
        try:
            raw = self.path.read_bytes()
        except OSError as e:
            raise DatasetFileError(f"Cannot read {self.path}: {e}") from e

        try:
            items = self.type_adapter.validate_json(raw)
        except ValidationError as e:
            raise DatasetFileError(f"Invalid JSON content in {self.path}: {e}") from e

        logger.debug("Loaded JSON list", path=str(self.path), items=len(items))
        return items

    def save(self, items: list[T]) -> None:
        """Write the list atomically: a temp file in the same directory replaces the target.

        Raises:
            DatasetFileError: If the file cannot be written
        """
        payload = self.type_adapter.dump_json(items, indent=2, by_alias=True)
        tmp_name: str | None = None

        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "wb", dir=self.path.parent, prefix=f".{self.path.name}.", suffix=".tmp", delete=False
            ) as tmp:
                tmp_name = tmp.name
                tmp.write(payload)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name is not None and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise DatasetFileError(f"Cannot write {self.path}: {e}") from e

        logger.info("Wrote JSON list", path=str(self.path), items=len(items))


def dataset_file(path: Path | str) -> JsonListFile[CanonicalRecord]:
    return JsonListFile(path, CanonicalRecord)


def catalog_file(path: Path | str) -> JsonListFile[CatalogEntry]:
    return JsonListFile(path, CatalogEntry)


def discovery_file(path: Path | str) -> JsonListFile[DiscoveryEntry]:
    return JsonListFile(path, DiscoveryEntry)

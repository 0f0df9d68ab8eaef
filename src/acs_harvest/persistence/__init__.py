# ABOUTME: Persistence layer for the JSON files a run reads and writes
# ABOUTME: Exports the typed list-file helper and factories for each file kind

from .store import JsonListFile, catalog_file, dataset_file, discovery_file

__all__ = [
    "JsonListFile",
    "catalog_file",
    "dataset_file",
    "discovery_file",
]

# ABOUTME: Catalog of SCP names and the backlink discovery feed
# ABOUTME: Both are inputs to a harvest run, built from wiki index pages

from .backlinks import BACKLINK_SOURCES, fetch_backlinks, is_excluded, parse_backlinks
from .lookup import CatalogLookup
from .series import SERIES_URLS, build_catalog, parse_series_page

__all__ = [
    "BACKLINK_SOURCES",
    "SERIES_URLS",
    "CatalogLookup",
    "build_catalog",
    "fetch_backlinks",
    "is_excluded",
    "parse_backlinks",
    "parse_series_page",
]

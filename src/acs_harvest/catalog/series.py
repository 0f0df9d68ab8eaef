# ABOUTME: Builds the SCP name catalog from the wiki's series index pages
# ABOUTME: Each series page lists "SCP-NNN - Name" items under table-of-contents anchors

import re

from bs4 import BeautifulSoup

from acs_harvest.core.sorting import SortField, sort_records
from acs_harvest.errors import TransientFetchError
from acs_harvest.extraction.fetcher import Found, NotFound, PageFetcher
from acs_harvest.extraction.normalize import extract_identifier_number, format_identifier
from acs_harvest.models import CatalogEntry
from acs_harvest.utils.logging import get_logger

logger = get_logger(__name__)

DEFAULT_BASE_URL = "https://scp-wiki.wikidot.com"

SERIES_URLS = (
    "https://scp-wiki.wikidot.com/scp-series",
    "https://scp-wiki.wikidot.com/scp-series-2",
    "https://scp-wiki.wikidot.com/scp-series-3",
    "https://scp-wiki.wikidot.com/scp-series-4",
    "https://scp-wiki.wikidot.com/scp-series-5",
    "https://scp-wiki.wikidot.com/scp-series-6",
    "https://scp-wiki.wikidot.com/scp-series-7",
    "https://scp-wiki.wikidot.com/scp-series-8",
    "https://scp-wiki.wikidot.com/scp-series-9",
)

SERIES_ITEM_SELECTOR = "[id*='toc']:not([id='toc0']) + ul li"

SERIES_IDENTIFIER_PATTERN = re.compile(r"SCP-(\d{3,4})", re.IGNORECASE)
DASH_NUMBER_PATTERN = re.compile(r"-(\d{3,4})")


def _identifier_from_link(href: str, link_text: str) -> str:
    if "SCP-" in href.upper():
        number = extract_identifier_number(href, SERIES_IDENTIFIER_PATTERN)
    elif link_text.upper().startswith("SCP-"):
        number = extract_identifier_number(link_text, SERIES_IDENTIFIER_PATTERN)
    elif "-" in href:
        number = extract_identifier_number(href, DASH_NUMBER_PATTERN)
    else:
        number = None
    return format_identifier(number) if number is not None else ""


def parse_series_page(document: BeautifulSoup, base_url: str = DEFAULT_BASE_URL) -> list[CatalogEntry]:
    """Read catalog entries from one series index page.

    Links styled as ``newpage`` point at pages that do not exist yet and are skipped.
    """
    entries: list[CatalogEntry] = []

    for item in document.select(SERIES_ITEM_SELECTOR):
        link = item.find("a")
        if link is None:
            continue
        if "newpage" in (link.get("class") or []):
            continue

        href = link.get("href") or ""
        link_text = link.get_text().strip()
        item_text = item.get_text()

        _, separator, name = item_text.partition(" - ")

        entries.append(
            CatalogEntry(
                identifier=_identifier_from_link(href, link_text),
                display_identifier=link_text,
                name=name.strip() if separator else "",
                url=href if "scp-wiki" in href else f"{base_url}{href}",
            )
        )

    return entries


async def build_catalog(
    fetcher: PageFetcher,
    series_urls: tuple[str, ...] = SERIES_URLS,
    base_url: str = DEFAULT_BASE_URL,
) -> list[CatalogEntry]:
    """Fetch every series page and return the combined catalog sorted by identifier.

    Raises:
        TransientFetchError: If a series page cannot be fetched
    """
    entries: list[CatalogEntry] = []

    for series_url in series_urls:
        outcome = await fetcher.fetch(series_url)
        match outcome:
            case Found(document=document):
                page_entries = parse_series_page(document, base_url)
                logger.info("Parsed series page", url=series_url, entries=len(page_entries))
                entries.extend(page_entries)
            case NotFound():
                logger.warning("Series page not found", url=series_url)
            case _:
                raise TransientFetchError(series_url, outcome.cause)

    return sort_records(entries, SortField.IDENTIFIER)

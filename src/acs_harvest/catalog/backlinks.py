# ABOUTME: Builds the discovery feed from the backlinks of the ACS component pages
# ABOUTME: Every page including an ACS component links back to it, which reveals candidates

import re
import secrets
import string

import httpx
from bs4 import BeautifulSoup

from acs_harvest.catalog.lookup import CatalogLookup
from acs_harvest.catalog.series import DEFAULT_BASE_URL
from acs_harvest.extraction.fetcher import parse_document
from acs_harvest.extraction.normalize import URL_IDENTIFIER_PATTERN, extract_identifier_number, format_identifier
from acs_harvest.models import DiscoveryEntry
from acs_harvest.utils.logging import get_logger

logger = get_logger(__name__)

# page_id -> component page whose backlinks are listed
BACKLINK_SOURCES = {
    "858310940": "ACS Bar",
    "1058262511": "Flops Header",
    "1307058244": "AIM Component",
}

BACKLINKS_MODULE = "backlinks/BacklinksModule"

BACKLINK_SELECTOR = "ul li a:first-of-type"

# Links to these are documentation, author or theme pages, never ACS entries
EXCLUSION_PATTERN = re.compile(
    r"http|component|guide|author|memo|acs|personnel|icons|art:|resource|theme",
    re.IGNORECASE,
)

PAGE_PATH_SUFFIX = re.compile(r" \(/\S+\)")

PROPOSAL_IDENTIFIER = "SCP-001"


def is_excluded(url: str, name: str = "") -> bool:
    return bool(EXCLUSION_PATTERN.search(url) or EXCLUSION_PATTERN.search(name))


def _name_from_slug(url: str) -> str:
    slug = url.rstrip("/").rsplit("/", 1)[-1]
    slug = slug.replace("fragment:", "").replace("ii", "II").replace("-s", "'s").replace("-", " ")
    return " ".join(word[:1].upper() + word[1:] for word in slug.split())


def parse_backlinks(
    document: BeautifulSoup,
    catalog: CatalogLookup,
    base_url: str = DEFAULT_BASE_URL,
) -> list[DiscoveryEntry]:
    """Turn a backlinks module listing into discovery entries, one per distinct URL."""
    entries: dict[str, DiscoveryEntry] = {}

    for link in document.select(BACKLINK_SELECTOR):
        href = link.get("href") or ""
        name = link.get_text().strip()

        if is_excluded(href, name):
            continue

        is_fragment = "fragment:" in href
        name = PAGE_PATH_SUFFIX.sub("", name)
        identifier = ""

        number = extract_identifier_number(href, URL_IDENTIFIER_PATTERN)
        if number is not None and not is_fragment:
            identifier = format_identifier(number)
            catalog_entry = catalog.get(identifier)
            if catalog_entry is not None:
                name = catalog_entry.name
            else:
                logger.warning("Backlink not in catalog", identifier=identifier, url=href)
        elif len(name) <= 1:
            name = _name_from_slug(href)

        if "proposal" in name.lower() or "proposal" in href.lower():
            identifier = PROPOSAL_IDENTIFIER

        url = f"{base_url}{href}"
        if url not in entries:
            entries[url] = DiscoveryEntry(identifier=identifier, name=name, url=url, is_fragment=is_fragment)

    return list(entries.values())


def _wikidot_token() -> str:
    alphabet = string.ascii_letters + string.digits
    return "".join(secrets.choice(alphabet) for _ in range(8))


async def fetch_backlinks(
    client: httpx.AsyncClient,
    catalog: CatalogLookup,
    base_url: str = DEFAULT_BASE_URL,
    sources: dict[str, str] = BACKLINK_SOURCES,
) -> list[DiscoveryEntry]:
    """Query the backlinks module of every ACS component page.

    A failing source is logged and skipped; the feed is built from the rest.
    """
    token = _wikidot_token()
    connector_url = f"{base_url}/ajax-module-connector.php"
    entries: dict[str, DiscoveryEntry] = {}

    for page_id, page_name in sources.items():
        try:
            response = await client.post(
                connector_url,
                data={
                    "page_id": page_id,
                    "moduleName": BACKLINKS_MODULE,
                    "callbackIndex": "1",
                    "wikidot_token7": token,
                },
                headers={"Cookie": f"wikidot_token7={token}"},
            )
        except httpx.RequestError as e:
            logger.error("Backlinks request failed", page=page_name, page_id=page_id, error=str(e))
            continue

        if not response.is_success:
            logger.error("Backlinks request failed", page=page_name, page_id=page_id, status=response.status_code)
            continue

        try:
            payload = response.json()
        except ValueError as e:
            logger.error("Backlinks response is not JSON", page=page_name, page_id=page_id, error=str(e))
            continue

        body = payload.get("body") if isinstance(payload, dict) else None
        if not isinstance(body, str):
            logger.error("Backlinks response has no HTML body", page=page_name, page_id=page_id)
            continue

        parsed = parse_backlinks(parse_document(body), catalog, base_url)
        fragments = sum(1 for entry in parsed if entry.is_fragment)
        logger.info(
            "Parsed backlinks",
            page=page_name,
            entries=len(parsed),
            fragments=fragments,
            normal=len(parsed) - fragments,
        )
        for entry in parsed:
            entries.setdefault(entry.url, entry)

    return list(entries.values())

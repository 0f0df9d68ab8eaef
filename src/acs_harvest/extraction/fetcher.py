# ABOUTME: HTTP page retrieval that classifies responses into found / not found / transient
# ABOUTME: Wraps an injectable httpx.AsyncClient and parses successful bodies with BeautifulSoup

from dataclasses import dataclass

import httpx
from bs4 import BeautifulSoup

from acs_harvest.utils.logging import get_logger, log_extraction_step

DEFAULT_USER_AGENT = "acs-harvest/0.1 (python-httpx)"
DEFAULT_REFERER = "https://scp-wiki.wikidot.com/"


@dataclass(frozen=True)
class Found:
    url: str
    document: BeautifulSoup


@dataclass(frozen=True)
class NotFound:
    url: str


@dataclass(frozen=True)
class TransientError:
    url: str
    cause: str


FetchOutcome = Found | NotFound | TransientError


def parse_document(html: str) -> BeautifulSoup:
    return BeautifulSoup(html, "html.parser")


class PageFetcher:
    """Fetches wiki pages. A 404 is an expected outcome, not an exception."""

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        user_agent: str = DEFAULT_USER_AGENT,
        referer: str = DEFAULT_REFERER,
        timeout: float = 30.0,
    ):
        self._owns_client = client is None
        self.http_client = client or httpx.AsyncClient(  # Allow for dependency injection
            headers={"User-Agent": user_agent, "Referer": referer},
            timeout=timeout,
            follow_redirects=True,
        )
        self.logger = get_logger(__name__)

    @log_extraction_step("fetch_page")
    async def fetch(self, url: str) -> FetchOutcome:
        """Fetch and parse a page."""
        try:
            response = await self.http_client.get(url)
        except httpx.InvalidURL as e:
            # A malformed URL can never resolve to a page
            self.logger.warning("Invalid URL", url=url, error=str(e))
            return NotFound(url=url)
        except httpx.RequestError as e:
            # Transport failures, redirect loops and undecodable bodies
            self.logger.debug("Request error", url=url, error=str(e), error_type=type(e).__name__)
            return TransientError(url=url, cause=f"{type(e).__name__}: {e}")

        self.logger.debug("Received response", url=url, status_code=response.status_code)

        if response.status_code == httpx.codes.NOT_FOUND:
            return NotFound(url=url)
        if not response.is_success:
            return TransientError(url=url, cause=f"HTTP {response.status_code}")

        return Found(url=url, document=parse_document(response.text))

    async def close(self) -> None:
        """Close the HTTP client if this fetcher created it."""
        if self._owns_client:
            await self.http_client.aclose()

    async def __aenter__(self) -> "PageFetcher":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

# ABOUTME: Tests for discovery feed building from ACS component backlinks
# ABOUTME: Covers link classification, exclusions, catalog naming and the backlinks module request

import httpx
import pytest

from acs_harvest.catalog.backlinks import fetch_backlinks, is_excluded, parse_backlinks
from acs_harvest.catalog.lookup import CatalogLookup
from acs_harvest.extraction.fetcher import parse_document
from acs_harvest.models import CatalogEntry

CONNECTOR_URL = "https://scp-wiki.wikidot.com/ajax-module-connector.php"

BACKLINKS_BODY = """
<ul>
  <li><a href="/scp-173">SCP-173</a></li>
  <li><a href="/scp-9999">SCP-9999</a></li>
  <li><a href="/fragment:scp-4000-1">X</a></li>
  <li><a href="/component:anomaly-class-bar">Anomaly Classification Bar</a></li>
  <li><a href="/tufto-s-proposal">Tufto's Proposal</a></li>
  <li><a href="/a-quiet-tale">A Quiet Tale (/a-quiet-tale)</a></li>
  <li><a href="/scp-173">SCP-173</a></li>
</ul>
"""


@pytest.fixture
def catalog():
    return CatalogLookup(
        [
            CatalogEntry(
                identifier="SCP-173",
                display_identifier="SCP-173",
                name="The Sculpture",
                url="https://scp-wiki.wikidot.com/scp-173",
            )
        ]
    )


class TestExclusions:
    @pytest.mark.parametrize(
        "url,name",
        [
            ("/component:anomaly-class-bar", ""),
            ("/acs-animation", ""),
            ("/how-to-write-an-scp-guide", ""),
            ("/theme:black-highlighter", ""),
            ("/scp-173", "Author Page"),
            ("/art:gallery", ""),
        ],
    )
    def test_excluded(self, url, name):
        assert is_excluded(url, name)

    @pytest.mark.parametrize("url", ["/scp-173", "/fragment:scp-4000-1", "/a-quiet-tale"])
    def test_not_excluded(self, url):
        assert not is_excluded(url)


class TestParseBacklinks:
    def test_entries(self, catalog):
        entries = parse_backlinks(parse_document(BACKLINKS_BODY), catalog)
        by_url = {entry.url: entry for entry in entries}

        assert len(entries) == 5
        assert "https://scp-wiki.wikidot.com/component:anomaly-class-bar" not in by_url

        sculpture = by_url["https://scp-wiki.wikidot.com/scp-173"]
        assert sculpture.identifier == "SCP-173"
        assert sculpture.name == "The Sculpture"
        assert not sculpture.is_fragment

    def test_identifier_missing_from_catalog_keeps_link_text(self, catalog):
        entries = parse_backlinks(parse_document(BACKLINKS_BODY), catalog)
        entry = next(e for e in entries if e.url.endswith("/scp-9999"))

        assert entry.identifier == "SCP-9999"
        assert entry.name == "SCP-9999"

    def test_fragment_gets_name_from_slug(self, catalog):
        entries = parse_backlinks(parse_document(BACKLINKS_BODY), catalog)
        fragment = next(e for e in entries if e.is_fragment)

        assert fragment.url == "https://scp-wiki.wikidot.com/fragment:scp-4000-1"
        assert fragment.identifier == ""
        assert fragment.name == "Scp 4000 1"

    def test_proposal_maps_to_001(self, catalog):
        entries = parse_backlinks(parse_document(BACKLINKS_BODY), catalog)
        proposal = next(e for e in entries if "proposal" in e.url)

        assert proposal.identifier == "SCP-001"
        assert proposal.name == "Tufto's Proposal"

    def test_page_path_suffix_is_stripped(self, catalog):
        entries = parse_backlinks(parse_document(BACKLINKS_BODY), catalog)
        tale = next(e for e in entries if e.url.endswith("/a-quiet-tale"))

        assert tale.name == "A Quiet Tale"
        assert tale.identifier == ""


class TestFetchBacklinks:
    @pytest.mark.asyncio
    async def test_posts_to_module_connector(self, httpx_mock, catalog):
        httpx_mock.add_response(url=CONNECTOR_URL, method="POST", json={"status": "ok", "body": BACKLINKS_BODY})

        async with httpx.AsyncClient() as client:
            entries = await fetch_backlinks(client, catalog, sources={"858310940": "ACS Bar"})

        assert len(entries) == 5

        request = httpx_mock.get_requests()[0]
        assert b"page_id=858310940" in request.content
        assert b"moduleName=backlinks%2FBacklinksModule" in request.content
        assert request.headers["Cookie"].startswith("wikidot_token7=")

    @pytest.mark.asyncio
    async def test_entries_are_merged_across_sources(self, httpx_mock, catalog):
        httpx_mock.add_response(url=CONNECTOR_URL, method="POST", json={"body": BACKLINKS_BODY})
        httpx_mock.add_response(
            url=CONNECTOR_URL,
            method="POST",
            json={"body": '<ul><li><a href="/scp-173">SCP-173</a></li><li><a href="/scp-049">SCP-049</a></li></ul>'},
        )

        async with httpx.AsyncClient() as client:
            entries = await fetch_backlinks(client, catalog, sources={"1": "ACS Bar", "2": "Flops Header"})

        assert len(entries) == 6
        assert entries[-1].identifier == "SCP-049"

    @pytest.mark.asyncio
    async def test_failing_source_is_skipped(self, httpx_mock, catalog):
        httpx_mock.add_response(url=CONNECTOR_URL, method="POST", status_code=500)

        async with httpx.AsyncClient() as client:
            entries = await fetch_backlinks(client, catalog, sources={"858310940": "ACS Bar"})

        assert entries == []

    @pytest.mark.asyncio
    async def test_non_json_source_is_skipped(self, httpx_mock, catalog):
        httpx_mock.add_response(url=CONNECTOR_URL, method="POST", text="<html>maintenance</html>")
        httpx_mock.add_response(url=CONNECTOR_URL, method="POST", json={"body": BACKLINKS_BODY})

        async with httpx.AsyncClient() as client:
            entries = await fetch_backlinks(client, catalog, sources={"1": "ACS Bar", "2": "Flops Header"})

        assert len(entries) == 5

    @pytest.mark.asyncio
    async def test_unreachable_source_is_skipped(self, httpx_mock, catalog):
        httpx_mock.add_exception(httpx.ConnectError("connection refused"), url=CONNECTOR_URL, method="POST")
        httpx_mock.add_response(url=CONNECTOR_URL, method="POST", json={"body": BACKLINKS_BODY})

        async with httpx.AsyncClient() as client:
            entries = await fetch_backlinks(client, catalog, sources={"1": "ACS Bar", "2": "Flops Header"})

        assert len(entries) == 5

    @pytest.mark.asyncio
    async def test_json_without_body_is_skipped(self, httpx_mock, catalog):
        httpx_mock.add_response(url=CONNECTOR_URL, method="POST", json=["unexpected"])

        async with httpx.AsyncClient() as client:
            entries = await fetch_backlinks(client, catalog, sources={"1": "ACS Bar"})

        assert entries == []

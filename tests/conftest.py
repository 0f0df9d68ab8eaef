# ABOUTME: Shared fixtures for the test suite: sample wiki page layouts and a scripted fetcher
# ABOUTME: Keeps network access out of everything except the httpx_mock based fetcher tests

import asyncio
from types import SimpleNamespace

import pytest

from acs_harvest.extraction.fetcher import Found, NotFound, TransientError, parse_document

BAR_PAGE = """
<html><body>
<div class="anom-bar-container">
  <div class="top-right-box"><div class="level">Level 4</div><div class="clearance">Secret</div></div>
  <div class="contain-class"><div class="class-text">Keter</div></div>
  <div class="second-class"><div class="class-text">none</div></div>
  <div class="disrupt-class"><div class="class-text">Ekhi</div></div>
  <div class="risk-class"><div class="class-text">Danger</div></div>
</div>
</body></html>
"""

HYBRID_BAR_PAGE = """
<html><body>
<div class="acs-hybrid-text-bar">
  <div class="acs-clear"><strong>Level 3</strong><span class="clearance-level-text">Clearance</span></div>
  <div class="acs-contain"><div class="acs-text"><span>Containment Class:</span><span>Euclid</span></div></div>
  <div class="acs-secondary"><div class="acs-text"><span>Secondary Class:</span><span>{$secondary-class}</span></div></div>
  <div class="acs-disrupt"><div class="acs-text">Disruption Class: 2/Vlam</div></div>
  <div class="acs-risk"><div class="acs-text">Risk Class: 3/Warning</div></div>
</div>
</body></html>
"""

FLOPS_HEADER_PAGE = """
<html><body>
<div class="itemInfo darkbox"><table>
  <tr><td>Item #: SCP-1234</td><td><span>Level 2/1234</span></td></tr>
  <tr><td>Object Class: Thaumiel</td><td><span>Restricted</span></td></tr>
</table></div>
<p><a class="disruptionHeader">Disruption Class: Dark</a></p>
</body></html>
"""

AIM_HEADER_PAGE = """
<html><body>
<div class="desktop-aim"><div class="w-container"><div>
  <div class="cell-container-image"><img src="aim.png"></div>
  <div><p><span>Clearance: <span class="three">3</span></span></p></div>
  <div><p>Containment Class: Safe</p></div>
  <div><p>Disruption Class: Keneq</p></div>
</div></div></div>
</body></html>
"""

HEURISTIC_PAGE = "<html><body><p>Disruption Class: vlam</p></body></html>"

PLAIN_PAGE = "<html><body><p>A tale about a lighthouse keeper.</p></body></html>"


@pytest.fixture
def bar_document():
    return parse_document(BAR_PAGE)


@pytest.fixture
def hybrid_bar_document():
    return parse_document(HYBRID_BAR_PAGE)


@pytest.fixture
def flops_header_document():
    return parse_document(FLOPS_HEADER_PAGE)


@pytest.fixture
def aim_header_document():
    return parse_document(AIM_HEADER_PAGE)


@pytest.fixture
def heuristic_document():
    return parse_document(HEURISTIC_PAGE)


@pytest.fixture
def plain_document():
    return parse_document(PLAIN_PAGE)


class ScriptedFetcher:
    """Stands in for PageFetcher. Each URL maps to an HTML body, a status code, or a list of them.

    A list is consumed one item per call; its last item repeats once exhausted.
    An int is an HTTP status (404 gives NotFound, anything else a transient error).
    Unknown URLs are 404s.
    """

    def __init__(self, pages: dict, delay: float = 0.0):
        self.pages = pages
        self.delay = delay
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def _next(self, url: str):
        script = self.pages.get(url, 404)
        if isinstance(script, list):
            attempt = self.calls.count(url) - 1
            return script[min(attempt, len(script) - 1)]
        return script

    async def fetch(self, url: str):
        self.calls.append(url)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delay)
            page = self._next(url)
        finally:
            self.in_flight -= 1

        if page == 404:
            return NotFound(url=url)
        if isinstance(page, int):
            return TransientError(url=url, cause=f"HTTP {page}")
        return Found(url=url, document=parse_document(page))

    def attempts(self, url: str) -> int:
        return self.calls.count(url)


@pytest.fixture
def scripted_fetcher():
    def factory(pages: dict, delay: float = 0.0) -> ScriptedFetcher:
        return ScriptedFetcher(pages, delay)

    return factory


@pytest.fixture
def recorded_sleeps():
    """An injectable async sleep that records requested delays and returns at once."""
    delays: list[float] = []

    async def sleep(seconds: float) -> None:
        delays.append(seconds)

    sleep.delays = delays
    return sleep


@pytest.fixture
def pages():
    """Raw HTML of the sample pages, for feeding a scripted fetcher."""
    return SimpleNamespace(
        bar=BAR_PAGE,
        hybrid_bar=HYBRID_BAR_PAGE,
        flops_header=FLOPS_HEADER_PAGE,
        aim_header=AIM_HEADER_PAGE,
        heuristic=HEURISTIC_PAGE,
        plain=PLAIN_PAGE,
    )

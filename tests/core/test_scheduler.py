# ABOUTME: Tests for the bounded-concurrency harvest scheduler
# ABOUTME: Drives the scheduler with a scripted fetcher to check limits, retries and drop handling

import httpx
import pytest

from acs_harvest.catalog.lookup import CatalogLookup
from acs_harvest.core.assembler import RecordAssembler
from acs_harvest.core.scheduler import HarvestScheduler, HarvestStats, HarvestTarget, targets_from_range
from acs_harvest.errors import NoExtractableData, NotFoundPage, TransientFetchError
from acs_harvest.extraction.fetcher import PageFetcher
from acs_harvest.models import CatalogEntry, ExtractionStrategy


def _url(n: int) -> str:
    return f"https://scp-wiki.wikidot.com/scp-{n:03d}"


def _target(n: int) -> HarvestTarget:
    return HarvestTarget(identifier=f"SCP-{n:03d}", url=_url(n))


def _scheduler(fetcher, recorded_sleeps, **kwargs) -> HarvestScheduler:
    kwargs.setdefault("request_delay", 0)
    kwargs.setdefault("retry_backoff", 0)
    return HarvestScheduler(fetcher, retry_sleep=recorded_sleeps, **kwargs)


class TestConcurrency:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit", [1, 3, 5])
    async def test_in_flight_fetches_never_exceed_limit(self, scripted_fetcher, recorded_sleeps, pages, limit):
        fetcher = scripted_fetcher({_url(n): pages.bar for n in range(1, 21)}, delay=0.01)
        scheduler = _scheduler(fetcher, recorded_sleeps, limit=limit)

        result = await scheduler.run([_target(n) for n in range(1, 21)])

        assert fetcher.max_in_flight <= limit
        assert fetcher.max_in_flight == limit
        assert len(result.records) == 20

    def test_invalid_limits(self, scripted_fetcher):
        with pytest.raises(ValueError):
            HarvestScheduler(scripted_fetcher({}), limit=0)
        with pytest.raises(ValueError):
            HarvestScheduler(scripted_fetcher({}), retries=-1)


class TestRetries:
    @pytest.mark.asyncio
    async def test_always_transient_target_is_attempted_retries_plus_one(self, scripted_fetcher, recorded_sleeps):
        fetcher = scripted_fetcher({_url(1): 503})
        scheduler = _scheduler(fetcher, recorded_sleeps, retries=3)

        result = await scheduler.run([_target(1)])

        assert fetcher.attempts(_url(1)) == 4
        assert result.records == []
        assert result.stats.failed == 1
        assert result.stats.processed == 1

    @pytest.mark.asyncio
    async def test_backoff_doubles(self, scripted_fetcher, recorded_sleeps):
        fetcher = scripted_fetcher({_url(1): 503})
        scheduler = _scheduler(fetcher, recorded_sleeps, retries=3, retry_backoff=2.0)

        with pytest.raises(TransientFetchError):
            await scheduler.harvest_one(_target(1))

        assert recorded_sleeps.delays == [2, 4, 8]

    @pytest.mark.asyncio
    async def test_zero_retries_makes_a_single_attempt(self, scripted_fetcher, recorded_sleeps):
        fetcher = scripted_fetcher({_url(1): 500})
        scheduler = _scheduler(fetcher, recorded_sleeps, retries=0)

        await scheduler.run([_target(1)])

        assert fetcher.attempts(_url(1)) == 1
        assert recorded_sleeps.delays == []

    @pytest.mark.asyncio
    async def test_recovers_after_transient_failures(self, scripted_fetcher, recorded_sleeps, pages):
        fetcher = scripted_fetcher({_url(173): [500, 429, pages.bar]})
        scheduler = _scheduler(fetcher, recorded_sleeps, retries=5)

        result = await scheduler.run([_target(173)])

        assert fetcher.attempts(_url(173)) == 3
        assert len(result.records) == 1
        assert result.records[0].identifier == "SCP-173"
        assert result.stats.matched == 1

    @pytest.mark.asyncio
    async def test_not_found_is_not_retried(self, scripted_fetcher, recorded_sleeps):
        fetcher = scripted_fetcher({})
        scheduler = _scheduler(fetcher, recorded_sleeps, retries=5)

        with pytest.raises(NotFoundPage):
            await scheduler.harvest_one(_target(404))

        assert fetcher.attempts(_url(404)) == 1

    @pytest.mark.asyncio
    async def test_page_without_data_is_not_retried(self, scripted_fetcher, recorded_sleeps, pages):
        fetcher = scripted_fetcher({_url(2): pages.plain})
        scheduler = _scheduler(fetcher, recorded_sleeps, retries=5)

        with pytest.raises(NoExtractableData):
            await scheduler.harvest_one(_target(2))

        assert fetcher.attempts(_url(2)) == 1


class TestRun:
    @pytest.mark.asyncio
    async def test_drops_are_counted_and_run_continues(self, scripted_fetcher, recorded_sleeps, pages):
        fetcher = scripted_fetcher(
            {
                _url(1): pages.bar,
                _url(2): pages.plain,
                _url(3): 500,
                _url(5): pages.heuristic,
            }
        )
        scheduler = _scheduler(fetcher, recorded_sleeps, retries=1)

        result = await scheduler.run([_target(n) for n in range(1, 6)])

        assert sorted(r.identifier for r in result.records) == ["SCP-001", "SCP-005"]
        assert result.stats == HarvestStats(processed=5, matched=2, not_found=1, no_data=1, failed=1)
        assert result.stats.dropped == 3

    @pytest.mark.asyncio
    async def test_progress_reports_every_target(self, scripted_fetcher, recorded_sleeps, pages):
        fetcher = scripted_fetcher({_url(1): pages.bar})
        scheduler = _scheduler(fetcher, recorded_sleeps)
        reported: list[bool] = []

        await scheduler.run([_target(1), _target(2)], progress=reported.append)

        assert sorted(reported) == [False, True]

    @pytest.mark.asyncio
    async def test_records_use_catalog_names(self, scripted_fetcher, recorded_sleeps, pages):
        catalog = CatalogLookup(
            [CatalogEntry(identifier="SCP-009", display_identifier="SCP-009", name="Red Ice", url=_url(9))]
        )
        fetcher = scripted_fetcher({_url(9): pages.bar})
        scheduler = _scheduler(fetcher, recorded_sleeps, assembler=RecordAssembler(catalog))

        result = await scheduler.run([HarvestTarget(identifier="SCP-009", url=_url(9))])

        record = result.records[0]
        assert record.name == "Red Ice"
        assert record.display_identifier == "SCP-009"
        assert record.extraction_strategy == ExtractionStrategy.BAR
        assert record.clearance_text == "Secret"

    @pytest.mark.asyncio
    async def test_heuristic_page_end_to_end(self, scripted_fetcher, recorded_sleeps, pages):
        fetcher = scripted_fetcher({_url(5): pages.heuristic})
        scheduler = _scheduler(fetcher, recorded_sleeps)

        result = await scheduler.run([_target(5)])

        record = result.records[0]
        assert record.disruption_class == "vlam"
        assert record.extraction_strategy == ExtractionStrategy.HEURISTIC_TEXT
        assert record.clearance_level == ""

    @pytest.mark.asyncio
    async def test_redirect_loop_does_not_abort_run(self, httpx_mock, recorded_sleeps, pages):
        httpx_mock.add_response(url=_url(1), html=pages.bar)
        httpx_mock.add_exception(httpx.TooManyRedirects("loop"), url=_url(2))

        async with PageFetcher() as fetcher:
            result = await _scheduler(fetcher, recorded_sleeps, retries=0).run([_target(1), _target(2)])

        assert [r.identifier for r in result.records] == ["SCP-001"]
        assert result.stats == HarvestStats(processed=2, matched=1, failed=1)

    @pytest.mark.asyncio
    async def test_unexpected_error_counts_as_failed(self, scripted_fetcher, recorded_sleeps, pages):
        class BrokenFetcher:
            def __init__(self, inner):
                self.inner = inner

            async def fetch(self, url: str):
                if url == _url(2):
                    raise RuntimeError("parser exploded")
                return await self.inner.fetch(url)

        fetcher = BrokenFetcher(scripted_fetcher({_url(1): pages.bar}))
        reported: list[bool] = []

        result = await _scheduler(fetcher, recorded_sleeps).run([_target(1), _target(2)], progress=reported.append)

        assert len(result.records) == 1
        assert result.stats.failed == 1
        assert result.stats.processed == 2
        assert sorted(reported) == [False, True]

    @pytest.mark.asyncio
    async def test_empty_target_list(self, scripted_fetcher, recorded_sleeps):
        result = await _scheduler(scripted_fetcher({}), recorded_sleeps).run([])
        assert result.records == []
        assert result.stats.processed == 0


class TestTargetsFromRange:
    def test_uses_catalog_urls_and_template(self):
        catalog = CatalogLookup(
            [
                CatalogEntry(
                    identifier="SCP-002",
                    display_identifier="SCP-002",
                    name="The Living Room",
                    url="https://mirror.example/scp-002",
                )
            ]
        )

        targets = targets_from_range(1, 3, catalog)

        assert [t.identifier for t in targets] == ["SCP-001", "SCP-002", "SCP-003"]
        assert targets[0].url == "https://scp-wiki.wikidot.com/scp-001"
        assert targets[1].url == "https://mirror.example/scp-002"
        assert all(t.name is None and not t.is_fragment for t in targets)

    def test_custom_template(self):
        targets = targets_from_range(100, 100, url_template="https://wiki.example/{slug}")
        assert targets == [HarvestTarget(identifier="SCP-100", url="https://wiki.example/scp-100")]

    def test_empty_range(self):
        assert targets_from_range(5, 4) == []


class TestPolitenessDelay:
    @pytest.mark.asyncio
    async def test_delay_follows_found_pages_only(self, scripted_fetcher, recorded_sleeps, pages):
        delays: list[float] = []

        async def delay_sleep(seconds: float) -> None:
            delays.append(seconds)

        fetcher = scripted_fetcher({_url(1): pages.bar, _url(3): 503})
        scheduler = HarvestScheduler(
            fetcher,
            retries=0,
            request_delay=1.5,
            retry_sleep=recorded_sleeps,
            delay_sleep=delay_sleep,
        )

        result = await scheduler.run([_target(1), _target(2), _target(3)])

        assert result.stats == HarvestStats(processed=3, matched=1, not_found=1, failed=1)
        assert delays == [1.5]
        assert recorded_sleeps.delays == []

    @pytest.mark.asyncio
    async def test_zero_delay_skips_sleeping(self, scripted_fetcher, recorded_sleeps, pages):
        delays: list[float] = []

        async def delay_sleep(seconds: float) -> None:
            delays.append(seconds)

        fetcher = scripted_fetcher({_url(1): pages.bar})
        scheduler = HarvestScheduler(fetcher, request_delay=0, retry_sleep=recorded_sleeps, delay_sleep=delay_sleep)

        await scheduler.run([_target(1)])

        assert delays == []

# ABOUTME: Concurrent fetch -> extract -> assemble over many targets with bounded parallelism
# ABOUTME: Transient failures are retried with exponential backoff; dead links and empty pages are dropped

import asyncio
from collections.abc import Awaitable, Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

from acs_harvest.catalog.lookup import CatalogLookup
from acs_harvest.core.assembler import RecordAssembler
from acs_harvest.errors import NoExtractableData, NotFoundPage, TransientFetchError
from acs_harvest.extraction.fetcher import Found, NotFound, PageFetcher
from acs_harvest.extraction.normalize import format_identifier
from acs_harvest.extraction.variants import VariantExtractor
from acs_harvest.models import CanonicalRecord
from acs_harvest.utils.logging import ProgressCallback, get_logger, with_target_context
from acs_harvest.utils.retry import fetch_retrying

DEFAULT_URL_TEMPLATE = "https://scp-wiki.wikidot.com/{slug}"


@dataclass(frozen=True)
class HarvestTarget:
    """One page to harvest. ``name`` is set when the caller already knows it."""

    identifier: str
    url: str
    name: str | None = None
    is_fragment: bool = False


@dataclass
class HarvestStats:
    processed: int = 0
    matched: int = 0
    not_found: int = 0
    no_data: int = 0
    failed: int = 0

    @property
    def dropped(self) -> int:
        return self.not_found + self.no_data + self.failed

    def as_dict(self) -> dict[str, int]:
        return {
            "processed": self.processed,
            "matched": self.matched,
            "not_found": self.not_found,
            "no_data": self.no_data,
            "failed": self.failed,
            "dropped": self.dropped,
        }


@dataclass
class HarvestResult:
    records: list[CanonicalRecord] = field(default_factory=list)
    stats: HarvestStats = field(default_factory=HarvestStats)


def targets_from_range(
    start: int,
    end: int,
    catalog: CatalogLookup | None = None,
    url_template: str = DEFAULT_URL_TEMPLATE,
) -> list[HarvestTarget]:
    """Targets for every catalog number in ``start..end`` (inclusive).

    The catalog URL is used when the catalog knows the identifier, the template otherwise.
    """
    targets = []
    for number in range(start, end + 1):
        identifier = format_identifier(number)
        entry = catalog.get(identifier) if catalog is not None else None
        url = entry.url if entry is not None else url_template.format(slug=identifier.lower())
        targets.append(HarvestTarget(identifier=identifier, url=url))
    return targets


class HarvestScheduler:
    """Runs fetch + extract + assemble for many targets concurrently.

    At most ``limit`` attempts are in flight at once. Each attempt holds one slot for
    the fetch, the extraction and the politeness delay; backoff sleeps between retries
    do not hold a slot.
    """

    def __init__(
        self,
        fetcher: PageFetcher,
        extractor: VariantExtractor | None = None,
        assembler: RecordAssembler | None = None,
        limit: int = 10,
        retries: int = 5,
        request_delay: float = 1.0,
        retry_backoff: float = 2.0,
        retry_sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        delay_sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ):
        if limit < 1:
            raise ValueError("limit must be at least 1")
        if retries < 0:
            raise ValueError("retries must not be negative")

        self.fetcher = fetcher
        self.extractor = extractor or VariantExtractor()
        self.assembler = assembler or RecordAssembler()
        self.limit = limit
        self.retries = retries
        self.request_delay = request_delay
        self.retry_backoff = retry_backoff
        self._retry_sleep = retry_sleep
        self._delay_sleep = delay_sleep
        self._slots = asyncio.Semaphore(limit)
        self.logger = get_logger(__name__)

    async def _attempt(self, target: HarvestTarget) -> CanonicalRecord:
        """One fetch + extract + assemble attempt, holding a concurrency slot.

        Raises:
            NotFoundPage: The page does not exist
            TransientFetchError: The fetch failed and may be retried
            NoExtractableData: The page has no ACS data
        """
        async with self._slots:
            outcome = await self.fetcher.fetch(target.url)

            match outcome:
                case NotFound():
                    raise NotFoundPage(target.url)
                case Found(document=document):
                    pass
                case _:
                    raise TransientFetchError(target.url, outcome.cause)

            if self.request_delay > 0:
                await self._delay_sleep(self.request_delay)

            raw = self.extractor.extract(document)
            if raw is None:
                raise NoExtractableData(target.url)

            return self.assembler.assemble(
                raw,
                identifier=target.identifier,
                url=target.url,
                name=target.name,
                is_fragment=target.is_fragment,
            )

    async def harvest_one(self, target: HarvestTarget) -> CanonicalRecord:
        """Harvest a single target, retrying transient failures.

        Raises:
            NotFoundPage: The page does not exist
            TransientFetchError: Every attempt failed
            NoExtractableData: The page has no ACS data
        """
        async for attempt in fetch_retrying(self.retries, self.retry_backoff, sleep=self._retry_sleep):
            with attempt:
                return await self._attempt(target)
        raise AssertionError("unreachable: tenacity re-raises the last error")

    async def _run_target(
        self, target: HarvestTarget, stats: HarvestStats, progress: ProgressCallback | None
    ) -> CanonicalRecord | None:
        record = None

        with with_target_context(target.identifier, target.url) as logger:
            try:
                record = await self.harvest_one(target)
            except NotFoundPage:
                stats.not_found += 1
                logger.warning("Page does not exist")
            except NoExtractableData:
                stats.no_data += 1
                logger.debug("No ACS data on page")
            except TransientFetchError as e:
                stats.failed += 1
                logger.error("Giving up on target", attempts=self.retries + 1, error=str(e))
            except Exception as e:
                # One broken page must not abort the whole batch
                stats.failed += 1
                logger.error("Unexpected failure on target", error=str(e), error_type=type(e).__name__)
            else:
                stats.matched += 1
                logger.debug("Harvested record", strategy=record.extraction_strategy.value)

        stats.processed += 1
        if progress is not None:
            progress(record is not None)
        return record

    async def run(self, targets: Iterable[HarvestTarget], progress: ProgressCallback | None = None) -> HarvestResult:
        """Harvest all targets concurrently. Completion order is not preserved."""
        targets = list(targets)
        stats = HarvestStats()

        self.logger.info("Starting harvest", targets=len(targets), limit=self.limit, retries=self.retries)

        results = await asyncio.gather(*(self._run_target(target, stats, progress) for target in targets))
        records = [record for record in results if record is not None]

        self.logger.info("Harvest completed", **stats.as_dict())
        return HarvestResult(records=records, stats=stats)

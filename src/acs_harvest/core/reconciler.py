# ABOUTME: Merges newly discovered pages into an existing dataset without duplicating entries
# ABOUTME: Append-only: existing records are never modified, fragments never count as a match

from collections.abc import Sequence
from urllib.parse import urlparse

from acs_harvest.catalog.backlinks import is_excluded
from acs_harvest.core.scheduler import HarvestResult, HarvestScheduler, HarvestTarget
from acs_harvest.models import CanonicalRecord, DiscoveryEntry
from acs_harvest.utils.logging import ProgressCallback, get_logger


def select_candidates(existing: Sequence[CanonicalRecord], feed: Sequence[DiscoveryEntry]) -> list[DiscoveryEntry]:
    """Feed entries that still need to be harvested.

    An entry is skipped when its URL path or name hits the exclusion rules, when an
    earlier feed entry has the same URL, or when a non-fragment existing record has
    the same identifier or name (case-insensitive, empty values never match).
    """
    known_identifiers = {r.identifier.lower() for r in existing if not r.is_fragment and r.identifier}
    known_names = {r.name.lower() for r in existing if not r.is_fragment and r.name}

    seen_urls: set[str] = set()
    candidates = []

    for entry in feed:
        if entry.url in seen_urls:
            continue
        seen_urls.add(entry.url)

        if is_excluded(urlparse(entry.url).path, entry.name):
            continue
        if entry.identifier and entry.identifier.lower() in known_identifiers:
            continue
        if entry.name and entry.name.lower() in known_names:
            continue

        candidates.append(entry)

    return candidates


class Reconciler:
    """Harvests discovery feed entries missing from a dataset and appends them."""

    def __init__(self, scheduler: HarvestScheduler):
        self.scheduler = scheduler
        self.logger = get_logger(__name__)

    async def reconcile(
        self,
        existing: Sequence[CanonicalRecord],
        feed: Sequence[DiscoveryEntry],
        progress: ProgressCallback | None = None,
    ) -> tuple[list[CanonicalRecord], HarvestResult]:
        """Harvest the missing feed entries.

        Returns:
            Tuple of (existing records followed by the new ones, harvest result of the new ones)
        """
        candidates = select_candidates(existing, feed)
        self.logger.info(
            "Reconciling discovery feed",
            existing=len(existing),
            feed=len(feed),
            candidates=len(candidates),
        )

        targets = [
            HarvestTarget(identifier=entry.identifier, url=entry.url, name=entry.name, is_fragment=entry.is_fragment)
            for entry in candidates
        ]
        result = await self.scheduler.run(targets, progress=progress)

        self.logger.info("Reconciliation completed", added=len(result.records), **result.stats.as_dict())
        return [*existing, *result.records], result

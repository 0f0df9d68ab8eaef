# ABOUTME: Layout detection and field extraction for ACS components on wiki pages
# ABOUTME: Tries the structured layouts in priority order, then falls back to a free-text scan

import re

from bs4 import BeautifulSoup

from acs_harvest.extraction.models import (
    AimClassification,
    BarClassification,
    FlopsClassification,
    HeuristicClassification,
    RawClassification,
    SharedClassification,
)
from acs_harvest.extraction.normalize import (
    clean,
    clearance_level_conversion,
    extract_string_after_colon,
    is_valid_containment_class,
)
from acs_harvest.extraction.selectors import DEFAULT_SELECTORS, LayoutSelectors
from acs_harvest.models import ExtractionStrategy
from acs_harvest.utils.logging import get_logger

AIM_CLEARANCE_LEVELS = {
    "one": "LEVEL 1",
    "two": "LEVEL 2",
    "three": "LEVEL 3",
    "four": "LEVEL 4",
    "five": "LEVEL 5",
    "six": "LEVEL 6",
}

HEURISTIC_LABELS = (
    ("containment class:", "containment"),
    ("disruption class:", "disruption"),
    ("risk class:", "risk"),
    ("secondary class:", "secondary"),
)

DISRUPTION_KEYWORDS = ("vlam", "keneq", "ekhi", "amida")

FALLBACK_DEMOTED_CLASS = "esoteric"


def _select_text(document: BeautifulSoup, selector: str) -> str:
    element = document.select_one(selector)
    if element is None:
        return ""
    return element.get_text().strip()


def _select_clearance(document: BeautifulSoup, selector: str) -> str:
    # Convert before cleaning: clean() keeps only the text after the last separator,
    # so "Level 3/EE-7372" would otherwise be read as LEVEL 7
    return clean(clearance_level_conversion(_select_text(document, selector)))


def _select_class(document: BeautifulSoup, selector: str) -> str:
    element = document.select_one(selector)
    if element is None:
        return ""
    classes = element.get("class") or []
    return " ".join(classes) if isinstance(classes, list) else str(classes)


def _has_any(document: BeautifulSoup, markers: tuple[str, ...]) -> bool:
    return any(document.select_one(marker) is not None for marker in markers)


def _demote_containment(containment: str) -> tuple[str, str]:
    """Move a non-standard containment class into the secondary slot.

    Returns:
        Tuple of (containment, secondary)
    """
    if is_valid_containment_class(containment):
        return containment, ""
    return FALLBACK_DEMOTED_CLASS, containment


class VariantExtractor:
    """Reads ACS classification data out of a parsed page.

    Exactly one strategy is applied per page; the first layout whose marker is
    present wins, in the order bar, hybrid bar, Flops header, AIM header, and the
    free-text scan when none is present.
    """

    def __init__(self, selectors: LayoutSelectors = DEFAULT_SELECTORS):
        self.selectors = selectors
        self.logger = get_logger(__name__)

    def detect(self, document: BeautifulSoup) -> ExtractionStrategy:
        """Return the strategy that applies to the page."""
        if _has_any(document, self.selectors.bar.markers):
            return ExtractionStrategy.BAR
        if _has_any(document, self.selectors.hybrid_bar.markers):
            return ExtractionStrategy.HYBRID_BAR
        if _has_any(document, self.selectors.flops_header.markers):
            return ExtractionStrategy.FLOPS_HEADER
        if _has_any(document, self.selectors.aim_header.markers):
            return ExtractionStrategy.AIM_HEADER
        return ExtractionStrategy.HEURISTIC_TEXT

    def extract(self, document: BeautifulSoup) -> RawClassification | None:
        """Extract the raw classification, or None when the page has nothing to offer."""
        strategy = self.detect(document)
        self.logger.debug("Detected page layout", strategy=strategy.value)

        match strategy:
            case ExtractionStrategy.BAR:
                return self._extract_bar(document)
            case ExtractionStrategy.HYBRID_BAR:
                return self._extract_hybrid_bar(document)
            case ExtractionStrategy.FLOPS_HEADER:
                return self._extract_flops_header(document)
            case ExtractionStrategy.AIM_HEADER:
                return self._extract_aim_header(document)
            case _:
                return self._extract_heuristic(document)

    def _extract_bar(self, document: BeautifulSoup) -> BarClassification:
        sel = self.selectors.bar
        return BarClassification(
            shared=SharedClassification(
                containment=clean(_select_text(document, sel.containment)),
                secondary=clean(_select_text(document, sel.secondary)),
                disruption=clean(_select_text(document, sel.disruption)),
                strategy=ExtractionStrategy.BAR,
            ),
            clearance=_select_clearance(document, sel.clearance),
            clearance_text=clean(_select_text(document, sel.clearance_text)),
            risk=clean(_select_text(document, sel.risk)),
        )

    def _extract_hybrid_bar(self, document: BeautifulSoup) -> BarClassification:
        sel = self.selectors.hybrid_bar

        clearance_text = clean(_select_text(document, sel.clearance_text))
        # The hybrid bar renders the literal word as a placeholder when no label is set
        if clearance_text.lower() == "clearance":
            clearance_text = ""

        return BarClassification(
            shared=SharedClassification(
                containment=clean(_select_text(document, sel.containment)),
                secondary=clean(_select_text(document, sel.secondary)),
                disruption=clean(_select_text(document, sel.disruption)),
                strategy=ExtractionStrategy.HYBRID_BAR,
            ),
            clearance=_select_clearance(document, sel.clearance),
            clearance_text=clearance_text,
            risk=clean(_select_text(document, sel.risk)),
        )

    def _extract_flops_header(self, document: BeautifulSoup) -> FlopsClassification:
        sel = self.selectors.flops_header
        containment, secondary = _demote_containment(clean(_select_text(document, sel.containment)))

        return FlopsClassification(
            shared=SharedClassification(
                containment=containment,
                secondary=secondary,
                disruption=clean(_select_text(document, sel.disruption)),
                strategy=ExtractionStrategy.FLOPS_HEADER,
            ),
            clearance=_select_clearance(document, sel.clearance),
            clearance_text=clean(_select_text(document, sel.clearance_text)),
        )

    def _extract_aim_header(self, document: BeautifulSoup) -> AimClassification:
        sel = self.selectors.aim_header
        containment, secondary = _demote_containment(clean(_select_text(document, sel.containment)))

        return AimClassification(
            shared=SharedClassification(
                containment=containment,
                secondary=secondary,
                disruption=clean(_select_text(document, sel.disruption)),
                strategy=ExtractionStrategy.AIM_HEADER,
            ),
            clearance=AIM_CLEARANCE_LEVELS.get(_select_class(document, sel.clearance), ""),
        )

    def _extract_heuristic(self, document: BeautifulSoup) -> HeuristicClassification | None:
        text = document.get_text().lower()
        found: dict[str, str] = {}

        for label, field in HEURISTIC_LABELS:
            index = text.find(label)
            if index != -1:
                found[field] = extract_string_after_colon(text[index:])
                self.logger.debug("Text scan found label", label=label, value=found[field])

        for keyword in DISRUPTION_KEYWORDS:
            if re.search(rf"(?<!\S){keyword}(?!\S)", text):
                found["disruption"] = keyword
                self.logger.debug("Text scan found disruption keyword", keyword=keyword)
                break

        containment = clean(found.get("containment", ""))
        secondary = clean(found.get("secondary", ""))
        disruption = clean(found.get("disruption", ""))
        risk = clean(found.get("risk", ""))

        if not (disruption or risk or secondary):
            return None

        return HeuristicClassification(
            shared=SharedClassification(
                containment=containment,
                secondary=secondary,
                disruption=disruption,
                strategy=ExtractionStrategy.HEURISTIC_TEXT,
            ),
            risk=risk,
        )

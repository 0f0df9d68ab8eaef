# ABOUTME: Page fetching, layout detection and field normalization
# ABOUTME: Turns a wiki URL into a raw, cleaned ACS classification

from .fetcher import FetchOutcome, Found, NotFound, PageFetcher, TransientError
from .models import (
    AimClassification,
    BarClassification,
    FlopsClassification,
    HeuristicClassification,
    RawClassification,
    SharedClassification,
)
from .selectors import DEFAULT_SELECTORS, LayoutSelectors
from .variants import VariantExtractor

__all__ = [
    "DEFAULT_SELECTORS",
    "AimClassification",
    "BarClassification",
    "FetchOutcome",
    "FlopsClassification",
    "Found",
    "HeuristicClassification",
    "LayoutSelectors",
    "NotFound",
    "PageFetcher",
    "RawClassification",
    "SharedClassification",
    "TransientError",
    "VariantExtractor",
]

# ABOUTME: Exception taxonomy for the harvesting pipeline
# ABOUTME: Separates expected per-target drops from fatal file-level failures


class HarvestError(Exception):
    """Base exception for all harvesting errors."""

    pass


class NotFoundPage(HarvestError):
    """Raised when a page does not exist (HTTP 404). Expected, never retried."""

    pass


class TransientFetchError(HarvestError):
    """Raised when a fetch fails in a way that may succeed on a later attempt."""

    def __init__(self, url: str, cause: str):
        super().__init__(f"Failed to fetch {url}: {cause}")
        self.url = url
        self.cause = cause


class NoExtractableData(HarvestError):
    """Raised when a page matched no layout and the text scan found nothing."""

    pass


class MalformedCatalogLookup(HarvestError, KeyError):
    """Raised when an identifier has no entry in the catalog."""

    def __init__(self, identifier: str):
        super().__init__(identifier)
        self.identifier = identifier

    def __str__(self) -> str:
        return f"No catalog entry for identifier: {self.identifier}"


class InvalidFieldRequested(HarvestError, ValueError):
    """Raised when a sort field name is not one of the sortable fields."""

    pass


class DatasetFileError(HarvestError):
    """Raised when a catalog, feed or dataset file cannot be read or written."""

    pass

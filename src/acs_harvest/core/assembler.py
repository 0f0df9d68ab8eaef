# ABOUTME: Converts raw layout extractions into canonical ACS records
# ABOUTME: Fills catalog names, defaults absent fields and reconciles the identifier with the title

from acs_harvest.catalog.lookup import CatalogLookup
from acs_harvest.errors import MalformedCatalogLookup
from acs_harvest.extraction.models import (
    AimClassification,
    BarClassification,
    FlopsClassification,
    HeuristicClassification,
    RawClassification,
)
from acs_harvest.extraction.normalize import (
    SENTINEL_IDENTIFIERS,
    TEXT_IDENTIFIER_PATTERN,
    clean,
    default_clearance_text,
    extract_identifier_number,
    format_identifier,
)
from acs_harvest.models import CanonicalRecord
from acs_harvest.utils.logging import get_logger


def _layout_fields(raw: RawClassification) -> dict[str, str]:
    """Flatten a raw extraction into the layout-dependent record fields.

    Fields a layout does not provide default to an empty string.
    """
    match raw:
        case BarClassification(clearance=clearance, clearance_text=clearance_text, risk=risk):
            return {"clearance_level": clearance, "clearance_text": clearance_text, "risk_class": risk}
        case FlopsClassification(clearance=clearance, clearance_text=clearance_text):
            return {"clearance_level": clearance, "clearance_text": clearance_text, "risk_class": ""}
        case AimClassification(clearance=clearance):
            return {"clearance_level": clearance, "clearance_text": "", "risk_class": ""}
        case HeuristicClassification(risk=risk):
            return {"clearance_level": "", "clearance_text": "", "risk_class": risk}
    raise TypeError(f"Unsupported raw classification: {type(raw).__name__}")


class RecordAssembler:
    """Builds CanonicalRecords from raw extractions."""

    def __init__(self, catalog: CatalogLookup | None = None):
        self.catalog = catalog or CatalogLookup()
        self.logger = get_logger(__name__)

    def assemble(
        self,
        raw: RawClassification,
        *,
        identifier: str,
        url: str,
        name: str | None = None,
        is_fragment: bool = False,
    ) -> CanonicalRecord:
        """Assemble one record.

        Args:
            raw: Extraction result for the page
            identifier: Identifier the caller fetched the page for
            url: Page URL
            name: Name already known to the caller; looked up in the catalog when omitted
            is_fragment: Whether the page is a fragment sub-page

        Returns:
            The canonical record
        """
        display_identifier = ""
        resolved_name = name or ""

        if not name and identifier.upper() not in SENTINEL_IDENTIFIERS:
            try:
                entry = self.catalog.lookup(identifier)
            except MalformedCatalogLookup as e:
                self.logger.warning("Catalog lookup failed, keeping caller values", identifier=identifier, error=str(e))
            else:
                resolved_name = entry.name
                display_identifier = entry.display_identifier

        # The page title is authoritative over the identifier it was fetched under
        title_number = extract_identifier_number(resolved_name, TEXT_IDENTIFIER_PATTERN)
        if title_number is not None:
            identifier = format_identifier(title_number)

        fields = _layout_fields(raw)
        clearance_level = clean(fields["clearance_level"])
        clearance_text = clean(fields["clearance_text"]) or clean(default_clearance_text(clearance_level))

        return CanonicalRecord(
            name=resolved_name,
            identifier=identifier,
            display_identifier=display_identifier,
            clearance_level=clearance_level,
            clearance_text=clearance_text,
            containment_class=clean(raw.shared.containment),
            secondary_class=clean(raw.shared.secondary),
            disruption_class=clean(raw.shared.disruption),
            risk_class=clean(fields["risk_class"]),
            source_url=url,
            is_fragment=is_fragment,
            extraction_strategy=raw.shared.strategy,
        )

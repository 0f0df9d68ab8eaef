# ABOUTME: Pydantic models for catalog entries, discovery entries and harvested ACS records
# ABOUTME: JSON aliases keep the on-disk schema compatible with datasets from earlier runs

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ExtractionStrategy(str, Enum):
    """Page layout family a record was extracted from."""

    BAR = "ACS Bar"
    HYBRID_BAR = "ACS Hybrid Bar"
    FLOPS_HEADER = "Flops Header"
    AIM_HEADER = "AIM Header"
    HEURISTIC_TEXT = "Backup"


class CatalogEntry(BaseModel):
    """One row of the authoritative SCP name list scraped from the series pages."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    identifier: str = Field(..., alias="actual_number", description="Canonical identifier, e.g. SCP-002")
    display_identifier: str = Field(..., alias="display_number", description="Identifier as shown on the page")
    name: str = Field(..., description="Display name of the entry")
    url: str = Field(..., description="Absolute URL of the entry's page")


class DiscoveryEntry(BaseModel):
    """A candidate page found through the backlinks of an ACS component page."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    identifier: str = Field("", alias="actual_number")
    name: str = Field("")
    url: str = Field(...)
    is_fragment: bool = Field(False, alias="fragment", description="True if the page is a fragment sub-page")


class CanonicalRecord(BaseModel):
    """A fully assembled, normalized ACS record. The unit of output."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    name: str = Field("")
    identifier: str = Field(..., alias="actual_number")
    display_identifier: str = Field("", alias="display_number")
    clearance_level: str = Field("", alias="clearance")
    clearance_text: str = Field("")
    containment_class: str = Field("", alias="contain")
    secondary_class: str = Field("", alias="secondary")
    disruption_class: str = Field("", alias="disrupt")
    risk_class: str = Field("", alias="risk")
    source_url: str = Field("", alias="url")
    is_fragment: bool = Field(False, alias="fragment")
    extraction_strategy: ExtractionStrategy = Field(..., alias="scraper")

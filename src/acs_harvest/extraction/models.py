# ABOUTME: Raw classification records produced by the layout extractors
# ABOUTME: Each layout yields its own shape around a shared embedded classification block

from pydantic import BaseModel, ConfigDict

from acs_harvest.models import ExtractionStrategy


class SharedClassification(BaseModel):
    """Fields every layout can provide."""

    model_config = ConfigDict(frozen=True)

    containment: str = ""
    secondary: str = ""
    disruption: str = ""
    strategy: ExtractionStrategy


class BarClassification(BaseModel):
    """ACS bar, lite bar and hybrid bar layouts."""

    model_config = ConfigDict(frozen=True)

    shared: SharedClassification
    clearance: str = ""
    clearance_text: str = ""
    risk: str = ""


class FlopsClassification(BaseModel):
    """Flops header table layout. Has no risk class."""

    model_config = ConfigDict(frozen=True)

    shared: SharedClassification
    clearance: str = ""
    clearance_text: str = ""


class AimClassification(BaseModel):
    """AIM header layout. Clearance comes from a CSS class, there is no label or risk."""

    model_config = ConfigDict(frozen=True)

    shared: SharedClassification
    clearance: str = ""


class HeuristicClassification(BaseModel):
    """Free-text scan of pages without a recognized layout. Has no clearance."""

    model_config = ConfigDict(frozen=True)

    shared: SharedClassification
    risk: str = ""


RawClassification = BarClassification | FlopsClassification | AimClassification | HeuristicClassification

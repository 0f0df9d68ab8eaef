# ABOUTME: CSS selectors locating ACS components in each known page layout
# ABOUTME: Immutable configuration handed to VariantExtractor at construction time

from pydantic import BaseModel, ConfigDict


class BarSelectors(BaseModel):
    model_config = ConfigDict(frozen=True)

    markers: tuple[str, ...] = ("div.anom-bar-container", "div.anom-lite-bar-container")
    clearance: str = "div.top-right-box > div.level"
    clearance_text: str = "div.top-right-box > div.clearance"
    containment: str = "div.contain-class > div.class-text"
    secondary: str = "div.second-class > div.class-text"
    disruption: str = "div.disrupt-class > div.class-text"
    risk: str = "div.risk-class > div.class-text"


class HybridBarSelectors(BaseModel):
    model_config = ConfigDict(frozen=True)

    markers: tuple[str, ...] = ("div.acs-hybrid-text-bar",)
    clearance: str = "div.acs-clear > strong"
    clearance_text: str = "div.acs-clear > span.clearance-level-text"
    containment: str = "div.acs-contain > div.acs-text > span:nth-of-type(2)"
    secondary: str = "div.acs-secondary > div.acs-text > span:nth-of-type(2)"
    disruption: str = "div.acs-disrupt > div.acs-text"
    risk: str = "div.acs-risk > div.acs-text"


class FlopsHeaderSelectors(BaseModel):
    """Rows are matched with a descendant combinator so pages with or without an explicit
    ``<tbody>`` both work; ``html.parser`` does not synthesize one."""

    model_config = ConfigDict(frozen=True)

    markers: tuple[str, ...] = (".itemInfo.darkbox",)
    clearance: str = ".itemInfo.darkbox tr:nth-child(1) > td:nth-child(2) > span:nth-child(1)"
    clearance_text: str = ".itemInfo.darkbox tr:nth-child(2) > td:nth-child(2) > span:nth-child(1)"
    containment: str = ".itemInfo.darkbox tr:nth-child(2) > td:nth-child(1)"
    disruption: str = ".itemInfo.darkbox + p > a.disruptionHeader"


class AimHeaderSelectors(BaseModel):
    model_config = ConfigDict(frozen=True)

    markers: tuple[str, ...] = ("div.desktop-aim div.cell-container-image",)
    clearance: str = "div.desktop-aim > div.w-container > div > div:nth-child(2) > p > span > span"
    containment: str = "div.desktop-aim > div.w-container > div > div:nth-child(3) > p"
    disruption: str = "div.desktop-aim > div.w-container > div > div:nth-child(4) > p"


class LayoutSelectors(BaseModel):
    """All selectors used to detect and read the known layouts."""

    model_config = ConfigDict(frozen=True)

    bar: BarSelectors = BarSelectors()
    hybrid_bar: HybridBarSelectors = HybridBarSelectors()
    flops_header: FlopsHeaderSelectors = FlopsHeaderSelectors()
    aim_header: AimHeaderSelectors = AimHeaderSelectors()


DEFAULT_SELECTORS = LayoutSelectors()

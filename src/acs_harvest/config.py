# ABOUTME: Application configuration using Pydantic Settings for environment variables
# ABOUTME: Provides type-safe access to harvest limits, file locations and logging config

from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from acs_harvest.core.sorting import SortField


class Config(BaseSettings):
    """Application configuration with environment variable support."""

    model_config = SettingsConfigDict(
        env_prefix="ACS_HARVEST_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",  # Ignore unknown environment variables
    )

    # Wiki / HTTP Configuration
    base_url: str = Field(default="https://scp-wiki.wikidot.com", description="Root URL of the wiki")
    user_agent: str = Field(default="acs-harvest/0.1 (python-httpx)", description="User-Agent sent with every request")
    referer: str = Field(default="https://scp-wiki.wikidot.com/", description="Referer sent with every request")
    url_template: str = Field(
        default="https://scp-wiki.wikidot.com/{slug}",
        description="Page URL for identifiers missing from the catalog; {slug} is the lowercased identifier",
    )

    # File Configuration
    output_dir: Path = Field(default=Path("output"), description="Directory holding all JSON files")
    catalog_file: str = Field(default="scp_names.json", description="Catalog of SCP names")
    backlinks_file: str = Field(default="acs_backlinks.json", description="Discovery feed of backlinked pages")
    dataset_file: str = Field(default="acs_database.json", description="Harvested ACS dataset")

    # Harvest Configuration
    start: int = Field(default=1, ge=0, le=9999, description="First catalog number to harvest")
    end: int = Field(default=7999, ge=0, le=9999, description="Last catalog number to harvest (inclusive)")
    limit: int = Field(default=10, ge=1, description="Maximum number of in-flight page fetches")
    retries: int = Field(default=5, ge=0, description="Retries after a transient fetch failure")
    request_delay: float = Field(default=1.0, ge=0.0, description="Politeness delay after each successful fetch")
    retry_backoff: float = Field(default=2.0, ge=0.0, description="Base of the exponential retry backoff in seconds")
    sort_field: SortField = Field(default=SortField.IDENTIFIER, description="Field the dataset is sorted by")

    # Logging Configuration
    log_mode: Literal["interactive", "production"] = Field(default="interactive", description="Logging output mode")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO", description="Logging verbosity level"
    )

    log_file: Path | None = Field(default=None, description="Custom log file path (overrides default)")

    @field_validator("sort_field", mode="before")
    @classmethod
    def _validate_sort_field(cls, value):
        if isinstance(value, SortField):
            return value
        return SortField.parse(str(value))

    @property
    def catalog_path(self) -> Path:
        return self.output_dir / self.catalog_file

    @property
    def backlinks_path(self) -> Path:
        return self.output_dir / self.backlinks_file

    @property
    def dataset_path(self) -> Path:
        return self.output_dir / self.dataset_file


# Global config instance - lazy loaded when first accessed
_config_instance: Config | None = None


def get_config() -> Config:
    """Get the global configuration instance.

    Creates the config on first access, subsequent calls return the same instance.

    Returns:
        Config: The application configuration instance
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = Config()
    return _config_instance


def reload_config() -> Config:
    """Reload configuration from environment variables.

    Useful for testing or when environment variables change at runtime.

    Returns:
        Config: A fresh configuration instance
    """
    global _config_instance
    _config_instance = Config()
    return _config_instance

"""Runtime configuration for feature-set staging runs."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from featurestage.modules.featuresets.domain.constants import (
    DEFAULT_COPY_TYPES,
    DEFAULT_EXCLUDE_SCOPE,
    DEFAULT_INCLUDE_SCOPE,
    DEFAULT_UNPACK_TYPES,
    PROPERTY_PREFIX,
)
from featurestage.modules.featuresets.domain.models import NameMapping


class Settings(BaseSettings):
    """Configuration values mapped from ``FEATURESTAGE_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix=PROPERTY_PREFIX,
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = Field("Feature Stage API")
    version: str = Field("1.0.0")
    log_level: str = Field("INFO")

    # Staging
    build_directory: Path = Field(Path("target"))
    stage_directory: Optional[Path] = Field(None, description="Defaults to <build_directory>/stage")
    copy_types: str = Field(DEFAULT_COPY_TYPES)
    copy_excludes: List[str] = Field(default_factory=list)
    unpack_types: str = Field(DEFAULT_UNPACK_TYPES)
    unpack_excludes: List[str] = Field(default_factory=list)
    includes: str = Field("")
    excludes: str = Field("")
    include_scope: str = Field(DEFAULT_INCLUDE_SCOPE)
    exclude_scope: str = Field(DEFAULT_EXCLUDE_SCOPE)
    include_scope_empty_means_all: bool = Field(False)
    featureset_groupid_includes: List[str] = Field(default_factory=list)
    mappings: List[NameMapping] = Field(default_factory=list)
    skip: bool = Field(False)
    sort_resolved: bool = Field(True)

    # Nexus repository configuration
    nexus_base_url: str = Field("http://localhost:8081")
    nexus_repository: str = Field("maven-public")
    nexus_username: Optional[str] = Field(None)
    nexus_password: Optional[str] = Field(None)
    nexus_timeout: float = Field(30.0)
    local_repository: Path = Field(Path("~/.m2/repository"))

    # Zip packaging
    zip_duplicate: str = Field("add")
    output_timestamp: Optional[str] = Field(None)


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance for dependency injection."""
    return Settings()

"""Service wiring shared by the API and the CLI."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

from featurestage.modules.featuresets.service.manager import FeatureSetsStagingService
from featurestage.modules.packaging import PackagingService

from .settings import Settings

log = logging.getLogger(__name__)


@dataclass
class ServiceContainer:
    """Container that wires plain-Python services with shared settings."""

    settings: Settings
    staging_service: FeatureSetsStagingService = field(init=False)
    packaging_service: PackagingService = field(init=False)

    def __post_init__(self) -> None:
        self.staging_service = FeatureSetsStagingService(self.settings)
        self.packaging_service = PackagingService(self.settings)
        log.debug(
            "Services ready nexus=%s repository=%s",
            self.settings.nexus_base_url,
            self.settings.nexus_repository,
        )

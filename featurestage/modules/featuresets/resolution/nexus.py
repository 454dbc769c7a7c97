"""HTTP client resolving artifacts and POM descriptors from a Nexus repository."""

from __future__ import annotations

import logging
import time
from pathlib import Path
from typing import Iterable, List, Optional, Protocol

import httpx

from featurestage.modules.featuresets.domain import (
    ArtifactCoordinate,
    ArtifactRequest,
    DependencyDeclaration,
    ResolutionError,
    ResolvedDependency,
)
from featurestage.settings import Settings

from .pom import PomDocument, effective_dependencies, parse_pom

MAX_PARENT_DEPTH = 10


class ArtifactRepository(Protocol):
    """Repository collaborator used by the resolution driver."""

    def read_dependency_descriptor(
        self, coordinate: ArtifactCoordinate
    ) -> List[DependencyDeclaration]:  # pragma: no cover - interface
        ...

    def resolve_artifacts(
        self, requests: Iterable[ArtifactRequest]
    ) -> List[ResolvedDependency]:  # pragma: no cover - interface
        ...


class NexusRepositoryClient:
    """Download artifacts from a Nexus repository into a Maven-layout local repository."""

    def __init__(self, settings: Settings, client: Optional[httpx.Client] = None) -> None:
        self.settings = settings
        self.base_url = settings.nexus_base_url.rstrip("/")
        self.repository = settings.nexus_repository
        self.local_repository = Path(settings.local_repository).expanduser()
        self.log = logging.getLogger(self.__class__.__name__)
        auth = None
        if settings.nexus_username and settings.nexus_password:
            auth = (settings.nexus_username, settings.nexus_password)
        self._auth = auth
        self._client = client or httpx.Client(timeout=settings.nexus_timeout, verify=True)

    def _build_artifact_url(self, coords: ArtifactCoordinate) -> str:
        path = "/".join(coords.path_segments)
        return f"{self.base_url}/repository/{self.repository}/{path}"

    def local_path(self, coords: ArtifactCoordinate) -> Path:
        return self.local_repository.joinpath(*coords.path_segments)

    def download(self, coords: ArtifactCoordinate, *, force: bool = False) -> Path:
        url = self._build_artifact_url(coords)
        target = self.local_path(coords)
        target.parent.mkdir(parents=True, exist_ok=True)
        if target.exists() and not force and not coords.version.endswith("SNAPSHOT"):
            self.log.debug("Reusing cached artifact %s -> %s", coords, target)
            return target

        self.log.info("Downloading artifact %s url=%s", coords, url)
        start_time = time.time()
        downloaded = 0
        partial = target.with_name(target.name + ".part")
        try:
            with self._client.stream("GET", url, auth=self._auth) as response:
                response.raise_for_status()
                total = int(response.headers.get("content-length") or 0)
                next_percent = 10
                with open(partial, "wb") as fh:
                    for chunk in response.iter_bytes(65536):
                        if not chunk:
                            continue
                        fh.write(chunk)
                        downloaded += len(chunk)
                        if total:
                            percent = int(downloaded * 100 / total)
                            if percent >= next_percent:
                                self.log.debug(
                                    "Download progress %s %s%% (%d/%d bytes)",
                                    coords,
                                    percent,
                                    downloaded,
                                    total,
                                )
                                next_percent += 10
            partial.replace(target)
        except Exception:
            # an interrupted download never leaves a partial file behind
            partial.unlink(missing_ok=True)
            raise
        elapsed = max(time.time() - start_time, 1e-3)
        speed_mb_s = (downloaded / 1024 / 1024) / elapsed
        self.log.info(
            "Downloaded artifact %s -> %s (%d bytes, %.2f MB/s, %.2fs)",
            coords,
            target,
            downloaded,
            speed_mb_s,
            elapsed,
        )
        return target

    def _read_pom(self, coords: ArtifactCoordinate) -> PomDocument:
        pom_coords = coords.with_extension("pom")
        try:
            path = self.download(pom_coords)
        except httpx.HTTPError as exc:
            raise ResolutionError(f"Failed to read artifact descriptor for {coords}: {exc}") from exc
        return parse_pom(path.read_bytes(), str(pom_coords))

    def read_dependency_descriptor(self, coordinate: ArtifactCoordinate) -> List[DependencyDeclaration]:
        pom = self._read_pom(coordinate)
        ancestors: List[PomDocument] = []
        parent = pom.parent
        while parent is not None:
            if len(ancestors) >= MAX_PARENT_DEPTH:
                raise ResolutionError(f"Parent chain of {coordinate} is deeper than {MAX_PARENT_DEPTH}")
            parent_pom = self._read_pom(parent)
            ancestors.append(parent_pom)
            parent = parent_pom.parent
        declarations = effective_dependencies(pom, ancestors, source=str(coordinate))
        self.log.debug("Descriptor %s declares %d dependencies", coordinate, len(declarations))
        return declarations

    def resolve_artifacts(self, requests: Iterable[ArtifactRequest]) -> List[ResolvedDependency]:
        """Resolve every request or none: any failure raises after all were attempted."""
        resolved: List[ResolvedDependency] = []
        failures: List[str] = []
        for request in requests:
            try:
                path = self.download(request.coordinate)
            except (httpx.HTTPError, OSError) as exc:
                self.log.error("Could not resolve %s: %s", request.coordinate, exc)
                failures.append(f"{request.coordinate}: {exc}")
                continue
            resolved.append(ResolvedDependency(coordinate=request.coordinate, file=path, scope=request.scope))
        if failures:
            raise ResolutionError("The following artifacts could not be resolved: " + "; ".join(failures))
        return resolved

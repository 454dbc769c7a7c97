from .driver import ResolutionDriver
from .nexus import ArtifactRepository, NexusRepositoryClient
from .pom import effective_dependencies, parse_dependencies, parse_pom, read_project_pom

__all__ = [
    "ResolutionDriver",
    "ArtifactRepository",
    "NexusRepositoryClient",
    "effective_dependencies",
    "parse_dependencies",
    "parse_pom",
    "read_project_pom",
]

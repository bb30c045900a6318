"""Port interfaces for the depassembly application layer.

Domain logic depends on these protocols, never on concrete adapters.
"""

__all__ = [
    "RESOLVER_ERRORS",
    "ArchiveWriterPort",
    "ArtifactNotFoundError",
    "ArtifactResolutionError",
    "DependencyResolverPort",
    "InvalidVersionError",
    "PlacementEntry",
    "ProjectLoaderPort",
    "StagedArchivePort",
]

from depassembly.app.ports.archive import ArchiveWriterPort, PlacementEntry, StagedArchivePort
from depassembly.app.ports.project_loader import ProjectLoaderPort
from depassembly.app.ports.resolver import (
    RESOLVER_ERRORS,
    ArtifactNotFoundError,
    ArtifactResolutionError,
    DependencyResolverPort,
    InvalidVersionError,
)

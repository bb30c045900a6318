"""Domain models: coordinates, projects, and assembly descriptors."""

from depassembly.model.artifact import (
    SCOPE_INCLUDES,
    ArtifactCoordinate,
    DependencyScope,
    ScopeSelector,
    identity_forms,
)
from depassembly.model.descriptor import (
    ArchiveFormat,
    AssemblyDescriptor,
    DependencySetRule,
    UnpackOptions,
    load_descriptor,
)
from depassembly.model.project import (
    BuildInfo,
    Dependency,
    Project,
    ProjectDescriptor,
    ResolvedArtifact,
    load_project,
    read_project_descriptor,
)

__all__ = [
    "SCOPE_INCLUDES",
    "ArchiveFormat",
    "ArtifactCoordinate",
    "AssemblyDescriptor",
    "BuildInfo",
    "Dependency",
    "DependencyScope",
    "DependencySetRule",
    "Project",
    "ProjectDescriptor",
    "ResolvedArtifact",
    "ScopeSelector",
    "UnpackOptions",
    "identity_forms",
    "load_descriptor",
    "load_project",
    "read_project_descriptor",
]

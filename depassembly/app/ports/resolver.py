"""Dependency resolver port interface and the failures it may raise."""

from __future__ import annotations

from collections.abc import Iterable, Sequence
from pathlib import Path
from typing import Protocol

from depassembly.model import Project, ResolvedArtifact, ScopeSelector


class ArtifactResolutionError(Exception):
    """The dependency graph could not be walked."""


class ArtifactNotFoundError(Exception):
    """A required artifact file is missing from every repository."""

    def __init__(self, message: str, *, artifact_id: str | None = None) -> None:
        self.artifact_id = artifact_id
        super().__init__(message)


class InvalidVersionError(Exception):
    """A declared dependency carries a version that cannot be used."""


RESOLVER_ERRORS: tuple[type[Exception], ...] = (
    ArtifactResolutionError,
    ArtifactNotFoundError,
    InvalidVersionError,
)


class DependencyResolverPort(Protocol):
    """Port interface for turning a project + scope into resolved artifacts."""

    def resolve_dependencies(
        self,
        project: Project,
        scope: ScopeSelector,
        local_repository: Path,
        remote_repositories: Sequence[str],
    ) -> Iterable[ResolvedArtifact]:
        """Resolve ``project``'s dependencies visible in ``scope``.

        Raises:
            ArtifactResolutionError: graph could not be computed
            ArtifactNotFoundError: an admitted artifact has no file
            InvalidVersionError: a dependency version is unusable
        """
        ...

"""Repository-backed dependency resolver."""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from depassembly.app.adapters.repository import RepositoryProjectLoader, locate_artifact_file
from depassembly.app.ports import (
    ArtifactNotFoundError,
    ArtifactResolutionError,
    DependencyResolverPort,
    InvalidVersionError,
    ProjectLoaderPort,
)
from depassembly.errors import ProjectBuildError
from depassembly.model import (
    SCOPE_INCLUDES,
    ArtifactCoordinate,
    Dependency,
    DependencyScope,
    Project,
    ResolvedArtifact,
    ScopeSelector,
)
from depassembly.utils.patterns import match_identity

logger = logging.getLogger(__name__)

# (parent effective scope, declared child scope) -> child effective scope.
# Pairs not listed are not transitive.
_SCOPE_PROPAGATION: dict[tuple[str, str], DependencyScope] = {
    ("compile", "compile"): "compile",
    ("compile", "runtime"): "runtime",
    ("provided", "compile"): "provided",
    ("provided", "runtime"): "provided",
    ("runtime", "compile"): "runtime",
    ("runtime", "runtime"): "runtime",
    ("test", "compile"): "test",
    ("test", "runtime"): "test",
}


@dataclass(frozen=True, slots=True)
class _Node:
    dependency: Dependency
    scope: DependencyScope
    trail: tuple[str, ...]
    exclusions: tuple[str, ...]


def _validated_coordinate(dependency: Dependency) -> ArtifactCoordinate:
    version = dependency.version
    if (
        not version
        or version != version.strip()
        or any(char.isspace() for char in version)
        or version[0] in "[("
        or "," in version
    ):
        raise InvalidVersionError(
            f"Invalid version {version!r} for dependency "
            f"{dependency.group_id}:{dependency.artifact_id}"
        )
    return dependency.to_coordinate()


class RepositoryDependencyResolver(DependencyResolverPort):
    """Breadth-first resolver with nearest-wins mediation over a Maven-layout repository.

    The first declaration reached at the shallowest depth wins for each
    ``groupId:artifactId:type:classifier``. Optional transitive dependencies
    are skipped and exclusions prune the whole subtree below the declaring
    dependency. Only artifacts admitted by the requested scope need a file.
    """

    def __init__(self, project_loader: ProjectLoaderPort | None = None) -> None:
        self._project_loader = project_loader or RepositoryProjectLoader()

    def resolve_dependencies(
        self,
        project: Project,
        scope: ScopeSelector,
        local_repository: Path,
        remote_repositories: Sequence[str],
    ) -> list[ResolvedArtifact]:
        admitted = SCOPE_INCLUDES[scope]
        queue: deque[_Node] = deque(
            _Node(dependency, dependency.scope, (), tuple(dependency.exclusions))
            for dependency in project.dependencies
        )
        seen: set[str] = {project.coordinate.conflict_key}
        selected: list[tuple[ResolvedArtifact, Dependency]] = []

        while queue:
            node = queue.popleft()
            key = node.dependency.conflict_key
            if key in seen:
                logger.debug("Omitting %s:%s (nearer declaration wins)", key, node.dependency.version)
                continue
            seen.add(key)
            coordinate = _validated_coordinate(node.dependency)

            artifact = ResolvedArtifact(coordinate=coordinate, scope=node.scope, trail=node.trail)
            selected.append((artifact, node.dependency))

            if node.scope == "system":
                continue
            for child in self._children(artifact, local_repository, remote_repositories):
                if child.optional:
                    continue
                child_scope = _SCOPE_PROPAGATION.get((node.scope, child.scope))
                if child_scope is None:
                    continue
                if any(
                    match_identity(pattern, f"{child.group_id}:{child.artifact_id}")
                    for pattern in node.exclusions
                ):
                    logger.debug("Excluding %s:%s below %s", child.group_id, child.artifact_id, coordinate.id)
                    continue
                queue.append(
                    _Node(
                        child,
                        child_scope,
                        (*node.trail, coordinate.id),
                        (*node.exclusions, *child.exclusions),
                    )
                )

        resolved: list[ResolvedArtifact] = []
        for artifact, dependency in selected:
            if artifact.scope not in admitted:
                continue
            artifact.file = self._locate(artifact, dependency, local_repository, remote_repositories)
            resolved.append(artifact)
        return resolved

    def _children(
        self,
        artifact: ResolvedArtifact,
        local_repository: Path,
        remote_repositories: Sequence[str],
    ) -> list[Dependency]:
        try:
            dep_project = self._project_loader.load_from_repository(
                artifact, remote_repositories, local_repository, True
            )
        except ProjectBuildError as exc:
            raise ArtifactResolutionError(
                f"Cannot read dependencies of {artifact.id}: {exc}"
            ) from exc
        artifact.project = dep_project
        return list(dep_project.dependencies)

    def _locate(
        self,
        artifact: ResolvedArtifact,
        dependency: Dependency,
        local_repository: Path,
        remote_repositories: Sequence[str],
    ) -> Path:
        if artifact.scope == "system":
            system_path = dependency.system_path
            if system_path is None or not system_path.exists():
                raise ArtifactNotFoundError(
                    f"System-scoped artifact {artifact.id} not found at {system_path}",
                    artifact_id=artifact.id,
                )
            return system_path

        found = locate_artifact_file(artifact.coordinate, local_repository, remote_repositories)
        if found is None:
            raise ArtifactNotFoundError(
                f"Artifact {artifact.id} not found in {local_repository} "
                f"or {len(remote_repositories)} remote repository(ies)",
                artifact_id=artifact.id,
            )
        return found

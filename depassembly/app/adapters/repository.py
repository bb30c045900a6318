"""Maven-layout repository access and project metadata loading."""

from __future__ import annotations

import logging
from collections.abc import Iterator, Sequence
from pathlib import Path
from urllib.parse import unquote, urlparse

from depassembly.app.ports import ProjectLoaderPort
from depassembly.errors import ProjectBuildError
from depassembly.model import ArtifactCoordinate, Project, ResolvedArtifact, read_project_descriptor

logger = logging.getLogger(__name__)

METADATA_SUFFIX = ".project.yaml"


def repository_roots(local_repository: Path, remote_repositories: Sequence[str]) -> Iterator[Path]:
    """Yield the local repository, then every filesystem remote.

    Remote entries may be plain paths or ``file://`` URLs; other schemes are
    skipped since artifacts are never fetched over the network.
    """
    yield Path(local_repository)
    for remote in remote_repositories:
        parsed = urlparse(remote)
        if parsed.scheme == "file":
            yield Path(unquote(parsed.path))
        elif not parsed.scheme or len(parsed.scheme) == 1:
            # bare path or Windows drive letter
            yield Path(remote)
        else:
            logger.debug("Skipping non-filesystem remote repository %s", remote)


def artifact_directory(root: Path, coordinate: ArtifactCoordinate) -> Path:
    return root.joinpath(*coordinate.repository_path[:-1])


def locate_artifact_file(
    coordinate: ArtifactCoordinate,
    local_repository: Path,
    remote_repositories: Sequence[str],
) -> Path | None:
    """Return the first existing file for ``coordinate`` across repositories."""
    for root in repository_roots(local_repository, remote_repositories):
        candidate = root.joinpath(*coordinate.repository_path)
        if candidate.exists():
            return candidate
    return None


def locate_metadata_file(
    coordinate: ArtifactCoordinate,
    local_repository: Path,
    remote_repositories: Sequence[str],
) -> Path | None:
    name = f"{coordinate.artifact_id}-{coordinate.version}{METADATA_SUFFIX}"
    for root in repository_roots(local_repository, remote_repositories):
        candidate = artifact_directory(root, coordinate) / name
        if candidate.is_file():
            return candidate
    return None


class RepositoryProjectLoader(ProjectLoaderPort):
    """Load ``<artifactId>-<version>.project.yaml`` from a Maven-layout repository."""

    def load_from_repository(
        self,
        artifact: ResolvedArtifact,
        remote_repositories: Sequence[str],
        local_repository: Path,
        allow_stub: bool = True,
    ) -> Project:
        coordinate = artifact.coordinate
        metadata_path = locate_metadata_file(coordinate, local_repository, remote_repositories)

        if metadata_path is None:
            if not allow_stub:
                raise ProjectBuildError(
                    f"No project metadata found for {coordinate.id}",
                    artifact_id=coordinate.id,
                )
            logger.debug("No project metadata for %s; using stub project", coordinate.id)
            return Project.stub_for(coordinate.model_copy(update={"classifier": None}))

        try:
            descriptor = read_project_descriptor(metadata_path)
        except (OSError, ValueError) as exc:
            raise ProjectBuildError(
                f"Unreadable project metadata for {coordinate.id} at {metadata_path}: {exc}",
                artifact_id=coordinate.id,
            ) from exc

        project = descriptor.to_project(base_dir=metadata_path.parent)
        if project.artifact is not None and project.artifact.file is None:
            project.artifact.file = locate_artifact_file(
                project.coordinate, local_repository, remote_repositories
            )
        return project

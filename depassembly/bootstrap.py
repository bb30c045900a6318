"""Application bootstrap wiring ports, adapters, and services."""

from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from pathlib import Path

from depassembly.app import AssemblyService, PlacementPlanner, RepositoryContext
from depassembly.app.adapters import (
    RepositoryDependencyResolver,
    RepositoryProjectLoader,
    StagingArchiveWriter,
)
from depassembly.app.ports import DependencyResolverPort, ProjectLoaderPort, StagedArchivePort
from depassembly.config import Settings, get_settings


@dataclass(slots=True)
class ApplicationContainer:
    """Aggregates wired services and adapters for the CLI layer."""

    settings: Settings
    assembly_service: AssemblyService
    resolver: DependencyResolverPort
    project_loader: ProjectLoaderPort
    planner: PlacementPlanner
    writer_factory: Callable[[], StagedArchivePort]
    context: RepositoryContext


def _writer_factory(settings: Settings) -> Callable[[], StagedArchivePort]:
    def factory() -> StagedArchivePort:
        return StagingArchiveWriter(
            default_file_mode=settings.default_file_mode,
            default_directory_mode=settings.default_directory_mode,
        )

    return factory


def bootstrap_application(
    settings: Settings | None = None,
    *,
    local_repository: Path | None = None,
    remote_repositories: Sequence[str] | None = None,
) -> ApplicationContainer:
    """Instantiate adapters and services for CLI consumption.

    ``local_repository`` and ``remote_repositories`` override the values from
    settings for this container only.
    """

    active_settings = settings or get_settings()

    context = RepositoryContext(
        local_repository=local_repository or active_settings.get_local_repository(),
        remote_repositories=tuple(
            active_settings.remote_repositories if remote_repositories is None else remote_repositories
        ),
    )

    project_loader = RepositoryProjectLoader()
    resolver = RepositoryDependencyResolver(project_loader=project_loader)
    planner = PlacementPlanner(
        default_output_directory=active_settings.default_output_directory,
        default_file_name_mapping=active_settings.default_file_name_mapping,
        default_file_mode=active_settings.default_file_mode,
        default_directory_mode=active_settings.default_directory_mode,
    )
    writer_factory = _writer_factory(active_settings)

    assembly_service = AssemblyService(
        resolver=resolver,
        project_loader=project_loader,
        writer_factory=writer_factory,
        planner=planner,
        context=context,
    )

    return ApplicationContainer(
        settings=active_settings,
        assembly_service=assembly_service,
        resolver=resolver,
        project_loader=project_loader,
        planner=planner,
        writer_factory=writer_factory,
        context=context,
    )

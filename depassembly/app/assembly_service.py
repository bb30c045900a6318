"""Assembly service for dependency archive creation.

Runs the dependency-set pipeline for a project and finalizes the archive.
All repository and archive I/O is delegated to ports.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from pydantic import BaseModel, Field

from depassembly.app.adapters.archive import RecordingArchiveWriter
from depassembly.app.assembly_task import AssemblyTask, RepositoryContext, RuleOutcome
from depassembly.app.dependency_sets import DependencySetResolver
from depassembly.app.placement import PlacementPlanner
from depassembly.app.ports import (
    DependencyResolverPort,
    PlacementEntry,
    ProjectLoaderPort,
    StagedArchivePort,
)
from depassembly.model import ArchiveFormat, AssemblyDescriptor, Project, ResolvedArtifact

logger = logging.getLogger(__name__)


class AssemblyReport(BaseModel):
    """Summary of a finished (or planned) assembly."""

    assembly_id: str
    project_id: str
    archive_path: Path | None = None
    format: ArchiveFormat | None = None
    rule_count: int = 0
    entry_count: int = 0
    destinations: list[str] = Field(default_factory=list)
    placements: list[PlacementEntry] = Field(default_factory=list)
    warnings: list[str] = Field(default_factory=list)


class RuleResolution(BaseModel):
    """Artifacts selected by one rule."""

    rule: str
    artifacts: list[ResolvedArtifact] = Field(default_factory=list)


class AssemblyService:
    """Orchestrates resolution, placement, and archive finalization."""

    def __init__(
        self,
        *,
        resolver: DependencyResolverPort,
        project_loader: ProjectLoaderPort,
        writer_factory: Callable[[], StagedArchivePort],
        planner: PlacementPlanner,
        context: RepositoryContext,
    ) -> None:
        """Initialize assembly service.

        Args:
            resolver: Dependency resolution port
            project_loader: Project metadata port for resolved artifacts
            writer_factory: Returns a fresh staging archive writer per run
            planner: Placement planner carrying default templates and modes
            context: Default local/remote repositories
        """
        self.resolver = resolver
        self.project_loader = project_loader
        self.writer_factory = writer_factory
        self.planner = planner
        self.context = context

    def _task(self, project: Project, descriptor: AssemblyDescriptor) -> AssemblyTask:
        return AssemblyTask(
            descriptor.dependency_sets,
            project,
            resolver=self.resolver,
            project_loader=self.project_loader,
            planner=self.planner,
        )

    def resolve_assembly(
        self,
        project: Project,
        descriptor: AssemblyDescriptor,
        *,
        context: RepositoryContext | None = None,
    ) -> list[RuleResolution]:
        """Return the filtered artifact set of every rule without placing anything."""
        active = context or self.context
        set_resolver = DependencySetResolver(self.resolver)
        return [
            RuleResolution(
                rule=rule.describe(),
                artifacts=set_resolver.resolve(
                    project, rule, active.local_repository, active.remote_repositories
                ),
            )
            for rule in descriptor.dependency_sets
        ]

    def plan_assembly(
        self,
        project: Project,
        descriptor: AssemblyDescriptor,
        *,
        context: RepositoryContext | None = None,
    ) -> AssemblyReport:
        """Compute the placement plan without reading or writing any artifact."""
        task = self._task(project, descriptor)
        writer = RecordingArchiveWriter()
        outcomes = task.execute(writer, context or self.context)
        return self._report(descriptor, project, task, outcomes, writer)

    def create_assembly(
        self,
        project: Project,
        descriptor: AssemblyDescriptor,
        output: Path,
        *,
        format: ArchiveFormat | None = None,
        context: RepositoryContext | None = None,
    ) -> AssemblyReport:
        """Run every rule and write the archive to ``output``.

        Any rule failure propagates before the archive is written.
        """
        archive_format = format or (descriptor.formats[0] if descriptor.formats else "zip")
        task = self._task(project, descriptor)
        writer = self.writer_factory()
        outcomes = task.execute(writer, context or self.context)

        archive_path = writer.write(Path(output), archive_format)
        report = self._report(descriptor, project, task, outcomes, writer)
        report.archive_path = archive_path
        report.format = archive_format
        logger.info(
            "Assembly %s for %s written to %s (%d entries)",
            descriptor.id,
            project.id,
            archive_path,
            report.entry_count,
        )
        return report

    def _report(
        self,
        descriptor: AssemblyDescriptor,
        project: Project,
        task: AssemblyTask,
        outcomes: list[RuleOutcome],
        writer: StagedArchivePort | RecordingArchiveWriter,
    ) -> AssemblyReport:
        destinations = writer.destinations
        return AssemblyReport(
            assembly_id=descriptor.id,
            project_id=project.id,
            rule_count=len(outcomes),
            entry_count=len(destinations),
            destinations=destinations,
            placements=task.placements,
            warnings=task.warnings,
        )

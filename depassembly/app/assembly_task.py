"""Driver that runs every dependency-set rule into an archive writer."""

from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Literal

from depassembly.app.dependency_sets import DependencySetResolver
from depassembly.app.placement import PlacementPlanner
from depassembly.app.ports import (
    ArchiveWriterPort,
    DependencyResolverPort,
    PlacementEntry,
    ProjectLoaderPort,
)
from depassembly.errors import ArchiveWriteError, ProjectBuildError
from depassembly.model import DependencySetRule, Project, ResolvedArtifact

logger = logging.getLogger(__name__)

TaskState = Literal["idle", "resolving", "placing"]


@dataclass(frozen=True, slots=True)
class RepositoryContext:
    """Repositories consulted while resolving and loading project metadata."""

    local_repository: Path
    remote_repositories: tuple[str, ...] = ()


@dataclass(slots=True)
class RuleOutcome:
    """Artifacts and placements produced by one rule."""

    rule: DependencySetRule
    artifacts: list[ResolvedArtifact] = field(default_factory=list)
    placements: list[PlacementEntry] = field(default_factory=list)


class AssemblyTask:
    """Process dependency-set rules strictly in declaration order.

    Each rule moves ``idle -> resolving -> placing -> idle``. The first failure
    aborts the run: placements from completed rules stay staged in the writer,
    later rules are never started.
    """

    def __init__(
        self,
        dependency_sets: Sequence[DependencySetRule],
        project: Project,
        *,
        resolver: DependencyResolverPort,
        project_loader: ProjectLoaderPort,
        planner: PlacementPlanner | None = None,
    ) -> None:
        self.dependency_sets = tuple(dependency_sets)
        self.project = project
        self._project_loader = project_loader
        self._set_resolver = DependencySetResolver(resolver)
        self._planner = planner or PlacementPlanner()
        self.state: TaskState = "idle"
        self.outcomes: list[RuleOutcome] = []

    @property
    def warnings(self) -> list[str]:
        return list(self._set_resolver.warnings)

    @property
    def placements(self) -> list[PlacementEntry]:
        return [entry for outcome in self.outcomes for entry in outcome.placements]

    def execute(self, archiver: ArchiveWriterPort, context: RepositoryContext) -> list[RuleOutcome]:
        if not self.dependency_sets:
            logger.debug("No dependency sets specified.")
            return self.outcomes

        if not self.project.dependencies:
            logger.debug(
                "Project %s has no dependencies. Skipping dependency set addition.",
                self.project.id,
            )

        for rule in self.dependency_sets:
            try:
                self.outcomes.append(self.add_dependency_set(rule, archiver, context))
            finally:
                self.state = "idle"
        return self.outcomes

    def add_dependency_set(
        self,
        rule: DependencySetRule,
        archiver: ArchiveWriterPort,
        context: RepositoryContext,
    ) -> RuleOutcome:
        logger.info("Processing DependencySet (output=%s)", rule.output_directory)
        outcome = RuleOutcome(rule=rule)

        self.state = "resolving"
        outcome.artifacts = self._set_resolver.resolve(
            self.project,
            rule,
            context.local_repository,
            context.remote_repositories,
        )

        self.state = "placing"
        for artifact in outcome.artifacts:
            dep_project = self._load_project(artifact, context)
            entry = self._planner.plan(artifact, rule, dep_project)
            self._submit(entry, archiver)
            outcome.placements.append(entry)

        logger.debug(
            "Dependency set %s placed %d artifact(s)", rule.describe(), len(outcome.placements)
        )
        return outcome

    def _load_project(self, artifact: ResolvedArtifact, context: RepositoryContext) -> Project:
        if artifact.project is not None:
            return artifact.project
        try:
            dep_project = self._project_loader.load_from_repository(
                artifact,
                context.remote_repositories,
                context.local_repository,
                True,
            )
        except ProjectBuildError as exc:
            raise ProjectBuildError(
                f"Error retrieving POM of module-dependency: {artifact.id}; Reason: {exc}",
                artifact_id=artifact.id,
            ) from exc
        artifact.project = dep_project
        return dep_project

    def _submit(self, entry: PlacementEntry, archiver: ArchiveWriterPort) -> None:
        try:
            if entry.unpack:
                archiver.add_directory(
                    entry.source,
                    entry.destination,
                    entry.includes,
                    entry.excludes,
                    entry.mode,
                    entry.directory_mode,
                )
            else:
                archiver.add_file(entry.source, entry.destination, entry.mode)
        except ArchiveWriteError as exc:
            raise ArchiveWriteError(
                f"Error adding {entry.artifact_id} to archive at {entry.destination!r}: {exc}",
                destination=entry.destination,
            ) from exc

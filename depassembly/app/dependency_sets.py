"""Resolution of the artifact set selected by one dependency-set rule."""

from __future__ import annotations

import logging
from collections.abc import Iterable, Sequence
from pathlib import Path

from depassembly.app.filtering import filter_artifacts
from depassembly.app.ports import RESOLVER_ERRORS, DependencyResolverPort
from depassembly.errors import FilterError, ResolutionError
from depassembly.model import DependencySetRule, Project, ResolvedArtifact

logger = logging.getLogger(__name__)


def ordered_unique(artifacts: Iterable[ResolvedArtifact]) -> dict[tuple[str, ...], ResolvedArtifact]:
    """Copy ``artifacts`` into an insertion-ordered map; first occurrence wins."""
    unique: dict[tuple[str, ...], ResolvedArtifact] = {}
    for artifact in artifacts:
        unique.setdefault(artifact.key, artifact)
    return unique


class DependencySetResolver:
    """Resolve, augment, and filter the artifacts for a dependency-set rule."""

    def __init__(self, resolver: DependencyResolverPort) -> None:
        self._resolver = resolver
        self.warnings: list[str] = []

    def resolve(
        self,
        project: Project,
        rule: DependencySetRule,
        local_repository: Path,
        remote_repositories: Sequence[str],
    ) -> list[ResolvedArtifact]:
        """Return the ordered-unique artifact set for ``rule``.

        Raises:
            ResolutionError: the resolver collaborator failed
            FilterError: strict filtering left include patterns unmatched
        """
        if not project.dependencies:
            logger.debug("Project %s declares no dependencies", project.id)

        try:
            resolved = self._resolver.resolve_dependencies(
                project, rule.scope, local_repository, remote_repositories
            )
            artifacts = ordered_unique(resolved or ())
        except RESOLVER_ERRORS as exc:
            raise ResolutionError(project.id, exc, rule=rule.describe()) from exc

        if rule.use_project_artifact:
            project_artifact = project.artifact
            if project_artifact is not None and project_artifact.file is not None:
                artifacts.setdefault(project_artifact.key, project_artifact)
            else:
                self._warn(
                    f"Cannot include project artifact: {project_artifact or project.id}; "
                    "it doesn't have an associated file or directory."
                )

        if rule.use_project_attachments:
            for attachment in project.attached_artifacts:
                if attachment.file is not None:
                    artifacts.setdefault(attachment.key, attachment)
                else:
                    self._warn(
                        f"Cannot include attached artifact: {attachment.id} for project: "
                        f"{project.id}; it doesn't have an associated file or directory."
                    )

        try:
            return filter_artifacts(
                artifacts.values(),
                rule.includes,
                rule.excludes,
                strict=rule.use_strict_filtering,
                transitive=rule.use_transitive_filtering,
            )
        except FilterError as exc:
            raise FilterError(exc.unmatched, rule=rule.describe()) from exc

    def _warn(self, message: str) -> None:
        logger.warning(message)
        self.warnings.append(message)

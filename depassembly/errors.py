"""Error taxonomy for assembly runs.

Every error here aborts the current run. Soft conditions (missing project
artifact file, missing attachment file, empty dependency list) are logged as
warnings and never raised.
"""

from __future__ import annotations

from collections.abc import Sequence


class AssemblyError(RuntimeError):
    """Base class for failures that abort an assembly run."""


class ResolutionError(AssemblyError):
    """Raised when the dependency graph for a project could not be computed."""

    def __init__(
        self,
        project_id: str,
        cause: BaseException | None = None,
        *,
        rule: str | None = None,
    ) -> None:
        self.project_id = project_id
        self.cause = cause
        self.rule = rule
        message = f"Failed to resolve dependencies for project: {project_id}"
        if rule:
            message += f" ({rule})"
        if cause is not None:
            message += f"; reason: {cause}"
        super().__init__(message)


class FilterError(AssemblyError):
    """Raised when strict filtering leaves include patterns unmatched."""

    def __init__(self, unmatched: Sequence[str], *, rule: str | None = None) -> None:
        self.unmatched = tuple(unmatched)
        self.rule = rule
        patterns = ", ".join(self.unmatched)
        message = f"The following include patterns were not triggered: {patterns}"
        if rule:
            message += f" ({rule})"
        super().__init__(message)


class PlacementError(AssemblyError):
    """Raised when an artifact cannot be placed inside the archive."""

    def __init__(
        self,
        message: str,
        *,
        artifact_id: str | None = None,
        rule: str | None = None,
    ) -> None:
        self.artifact_id = artifact_id
        self.rule = rule
        super().__init__(message)


class ArchiveWriteError(AssemblyError):
    """Raised when the archive writer fails to materialize an entry."""

    def __init__(self, message: str, *, destination: str | None = None) -> None:
        self.destination = destination
        super().__init__(message)


class ProjectBuildError(AssemblyError):
    """Raised when a dependency's own project metadata cannot be loaded."""

    def __init__(self, message: str, *, artifact_id: str | None = None) -> None:
        self.artifact_id = artifact_id
        super().__init__(message)


__all__ = [
    "AssemblyError",
    "ResolutionError",
    "FilterError",
    "PlacementError",
    "ArchiveWriteError",
    "ProjectBuildError",
]

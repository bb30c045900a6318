"""Project metadata loader port interface."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from depassembly.model import Project, ResolvedArtifact


class ProjectLoaderPort(Protocol):
    """Port interface for loading an artifact's own project metadata."""

    def load_from_repository(
        self,
        artifact: ResolvedArtifact,
        remote_repositories: Sequence[str],
        local_repository: Path,
        allow_stub: bool = True,
    ) -> Project:
        """Return the project that produced ``artifact``.

        Raises:
            ProjectBuildError: metadata exists but cannot be read, or is
                missing while ``allow_stub`` is False
        """
        ...

"""Archive writer port interface and placement DTO."""

from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path
from typing import Protocol

from pydantic import BaseModel, Field


class PlacementEntry(BaseModel):
    """One unit of work submitted to the archive writer."""

    source: Path = Field(..., description="Resolved file (or directory) of the artifact")
    destination: str = Field(
        ...,
        description="Archive-relative, forward-slash path; the target directory when unpacking",
    )
    mode: int | None = Field(default=None, description="File permission bits, None to inherit")
    directory_mode: int | None = Field(default=None, description="Directory permission bits")
    unpack: bool = False
    includes: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()
    artifact_id: str | None = Field(default=None, description="Identity of the placed artifact")


class ArchiveWriterPort(Protocol):
    """Port interface for staging entries into an archive.

    Entries are applied in submission order; a later entry at the same
    destination replaces an earlier one.
    """

    def add_file(self, source: Path, destination: str, mode: int | None = None) -> None:
        """Stage ``source`` as a single file at ``destination``."""
        ...

    def add_directory(
        self,
        source: Path,
        destination: str,
        includes: Sequence[str] = (),
        excludes: Sequence[str] = (),
        mode: int | None = None,
        directory_mode: int | None = None,
    ) -> None:
        """Expand ``source`` (a directory or zip-format archive) under ``destination``."""
        ...


class StagedArchivePort(ArchiveWriterPort, Protocol):
    """Archive writer that stages entries and materializes them on request."""

    @property
    def destinations(self) -> list[str]:
        """Staged destinations in submission order."""
        ...

    def write(self, destination: Path, format: str = "zip") -> Path:
        """Write every staged entry to ``destination`` and return it."""
        ...

"""Concrete adapters wiring application ports to built-in implementations."""

from __future__ import annotations

from .archive import RecordingArchiveWriter, StagingArchiveWriter
from .repository import RepositoryProjectLoader
from .resolver import RepositoryDependencyResolver

__all__ = [
    "RecordingArchiveWriter",
    "RepositoryDependencyResolver",
    "RepositoryProjectLoader",
    "StagingArchiveWriter",
]

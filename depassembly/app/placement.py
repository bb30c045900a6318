"""Placement planning: where and how each resolved artifact enters the archive."""

from __future__ import annotations

import logging

from depassembly.app.ports import PlacementEntry
from depassembly.app.templates import (
    evaluate_file_name_mapping,
    evaluate_output_directory,
    join_destination,
)
from depassembly.errors import PlacementError
from depassembly.model import DependencySetRule, Project, ResolvedArtifact

logger = logging.getLogger(__name__)

# Types copied as raw files and never unpacked.
NON_ARCHIVE_DEPENDENCY_TYPES: frozenset[str] = frozenset({"pom"})


class PlacementPlanner:
    """Compute the :class:`PlacementEntry` for one artifact under one rule."""

    def __init__(
        self,
        *,
        default_output_directory: str | None = None,
        default_file_name_mapping: str | None = None,
        default_file_mode: int | None = None,
        default_directory_mode: int | None = None,
    ) -> None:
        self.default_output_directory = default_output_directory
        self.default_file_name_mapping = default_file_name_mapping
        self.default_file_mode = default_file_mode
        self.default_directory_mode = default_directory_mode

    def plan(
        self,
        artifact: ResolvedArtifact,
        rule: DependencySetRule,
        dep_project: Project,
    ) -> PlacementEntry:
        if artifact.file is None:
            raise PlacementError(
                f"Artifact {artifact.id} has no resolved file ({rule.describe()})",
                artifact_id=artifact.id,
                rule=rule.describe(),
            )

        try:
            directory = evaluate_output_directory(
                rule.output_directory
                if rule.output_directory is not None
                else self.default_output_directory,
                dep_project,
                dep_project.build.final_name,
            )
            file_name = evaluate_file_name_mapping(
                rule.output_file_name_mapping
                if rule.output_file_name_mapping is not None
                else self.default_file_name_mapping,
                artifact,
            )
        except PlacementError as exc:
            raise PlacementError(
                f"Cannot place {artifact.id} ({rule.describe()}): {exc}",
                artifact_id=artifact.id,
                rule=rule.describe(),
            ) from exc

        file_mode = rule.file_mode if rule.file_mode is not None else self.default_file_mode
        directory_mode = (
            rule.directory_mode if rule.directory_mode is not None else self.default_directory_mode
        )

        if artifact.type in NON_ARCHIVE_DEPENDENCY_TYPES or not rule.unpack:
            entry = PlacementEntry(
                source=artifact.file,
                destination=join_destination(directory, file_name),
                mode=file_mode,
                directory_mode=directory_mode,
                artifact_id=artifact.id,
            )
        else:
            options = rule.unpack_options
            entry = PlacementEntry(
                source=artifact.file,
                destination=directory,
                mode=file_mode,
                directory_mode=directory_mode,
                unpack=True,
                includes=options.includes if options else (),
                excludes=options.excludes if options else (),
                artifact_id=artifact.id,
            )

        self._validate(entry, rule)
        logger.debug("Planned %s -> %s (unpack=%s)", artifact.id, entry.destination, entry.unpack)
        return entry

    def _validate(self, entry: PlacementEntry, rule: DependencySetRule) -> None:
        segments = entry.destination.split("/")
        if entry.destination.startswith("/") or ".." in segments:
            raise PlacementError(
                f"Destination {entry.destination!r} for {entry.artifact_id} escapes the archive root "
                f"({rule.describe()})",
                artifact_id=entry.artifact_id,
                rule=rule.describe(),
            )
        if not entry.unpack and (not segments[-1] or segments[-1] == "."):
            raise PlacementError(
                f"Empty file name for {entry.artifact_id} ({rule.describe()})",
                artifact_id=entry.artifact_id,
                rule=rule.describe(),
            )

"""Output directory and filename template evaluation.

Both evaluators are pure: they read coordinates and project metadata and
return strings. Tokens use ``${name}`` syntax; an unknown token is a
:class:`~depassembly.errors.PlacementError` because it would otherwise leak
into archive paths verbatim.
"""

from __future__ import annotations

import re

from depassembly.errors import PlacementError
from depassembly.model import Project, ResolvedArtifact

DEFAULT_FILE_NAME_MAPPING = "${artifactId}-${version}${dashClassifier?}.${extension}"

_TOKEN = re.compile(r"\$\{([^}]+)\}")
_REPEATED_SEPARATORS = re.compile(r"/{2,}")


def _interpolate(template: str, values: dict[str, str], kind: str) -> str:
    def replace(match: re.Match[str]) -> str:
        name = match.group(1).strip()
        if name not in values:
            raise PlacementError(f"Unknown token ${{{name}}} in {kind} template {template!r}")
        return values[name]

    return _TOKEN.sub(replace, template)


def _project_values(project: Project, final_name: str | None) -> dict[str, str]:
    name = final_name or project.build.final_name
    base = {
        "groupId": project.group_id,
        "artifactId": project.artifact_id,
        "version": project.version,
        "packaging": project.packaging,
        "finalName": name,
        "build.finalName": name,
    }
    values = dict(base)
    values.update({f"project.{key}": value for key, value in base.items()})
    return values


def _artifact_values(artifact: ResolvedArtifact) -> dict[str, str]:
    coordinate = artifact.coordinate
    classifier = coordinate.effective_classifier or ""
    dash_classifier = f"-{classifier}" if classifier else ""
    base = {
        "groupId": coordinate.group_id,
        "artifactId": coordinate.artifact_id,
        "version": coordinate.version,
        "baseVersion": coordinate.base_version,
        "classifier": classifier,
        "dashClassifier": dash_classifier,
        "dashClassifier?": dash_classifier,
        "extension": coordinate.extension,
        "type": coordinate.type,
    }
    values = dict(base)
    values.update({f"artifact.{key}": value for key, value in base.items()})
    return values


def normalize_directory(value: str) -> str:
    """Canonicalize separators and strip leading ``./``, ``/`` and trailing ``/``."""
    normalized = _REPEATED_SEPARATORS.sub("/", value.replace("\\", "/"))
    while normalized.startswith("./"):
        normalized = normalized[2:]
    if normalized == ".":
        normalized = ""
    return normalized.strip("/")


def evaluate_output_directory(
    template: str | None,
    project: Project,
    final_name: str | None = None,
) -> str:
    """Evaluate an output-directory template against the artifact's project."""
    if not template:
        return ""
    evaluated = _interpolate(template, _project_values(project, final_name), "output directory")
    return normalize_directory(evaluated)


def evaluate_file_name_mapping(template: str | None, artifact: ResolvedArtifact) -> str:
    """Evaluate a filename template, defaulting to ``artifactId-version[-classifier].ext``.

    Only an unset template falls back to the default; an empty one yields an
    empty name.
    """
    active = DEFAULT_FILE_NAME_MAPPING if template is None else template
    return _interpolate(active, _artifact_values(artifact), "file name")


def join_destination(directory: str, file_name: str) -> str:
    """Join a directory and filename with exactly one separator."""
    if not directory:
        return file_name
    if directory.endswith("/") or directory.endswith("\\"):
        return directory + file_name
    return f"{directory}/{file_name}"

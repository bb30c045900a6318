"""Artifact coordinates and scope tables."""

from __future__ import annotations

import re
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

DependencyScope = Literal["compile", "runtime", "test", "provided", "system"]
ScopeSelector = Literal["compile", "runtime", "test", "provided", "system", "all"]

# Dependency scopes admitted by each dependency-set scope.
SCOPE_INCLUDES: dict[ScopeSelector, frozenset[str]] = {
    "compile": frozenset({"compile", "provided", "system"}),
    "runtime": frozenset({"compile", "runtime"}),
    "test": frozenset({"compile", "runtime", "test", "provided", "system"}),
    "provided": frozenset({"provided"}),
    "system": frozenset({"system"}),
    "all": frozenset({"compile", "runtime", "test", "provided", "system"}),
}

# (type -> (extension, classifier)) for types whose file does not share their name.
_ARTIFACT_HANDLERS: dict[str, tuple[str, str | None]] = {
    "test-jar": ("jar", "tests"),
    "ejb": ("jar", None),
    "ejb-client": ("jar", "client"),
    "java-source": ("jar", "sources"),
    "javadoc": ("jar", "javadoc"),
    "maven-plugin": ("jar", None),
}

_SNAPSHOT_TIMESTAMP = re.compile(r"^(.*)-(\d{8}\.\d{6})-(\d+)$")


class ArtifactCoordinate(BaseModel):
    """Maven-style artifact coordinate."""

    model_config = ConfigDict(frozen=True)

    group_id: str = Field(..., min_length=1)
    artifact_id: str = Field(..., min_length=1)
    version: str = Field(..., min_length=1)
    type: str = Field(default="jar", min_length=1)
    classifier: str | None = Field(default=None)

    @property
    def key(self) -> tuple[str, str, str, str, str]:
        """Identity key used for ordered de-duplication."""
        return (self.group_id, self.artifact_id, self.version, self.type, self.classifier or "")

    @property
    def conflict_key(self) -> str:
        """Version-less key used for nearest-wins mediation."""
        return f"{self.group_id}:{self.artifact_id}:{self.type}:{self.classifier or ''}"

    @property
    def id(self) -> str:
        """Return ``groupId:artifactId:type[:classifier]:version``."""
        if self.classifier:
            return f"{self.group_id}:{self.artifact_id}:{self.type}:{self.classifier}:{self.version}"
        return f"{self.group_id}:{self.artifact_id}:{self.type}:{self.version}"

    @property
    def extension(self) -> str:
        handler = _ARTIFACT_HANDLERS.get(self.type)
        if handler is None:
            return self.type
        return handler[0]

    @property
    def effective_classifier(self) -> str | None:
        """Explicit classifier, else the one implied by the artifact type."""
        if self.classifier:
            return self.classifier
        handler = _ARTIFACT_HANDLERS.get(self.type)
        return handler[1] if handler else None

    @property
    def base_version(self) -> str:
        match = _SNAPSHOT_TIMESTAMP.match(self.version)
        if match:
            return f"{match.group(1)}-SNAPSHOT"
        return self.version

    @property
    def repository_path(self) -> tuple[str, ...]:
        """Maven repository layout segments for the artifact file."""
        classifier = self.effective_classifier
        suffix = f"-{classifier}" if classifier else ""
        filename = f"{self.artifact_id}-{self.version}{suffix}.{self.extension}"
        return (*self.group_id.split("."), self.artifact_id, self.base_version, filename)

    def __str__(self) -> str:
        return self.id


def identity_forms(identity: str) -> tuple[list[str], list[str]]:
    """Split an identity string into (full, short) segment forms.

    The full form is ``[groupId, artifactId, type, classifier, version]`` with an
    empty classifier when absent; the short form drops the classifier.
    """
    segments = identity.split(":")
    if len(segments) == 5:
        group_id, artifact_id, type_, classifier, version = segments
        return segments, [group_id, artifact_id, type_, version]
    if len(segments) == 4:
        group_id, artifact_id, type_, version = segments
        return [group_id, artifact_id, type_, "", version], segments
    return segments, segments

"""Assembly descriptor and dependency-set rule models."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator
from pydantic.alias_generators import to_camel

from depassembly.model.artifact import ScopeSelector
from depassembly.utils.modes import format_mode, mode_to_int

ArchiveFormat = Literal["zip", "tar", "tar.gz", "dir"]

_RULE_CONFIG = ConfigDict(
    alias_generator=to_camel,
    populate_by_name=True,
    extra="forbid",
    frozen=True,
)


class UnpackOptions(BaseModel):
    """Path filters applied when an artifact is expanded in place."""

    model_config = _RULE_CONFIG

    includes: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()


class DependencySetRule(BaseModel):
    """One ``dependencySet`` entry of an assembly descriptor.

    Read-only configuration: constructed before resolution and never mutated.
    """

    model_config = _RULE_CONFIG

    scope: ScopeSelector = "runtime"
    output_directory: str | None = None
    output_file_name_mapping: str | None = None
    directory_mode: int | None = None
    file_mode: int | None = None
    unpack: bool = False
    unpack_options: UnpackOptions | None = None
    includes: tuple[str, ...] = ()
    excludes: tuple[str, ...] = ()
    use_strict_filtering: bool = False
    use_transitive_filtering: bool = False
    use_project_artifact: bool = False
    use_project_attachments: bool = False

    @field_validator("directory_mode", "file_mode", mode="before")
    @classmethod
    def _parse_mode(cls, value: Any) -> int | None:
        return mode_to_int(value)

    def describe(self) -> str:
        """Short human-readable identity used in log lines and errors."""
        return (
            f"dependencySet(scope={self.scope}, output={self.output_directory!r}, "
            f"unpack={self.unpack}, fileMode={format_mode(self.file_mode)})"
        )


class AssemblyDescriptor(BaseModel):
    """Assembly descriptor: archive formats plus ordered dependency-set rules."""

    model_config = _RULE_CONFIG

    id: str = "assembly"
    formats: tuple[ArchiveFormat, ...] = ("zip",)
    dependency_sets: tuple[DependencySetRule, ...] = Field(default=())


def load_descriptor(path: Path) -> AssemblyDescriptor:
    """Load and validate an assembly descriptor YAML file."""
    path = Path(path).resolve()
    if not path.exists():
        raise FileNotFoundError(f"Assembly descriptor not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as handle:
            data: dict[str, Any] | None = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ValueError(f"Malformed YAML in {path}: {exc}") from exc

    if data is None:
        raise ValueError(f"Assembly descriptor is empty: {path}")

    try:
        return AssemblyDescriptor.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid assembly descriptor at {path}: {exc}") from exc

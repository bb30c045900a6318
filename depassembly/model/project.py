"""Project, dependency, and resolved-artifact models."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from depassembly.model.artifact import ArtifactCoordinate, DependencyScope


class Dependency(BaseModel):
    """Dependency declared by a project."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        coerce_numbers_to_str=True,
    )

    group_id: str
    artifact_id: str
    version: str = ""
    type: str = "jar"
    classifier: str | None = None
    scope: DependencyScope = "compile"
    optional: bool = False
    system_path: Path | None = None
    exclusions: list[str] = Field(
        default_factory=list,
        description="groupId:artifactId glob patterns pruned from this dependency's subtree",
    )

    @property
    def conflict_key(self) -> str:
        return f"{self.group_id}:{self.artifact_id}:{self.type}:{self.classifier or ''}"

    def to_coordinate(self) -> ArtifactCoordinate:
        return ArtifactCoordinate(
            group_id=self.group_id,
            artifact_id=self.artifact_id,
            version=self.version,
            type=self.type,
            classifier=self.classifier,
        )


class BuildInfo(BaseModel):
    """Build metadata of a project."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    final_name: str
    directory: Path = Path("target")


class ResolvedArtifact(BaseModel):
    """An artifact produced by resolution, with its file once known."""

    coordinate: ArtifactCoordinate
    file: Path | None = None
    scope: DependencyScope | None = None
    trail: tuple[str, ...] = Field(
        default=(),
        description="Identity strings of the ancestors between the root project and this artifact",
    )
    project: Project | None = Field(default=None, exclude=True, repr=False)

    @property
    def id(self) -> str:
        return self.coordinate.id

    @property
    def key(self) -> tuple[str, str, str, str, str]:
        return self.coordinate.key

    @property
    def type(self) -> str:
        return self.coordinate.type

    @property
    def is_direct(self) -> bool:
        """True for depth-1 dependencies and the project's own artifacts."""
        return not self.trail

    def __str__(self) -> str:
        return self.coordinate.id


class Project(BaseModel):
    """A project with its declared dependencies and build outputs."""

    coordinate: ArtifactCoordinate
    dependencies: list[Dependency] = Field(default_factory=list)
    artifact: ResolvedArtifact | None = None
    attached_artifacts: list[ResolvedArtifact] = Field(default_factory=list)
    build: BuildInfo
    stub: bool = False

    @property
    def id(self) -> str:
        return self.coordinate.id

    @property
    def group_id(self) -> str:
        return self.coordinate.group_id

    @property
    def artifact_id(self) -> str:
        return self.coordinate.artifact_id

    @property
    def version(self) -> str:
        return self.coordinate.version

    @property
    def packaging(self) -> str:
        return self.coordinate.type

    @classmethod
    def stub_for(cls, coordinate: ArtifactCoordinate) -> Project:
        """Minimal project for an artifact with no readable metadata."""
        return cls(
            coordinate=coordinate,
            build=BuildInfo(final_name=f"{coordinate.artifact_id}-{coordinate.version}"),
            stub=True,
        )


ResolvedArtifact.model_rebuild()


class BuildSpec(BaseModel):
    """``build`` section of a project descriptor."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    final_name: str | None = None
    directory: Path = Path("target")


class ArtifactFileSpec(BaseModel):
    """Main or attached build output declared in a project descriptor."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")

    type: str | None = None
    classifier: str | None = None
    file: Path | None = None


class ProjectDescriptor(BaseModel):
    """On-disk project metadata (``project.yaml`` / ``*.project.yaml``)."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        extra="forbid",
        coerce_numbers_to_str=True,
    )

    group_id: str
    artifact_id: str
    version: str
    packaging: str = "jar"
    build: BuildSpec = Field(default_factory=BuildSpec)
    artifact: ArtifactFileSpec | None = None
    attachments: list[ArtifactFileSpec] = Field(default_factory=list)
    dependencies: list[Dependency] = Field(default_factory=list)

    def to_project(self, base_dir: Path | None = None) -> Project:
        """Build a :class:`Project`, resolving relative files against ``base_dir``."""
        coordinate = ArtifactCoordinate(
            group_id=self.group_id,
            artifact_id=self.artifact_id,
            version=self.version,
            type=self.packaging,
        )
        build = BuildInfo(
            final_name=self.build.final_name or f"{self.artifact_id}-{self.version}",
            directory=self.build.directory,
        )

        main_file = self.artifact.file if self.artifact else None
        main_artifact = ResolvedArtifact(
            coordinate=coordinate,
            file=_resolve_file(main_file, base_dir),
        )

        attached: list[ResolvedArtifact] = []
        for spec in self.attachments:
            attached.append(
                ResolvedArtifact(
                    coordinate=coordinate.model_copy(
                        update={
                            "type": spec.type or self.packaging,
                            "classifier": spec.classifier,
                        }
                    ),
                    file=_resolve_file(spec.file, base_dir),
                )
            )

        project = Project(
            coordinate=coordinate,
            dependencies=list(self.dependencies),
            artifact=main_artifact,
            attached_artifacts=attached,
            build=build,
        )
        main_artifact.project = project
        for attachment in attached:
            attachment.project = project
        return project


def _resolve_file(path: Path | None, base_dir: Path | None) -> Path | None:
    """Resolve a declared build output; an output that was not built yet has no file."""
    if path is None:
        return None
    if base_dir is not None and not path.is_absolute():
        path = base_dir / path
    return path if path.exists() else None


def read_project_descriptor(path: Path) -> ProjectDescriptor:
    """Parse and validate a project descriptor YAML file."""
    path = path.resolve()
    if not path.exists():
        raise FileNotFoundError(f"Project descriptor not found: {path}")

    try:
        with path.open("r", encoding="utf-8") as handle:
            data: dict[str, Any] | None = yaml.safe_load(handle)
    except yaml.YAMLError as exc:
        raise ValueError(f"Malformed YAML in {path}: {exc}") from exc

    if data is None:
        raise ValueError(f"Project descriptor is empty: {path}")

    try:
        return ProjectDescriptor.model_validate(data)
    except ValidationError as exc:
        raise ValueError(f"Invalid project descriptor at {path}: {exc}") from exc


def load_project(path: Path) -> Project:
    """Load the root project from ``path``."""
    path = Path(path).resolve()
    return read_project_descriptor(path).to_project(base_dir=path.parent)

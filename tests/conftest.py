"""Pytest configuration and fixtures."""

import gc
import shutil
import tempfile
import time
import zipfile
from collections.abc import Callable, Generator
from pathlib import Path
from typing import Any

import pytest
import yaml

from depassembly.config import Settings
from depassembly.model import ArtifactCoordinate, ResolvedArtifact


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    tmpdir = tempfile.mkdtemp()
    try:
        yield Path(tmpdir)
    finally:
        # Force garbage collection to release any file handles
        gc.collect()
        # Small delay to allow OS to release file locks
        time.sleep(0.1)
        # Retry cleanup with ignore_errors for better cross-platform support
        shutil.rmtree(tmpdir, ignore_errors=True)


@pytest.fixture
def override_settings(temp_dir: Path) -> Generator[Settings, None, None]:
    """Provide isolated depassembly settings scoped to tests."""

    import depassembly.config as config_module

    original_settings = getattr(config_module, "_settings", None)

    data_dir = temp_dir / "appdata"
    data_dir.mkdir(parents=True, exist_ok=True)

    settings = config_module.Settings(
        data_dir=data_dir,
        local_repository=temp_dir / "repository",
    )

    config_module._settings = settings

    try:
        yield settings
    finally:
        config_module._settings = original_settings


def write_jar(path: Path, entries: dict[str, str] | None = None) -> Path:
    """Write a small zip-format archive at ``path``."""
    path.parent.mkdir(parents=True, exist_ok=True)
    with zipfile.ZipFile(path, "w") as archive:
        for name, content in (entries or {"META-INF/MANIFEST.MF": "Manifest-Version: 1.0\n"}).items():
            archive.writestr(name, content)
    return path


def write_yaml(path: Path, data: dict[str, Any]) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(yaml.safe_dump(data, sort_keys=False), encoding="utf-8")
    return path


class RepositoryBuilder:
    """Publish artifacts and ``*.project.yaml`` metadata into a Maven-layout directory."""

    def __init__(self, root: Path) -> None:
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def publish(
        self,
        group_id: str,
        artifact_id: str,
        version: str,
        *,
        type: str = "jar",
        classifier: str | None = None,
        dependencies: list[dict[str, Any]] | None = None,
        entries: dict[str, str] | None = None,
        metadata: bool = True,
        final_name: str | None = None,
    ) -> Path:
        """Publish one artifact and return its file."""
        coordinate = ArtifactCoordinate(
            group_id=group_id,
            artifact_id=artifact_id,
            version=version,
            type=type,
            classifier=classifier,
        )
        target = self.root.joinpath(*coordinate.repository_path)
        if coordinate.extension in ("jar", "war", "zip"):
            write_jar(target, entries)
        else:
            target.parent.mkdir(parents=True, exist_ok=True)
            target.write_text(f"<project>{artifact_id}</project>\n", encoding="utf-8")

        if metadata:
            descriptor: dict[str, Any] = {
                "groupId": group_id,
                "artifactId": artifact_id,
                "version": version,
                "packaging": type,
                "dependencies": dependencies or [],
            }
            if final_name:
                descriptor["build"] = {"finalName": final_name}
            write_yaml(target.parent / f"{artifact_id}-{version}.project.yaml", descriptor)
        return target


@pytest.fixture
def repository(temp_dir: Path) -> RepositoryBuilder:
    """Empty local repository rooted in the test's temp directory."""
    return RepositoryBuilder(temp_dir / "repository")


@pytest.fixture
def make_artifact(temp_dir: Path) -> Callable[..., ResolvedArtifact]:
    """Factory for resolved artifacts backed by real files."""

    def factory(
        coordinate: str,
        *,
        trail: tuple[str, ...] = (),
        scope: str | None = "compile",
        with_file: bool = True,
    ) -> ResolvedArtifact:
        parts = coordinate.split(":")
        group_id, artifact_id, type_ = parts[0], parts[1], parts[2]
        classifier = parts[3] if len(parts) == 5 else None
        version = parts[-1]
        resolved = ResolvedArtifact(
            coordinate=ArtifactCoordinate(
                group_id=group_id,
                artifact_id=artifact_id,
                version=version,
                type=type_,
                classifier=classifier,
            ),
            scope=scope,
            trail=trail,
        )
        if with_file:
            suffix = f"-{classifier}" if classifier else ""
            resolved.file = write_jar(
                temp_dir / "files" / group_id / f"{artifact_id}-{version}{suffix}.{resolved.coordinate.extension}"
            )
        return resolved

    return factory

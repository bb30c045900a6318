"""CLI integration smoke tests."""

from __future__ import annotations

import json
import zipfile
from datetime import datetime
from pathlib import Path

import pytest
from typer.testing import CliRunner

from depassembly import __version__
from depassembly.cli import app

runner = CliRunner()


@pytest.fixture
def workspace(temp_dir: Path, repository, override_settings) -> tuple[Path, Path]:
    """Project + descriptor pair backed by the settings' local repository."""
    assert override_settings.get_local_repository() == repository.root

    repository.publish("g", "a", "1.0", dependencies=[{"groupId": "g", "artifactId": "b", "version": "2.0"}])
    repository.publish("g", "b", "2.0")

    project = temp_dir / "project.yaml"
    project.write_text(
        "groupId: p\nartifactId: P\nversion: '1.0'\n"
        "dependencies:\n  - {groupId: g, artifactId: a, version: '1.0'}\n",
        encoding="utf-8",
    )
    descriptor = temp_dir / "assembly.yaml"
    descriptor.write_text(
        "id: bin\n"
        "dependencySets:\n"
        "  - scope: compile\n"
        "    outputDirectory: lib\n"
        "    useProjectArtifact: true\n",
        encoding="utf-8",
    )
    return project, descriptor


def test_version() -> None:
    result = runner.invoke(app, ["--version"])

    assert result.exit_code == 0
    assert __version__ in result.stdout


def test_assemble_writes_archive(temp_dir: Path, workspace) -> None:
    project, descriptor = workspace
    output = temp_dir / "dist" / "P-bin.zip"

    result = runner.invoke(app, ["assemble", str(project), str(descriptor), "--output", str(output)])

    assert result.exit_code == 0, result.stdout
    assert "Assembly 'bin' written" in result.stdout
    assert "Entries: 2" in result.stdout
    assert "NOTE:" in result.stdout
    with zipfile.ZipFile(output) as archive:
        names = [name for name in archive.namelist() if not name.endswith("/")]
    assert names == ["lib/a-1.0.jar", "lib/b-2.0.jar"]


def test_assemble_json_report(temp_dir: Path, workspace) -> None:
    project, descriptor = workspace
    output = temp_dir / "out"

    result = runner.invoke(
        app,
        ["assemble", str(project), str(descriptor), "-o", str(output), "--format", "dir", "--json"],
    )

    assert result.exit_code == 0, result.stdout
    payload = json.loads(result.stdout)
    assert payload["schema_id"] == "assembly_report"
    assert payload["schema_version"] == 1
    assert payload["producer"] == f"depassembly-{__version__}"
    datetime.fromisoformat(payload["produced_at"])
    assert payload["format"] == "dir"
    assert payload["destinations"] == ["lib/a-1.0.jar", "lib/b-2.0.jar"]
    assert (output / "lib" / "b-2.0.jar").is_file()


def test_resolve_lists_artifacts(workspace) -> None:
    project, descriptor = workspace

    result = runner.invoke(app, ["resolve", str(project), str(descriptor)])

    assert result.exit_code == 0, result.stdout
    assert "g:a:jar:1.0 [compile]" in result.stdout
    assert "g:b:jar:2.0 [compile] via g:a:jar:1.0" in result.stdout


def test_resolve_json(workspace) -> None:
    project, descriptor = workspace

    result = runner.invoke(app, ["resolve", str(project), str(descriptor), "--json"])

    payload = json.loads(result.stdout)
    assert payload["project"] == "p:P:jar:1.0"
    artifacts = payload["rules"][0]["artifacts"]
    assert [artifact["id"] for artifact in artifacts] == ["g:a:jar:1.0", "g:b:jar:2.0"]
    assert artifacts[1]["trail"] == ["g:a:jar:1.0"]


def test_plan_is_dry_run(temp_dir: Path, workspace) -> None:
    project, descriptor = workspace

    result = runner.invoke(app, ["plan", str(project), str(descriptor), "--json"])

    assert result.exit_code == 0, result.stdout
    payload = json.loads(result.stdout)
    assert [entry["destination"] for entry in payload["placements"]] == ["lib/a-1.0.jar", "lib/b-2.0.jar"]
    assert len(payload["warnings"]) == 1


def test_repository_option_overrides_settings(temp_dir: Path, workspace) -> None:
    project, descriptor = workspace
    empty = temp_dir / "empty-repo"
    empty.mkdir()

    result = runner.invoke(app, ["resolve", str(project), str(descriptor), "--repository", str(empty)])

    assert result.exit_code == 1
    assert "Failed to resolve dependencies for project: p:P:jar:1.0" in result.output


def test_remote_option_supplies_missing_artifacts(temp_dir: Path, workspace, repository) -> None:
    project, descriptor = workspace
    empty = temp_dir / "empty-repo"
    empty.mkdir()

    result = runner.invoke(
        app,
        [
            "plan",
            str(project),
            str(descriptor),
            "--repository",
            str(empty),
            "--remote",
            repository.root.as_uri(),
        ],
    )

    assert result.exit_code == 0, result.output
    assert "lib/b-2.0.jar" in result.stdout


def test_strict_filter_failure_exits_nonzero(temp_dir: Path, workspace) -> None:
    project, _ = workspace
    descriptor = temp_dir / "strict.yaml"
    descriptor.write_text(
        "dependencySets:\n  - includes: ['com.foo:*']\n    useStrictFiltering: true\n",
        encoding="utf-8",
    )

    result = runner.invoke(app, ["assemble", str(project), str(descriptor), "-o", str(temp_dir / "x.zip")])

    assert result.exit_code == 1
    assert "com.foo:*" in result.output
    assert not (temp_dir / "x.zip").exists()


def test_unwritable_output_exits_nonzero(temp_dir: Path, workspace) -> None:
    project, descriptor = workspace
    blocker = temp_dir / "blocker"
    blocker.write_text("not a directory", encoding="utf-8")

    result = runner.invoke(app, ["assemble", str(project), str(descriptor), "-o", str(blocker / "out.zip")])

    assert result.exit_code == 1
    assert result.exception is None or isinstance(result.exception, SystemExit)
    assert "Cannot write zip archive" in result.output


def test_missing_descriptor_exits_nonzero(temp_dir: Path, workspace) -> None:
    project, _ = workspace

    result = runner.invoke(app, ["plan", str(project), str(temp_dir / "absent.yaml")])

    assert result.exit_code == 1
    assert "Assembly descriptor not found" in result.output

"""Integration tests for the assembly service over a real repository layout."""

from __future__ import annotations

import tarfile
import zipfile
from pathlib import Path

import pytest

from depassembly.bootstrap import bootstrap_application
from depassembly.config import Settings
from depassembly.errors import FilterError
from depassembly.model import AssemblyDescriptor, DependencySetRule, load_project


@pytest.fixture
def app_project(temp_dir: Path, repository) -> Path:
    repository.publish(
        "org.acme",
        "core",
        "1.0",
        dependencies=[{"groupId": "org.acme", "artifactId": "util", "version": "1.1"}],
        entries={"org/acme/Core.class": "core", "META-INF/MANIFEST.MF": "m"},
    )
    repository.publish("org.acme", "util", "1.1")
    repository.publish("javax.servlet", "servlet-api", "3.0")
    repository.publish("org.acme", "parent", "1.0", type="pom")

    project_dir = temp_dir / "app"
    war = project_dir / "target" / "app-2.0.war"
    war.parent.mkdir(parents=True)
    with zipfile.ZipFile(war, "w") as archive:
        archive.writestr("WEB-INF/web.xml", "<web/>")
    (project_dir / "project.yaml").write_text(
        "\n".join(
            [
                "groupId: org.acme",
                "artifactId: app",
                "version: '2.0'",
                "packaging: war",
                "artifact:",
                "  file: target/app-2.0.war",
                "dependencies:",
                "  - {groupId: org.acme, artifactId: core, version: '1.0'}",
                "  - {groupId: javax.servlet, artifactId: servlet-api, version: '3.0', scope: provided}",
                "  - {groupId: org.acme, artifactId: parent, version: '1.0', type: pom}",
            ]
        )
        + "\n",
        encoding="utf-8",
    )
    return project_dir / "project.yaml"


@pytest.fixture
def container(temp_dir: Path, repository):
    settings = Settings(data_dir=temp_dir / "data", local_repository=repository.root)
    return bootstrap_application(settings)


def _descriptor(*rules: DependencySetRule, formats=("zip",)) -> AssemblyDescriptor:
    return AssemblyDescriptor(id="bin", formats=formats, dependency_sets=rules)


def test_create_zip_assembly(temp_dir: Path, app_project: Path, container) -> None:
    descriptor = _descriptor(
        DependencySetRule(scope="runtime", output_directory="lib", file_mode="0640"),
        DependencySetRule(scope="provided", output_directory="provided"),
        DependencySetRule(
            scope="runtime",
            output_directory="",
            use_project_artifact=True,
            includes=("org.acme:app",),
            unpack=True,
        ),
    )

    report = container.assembly_service.create_assembly(
        load_project(app_project), descriptor, temp_dir / "out" / "app-bin.zip"
    )

    assert report.format == "zip"
    assert report.rule_count == 3
    assert report.archive_path == temp_dir / "out" / "app-bin.zip"
    assert report.destinations == [
        "lib/core-1.0.jar",
        "lib/parent-1.0.pom",
        "lib/util-1.1.jar",
        "provided/servlet-api-3.0.jar",
        "WEB-INF/web.xml",
    ]
    with zipfile.ZipFile(report.archive_path) as archive:
        assert archive.read("WEB-INF/web.xml") == b"<web/>"
        info = archive.getinfo("lib/core-1.0.jar")
        assert (info.external_attr >> 16) & 0o777 == 0o640


def test_format_defaults_to_descriptor(temp_dir: Path, app_project: Path, container) -> None:
    descriptor = _descriptor(DependencySetRule(output_directory="lib"), formats=("tar.gz",))

    report = container.assembly_service.create_assembly(load_project(app_project), descriptor, temp_dir / "a.tgz")

    assert report.format == "tar.gz"
    with tarfile.open(report.archive_path, "r:gz") as archive:
        assert "lib/util-1.1.jar" in archive.getnames()


def test_plan_does_not_write(temp_dir: Path, app_project: Path, container) -> None:
    descriptor = _descriptor(DependencySetRule(output_directory="lib", use_project_artifact=True))

    report = container.assembly_service.plan_assembly(load_project(app_project), descriptor)

    assert report.archive_path is None
    assert [entry.destination for entry in report.placements] == [
        "lib/core-1.0.jar",
        "lib/parent-1.0.pom",
        "lib/util-1.1.jar",
        "lib/app-2.0.war",
    ]
    assert report.entry_count == 4
    assert not (temp_dir / "out").exists()


def test_resolve_assembly_lists_each_rule(app_project: Path, container) -> None:
    descriptor = _descriptor(
        DependencySetRule(scope="runtime"),
        DependencySetRule(scope="provided"),
    )

    resolutions = container.assembly_service.resolve_assembly(load_project(app_project), descriptor)

    assert [[artifact.id for artifact in resolution.artifacts] for resolution in resolutions] == [
        ["org.acme:core:jar:1.0", "org.acme:parent:pom:1.0", "org.acme:util:jar:1.1"],
        ["javax.servlet:servlet-api:jar:3.0"],
    ]
    assert resolutions[0].rule == descriptor.dependency_sets[0].describe()


def test_strict_failure_writes_nothing(temp_dir: Path, app_project: Path, container) -> None:
    descriptor = _descriptor(
        DependencySetRule(output_directory="lib"),
        DependencySetRule(includes=("com.missing:*",), use_strict_filtering=True),
    )
    output = temp_dir / "never.zip"

    with pytest.raises(FilterError):
        container.assembly_service.create_assembly(load_project(app_project), descriptor, output)

    assert not output.exists()


def test_missing_project_artifact_is_reported_as_warning(temp_dir: Path, app_project: Path, container) -> None:
    (app_project.parent / "target" / "app-2.0.war").unlink()
    project = load_project(app_project)
    descriptor = _descriptor(DependencySetRule(scope="provided", use_project_artifact=True))

    report = container.assembly_service.create_assembly(project, descriptor, temp_dir / "out.zip")

    assert report.destinations == ["servlet-api-3.0.jar"]
    assert len(report.warnings) == 1


def test_settings_defaults_flow_into_placement(temp_dir: Path, app_project: Path, repository) -> None:
    settings = Settings(
        data_dir=temp_dir / "data",
        local_repository=repository.root,
        default_output_directory="deps",
        default_file_name_mapping="${artifactId}.${extension}",
    )
    container = bootstrap_application(settings)

    report = container.assembly_service.plan_assembly(
        load_project(app_project), _descriptor(DependencySetRule(scope="provided"))
    )

    assert report.destinations == ["deps/servlet-api.jar"]

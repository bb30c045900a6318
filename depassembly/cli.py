"""depassembly CLI application with Typer."""

import logging
from pathlib import Path
from typing import Annotated

import click
import typer

from depassembly import __version__
from depassembly.bootstrap import ApplicationContainer, bootstrap_application
from depassembly.config import get_settings, set_settings
from depassembly.errors import AssemblyError
from depassembly.model import AssemblyDescriptor, Project, load_descriptor, load_project
from depassembly.utils.cli_output import json_response
from depassembly.utils.modes import format_mode

app = typer.Typer(
    name="depassembly",
    help="Resolve project dependencies and place them into assembly archives",
    add_completion=True,
    no_args_is_help=True,
)

ProjectArg = Annotated[Path, typer.Argument(help="Project YAML (coordinates, dependencies, artifacts)")]
DescriptorArg = Annotated[Path, typer.Argument(help="Assembly descriptor YAML with dependencySets")]
RepositoryOpt = Annotated[
    Path | None,
    typer.Option("--repository", "-r", help="Local repository (overrides settings)"),
]
RemoteOpt = Annotated[
    list[str] | None,
    typer.Option("--remote", help="Additional filesystem repository path or file:// URL (repeatable)"),
]
JsonOpt = Annotated[bool, typer.Option("--json", help="Output as JSON")]


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        typer.echo(f"depassembly version {__version__}")
        raise typer.Exit()


def _fail(exc: Exception) -> typer.Exit:
    typer.secho(f"Error: {exc}", fg=typer.colors.RED, err=True)
    return typer.Exit(code=1)


def _load_inputs(project_path: Path, descriptor_path: Path) -> tuple[Project, AssemblyDescriptor]:
    try:
        return load_project(project_path.resolve()), load_descriptor(descriptor_path.resolve())
    except (FileNotFoundError, ValueError) as exc:
        raise _fail(exc) from exc


def _container(repository: Path | None, remote: list[str] | None) -> ApplicationContainer:
    return bootstrap_application(
        local_repository=repository.resolve() if repository is not None else None,
        remote_repositories=remote or None,
    )


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option("--version", "-V", callback=version_callback, is_eager=True),
    ] = None,
    data_dir: Annotated[
        Path | None,
        typer.Option("--data-dir", help="Override data directory"),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option("--verbose", "-v", help="Enable debug logging"),
    ] = False,
) -> None:
    """depassembly - dependency sets for assembly archives."""
    # Update settings with CLI flags
    settings = get_settings()
    if data_dir:
        settings.data_dir = data_dir
    set_settings(settings)

    logging.basicConfig(format="%(levelname)s %(name)s: %(message)s")
    logging.getLogger("depassembly").setLevel(
        logging.DEBUG if verbose else getattr(logging, settings.log_level)
    )


@app.command("assemble")
def assemble(
    project: ProjectArg,
    descriptor: DescriptorArg,
    output: Annotated[Path, typer.Option("--output", "-o", help="Archive (or directory) to write")],
    format: Annotated[
        str | None,
        typer.Option(
            "--format",
            "-f",
            click_type=click.Choice(["zip", "tar", "tar.gz", "dir"]),
            help="Archive format (defaults to the descriptor's first format)",
        ),
    ] = None,
    repository: RepositoryOpt = None,
    remote: RemoteOpt = None,
    json_output: JsonOpt = False,
) -> None:
    """Resolve every dependency set and write the assembly archive."""

    root_project, assembly = _load_inputs(project, descriptor)
    container = _container(repository, remote)

    try:
        report = container.assembly_service.create_assembly(
            root_project,
            assembly,
            output.resolve(),
            format=format,
        )
    except (AssemblyError, ValueError) as exc:
        raise _fail(exc) from exc

    if json_output:
        typer.echo(json_response("assembly_report", 1, **report.model_dump(mode="json")))
        return

    typer.secho(f"✓ Assembly '{report.assembly_id}' written: {report.archive_path}", fg=typer.colors.GREEN)
    typer.echo(f"  Project: {report.project_id}")
    typer.echo(f"  Format: {report.format}")
    typer.echo(f"  Dependency sets: {report.rule_count}")
    typer.echo(f"  Entries: {report.entry_count}")
    for warning in report.warnings:
        typer.secho(f"  NOTE: {warning}", fg=typer.colors.YELLOW)


@app.command("resolve")
def resolve(
    project: ProjectArg,
    descriptor: DescriptorArg,
    repository: RepositoryOpt = None,
    remote: RemoteOpt = None,
    json_output: JsonOpt = False,
) -> None:
    """List the artifacts each dependency set selects."""

    root_project, assembly = _load_inputs(project, descriptor)
    container = _container(repository, remote)

    try:
        resolutions = container.assembly_service.resolve_assembly(root_project, assembly)
    except AssemblyError as exc:
        raise _fail(exc) from exc

    if json_output:
        typer.echo(
            json_response(
                "dependency_resolution",
                1,
                project=root_project.id,
                rules=[
                    {
                        "rule": resolution.rule,
                        "artifacts": [
                            {
                                "id": artifact.id,
                                "scope": artifact.scope,
                                "file": artifact.file,
                                "trail": list(artifact.trail),
                            }
                            for artifact in resolution.artifacts
                        ],
                    }
                    for resolution in resolutions
                ],
            )
        )
        return

    typer.secho(f"Project {root_project.id}", fg=typer.colors.BLUE, bold=True)
    for resolution in resolutions:
        typer.secho(f"  {resolution.rule}", fg=typer.colors.CYAN)
        if not resolution.artifacts:
            typer.secho("    (no artifacts)", fg=typer.colors.YELLOW)
        for artifact in resolution.artifacts:
            via = f" via {artifact.trail[-1]}" if artifact.trail else ""
            typer.echo(f"    {artifact.id} [{artifact.scope}]{via}")


@app.command("plan")
def plan(
    project: ProjectArg,
    descriptor: DescriptorArg,
    repository: RepositoryOpt = None,
    remote: RemoteOpt = None,
    json_output: JsonOpt = False,
) -> None:
    """Show where every artifact would be placed, without writing an archive."""

    root_project, assembly = _load_inputs(project, descriptor)
    container = _container(repository, remote)

    try:
        report = container.assembly_service.plan_assembly(root_project, assembly)
    except AssemblyError as exc:
        raise _fail(exc) from exc

    if json_output:
        typer.echo(
            json_response(
                "placement_plan",
                1,
                project=report.project_id,
                placements=[entry.model_dump(mode="json") for entry in report.placements],
                warnings=report.warnings,
            )
        )
        return

    typer.secho(f"Placement plan for {report.project_id}", fg=typer.colors.BLUE, bold=True)
    for entry in report.placements:
        action = "unpack" if entry.unpack else "copy"
        mode = format_mode(entry.mode)
        typer.echo(f"  {action:<6} {entry.artifact_id} -> {entry.destination or '/'} ({mode})")
    for warning in report.warnings:
        typer.secho(f"  NOTE: {warning}", fg=typer.colors.YELLOW)


if __name__ == "__main__":
    app()

"""Command line entry point.

Usage:
    featurestage stage pom.xml --featureset-group org.glassfish.main.featuresets
    featurestage zip target/stage target/dist.zip --output-timestamp 2024-01-01T00:00:00Z
    featurestage copy-file target/app.war dist/app.war
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, Tuple

import click

from .bootstrap import ServiceContainer
from .logging_config import configure_logging
from .settings import Settings, get_settings
from featurestage.modules.archive import FileSet
from featurestage.modules.featuresets.domain import FeatureStageError, StagingAction
from featurestage.modules.featuresets.service.manager import load_project


@click.group()
@click.option("--log-level", default=None, help="Logging level (default from FEATURESTAGE_LOG_LEVEL)")
@click.pass_context
def main(ctx: click.Context, log_level: Optional[str]) -> None:
    """Stage feature-set dependencies and build distribution archives."""
    settings = get_settings()
    configure_logging(log_level or settings.log_level)
    ctx.ensure_object(dict)
    ctx.obj.setdefault("settings", settings)


def _container(ctx: click.Context) -> ServiceContainer:
    if "container" not in ctx.obj:
        settings: Settings = ctx.obj["settings"]
        ctx.obj["container"] = ServiceContainer(settings)
    return ctx.obj["container"]


@main.command("stage")
@click.argument("project_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--stage-dir", type=click.Path(file_okay=False, path_type=Path), default=None)
@click.option("--include-scope", default=None, help="Comma separated scopes to include")
@click.option("--exclude-scope", default=None, help="Comma separated scopes to exclude")
@click.option("--featureset-group", "featureset_groups", multiple=True, help="Feature-set groupId (repeatable)")
@click.option("--skip", is_flag=True, help="Do nothing")
@click.option("--json", "as_json", is_flag=True, help="Print the staging report as JSON")
@click.pass_context
def stage(
    ctx: click.Context,
    project_file: Path,
    stage_dir: Optional[Path],
    include_scope: Optional[str],
    exclude_scope: Optional[str],
    featureset_groups: Tuple[str, ...],
    skip: bool,
    as_json: bool,
) -> None:
    """Resolve and stage the dependencies of PROJECT_FILE (pom.xml or JSON)."""
    service = _container(ctx).staging_service
    try:
        project = load_project(project_file)
        options = service.options(
            project,
            stage_directory=stage_dir,
            include_scope=include_scope,
            exclude_scope=exclude_scope,
            featureset_groupid_includes=list(featureset_groups) or None,
            skip=True if skip else None,
        )
        report = service.run(project, options)
    except FeatureStageError as exc:
        raise click.ClickException(str(exc)) from exc

    if as_json:
        click.echo(json.dumps(report.as_dict(), indent=2))
        return
    if report.skipped:
        click.echo("Skipped")
        return
    for entry in report.entries:
        if entry.action is StagingAction.SKIP:
            continue
        click.echo(f"{entry.action.value:<7} {entry.coordinate} -> {entry.destination}")


@main.command("zip")
@click.argument("directory", type=click.Path(exists=True, file_okay=False, path_type=Path))
@click.argument("output", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--includes", default="", help="Comma separated ant patterns to include")
@click.option("--excludes", default="", help="Comma separated ant patterns to exclude")
@click.option("--prefix", default="", help="Path prefix of every entry")
@click.option("--duplicate", type=click.Choice(["add", "preserve", "fail"]), default=None)
@click.option("--output-timestamp", default=None, help="ISO-8601 or epoch seconds")
@click.pass_context
def zip_command(
    ctx: click.Context,
    directory: Path,
    output: Path,
    includes: str,
    excludes: str,
    prefix: str,
    duplicate: Optional[str],
    output_timestamp: Optional[str],
) -> None:
    """Zip DIRECTORY into OUTPUT."""
    service = _container(ctx).packaging_service
    fileset = FileSet(directory=directory, prefix=prefix, includes=includes, excludes=excludes)
    try:
        target = service.zip(output, [fileset], duplicate=duplicate, output_timestamp=output_timestamp)
    except FeatureStageError as exc:
        raise click.ClickException(str(exc)) from exc
    click.echo(str(target))


@main.command("copy-file")
@click.argument("source", type=click.Path(path_type=Path))
@click.argument("dest", type=click.Path(path_type=Path))
@click.option("--overwrite/--no-overwrite", default=True)
@click.pass_context
def copy_file_command(ctx: click.Context, source: Path, dest: Path, overwrite: bool) -> None:
    """Copy SOURCE to DEST."""
    service = _container(ctx).packaging_service
    try:
        service.copy_file(source, dest, overwrite=overwrite)
    except FeatureStageError as exc:
        raise click.ClickException(str(exc)) from exc


if __name__ == "__main__":  # pragma: no cover
    main()

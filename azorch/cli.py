"""
CLI interface for azorch.

Deploys spec files (YAML or JSON) to Azkaban as scheduled projects.

    azorch init                      # write ~/.config/azorch/config.yaml
    azorch describe spec.yaml        # show the Azkaban project a spec maps to
    azorch deploy spec.yaml          # add_spec
    azorch update spec.yaml          # update_spec
"""

import dataclasses
import json
from pathlib import Path

import click

from azorch import __version__


def _load_spec_or_exit(spec_file: Path):
    from azorch.schemas import load_spec

    try:
        return load_spec(spec_file)
    except (FileNotFoundError, ValueError) as e:
        click.echo(f"✗ Cannot load spec: {e}", err=True)
        raise SystemExit(1)


def _require_config(ctx):
    if "config" not in ctx.obj:
        click.echo(f"✗ Config not loaded: {ctx.obj.get('config_error', 'Unknown error')}", err=True)
        click.echo("Run 'azorch init' to create a configuration file.", err=True)
        raise SystemExit(1)
    return ctx.obj["config"]


def _open_producer(config, dry_run: bool):
    from azorch.client import InMemoryAzkabanClient
    from azorch.errors import AuthenticationError
    from azorch.producer import AzkabanSpecProducer

    client = InMemoryAzkabanClient() if dry_run else None
    try:
        return AzkabanSpecProducer(config, client=client)
    except AuthenticationError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1)


@click.group()
@click.version_option(version=__version__, prog_name="azorch")
@click.option(
    "--config", "config_path",
    type=click.Path(path_type=Path, dir_okay=False),
    default=None,
    help="Config file (default: $AZORCH_HOME/config.yaml)",
)
@click.option("--verbose", "-v", is_flag=True, help="Log at DEBUG level")
@click.pass_context
def main(ctx, config_path, verbose):
    """
    azorch - Deploy job specs to Azkaban as scheduled projects.
    """
    from azorch.config import ConfigError, load_config
    from azorch.utils import setup_logging

    ctx.ensure_object(dict)
    ctx.obj["config_path"] = config_path
    try:
        config = load_config(config_path)
    except (FileNotFoundError, ConfigError) as e:
        # init and describe work without a config
        ctx.obj["config_error"] = str(e)
        setup_logging(log_level="DEBUG" if verbose else "INFO")
        return

    ctx.obj["config"] = config
    setup_logging(
        log_level="DEBUG" if verbose else config.log_level,
        log_format=config.log_format,
        log_file=config.get_log_file_path(),
    )


@main.command("init")
@click.option("--force", is_flag=True, help="Overwrite an existing config")
@click.pass_context
def init(ctx, force):
    """Write a config template to $AZORCH_HOME/config.yaml."""
    from azorch.config import ConfigError, write_config_template

    try:
        path = write_config_template(ctx.obj.get("config_path"), force=force)
    except ConfigError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1)
    click.echo(f"✓ Wrote {path}")
    click.echo("Edit the azkaban section, or set AZKABAN_PASSWORD.")


@main.command("describe")
@click.argument("spec_file", type=click.Path(path_type=Path, dir_okay=False))
@click.pass_context
def describe(ctx, spec_file):
    """Show the Azkaban project SPEC_FILE translates to. No server calls."""
    from azorch.errors import SpecTypeError
    from azorch.translator import translate

    spec = _load_spec_or_exit(spec_file)
    config = ctx.obj.get("config")
    defaults = config.spec_defaults() if config else None

    try:
        project = translate(spec, defaults)
    except SpecTypeError as e:
        click.echo(f"✗ {e}", err=True)
        raise SystemExit(1)

    click.echo(json.dumps(project.to_dict(), indent=2))


@main.command("deploy")
@click.argument("spec_file", type=click.Path(path_type=Path, dir_okay=False))
@click.option("--overwrite", is_flag=True, help="Replace the project if it already exists")
@click.option("--dry-run", is_flag=True, help="Run against an in-memory Azkaban")
@click.pass_context
def deploy(ctx, spec_file, overwrite, dry_run):
    """
    Deploy SPEC_FILE (add_spec).

    Creates the project, uploads the job and schedules it. If the project
    already exists it is left alone unless --overwrite is given.
    """
    from azorch.config import AZKABAN_PROJECT_OVERWRITE_IF_EXISTS_KEY
    from azorch.errors import DeploymentError, SpecTypeError
    from azorch.schemas import JobSpec

    config = _require_config(ctx)
    spec = _load_spec_or_exit(spec_file)
    if overwrite and isinstance(spec, JobSpec):
        spec = dataclasses.replace(
            spec, config={**spec.config, AZKABAN_PROJECT_OVERWRITE_IF_EXISTS_KEY: True}
        )

    with _open_producer(config, dry_run) as producer:
        try:
            result = producer.add_spec(spec).result()
        except (DeploymentError, SpecTypeError) as e:
            cause = f" ({e.__cause__})" if e.__cause__ else ""
            click.echo(f"✗ {spec.uri} failed: {e}{cause}", err=True)
            raise SystemExit(1)

    prefix = "[DRY-RUN] " if dry_run else ""
    click.echo(f"✓ {prefix}{result.project_name} {result.outcome.value}: {result.manager_url}")


@main.command("update")
@click.argument("spec_file", type=click.Path(path_type=Path, dir_okay=False))
@click.option("--dry-run", is_flag=True, help="Run against an in-memory Azkaban")
@click.pass_context
def update(ctx, spec_file, dry_run):
    """Replace the job and schedule of SPEC_FILE's existing project (update_spec)."""
    from azorch.errors import DeploymentError, SpecTypeError

    config = _require_config(ctx)
    spec = _load_spec_or_exit(spec_file)

    with _open_producer(config, dry_run) as producer:
        try:
            producer.update_spec(spec).result()
            project = producer.describe(spec)
        except (DeploymentError, SpecTypeError) as e:
            cause = f" ({e.__cause__})" if e.__cause__ else ""
            click.echo(f"✗ {spec.uri} failed: {e}{cause}", err=True)
            raise SystemExit(1)

    prefix = "[DRY-RUN] " if dry_run else ""
    click.echo(f"✓ {prefix}{project.project_name} updated: {project.manager_url}")


if __name__ == "__main__":
    main()

"""Command line interface entry point."""

from __future__ import annotations

import dataclasses
import json
import logging
import sys
from collections.abc import Mapping
from typing import Any

import click

from fork_booter.configuration import (
    DEFAULT_CONFIG_FILENAME,
    ConfigurationError,
    load_configuration,
    write_placeholder_configuration,
)
from fork_booter.errors import BooterError
from fork_booter.fork_launch import ForkLaunchError, ForkStarter
from fork_booter.worker_boot import (
    BooterConfiguration,
    read_booter_configuration,
    run_forked_worker,
)

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")


class CliError(Exception):
    """Custom CLI error."""


@click.group(context_settings={"help_option_names": ["-h", "--help"]})
@click.version_option(package_name="fork-booter")
@click.option(
    "--log-level",
    default="WARNING",
    show_default=True,
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help="Logging threshold for messages written to stderr",
)
def cli(log_level: str) -> None:
    """Hand test-run configurations to isolated worker processes."""
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@cli.command(name="generate-config")
@click.option(
    "--output",
    "output_path",
    required=False,
    default=DEFAULT_CONFIG_FILENAME,
    show_default=True,
    type=click.Path(path_type=str),
    help="Path to the YAML launch configuration template to write",
)
def generate_config(output_path: str) -> None:
    """Generate a placeholder YAML launch configuration with guidance comments."""
    try:
        resolved_output = write_placeholder_configuration(output_path)
    except (FileExistsError, OSError) as exc:
        raise CliError(str(exc)) from exc
    click.echo(str(resolved_output))


@cli.command(name="launch")
@click.option(
    "--config",
    "config_path",
    required=True,
    type=click.Path(path_type=str),
    help="Path to the YAML launch configuration",
)
@click.option(
    "--forks",
    "fork_count",
    required=False,
    type=click.IntRange(min=1),
    help="Number of workers to start; overrides fork.fork_count",
)
@click.pass_context
def launch(ctx: click.Context, config_path: str, fork_count: int | None) -> None:
    """Encode the configured run and execute it in worker processes."""
    try:
        configuration = load_configuration(config_path)
        starter = ForkStarter(configuration.fork)
        results = starter.launch_all(
            configuration.provider, configuration.startup, fork_count=fork_count
        )
    except (ConfigurationError, BooterError, ForkLaunchError) as exc:
        raise CliError(str(exc)) from exc
    for result in results:
        click.echo(f"fork {result.fork_number}: exit {result.exit_code}")
    if any(not result.succeeded for result in results):
        ctx.exit(1)


@cli.command(name="worker")
@click.argument("booter_file", type=click.Path(path_type=str))
@click.argument("plugin_pid", required=False)
@click.pass_context
def worker(ctx: click.Context, booter_file: str, plugin_pid: str | None) -> None:
    """Boot a worker from BOOTER_FILE; PLUGIN_PID names the parent to watch."""
    ctx.exit(int(run_forked_worker(booter_file, plugin_pid)))


@cli.command(name="inspect")
@click.argument("booter_file", type=click.Path(path_type=str))
def inspect_booter_file(booter_file: str) -> None:
    """Decode BOOTER_FILE and print the configurations as JSON."""
    try:
        configuration = read_booter_configuration(booter_file)
    except BooterError as exc:
        raise CliError(str(exc)) from exc
    click.echo(json.dumps(describe_configuration(configuration), indent=2, default=str))


def describe_configuration(configuration: BooterConfiguration) -> dict:
    """Return a JSON-ready view of a decoded booter file."""
    description = _to_plain_data(configuration)
    description["startup_configuration"]["manifest_only_jar_requested_and_usable"] = (
        configuration.startup_configuration.manifest_only_jar_requested_and_usable
    )
    return description


def _to_plain_data(value: Any) -> Any:
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return {
            item.name: _to_plain_data(getattr(value, item.name))
            for item in dataclasses.fields(value)
        }
    if isinstance(value, Mapping):
        return {key: _to_plain_data(item) for key, item in value.items()}
    if isinstance(value, tuple | list):
        return [_to_plain_data(item) for item in value]
    return value


def main(argv: list[str] | None = None) -> int:
    """CLI entry point for console_scripts wiring."""
    argv = argv if argv is not None else sys.argv[1:]
    try:
        result = cli.main(args=list(argv), standalone_mode=False)
    except CliError as exc:
        click.echo(str(exc), err=True)
        return 1
    except click.ClickException as exc:
        exc.show()
        return exc.exit_code
    except click.Abort:
        click.echo("Aborted.", err=True)
        return 1
    return result if isinstance(result, int) else 0


if __name__ == "__main__":  # pragma: no cover
    raise SystemExit(main())

"""
wcnt command line — count warnings in log files and compare them against limits.

Exits 1 when any limit is violated, 0 otherwise.
"""

from __future__ import annotations

import asyncio
import logging
import sys
from pathlib import Path

import click

from wcnt.config import settings
from wcnt.core.reporting import report_violations
from wcnt.errors import WcntError
from wcnt.workers.scan_worker import ScanWorker

logger = logging.getLogger("wcnt")

_VERBOSITY_LEVELS = {0: None, 1: logging.INFO, 2: logging.DEBUG}


def _configure_logging(verbosity: int) -> None:
    level = _VERBOSITY_LEVELS.get(min(verbosity, 2)) or settings.log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stderr,
    )


@click.command("wcnt")
@click.version_option(package_name="wcnt")
@click.option(
    "--start",
    "start_dir",
    type=click.Path(exists=True, file_okay=False, path_type=Path),
    default=None,
    metavar="DIR",
    help="Start search in this directory (instead of cwd).",
)
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    metavar="Wcnt.toml",
    help="Use this config file (instead of <start>/Wcnt.toml).",
)
@click.option("-v", "--verbose", "verbosity", count=True, help="Be more verbose. (Add more for more)")
@click.option(
    "--update-limits",
    is_flag=True,
    default=False,
    help="Update the Limits.toml files with lower values if no violations were found.",
)
@click.option(
    "--only",
    "only_kinds",
    multiple=True,
    metavar="KIND",
    help="Only count warnings of this kind. May be repeated.",
)
def cli(start_dir, config_file, verbosity, update_limits, only_kinds):
    """Count warnings inside log files and compare them against declared limits."""
    _configure_logging(verbosity)
    start_dir = start_dir or Path.cwd()
    config_file = config_file or start_dir / settings.config_file_name
    logger.debug(
        f"Parsed arguments: start={start_dir} config={config_file} "
        f"verbosity={verbosity} update_limits={update_limits} only={list(only_kinds)}"
    )

    worker = ScanWorker()
    try:
        outcome = asyncio.run(
            worker.run_check(
                start_dir,
                config_file,
                only_kinds=list(only_kinds) or None,
                update=update_limits,
            )
        )
    except WcntError as e:
        raise click.ClickException(str(e)) from e

    for error in outcome.read_errors:
        click.echo(str(error), err=True)

    violations = outcome.tally.violations()
    if violations:
        report_violations(
            outcome.config.string_arena,
            outcome.results,
            violations,
            outcome.tally.non_violations(),
            verbosity,
            echo=click.echo,
        )
        click.echo(f"Found {len(violations)} violations against specified limits.", err=True)
        sys.exit(1)

    for path in outcome.updated_files:
        click.echo(f"Updating `{path}`")


def main() -> None:
    cli()


if __name__ == "__main__":
    main()

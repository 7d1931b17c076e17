"""CLI entry point and commands."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from treepatch import __version__
from treepatch.core.config import (
    CONFIG_FILENAME,
    INCREMENT_POLICIES,
    default_config,
    serialize_config,
)
from treepatch.storage.fs import atomic_write


@click.group()
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help=f"Path to a {CONFIG_FILENAME} (defaults to the nearest one above the cwd).",
)
@click.option("-v", "--verbose", is_flag=True, help="Log debug output to stderr.")
@click.version_option(__version__, prog_name="treepatch")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """treepatch: apply path-addressed edits to JSON documents."""
    ctx.ensure_object(dict)
    ctx.obj["_config_path"] = config_path
    if verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s: %(message)s", force=True)


@cli.command()
@click.option(
    "--path",
    "target_path",
    type=click.Path(exists=True, file_okay=False, resolve_path=True),
    default=".",
    help=f"Directory to write {CONFIG_FILENAME} in (defaults to current directory).",
)
@click.option(
    "--increment-policy",
    type=click.Choice(INCREMENT_POLICIES),
    default=None,
    help="How 'inc' patches without a snapshot are handled.",
)
@click.option("--force", is_flag=True, help="Overwrite an existing config file.")
def init(target_path: str, increment_policy: str | None, force: bool) -> None:
    """Write a default treepatch.json."""
    config_file = Path(target_path) / CONFIG_FILENAME

    # Idempotency: an existing config is left alone unless --force
    if config_file.exists() and not force:
        click.echo(f"{CONFIG_FILENAME} already exists; use --force to overwrite.")
        return

    config = default_config()
    if increment_policy is not None:
        config["increment_policy"] = increment_policy

    atomic_write(config_file, serialize_config(config))
    click.echo(f"Wrote {config_file}")


# ---------------------------------------------------------------------------
# Register command modules (must be after cli group is defined)
# ---------------------------------------------------------------------------
from treepatch.cli import edit_cmds as _edit_cmds  # noqa: E402, F401

if __name__ == "__main__":
    cli()

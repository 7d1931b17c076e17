"""Shared CLI helpers and output utilities."""

from __future__ import annotations

import json
from pathlib import Path
from typing import NoReturn

import click

from treepatch.core.config import TreepatchConfig, load_config
from treepatch.core.edits import json_default, serialize_document
from treepatch.core.errors import TreepatchError
from treepatch.storage.fs import atomic_write, find_config


# ---------------------------------------------------------------------------
# Config
# ---------------------------------------------------------------------------


def require_config(is_json: bool = False) -> TreepatchConfig:
    """Load the config for this invocation or exit with an error.

    Uses ``--config`` when given, else ``find_config()``, else defaults.
    The result is cached on the Click context.
    """
    ctx = click.get_current_context()
    ctx.ensure_object(dict)
    if "_config" in ctx.obj:
        return ctx.obj["_config"]

    try:
        path = ctx.obj.get("_config_path") or find_config()
        config = load_config(path)
    except TreepatchError as e:
        output_error(str(e), e.code, is_json)

    ctx.obj["_config"] = config
    return config


# ---------------------------------------------------------------------------
# Output helpers
# ---------------------------------------------------------------------------


def json_envelope(ok: bool, *, data: object = None, error: object = None) -> str:
    """Build a structured JSON output envelope."""
    result: dict = {"ok": ok}
    if data is not None:
        result["data"] = data
    if error is not None:
        result["error"] = error
    return json.dumps(result, sort_keys=True, indent=2, default=json_default, ensure_ascii=False) + "\n"


def json_error_obj(code: str, message: str) -> dict:
    """Build an error object for the JSON envelope."""
    return {"code": code, "message": message}


def output_error(message: str, code: str, is_json: bool, exit_code: int = 1) -> NoReturn:
    """Print error and exit. JSON errors go to stdout; human errors to stderr."""
    if is_json:
        click.echo(json_envelope(False, error=json_error_obj(code, message)))
    else:
        click.echo(f"Error: {message}", err=True)
    raise SystemExit(exit_code)


def output_result(
    *,
    data: object,
    human_message: str,
    is_json: bool,
) -> None:
    """Print success result in the appropriate format."""
    if is_json:
        click.echo(json_envelope(True, data=data))
    else:
        click.echo(human_message, nl=not human_message.endswith("\n"))


def write_document(tree: object, target: Path) -> None:
    """Persist a document tree atomically."""
    atomic_write(target, serialize_document(tree))

"""CLI commands: apply, translate, replay."""

from __future__ import annotations

import contextlib
from pathlib import Path

import click

from treepatch.cli.helpers import (
    output_error,
    output_result,
    require_config,
    write_document,
)
from treepatch.cli.main import cli
from treepatch.core.apply import apply
from treepatch.core.config import INCREMENT_POLICIES
from treepatch.core.edits import (
    decode_edit,
    encode_edit,
    serialize_document,
    serialize_edit,
)
from treepatch.core.errors import TreepatchError
from treepatch.storage.fs import jsonl_read, read_json
from treepatch.storage.locks import document_lock
from treepatch.sync.mirror import DocumentMirror
from treepatch.sync.snapshots import lookup_from_tree
from treepatch.sync.translate import from_automerge

_existing_file = click.Path(exists=True, dir_okay=False, path_type=Path)


def _output_option(f):
    f = click.option(
        "--output",
        "-o",
        type=click.Path(dir_okay=False, path_type=Path),
        default=None,
        help="Write the edited document here instead of printing it.",
    )(f)
    f = click.option(
        "--in-place",
        is_flag=True,
        help="Rewrite DOCUMENT with the result (locked for the whole cycle).",
    )(f)
    return f


def _finish(
    tree: object,
    *,
    document: Path,
    output: Path | None,
    in_place: bool,
    applied: int,
    is_json: bool,
) -> None:
    target = document if in_place else output
    if target is not None:
        write_document(tree, target)
        output_result(
            data={"applied": applied, "written": str(target)},
            human_message=f"Applied {applied} edit(s) to {target}",
            is_json=is_json,
        )
        return
    output_result(
        data={"applied": applied, "document": tree},
        human_message=serialize_document(tree),
        is_json=is_json,
    )


@cli.command("apply")
@click.argument("document", type=_existing_file)
@click.argument("edits", type=_existing_file)
@_output_option
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def apply_cmd(
    document: Path,
    edits: Path,
    output: Path | None,
    in_place: bool,
    output_json: bool,
) -> None:
    """Apply a JSONL stream of canonical edits to a JSON DOCUMENT."""
    is_json = output_json
    if in_place and output is not None:
        output_error("--in-place and --output are mutually exclusive.", "INVALID_ARGS", is_json)

    config = require_config(is_json)
    lock = document_lock(document, config["lock_timeout"]) if in_place else contextlib.nullcontext()

    try:
        with lock:
            tree = read_json(document)
            applied = 0
            for raw in jsonl_read(edits):
                edit = decode_edit(raw)
                apply(tree, *edit, block_marker=config["block_marker"])
                if edit:
                    applied += 1
            _finish(
                tree,
                document=document,
                output=output,
                in_place=in_place,
                applied=applied,
                is_json=is_json,
            )
    except TreepatchError as e:
        output_error(str(e), e.code, is_json)


@cli.command()
@click.argument("events", type=_existing_file)
@click.option(
    "--snapshot",
    type=_existing_file,
    default=None,
    help="JSON of the document after the changes; resolves 'inc' and 'conflict'.",
)
@click.option(
    "--increment-policy",
    type=click.Choice(INCREMENT_POLICIES),
    default=None,
    help="Overrides the config's increment_policy.",
)
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def translate(
    events: Path,
    snapshot: Path | None,
    increment_policy: str | None,
    output_json: bool,
) -> None:
    """Translate a JSONL stream of Automerge patches into canonical edits."""
    is_json = output_json
    config = require_config(is_json)
    policy = increment_policy or config["increment_policy"]

    try:
        lookup = lookup_from_tree(read_json(snapshot)) if snapshot is not None else None
        translated = []
        skipped = 0
        for event in jsonl_read(events):
            edit = from_automerge(event, lookup, increment_policy=policy)
            if edit:
                translated.append(edit)
            else:
                skipped += 1
    except TreepatchError as e:
        output_error(str(e), e.code, is_json)

    output_result(
        data={"edits": [encode_edit(edit) for edit in translated], "skipped": skipped},
        human_message="".join(serialize_edit(edit) for edit in translated),
        is_json=is_json,
    )


@cli.command()
@click.argument("document", type=_existing_file)
@click.argument("events", type=_existing_file)
@click.option(
    "--snapshot",
    type=_existing_file,
    default=None,
    help="JSON of the document after the changes; resolves 'inc' and 'conflict'.",
)
@_output_option
@click.option("--json", "output_json", is_flag=True, help="Output as JSON.")
def replay(
    document: Path,
    events: Path,
    snapshot: Path | None,
    output: Path | None,
    in_place: bool,
    output_json: bool,
) -> None:
    """Replay Automerge patches from EVENTS onto a JSON DOCUMENT."""
    is_json = output_json
    if in_place and output is not None:
        output_error("--in-place and --output are mutually exclusive.", "INVALID_ARGS", is_json)

    config = require_config(is_json)
    lock = document_lock(document, config["lock_timeout"]) if in_place else contextlib.nullcontext()

    try:
        with lock:
            lookup = lookup_from_tree(read_json(snapshot)) if snapshot is not None else None
            mirror = DocumentMirror.from_config(config, read_json(document))  # type: ignore[arg-type]
            applied = mirror.apply_events(jsonl_read(events), lookup)
            _finish(
                mirror.root,
                document=document,
                output=output,
                in_place=in_place,
                applied=applied,
                is_json=is_json,
            )
    except TreepatchError as e:
        output_error(str(e), e.code, is_json)

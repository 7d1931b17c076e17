"""Shared test fixtures."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner


@pytest.fixture(autouse=True)
def _isolated_config(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    """Keep a developer's treepatch.json or TREEPATCH_CONFIG out of tests."""
    monkeypatch.delenv("TREEPATCH_CONFIG", raising=False)
    monkeypatch.chdir(tmp_path)


@pytest.fixture()
def cli_runner() -> CliRunner:
    """Return a Click CliRunner for invoking CLI commands."""
    return CliRunner()


@pytest.fixture()
def invoke(cli_runner: CliRunner):
    """Return a helper that invokes CLI commands.

    Usage::

        result = invoke("apply", "doc.json", "edits.jsonl")
    """
    from treepatch.cli.main import cli

    def _invoke(*args: str, **kwargs):
        return cli_runner.invoke(cli, list(args), **kwargs)

    return _invoke


@pytest.fixture()
def invoke_json(invoke):
    """Like invoke, but appends --json and parses the response.

    Returns (parsed_dict, exit_code) tuple.
    """

    def _invoke_json(*args: str) -> tuple[dict, int]:
        result = invoke(*args, "--json")
        parsed = json.loads(result.output)
        return parsed, result.exit_code

    return _invoke_json


@pytest.fixture()
def write_json(tmp_path: Path):
    """Write a JSON document under tmp_path and return its path."""

    def _write(name: str, data: object) -> Path:
        path = tmp_path / name
        path.write_text(json.dumps(data))
        return path

    return _write


@pytest.fixture()
def write_jsonl(tmp_path: Path):
    """Write one JSON record per line under tmp_path and return its path."""

    def _write(name: str, records: list) -> Path:
        path = tmp_path / name
        path.write_text("".join(json.dumps(r) + "\n" for r in records))
        return path

    return _write

"""Default config generation, loading and validation."""

from __future__ import annotations

import json
from pathlib import Path
from typing import TypedDict

from treepatch.core.errors import ConfigError

CONFIG_FILENAME = "treepatch.json"

INCREMENT_POLICIES: tuple[str, ...] = ("error", "delta")


class TreepatchConfig(TypedDict, total=False):
    schema_version: int
    increment_policy: str
    block_marker: str
    lock_timeout: float


def default_config() -> TreepatchConfig:
    """Return the default treepatch configuration.

    The returned dict, when serialized with ``serialize_config()``,
    produces the canonical default treepatch.json.
    """
    return {
        "schema_version": 1,
        "increment_policy": "error",
        "block_marker": "\ufffc",
        "lock_timeout": 10,
    }


def serialize_config(config: TreepatchConfig | dict) -> str:
    """Serialize config to canonical JSON (sorted keys, 2-space indent, trailing newline)."""
    return json.dumps(config, sort_keys=True, indent=2, ensure_ascii=False) + "\n"


def validate_increment_policy(policy: str) -> bool:
    """Return ``True`` if *policy* is a known increment policy."""
    return policy in INCREMENT_POLICIES


def validate_block_marker(marker: object) -> bool:
    """A block marker is a single character."""
    return isinstance(marker, str) and len(marker) == 1


def validate_config(config: dict) -> list[str]:
    """Return a list of problems with *config*; empty when it is usable."""
    problems: list[str] = []

    version = config.get("schema_version", 1)
    if version != 1:
        problems.append(f"Unsupported schema_version: {version!r}")

    policy = config.get("increment_policy", "error")
    if not validate_increment_policy(policy):
        problems.append(
            f"Invalid increment_policy: {policy!r} (expected one of {', '.join(INCREMENT_POLICIES)})"
        )

    marker = config.get("block_marker", "\ufffc")
    if not validate_block_marker(marker):
        problems.append(f"Invalid block_marker: {marker!r} (expected a single character)")

    timeout = config.get("lock_timeout", 10)
    if isinstance(timeout, bool) or not isinstance(timeout, (int, float)) or timeout < 0:
        problems.append(f"Invalid lock_timeout: {timeout!r}")

    return problems


def load_config(path: Path | None) -> TreepatchConfig:
    """Load config from *path* merged over the defaults.

    ``None`` returns the defaults unchanged.

    Raises:
        ConfigError: If the file is not valid JSON or fails validation.
    """
    config = default_config()
    if path is None:
        return config

    try:
        raw = json.loads(path.read_text())
    except json.JSONDecodeError as exc:
        raise ConfigError(f"{path}: invalid JSON ({exc.msg})") from exc
    if not isinstance(raw, dict):
        raise ConfigError(f"{path}: expected a JSON object")

    config.update(raw)  # type: ignore[typeddict-item]
    problems = validate_config(config)
    if problems:
        raise ConfigError(f"{path}: " + "; ".join(problems))
    return config

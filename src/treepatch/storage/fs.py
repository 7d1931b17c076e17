"""Atomic file writes, JSON/JSONL reading, and config discovery."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path

from treepatch.core.config import CONFIG_FILENAME
from treepatch.core.errors import ConfigError, InvalidJsonError

TREEPATCH_CONFIG_ENV = "TREEPATCH_CONFIG"


def _fsync_directory(path: Path) -> None:
    """Fsync a directory to ensure metadata (e.g. renames) is durable.

    Some platforms (notably macOS HFS+) may not support fsync on directory
    file descriptors, so ``OSError`` is silently ignored.
    """
    try:
        fd = os.open(str(path), os.O_RDONLY)
        try:
            os.fsync(fd)
        finally:
            os.close(fd)
    except OSError:
        pass


def atomic_write(path: Path, content: str | bytes) -> None:
    """Write content to path atomically via temp file + fsync + rename.

    The temp file lives next to the target so ``os.replace()`` stays on one
    filesystem.

    Raises:
        FileNotFoundError: If the parent directory does not exist.
    """
    parent = path.parent
    if not parent.is_dir():
        raise FileNotFoundError(f"Parent directory does not exist: {parent}")

    data = content.encode("utf-8") if isinstance(content, str) else content

    fd, tmp_path = tempfile.mkstemp(dir=parent, prefix=".tmp.")
    closed = False
    try:
        # os.write() can short-write.
        mv = memoryview(data)
        while mv:
            written = os.write(fd, mv)
            mv = mv[written:]
        os.fsync(fd)
        os.close(fd)
        closed = True
        os.replace(tmp_path, path)
        _fsync_directory(parent)
    except BaseException:
        if not closed:
            os.close(fd)
        try:
            os.unlink(tmp_path)
        except OSError:
            pass
        raise


def read_json(path: Path) -> object:
    """Read one JSON document from *path*.

    Raises:
        InvalidJsonError: If the file does not hold valid JSON.
    """
    try:
        return json.loads(path.read_text(encoding="utf-8"))
    except UnicodeDecodeError as exc:
        raise InvalidJsonError(f"{path}: not UTF-8 ({exc.reason} at byte {exc.start})") from exc
    except json.JSONDecodeError as exc:
        raise InvalidJsonError(f"{path}: {exc.msg} (line {exc.lineno})") from exc


def jsonl_read(path: Path) -> list:
    """Read every record of a JSONL file, skipping blank lines.

    A malformed record is an error, never skipped.

    Raises:
        InvalidJsonError: Naming the first line that is not valid JSON.
    """
    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as exc:
        raise InvalidJsonError(f"{path}: not UTF-8 ({exc.reason} at byte {exc.start})") from exc

    records: list = []
    for lineno, line in enumerate(text.splitlines(), start=1):
        line = line.strip()
        if not line:
            continue
        try:
            records.append(json.loads(line))
        except json.JSONDecodeError as exc:
            raise InvalidJsonError(f"{path}:{lineno}: {exc.msg}") from exc
    return records


def find_config(start: Path | None = None) -> Path | None:
    """Find the treepatch.json that applies to *start*.

    Checks TREEPATCH_CONFIG first.  If set, validates it and returns it
    (no fallback to walk-up).

    Otherwise, walks up from *start* (defaults to cwd) looking for
    treepatch.json.

    Returns:
        Path to the config file, or None if there is none.

    Raises:
        ConfigError: If TREEPATCH_CONFIG is set but invalid.
    """
    env_config = os.environ.get(TREEPATCH_CONFIG_ENV)
    if env_config is not None:
        if not env_config:
            raise ConfigError(f"{TREEPATCH_CONFIG_ENV} is set but empty")
        env_path = Path(env_config)
        if not env_path.is_file():
            raise ConfigError(
                f"{TREEPATCH_CONFIG_ENV} points to a file that does not exist: {env_config}"
            )
        return env_path

    current = (start or Path.cwd()).resolve()
    while True:
        candidate = current / CONFIG_FILENAME
        if candidate.is_file():
            return candidate
        parent = current.parent
        if parent == current:
            return None
        current = parent

"""Exceptions raised while applying or translating edits."""

from __future__ import annotations


class TreepatchError(Exception):
    """Base class for every error treepatch raises on purpose."""

    code = "TREEPATCH_ERROR"


class StructuralAddressError(TreepatchError):
    """The path cannot be walked: top level used as a sequence, or a
    path part whose type decides neither mapping nor sequence."""

    code = "STRUCTURAL_ADDRESS"


class InvalidRangeError(TreepatchError, ValueError):
    """A range with exactly one bound present."""

    code = "INVALID_RANGE"


class UnsupportedContainerError(TreepatchError):
    """The addressed slot holds something that cannot be spliced."""

    code = "UNSUPPORTED_CONTAINER"


class MissingSnapshotError(TreepatchError):
    """An increment or conflict event needs a snapshot lookup."""

    code = "MISSING_SNAPSHOT"


class UnknownActionError(TreepatchError):
    """A patch event carries an action we do not translate."""

    code = "UNKNOWN_ACTION"


class InvalidEditError(TreepatchError, ValueError):
    """A wire-format edit is not a 0-, 2- or 3-element array."""

    code = "INVALID_EDIT"


class ConfigError(TreepatchError):
    """Raised when treepatch.json is missing keys or holds bad values."""

    code = "INVALID_CONFIG"


class InvalidJsonError(TreepatchError, ValueError):
    """A document or JSONL stream could not be decoded."""

    code = "INVALID_JSON"

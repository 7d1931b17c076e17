"""treepatch: path-addressed edits for plain document trees."""

from __future__ import annotations

from treepatch.core.apply import BLOCK_MARKER, apply, patch
from treepatch.core.edits import UNSET, Increment
from treepatch.core.errors import (
    InvalidRangeError,
    MissingSnapshotError,
    StructuralAddressError,
    TreepatchError,
    UnsupportedContainerError,
)
from treepatch.core.nodes import HOLE
from treepatch.sync.mirror import DocumentMirror
from treepatch.sync.translate import from_automerge, translate_all

__version__ = "0.1.0"

__all__ = [
    "BLOCK_MARKER",
    "DocumentMirror",
    "HOLE",
    "Increment",
    "InvalidRangeError",
    "MissingSnapshotError",
    "StructuralAddressError",
    "TreepatchError",
    "UNSET",
    "UnsupportedContainerError",
    "apply",
    "from_automerge",
    "patch",
    "translate_all",
]

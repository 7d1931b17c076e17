"""Snapshot lookups over plain document trees.

``inc`` and ``conflict`` patches are translated by reading the value the
document holds *after* the change.  A lookup is a plain function of the
full patch path, so the translator never sees the document itself.
"""

from __future__ import annotations

from treepatch.core.errors import StructuralAddressError
from treepatch.core.nodes import CONTAINER_KINDS, get_slot, is_absent, kind_of
from treepatch.sync.translate import SnapshotLookup


def resolve_path(tree: object, path: list) -> object:
    """Return the value at *path* in *tree*, or ``None`` if any step is absent."""
    node = tree
    for part in path:
        if kind_of(node) not in CONTAINER_KINDS:
            return None
        try:
            node = get_slot(node, part)
        except StructuralAddressError:
            return None
        if is_absent(node):
            return None
    return node


def lookup_from_tree(tree: object) -> SnapshotLookup:
    """Build a lookup reading from a plain tree taken after the change."""

    def resolve(path: list) -> object:
        return resolve_path(tree, path)

    return resolve

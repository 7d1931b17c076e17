"""Translate Automerge patch events into canonical edits.

An Automerge patch names the full path of the slot it touches.  The
canonical edit splits that into the parent path and a range: the last path
part becomes a key (maps) or a span (sequences and text).

``inc`` and ``conflict`` patches do not carry the value the slot ends up
with, so they need a snapshot lookup that reads the document after the
change.  Without one, ``conflict`` always fails; ``inc`` fails under the
``"error"`` policy and becomes an ``Increment`` delta under ``"delta"``.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping

from treepatch.core.config import INCREMENT_POLICIES
from treepatch.core.edits import UNSET, Edit, Increment
from treepatch.core.errors import (
    ConfigError,
    MissingSnapshotError,
    StructuralAddressError,
    UnknownActionError,
)
from treepatch.core.nodes import is_index

logger = logging.getLogger(__name__)

SnapshotLookup = Callable[[list], object]

ACTIONS: frozenset[str] = frozenset(
    {"put", "del", "insert", "splice", "inc", "conflict", "mark", "unmark"}
)

# Presentation-only; they never change the addressable tree.
SKIPPED_ACTIONS: frozenset[str] = frozenset({"mark", "unmark"})


def _field(event: object, name: str, default: object = UNSET) -> object:
    """Read *name* from a mapping-shaped or attribute-shaped patch event."""
    if isinstance(event, Mapping):
        return event.get(name, default)
    return getattr(event, name, default)


def from_automerge(
    event: object,
    lookup: SnapshotLookup | None = None,
    *,
    increment_policy: str = "error",
) -> Edit:
    """Return the canonical edit for one Automerge patch event.

    Returns ``()`` for events that do not change the tree.

    Raises:
        MissingSnapshotError: ``inc`` or ``conflict`` without a lookup (and,
            for ``inc``, without the ``"delta"`` policy).
        UnknownActionError: The action is not a known patch action.
        StructuralAddressError: The event path is empty.
    """
    if increment_policy not in INCREMENT_POLICIES:
        raise ConfigError(f"Unknown increment policy: {increment_policy!r}")

    action = _field(event, "action")
    if action in SKIPPED_ACTIONS:
        logger.debug("skipping %s because it doesn't affect material reality", action)
        return ()
    if action not in ACTIONS:
        raise UnknownActionError(f"Unknown patch action: {action!r}")

    full_path = list(_field(event, "path", []))  # type: ignore[call-overload]
    if not full_path:
        raise StructuralAddressError(f"{action} patch has an empty path")
    path, key = full_path[:-1], full_path[-1]

    if action == "inc":
        if lookup is not None:
            return (path, key, lookup(full_path))
        if increment_policy == "delta":
            return (path, key, Increment(_field(event, "value", 1)))  # type: ignore[arg-type]
        raise MissingSnapshotError(f"can't apply {action} without a snapshot lookup")

    if action == "conflict":
        if lookup is not None:
            return (path, key, lookup(full_path))
        raise MissingSnapshotError(f"can't apply {action} without a snapshot lookup")

    if action == "del":
        if is_index(key):
            length = _field(event, "length", None) or 1
            return (path, [key, key + length])  # type: ignore[operator]
        return (path, key)

    if action == "insert":
        return (path, [key, key], list(_field(event, "values", [])))  # type: ignore[call-overload]

    if action == "splice":
        return (path, [key, key], [_field(event, "value", "")])

    # put
    return (path, key, _field(event, "value", None))


def translate_all(
    events: Iterable[object],
    lookup: SnapshotLookup | None = None,
    *,
    increment_policy: str = "error",
) -> list[Edit]:
    """Translate a batch of events, dropping the ones that are no-ops."""
    edits: list[Edit] = []
    for event in events:
        edit = from_automerge(event, lookup, increment_policy=increment_policy)
        if edit:
            edits.append(edit)
    return edits

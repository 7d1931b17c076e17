"""Node kinds of a document tree and slot access that understands holes.

A document node is never declared; its kind is read off whatever is stored
in the slot at the moment it is touched.  ``kind_of()`` is the one place
that inspects Python types, everything else dispatches on ``NodeKind``.

Sequences grown past their end are padded with ``HOLE``.  A slot holding
``HOLE`` is absent, exactly like a missing mapping key.
"""

from __future__ import annotations

import array
from collections.abc import MutableMapping
from enum import Enum

from treepatch.core.errors import StructuralAddressError


class NodeKind(Enum):
    MAPPING = "mapping"
    SEQUENCE = "sequence"
    TEXT = "text"
    BINARY = "binary"
    SCALAR = "scalar"


class _Hole:
    """Placeholder for an unaddressed slot in a sequence."""

    _instance: _Hole | None = None

    def __new__(cls) -> _Hole:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "HOLE"

    def __bool__(self) -> bool:
        return False

    def __copy__(self) -> _Hole:
        return self

    def __deepcopy__(self, memo: dict) -> _Hole:
        return self

    def __reduce__(self) -> str:
        return "HOLE"


HOLE = _Hole()

BINARY_TYPES = (bytes, bytearray, memoryview, array.array)

CONTAINER_KINDS: frozenset[NodeKind] = frozenset({NodeKind.MAPPING, NodeKind.SEQUENCE})


def kind_of(node: object) -> NodeKind:
    """Classify a stored value."""
    if isinstance(node, MutableMapping):
        return NodeKind.MAPPING
    if isinstance(node, list):
        return NodeKind.SEQUENCE
    if isinstance(node, str):
        return NodeKind.TEXT
    if isinstance(node, BINARY_TYPES):
        return NodeKind.BINARY
    return NodeKind.SCALAR


def is_index(part: object) -> bool:
    """True for a sequence index.  ``bool`` is an ``int`` but never an index."""
    return isinstance(part, int) and not isinstance(part, bool)


def is_absent(value: object) -> bool:
    return value is HOLE


def new_container(next_part: object, *, where: str = "") -> dict | list:
    """Build the container a missing slot needs, judged by the next path part.

    Raises:
        StructuralAddressError: If *next_part* is neither a key nor an index.
    """
    if isinstance(next_part, str):
        return {}
    if is_index(next_part):
        return []
    raise StructuralAddressError(
        f"can't go down this road: {where}.{next_part!r} is neither a key nor an index"
    )


def get_slot(container: object, key: object) -> object:
    """Return ``container[key]``, or ``HOLE`` when the slot is absent.

    A ``None`` inside a sequence is a hole that went through JSON, so it
    reads as ``HOLE`` too.  ``None`` under a mapping key is a value.
    """
    kind = kind_of(container)
    if kind is NodeKind.MAPPING:
        return container.get(key, HOLE)  # type: ignore[union-attr]
    if kind is NodeKind.SEQUENCE:
        if not is_index(key):
            raise StructuralAddressError(f"can't index a sequence with {key!r}")
        try:
            value = container[key]  # type: ignore[index]
        except IndexError:
            return HOLE
        return HOLE if value is None else value
    raise StructuralAddressError(f"can't index a {kind.value} value with {key!r}")


def put_slot(container: object, key: object, value: object) -> None:
    """Set ``container[key] = value``, padding sequences with holes."""
    kind = kind_of(container)
    if kind is NodeKind.MAPPING:
        container[key] = value  # type: ignore[index]
        return
    if kind is NodeKind.SEQUENCE:
        if not is_index(key):
            raise StructuralAddressError(f"can't index a sequence with {key!r}")
        seq: list = container  # type: ignore[assignment]
        if key < -len(seq):
            raise StructuralAddressError(f"index {key} is before the start of the sequence")
        if key >= len(seq):
            seq.extend([HOLE] * (key - len(seq) + 1))
        seq[key] = value
        return
    raise StructuralAddressError(f"can't set {key!r} on a {kind.value} value")


def delete_slot(container: object, key: object) -> None:
    """Remove ``container[key]``.  Deleting an absent slot does nothing.

    Removing a sequence slot shifts the following elements down.
    """
    kind = kind_of(container)
    if kind is NodeKind.MAPPING:
        container.pop(key, None)  # type: ignore[union-attr]
        return
    if kind is NodeKind.SEQUENCE:
        if not is_index(key):
            raise StructuralAddressError(f"can't index a sequence with {key!r}")
        seq: list = container  # type: ignore[assignment]
        if -len(seq) <= key < len(seq):
            del seq[key]
        return
    raise StructuralAddressError(f"can't delete {key!r} from a {kind.value} value")

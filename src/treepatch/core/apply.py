"""Apply a canonical edit to a document tree in place.

Walk the path, creating missing containers on the way (a mapping when the
next path part is a key, a sequence when it is an index), then work out
from the range shape and the presence of a value whether the edit is a
put, a delete, or a splice of a sequence or text.

Loosely follows the Braid range-patch draft: to insert a list *as one
item* into a sequence, wrap it in another list.
"""

from __future__ import annotations

import logging
from collections.abc import Sequence

from treepatch.core.edits import (
    UNSET,
    Increment,
    RangeShape,
    SpliceOp,
    range_bounds,
    range_shape,
    splice_op,
    unpack_edit,
)
from treepatch.core.errors import (
    InvalidRangeError,
    StructuralAddressError,
    UnsupportedContainerError,
)
from treepatch.core.nodes import (
    CONTAINER_KINDS,
    HOLE,
    NodeKind,
    delete_slot,
    get_slot,
    is_absent,
    is_index,
    kind_of,
    new_container,
    put_slot,
)

logger = logging.getLogger(__name__)

# Stands in for embedded objects when a mixed list is spliced into text.
BLOCK_MARKER = "\ufffc"

_SPAN_SHAPES = frozenset({RangeShape.PAIR, RangeShape.APPEND})


def apply(target: object, *edit: object, block_marker: str = BLOCK_MARKER) -> None:
    """Apply one canonical edit to *target*, mutating it in place.

    Usage::

        apply(doc, ["deeply", "nested"], "value", 10)   # put
        apply(doc, ["items"], [1, 3], "x")              # replace span
        apply(doc, ["items"], [])                       # no-op delete
        apply(doc)                                      # no-op

    Nothing is rolled back on failure: containers created along the path
    before an error stay in the tree.

    Raises:
        StructuralAddressError: The path cannot be walked or the root is
            addressed as a sequence.
        InvalidRangeError: The range has exactly one bound.
        UnsupportedContainerError: The addressed slot cannot be spliced.
    """
    if not edit:
        logger.debug("empty patch")
        return

    path, range_, value = unpack_edit(edit)
    walked: list = []

    while True:
        key = path.pop(0) if path else None
        if not path:
            _apply_at(target, key, range_, value, block_marker)
            logger.debug("applied %r %r at %r", range_, _describe(value), walked + [key])
            return

        if key is None:
            raise StructuralAddressError("can't treat the top level as a sequence")

        child = get_slot(target, key)
        if is_absent(child):
            child = new_container(path[0], where=".".join(map(str, walked + [key])))
            put_slot(target, key, child)
        elif kind_of(child) is NodeKind.TEXT:
            # Nothing inside a text value can be addressed; stale edits land here.
            logger.debug("ignoring edit inside text at %r", walked + [key])
            return
        elif kind_of(child) not in CONTAINER_KINDS:
            raise StructuralAddressError(
                f"can't walk into {kind_of(child).value} at {walked + [key]!r}"
            )
        walked.append(key)
        target = child


def _describe(value: object) -> str:
    return "(delete)" if value is UNSET else type(value).__name__


def _apply_at(target: object, key: object, range_: object, value: object, block_marker: str) -> None:
    """Final step: *target* is the parent, *key* the last path part (or None)."""
    shape = range_shape(range_)

    if (
        kind_of(target) is NodeKind.MAPPING
        and key is None
        and shape is RangeShape.PAIR
        and isinstance(range_[0], str)  # type: ignore[index]
    ):
        delete_slot(target, range_[0])  # type: ignore[index]
        return

    if shape in _SPAN_SHAPES or shape is RangeShape.INDEX:
        if key is None:
            raise StructuralAddressError("can't treat the top level as a sequence")
        _splice(target, key, range_, value, block_marker)
        return

    if not isinstance(range_, str):
        raise StructuralAddressError(f"can't index a map with {range_!r}")

    if key is None:
        _put_or_delete(target, range_, value)
        return

    child = get_slot(target, key)
    if is_absent(child):
        child = {}
        put_slot(target, key, child)
    if kind_of(child) is NodeKind.TEXT:
        # Setting a key on a character of a string.
        logger.debug("ignoring %r on text at %r", range_, key)
        return
    _put_or_delete(child, range_, value)


def _put_or_delete(container: object, key: object, value: object) -> None:
    if value is UNSET:
        delete_slot(container, key)
    elif isinstance(value, Increment):
        put_slot(container, key, _incremented(get_slot(container, key), value, key))
    else:
        put_slot(container, key, value)


def _incremented(current: object, increment: Increment, key: object) -> object:
    if is_absent(current):
        return increment.delta
    if isinstance(current, bool) or not isinstance(current, (int, float)):
        raise UnsupportedContainerError(
            f"can't increment a {type(current).__name__} value at {key!r}"
        )
    return current + increment.delta


def _splice(target: object, key: object, range_: object, value: object, block_marker: str) -> None:
    start, end = range_bounds(range_)
    op = splice_op(range_, value)

    if kind_of(target) is NodeKind.TEXT:
        logger.debug("ignoring %s inside text at %r", op.value, key)
        return

    seq = get_slot(target, key)
    if is_absent(seq):
        seq = "" if isinstance(value, str) else []
        put_slot(target, key, seq)

    kind = kind_of(seq)
    if kind in (NodeKind.SEQUENCE, NodeKind.TEXT) and start is not None:
        if not (is_index(start) and is_index(end)):
            raise InvalidRangeError(f"can't splice a {kind.value} with bounds {range_!r}")

    if kind is NodeKind.SEQUENCE:
        _splice_sequence(seq, start, end, op, value)  # type: ignore[arg-type]
    elif kind is NodeKind.TEXT:
        put_slot(target, key, _splice_text(seq, start, end, op, value, block_marker))  # type: ignore[arg-type]
    elif (
        kind is NodeKind.MAPPING
        and range_shape(range_) is RangeShape.PAIR
        and isinstance(range_[0], str)  # type: ignore[index]
    ):
        delete_slot(seq, range_[0])  # type: ignore[index]
    else:
        raise UnsupportedContainerError(f"can't splice a {kind.value} value at {key!r}")


def _spread(value: object) -> list:
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def _splice_sequence(seq: list, start: int | None, end: int | None, op: SpliceOp, value: object) -> None:
    if op is SpliceOp.APPEND:
        seq.extend(_spread(value))
        return

    if op is SpliceOp.DELETE:
        if start is not None:
            del seq[start:end]
        return

    if start > len(seq):  # type: ignore[operator]
        seq.extend([HOLE] * (start - len(seq)))  # type: ignore[operator]

    if op is SpliceOp.REPLACE and isinstance(value, Increment) and end - start == 1:  # type: ignore[operator]
        seq[start:end] = [_incremented(get_slot(seq, start), value, start)]
        return

    seq[start:end] = _spread(value)


def render_text(value: object, block_marker: str = BLOCK_MARKER) -> str:
    """Render a value for splicing into text.

    A bare value is stringified.  In a list, non-text items become
    *block_marker*.
    """
    if isinstance(value, str):
        return value
    if not isinstance(value, (list, tuple)):
        return str(value)
    items: Sequence = value
    return "".join(item if isinstance(item, str) else block_marker for item in items)


def _splice_text(
    text: str,
    start: int | None,
    end: int | None,
    op: SpliceOp,
    value: object,
    block_marker: str,
) -> str:
    if op is SpliceOp.APPEND:
        return text + render_text(value, block_marker)
    if op is SpliceOp.DELETE:
        if start is None:
            return text
        return text[:start] + text[end:]
    return text[:start] + render_text(value, block_marker) + text[end:]


patch = apply

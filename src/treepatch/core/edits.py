"""Canonical edits: types, range classification and the JSON wire shape.

A canonical edit is a tuple of 0, 2 or 3 elements::

    ()                        no-op
    (path, range)             delete
    (path, range, value)      put / insert / replace / append

The *range* decides what the edit means:

- a bare key (``"title"``) addresses a mapping slot,
- ``[start, end]`` is a half-open span of a sequence or text,
- a bare index ``n`` is shorthand for ``[n, n + 1]``,
- ``[]`` means "append".

A missing value is what makes an edit a delete, so ``None`` is never used
for that: ``None`` is JSON null and is put like any other value.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Union

from treepatch.core.errors import InvalidEditError, InvalidRangeError
from treepatch.core.nodes import HOLE, is_index

PathPart = Union[str, int]
RangeDescriptor = Union[str, int, Sequence]
Edit = tuple

INCREMENT_TAG = "$inc"


class _Unset:
    """Marks an edit that carries no value."""

    def __repr__(self) -> str:
        return "UNSET"

    def __bool__(self) -> bool:
        return False


UNSET = _Unset()


@dataclass(frozen=True)
class Increment:
    """A counter delta, applied as ``current + delta`` instead of a put."""

    delta: int | float = 1


class RangeShape(Enum):
    KEY = "key"
    INDEX = "index"
    PAIR = "pair"
    APPEND = "append"


class SpliceOp(Enum):
    DELETE = "delete"
    INSERT = "insert"
    APPEND = "append"
    REPLACE = "replace"


def range_shape(range_: object) -> RangeShape:
    """Classify a range descriptor by its shape alone."""
    if isinstance(range_, (list, tuple)):
        return RangeShape.APPEND if len(range_) == 0 else RangeShape.PAIR
    if is_index(range_):
        return RangeShape.INDEX
    return RangeShape.KEY


def range_bounds(range_: object) -> tuple[object, object]:
    """Return ``(start, end)`` for a span-shaped range.

    ``[]`` yields ``(None, None)``; a bare index ``n`` yields ``(n, n + 1)``.

    Raises:
        InvalidRangeError: If only one bound is present, or more than two are.
    """
    shape = range_shape(range_)
    if shape is RangeShape.APPEND:
        return (None, None)
    if shape is RangeShape.INDEX:
        return (range_, range_ + 1)  # type: ignore[operator]
    if shape is RangeShape.KEY:
        raise InvalidRangeError(f"{range_!r} is a key, not a range")
    bounds = list(range_)  # type: ignore[call-overload]
    if len(bounds) > 2:
        raise InvalidRangeError(f"a range has at most two bounds, got {range_!r}")
    bounds += [None] * (2 - len(bounds))
    start, end = bounds
    if start is None or end is None:
        raise InvalidRangeError(f"it's all or nothing, no half measures: {range_!r}")
    return (start, end)


def splice_op(range_: object, value: object) -> SpliceOp:
    """Decide what a span-shaped edit does from its range and value."""
    if value is UNSET:
        return SpliceOp.DELETE
    if range_shape(range_) is RangeShape.APPEND:
        return SpliceOp.APPEND
    start, end = range_bounds(range_)
    if start == end:
        return SpliceOp.INSERT
    return SpliceOp.REPLACE


def unpack_edit(edit: Sequence) -> tuple[list, object, object]:
    """Split a non-empty edit tuple into ``(path, range, value)``.

    The value is ``UNSET`` for two-element edits.
    """
    if len(edit) == 2:
        path, range_ = edit
        return list(path), range_, UNSET
    if len(edit) == 3:
        path, range_, value = edit
        return list(path), range_, value
    raise InvalidEditError(f"an edit has 0, 2 or 3 elements, got {len(edit)}")


# ---------------------------------------------------------------------------
# JSON wire shape
# ---------------------------------------------------------------------------


def _decode_value(value: object) -> object:
    if isinstance(value, dict) and set(value) == {INCREMENT_TAG}:
        return Increment(value[INCREMENT_TAG])
    return value


def _check_path(path: object) -> list:
    if not isinstance(path, list):
        raise InvalidEditError(f"edit path must be an array, got {path!r}")
    for part in path:
        if not (isinstance(part, str) or is_index(part)):
            raise InvalidEditError(f"path parts are strings or integers, got {part!r}")
    return path


def _check_range(range_: object) -> object:
    if isinstance(range_, list):
        for bound in range_:
            if bound is not None and not (isinstance(bound, str) or is_index(bound)):
                raise InvalidEditError(f"range bounds are integers, got {bound!r}")
        return range_
    if isinstance(range_, str) or is_index(range_):
        return range_
    raise InvalidEditError(f"range must be a key, an index or an array, got {range_!r}")


def decode_edit(raw: object) -> Edit:
    """Validate a decoded JSON edit and return it as a tuple."""
    if not isinstance(raw, list):
        raise InvalidEditError(f"an edit is a JSON array, got {type(raw).__name__}")
    if len(raw) == 0:
        return ()
    if len(raw) not in (2, 3):
        raise InvalidEditError(f"an edit has 0, 2 or 3 elements, got {len(raw)}")
    path = _check_path(raw[0])
    range_ = _check_range(raw[1])
    if len(raw) == 2:
        return (path, range_)
    return (path, range_, _decode_value(raw[2]))


def encode_edit(edit: Sequence) -> list:
    """Return the JSON-ready list form of an edit."""
    if len(edit) == 0:
        return []
    path, range_, value = unpack_edit(edit)
    encoded_range = list(range_) if isinstance(range_, tuple) else range_
    if value is UNSET:
        return [path, encoded_range]
    return [path, encoded_range, value]


def json_default(obj: object) -> object:
    """``json.dumps`` hook for holes and increment deltas."""
    if obj is HOLE:
        return None
    if isinstance(obj, Increment):
        return {INCREMENT_TAG: obj.delta}
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def serialize_edit(edit: Sequence) -> str:
    """Serialize an edit as one JSONL line (with trailing newline)."""
    return json.dumps(encode_edit(edit), default=json_default, ensure_ascii=False) + "\n"


def serialize_document(tree: object) -> str:
    """Serialize a document tree.  Holes become ``null``."""
    return json.dumps(tree, default=json_default, sort_keys=True, indent=2, ensure_ascii=False) + "\n"

"""Tests for core/edits.py: range classification and the wire shape."""

from __future__ import annotations

import json

import pytest

from treepatch.core.edits import (
    UNSET,
    Increment,
    RangeShape,
    SpliceOp,
    decode_edit,
    encode_edit,
    range_bounds,
    range_shape,
    serialize_document,
    serialize_edit,
    splice_op,
    unpack_edit,
)
from treepatch.core.errors import InvalidEditError, InvalidRangeError
from treepatch.core.nodes import HOLE


class TestRangeShape:
    @pytest.mark.parametrize(
        ("range_", "shape"),
        [
            ("title", RangeShape.KEY),
            (3, RangeShape.INDEX),
            ([1, 2], RangeShape.PAIR),
            ((1, 2), RangeShape.PAIR),
            ([], RangeShape.APPEND),
            (True, RangeShape.KEY),
        ],
    )
    def test_shapes(self, range_: object, shape: RangeShape) -> None:
        assert range_shape(range_) is shape

    def test_index_is_shorthand_for_pair(self) -> None:
        assert range_bounds(4) == (4, 5)

    def test_append_has_no_bounds(self) -> None:
        assert range_bounds([]) == (None, None)

    def test_key_has_no_bounds(self) -> None:
        with pytest.raises(InvalidRangeError):
            range_bounds("title")


class TestSpliceOp:
    def test_delete_without_value(self) -> None:
        assert splice_op([1, 2], UNSET) is SpliceOp.DELETE
        assert splice_op([], UNSET) is SpliceOp.DELETE

    def test_insert_when_bounds_match(self) -> None:
        assert splice_op([2, 2], "x") is SpliceOp.INSERT

    def test_append_on_empty_range(self) -> None:
        assert splice_op([], "x") is SpliceOp.APPEND

    def test_replace_otherwise(self) -> None:
        assert splice_op([1, 3], "x") is SpliceOp.REPLACE
        assert splice_op(1, "x") is SpliceOp.REPLACE

    def test_none_is_a_value(self) -> None:
        assert splice_op([0, 1], None) is SpliceOp.REPLACE


class TestUnpack:
    def test_two_elements_have_no_value(self) -> None:
        assert unpack_edit((["a"], "b")) == (["a"], "b", UNSET)

    def test_path_is_copied(self) -> None:
        path = ["a"]
        unpacked, _, _ = unpack_edit((path, "b", 1))
        unpacked.append("c")
        assert path == ["a"]

    def test_wrong_length(self) -> None:
        with pytest.raises(InvalidEditError):
            unpack_edit((["a"],))


class TestWire:
    def test_decode_empty(self) -> None:
        assert decode_edit([]) == ()

    def test_decode_delete(self) -> None:
        assert decode_edit([["items"], [1, 2]]) == (["items"], [1, 2])

    def test_decode_put_with_null(self) -> None:
        assert decode_edit([[], "a", None]) == ([], "a", None)

    def test_decode_increment(self) -> None:
        assert decode_edit([["stats"], "views", {"$inc": 2}]) == (["stats"], "views", Increment(2))

    @pytest.mark.parametrize(
        "raw",
        [
            {"path": []},
            [["a"]],
            [["a"], "b", 1, 2],
            ["a", "b"],
            [[1.5], "b"],
            [["a"], 1.5],
            [["a"], [0.5, 1]],
        ],
    )
    def test_decode_rejects(self, raw: object) -> None:
        with pytest.raises(InvalidEditError):
            decode_edit(raw)

    def test_encode_keeps_deletes_short(self) -> None:
        assert encode_edit((["items"], (1, 2))) == [["items"], [1, 2]]

    def test_serialize_edit_line(self) -> None:
        line = serialize_edit((["stats"], "views", Increment(1)))
        assert line.endswith("\n")
        assert json.loads(line) == [["stats"], "views", {"$inc": 1}]

    def test_serialize_document_turns_holes_into_null(self) -> None:
        text = serialize_document({"items": [HOLE, "x"]})
        assert json.loads(text) == {"items": [None, "x"]}

    def test_serialize_rejects_unknown_objects(self) -> None:
        with pytest.raises(TypeError):
            serialize_document({"a": object()})

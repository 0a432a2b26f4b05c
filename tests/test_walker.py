"""Tests for cson_core.walker."""

import ctypes

import pytest

from cson_core import (
    INT_LIST,
    STRING_LIST,
    AllocatorError,
    FieldType,
    decode_text,
    dup_string,
    free_record,
    list_append,
)
from cson_core.memory import store_pointer
from cson_core.model import (
    model_array,
    model_int,
    model_json,
    model_list,
    model_obj,
    model_string,
    model_struct,
)


class Leaf(ctypes.Structure):
    _fields_ = [("v", ctypes.c_int), ("note", ctypes.c_char_p)]


LEAF = [model_obj(Leaf), model_int(Leaf, "v"), model_string(Leaf, "note")]


class Tree(ctypes.Structure):
    _fields_ = [
        ("name", ctypes.c_char_p),
        ("leaf", ctypes.c_void_p),
        ("leaves", ctypes.c_void_p),
        ("ints", ctypes.c_void_p),
        ("words", ctypes.c_void_p),
        ("nums", ctypes.c_int * 4),
        ("tags", ctypes.c_char_p * 3),
        ("meta", ctypes.c_char_p),
    ]


TREE = [
    model_obj(Tree),
    model_string(Tree, "name"),
    model_struct(Tree, "leaf", LEAF),
    model_list(Tree, "leaves", LEAF),
    model_list(Tree, "ints", INT_LIST),
    model_list(Tree, "words", STRING_LIST),
    model_array(Tree, "nums", FieldType.INT, 4),
    model_array(Tree, "tags", FieldType.STRING, 3),
    model_json(Tree, "meta"),
]

FULL = """
{
    "name": "root",
    "leaf": {"v": 1, "note": "single"},
    "leaves": [{"v": 2, "note": "a"}, {"v": 3}],
    "ints": [4, 5, 6],
    "words": ["x", "yy", null],
    "nums": [7, 8],
    "tags": ["t1", "t2", "t3"],
    "meta": {"deep": [1, {"k": null}]}
}
"""


class TestFreeRecord:
    def test_releases_everything(self, heap):
        record = decode_text(FULL, TREE)
        assert heap.live_blocks > 1
        free_record(record, TREE)
        assert heap.live_blocks == 0
        assert heap.total_allocated == heap.total_released

    def test_empty_record(self, heap):
        free_record(decode_text("{}", TREE), TREE)
        assert heap.live_blocks == 0

    def test_null_record_is_noop(self, heap):
        free_record(None, TREE)
        assert heap.total_released == 0

    def test_double_free_detected(self):
        record = decode_text('{"name": "x"}', TREE)
        free_record(record, TREE)
        with pytest.raises(AllocatorError):
            free_record(record, TREE)

    def test_scalar_arrays_release_nothing_extra(self, heap):
        record = decode_text('{"nums": [1, 2, 3, 4]}', TREE)
        assert heap.live_blocks == 1
        free_record(record, TREE)
        assert heap.live_blocks == 0

    def test_partial_string_array(self, heap):
        free_record(decode_text('{"tags": ["only"]}', TREE), TREE)
        assert heap.live_blocks == 0

    def test_hand_assigned_slots_become_owned(self, heap):
        record = decode_text("{}", TREE)
        store_pointer(record + Tree.name.offset, dup_string("mine"))
        head = list_append(None, decode_text('{"note": "n"}', LEAF))
        store_pointer(record + Tree.leaves.offset, head)
        free_record(record, TREE)
        assert heap.live_blocks == 0

    def test_self_referential_schema(self, heap):
        class Node(ctypes.Structure):
            _fields_ = [("name", ctypes.c_char_p), ("children", ctypes.c_void_p)]

        node = [model_obj(Node), model_string(Node, "name")]
        node.append(model_list(Node, "children", node, 3))

        record = decode_text(
            '{"name": "r", "children": [{"name": "a",'
            ' "children": [{"name": "b"}]}]}',
            node,
        )
        free_record(record, node)
        assert heap.live_blocks == 0

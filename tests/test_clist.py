"""Tests for cson_core.clist."""

import ctypes
import logging

from cson_core import decode_text, list_append, list_remove
from cson_core.alloc import allocate
from cson_core.clist import (
    NODE_SIZE,
    PAYLOAD_OFFSET,
    iter_list,
    list_length,
    list_payloads,
    new_node,
    node_at,
)
from cson_core.model import model_obj, model_string


class Tag(ctypes.Structure):
    _fields_ = [("label", ctypes.c_char_p)]


TAG = [model_obj(Tag), model_string(Tag, "label")]


def _blocks(count):
    return [allocate(8) for _ in range(count)]


class TestNodes:
    def test_node_layout(self):
        assert NODE_SIZE == 2 * ctypes.sizeof(ctypes.c_void_p)
        assert PAYLOAD_OFFSET == ctypes.sizeof(ctypes.c_void_p)

    def test_new_node_is_detached(self):
        address = new_node(1234)
        node = node_at(address)
        assert node.next is None
        assert node.obj == 1234

    def test_iter_empty(self):
        assert list(iter_list(None)) == []
        assert list_length(None) == 0


class TestAppend:
    def test_append_to_empty_creates_head(self, heap):
        (a,) = _blocks(1)
        head = list_append(None, a)
        assert head is not None
        assert list(list_payloads(head)) == [a]
        assert heap.size_of(head) == NODE_SIZE

    def test_append_keeps_order_and_head(self):
        a, b, c = _blocks(3)
        head = list_append(None, a)
        assert list_append(head, b) == head
        assert list_append(head, c) == head
        assert list(list_payloads(head)) == [a, b, c]
        assert list_length(head) == 3

    def test_empty_tail_slot_is_filled(self, heap):
        (a,) = _blocks(1)
        head = list_append(None, None)
        before = heap.total_allocated
        assert list_append(head, a) == head
        assert heap.total_allocated == before
        assert list(list_payloads(head)) == [a]


class TestRemove:
    def test_remove_middle(self):
        a, b, c = _blocks(3)
        head = None
        for p in (a, b, c):
            head = list_append(head, p)
        head = list_remove(head, b)
        assert list(list_payloads(head)) == [a, c]

    def test_remove_head_returns_new_head(self):
        a, b = _blocks(2)
        head = list_append(list_append(None, a), b)
        head = list_remove(head, a)
        assert list(list_payloads(head)) == [b]

    def test_remove_last_node_empties_list(self):
        (a,) = _blocks(1)
        head = list_append(None, a)
        assert list_remove(head, a) is None

    def test_remove_releases_node_only(self, heap):
        (a,) = _blocks(1)
        head = list_append(None, a)
        list_remove(head, a)
        assert heap.owns(a)
        assert not heap.owns(head)

    def test_remove_with_release(self, heap):
        (a,) = _blocks(1)
        head = list_append(None, a)
        list_remove(head, a, True)
        assert heap.live_blocks == 0

    def test_remove_with_schema_deep_frees(self, heap):
        tag = decode_text('{"label": "hot"}', TAG)
        label = Tag.from_address(tag).label
        assert label == b"hot"
        head = list_append(None, tag)
        assert list_remove(head, tag, True, TAG) is None
        assert heap.live_blocks == 0

    def test_remove_missing_payload(self):
        a, b = _blocks(2)
        head = list_append(None, a)
        assert list_remove(head, b) == head
        assert list(list_payloads(head)) == [a]

    def test_remove_from_null_list(self, caplog):
        with caplog.at_level(logging.ERROR):
            assert list_remove(None, 1) is None
        assert "list assert failed" in caplog.text

"""Singly-linked list used for ``LIST`` fields.

A node is two pointer slots, ``next`` and ``obj``. For a record list ``obj``
points at an owned record; for a scalar list the scalar's bytes live in the
``obj`` slot itself. The list is identified by its head address and an
empty list is ``None``.
"""

from __future__ import annotations

import ctypes
from typing import Iterator

from .alloc import allocate, release
from .guards import cson_assert
from .model import Schema


class ListNode(ctypes.Structure):
    _fields_ = [
        ("next", ctypes.c_void_p),
        ("obj", ctypes.c_void_p),
    ]


PAYLOAD_OFFSET = ListNode.obj.offset
NODE_SIZE = ctypes.sizeof(ListNode)


def node_at(address: int) -> ListNode:
    return ListNode.from_address(address)


def new_node(payload: int | None = None) -> int | None:
    """Allocate a detached node holding *payload*."""
    address = allocate(NODE_SIZE)
    if address is None:
        return None
    node = node_at(address)
    node.next = None
    node.obj = payload
    return address


def iter_list(head: int | None) -> Iterator[int]:
    """Yield node addresses from *head* onwards.

    The successor is read before each node is yielded, so the caller may
    release the node it was handed.
    """
    address = head
    while address:
        successor = node_at(address).next
        yield address
        address = successor


def list_payloads(head: int | None) -> Iterator[int | None]:
    for address in iter_list(head):
        yield node_at(address).obj


def list_length(head: int | None) -> int:
    return sum(1 for _ in iter_list(head))


# ---------------------------------------------------------------------------
# Public list operations
# ---------------------------------------------------------------------------

def list_append(head: int | None, payload: int | None) -> int | None:
    """Append *payload* and return the (possibly new) head.

    A tail whose payload slot is still empty is filled in place; otherwise a
    new node is linked after it.
    """
    if not head:
        return new_node(payload)

    tail = node_at(head)
    while tail.next:
        tail = node_at(tail.next)

    if not tail.obj:
        tail.obj = payload
    else:
        address = new_node(payload)
        if address is not None:
            tail.next = address
    return head


def list_remove(
    head: int | None,
    payload: int,
    release_payload: bool = False,
    schema: Schema | None = None,
    n: int | None = None,
) -> int | None:
    """Unlink the first node whose payload is *payload*; return the new head.

    The unlinked node is always released. With *release_payload* the payload
    goes too: deep-freed with *schema* when one is given, otherwise released
    as a single block. Only meaningful for lists of records.
    """
    if not cson_assert(head, "list"):
        return None

    previous: ListNode | None = None
    for address in iter_list(head):
        node = node_at(address)
        if node.obj and node.obj == payload:
            if previous is None:
                head = node.next
            else:
                previous.next = node.next
            if release_payload:
                if schema is not None:
                    from .walker import free_record
                    free_record(node.obj, schema, n)
                else:
                    release(node.obj)
            release(address)
            break
        previous = node
    return head

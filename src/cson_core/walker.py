"""Deep-free walker: release everything a decode allocated."""

from __future__ import annotations

from .alloc import release
from .clist import PAYLOAD_OFFSET, iter_list, node_at
from .guards import cson_assert
from .memory import load_pointer
from .model import POINTER_SIZE, FieldType, Schema, schema_fields
from .scalar_lists import is_basic_list_model


def free_record(record: int | None, schema: Schema, n: int | None = None) -> None:
    """Release *record* and every allocation reachable through *schema*.

    Must be called with the schema that produced the record. A null record
    is ignored.
    """
    if not record:
        return
    _free_fields(record, schema_fields(schema, n))
    release(record)


def free_list(head: int | None, schema: Schema, n: int | None = None) -> None:
    """Release every node of a list along with what its payloads own."""
    basic = is_basic_list_model(schema)
    fields = schema_fields(schema, n)
    for address in iter_list(head):
        payload = node_at(address).obj
        if payload:
            if basic:
                # Inline scalar: only a string payload owns anything.
                _free_fields(address + PAYLOAD_OFFSET, fields)
            else:
                free_record(payload, fields)
        release(address)


def free_text(text: int | None) -> None:
    """Release a JSON text buffer returned by the encoder."""
    if not cson_assert(text, "json_str"):
        return
    release(text)


def _free_fields(record: int, fields: Schema) -> None:
    for desc in fields:
        slot = record + desc.offset
        ftype = desc.type

        if ftype in (FieldType.STRING, FieldType.JSON):
            release(load_pointer(slot))

        elif ftype is FieldType.LIST:
            free_list(load_pointer(slot), desc.sub.schema, desc.sub.size)

        elif ftype is FieldType.STRUCT:
            free_record(load_pointer(slot), desc.sub.schema, desc.sub.size)

        elif ftype is FieldType.ARRAY:
            if desc.array.element_type is FieldType.STRING:
                for i in range(desc.array.size):
                    release(load_pointer(slot + i * POINTER_SIZE))

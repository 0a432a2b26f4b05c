"""Decoder: JSON → record laid out by a schema.

Decoding is permissive by default. A member that is missing, null, or of
the wrong JSON type leaves its slot at the zero value and the decode carries
on. With ``strict=True`` a wrong JSON type raises
:class:`~cson_core.errors.SchemaMismatchError` instead; missing members and
nulls are still accepted.
"""

from __future__ import annotations

import ctypes
import json
import logging
import math
from typing import Any

from .alloc import allocate, dup_string, release, zero_fill
from .clist import PAYLOAD_OFFSET, new_node, node_at
from .errors import CsonError, SchemaMismatchError
from .guards import cson_assert
from .memory import store, store_pointer
from .model import (
    FLOAT_TYPES,
    INTEGER_TYPES,
    POINTER_SIZE,
    FieldDescriptor,
    FieldType,
    Missing,
    Schema,
    element_width,
    schema_fields,
    schema_size,
)
from .scalar_lists import is_basic_list_model
from .walker import free_list, free_record

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------

def decode_text(
    text: str | bytes,
    schema: Schema,
    n: int | None = None,
    *,
    strict: bool = False,
) -> int | None:
    """Parse *text* and decode it into a freshly allocated record.

    Returns ``None`` when the text is not valid JSON, when it is the JSON
    literal ``null``, or when the record cannot be allocated. The
    ``NaN``/``Infinity`` extensions and strings holding unpaired surrogate
    escapes are not valid JSON here.
    """
    try:
        node = json.loads(text, parse_constant=_reject_constant)
        _check_strings(node)
    except (TypeError, ValueError) as exc:
        logger.warning("cannot parse JSON text: %s", exc)
        return None
    return decode_node(node, schema, n, strict=strict)


def decode_node(
    node: Any,
    schema: Schema,
    n: int | None = None,
    *,
    strict: bool = False,
) -> int | None:
    """Decode a parsed JSON value into a freshly allocated record.

    A JSON null yields ``None`` without allocating. The record is sized by
    the schema's OBJ descriptor and zero-filled before any field is written.
    """
    if node is None:
        return None

    fields = schema_fields(schema, n)
    size = schema_size(fields)
    if not cson_assert(size > 0, "obj_size > 0"):
        return None

    record = allocate(size)
    if record is None:
        return None
    zero_fill(record, size)

    try:
        for desc in fields:
            if desc.type is not FieldType.OBJ:
                _decode_field(node, record, desc, strict)
    except CsonError:
        free_record(record, fields)
        raise
    return record


# ---------------------------------------------------------------------------
# JSON value helpers
# ---------------------------------------------------------------------------

def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a JSON value")


def _check_strings(item: Any) -> None:
    """Raise UnicodeEncodeError if a key or string has no UTF-8 form."""
    if isinstance(item, str):
        item.encode("utf-8")
    elif isinstance(item, list):
        for element in item:
            _check_strings(element)
    elif isinstance(item, dict):
        for key, value in item.items():
            key.encode("utf-8")
            _check_strings(value)


def _finite(item: Any) -> Any:
    """*item* with every non-finite number (``1e400`` parses as inf) nulled."""
    if isinstance(item, float) and not math.isfinite(item):
        return None
    if isinstance(item, list):
        return [_finite(element) for element in item]
    if isinstance(item, dict):
        return {key: _finite(value) for key, value in item.items()}
    return item


def _member(node: Any, key: str | None) -> Any:
    """The member named *key*, the node itself for a null key, else Missing."""
    if key is None:
        return node
    if isinstance(node, dict):
        return node.get(key, Missing)
    return Missing


def _is_number(item: Any) -> bool:
    return isinstance(item, (int, float)) and not isinstance(item, bool)


def _json_type(item: Any) -> str:
    if item is None:
        return "null"
    if isinstance(item, bool):
        return "bool"
    if _is_number(item):
        return "number"
    if isinstance(item, str):
        return "string"
    if isinstance(item, list):
        return "array"
    if isinstance(item, dict):
        return "object"
    return type(item).__name__


def _mismatch(item: Any, key: str | None, expected: str, strict: bool) -> None:
    if strict and item is not Missing and item is not None:
        raise SchemaMismatchError(key, expected, _json_type(item))


def _to_integer(item: Any, key: str | None, strict: bool) -> int:
    if _is_number(item):
        if isinstance(item, float) and not math.isfinite(item):
            return 0
        return int(item)
    _mismatch(item, key, "number", strict)
    return 0


def _to_double(item: Any, key: str | None, strict: bool) -> float:
    if _is_number(item):
        try:
            return float(item)
        except OverflowError:
            return 0.0
    _mismatch(item, key, "number", strict)
    return 0.0


def _to_bool(item: Any, key: str | None, strict: bool) -> bool:
    if item is True:
        return True
    if item is not False:
        _mismatch(item, key, "bool", strict)
    return False


def _to_string(item: Any, key: str | None, strict: bool) -> int | None:
    if isinstance(item, str):
        return dup_string(item)
    _mismatch(item, key, "string", strict)
    return None


def _store_scalar(
    address: int, ftype: FieldType, item: Any, key: str | None, strict: bool
) -> None:
    """Write one primitive JSON value at *address* as *ftype*."""
    if ftype in INTEGER_TYPES:
        store(address, ftype, _to_integer(item, key, strict))
    elif ftype in FLOAT_TYPES:
        store(address, ftype, _to_double(item, key, strict))
    elif ftype is FieldType.BOOL:
        store(address, ftype, _to_bool(item, key, strict))
    elif ftype is FieldType.STRING:
        store_pointer(address, _to_string(item, key, strict))


# ---------------------------------------------------------------------------
# Per-descriptor decoding
# ---------------------------------------------------------------------------

def _decode_field(node: Any, record: int, desc: FieldDescriptor, strict: bool) -> None:
    item = _member(node, desc.key)
    slot = record + desc.offset
    ftype = desc.type

    if ftype is FieldType.STRUCT:
        store_pointer(slot, _decode_struct(item, desc, strict))
    elif ftype is FieldType.LIST:
        store_pointer(slot, _decode_list(item, desc, strict))
    elif ftype is FieldType.ARRAY:
        _decode_array(item, slot, desc, strict)
    elif ftype is FieldType.JSON:
        store_pointer(slot, _decode_json(item))
    else:
        _store_scalar(slot, ftype, item, desc.key, strict)


def _decode_struct(item: Any, desc: FieldDescriptor, strict: bool) -> int | None:
    if isinstance(item, dict):
        return decode_node(item, desc.sub.schema, desc.sub.size, strict=strict)
    _mismatch(item, desc.key, "object", strict)
    return None


def _decode_list(item: Any, desc: FieldDescriptor, strict: bool) -> int | None:
    if not isinstance(item, list):
        _mismatch(item, desc.key, "array", strict)
        return None

    sub = desc.sub
    basic = is_basic_list_model(sub.schema)
    width = min(schema_size(sub.schema, sub.size), POINTER_SIZE)
    head: int | None = None
    tail: int | None = None

    try:
        for element in item:
            obj = decode_node(element, sub.schema, sub.size, strict=strict)
            if basic:
                address = new_node()
                if address is None:
                    free_record(obj, sub.schema, sub.size)
                elif obj is not None:
                    # The scalar, string pointer included, now lives in the node.
                    ctypes.memmove(address + PAYLOAD_OFFSET, obj, width)
                    release(obj)
            elif obj is None:
                continue
            else:
                address = new_node(obj)
                if address is None:
                    free_record(obj, sub.schema, sub.size)

            if address is None:
                break
            if tail is None:
                head = address
            else:
                node_at(tail).next = address
            tail = address
    except CsonError:
        free_list(head, sub.schema, sub.size)
        raise
    return head


def _decode_array(item: Any, base: int, desc: FieldDescriptor, strict: bool) -> None:
    if not isinstance(item, list):
        _mismatch(item, desc.key, "array", strict)
        return

    element_type = desc.array.element_type
    width = element_width(element_type)
    if width is None:
        return

    for i, element in enumerate(item[: desc.array.size]):
        _store_scalar(base + i * width, element_type, element, desc.key, strict)


def _decode_json(item: Any) -> int | None:
    if item is Missing:
        return None
    text = json.dumps(
        _finite(item), separators=(",", ":"), ensure_ascii=False, allow_nan=False
    )
    return dup_string(text)

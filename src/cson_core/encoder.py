"""Encoder: record → JSON tree / JSON text."""

from __future__ import annotations

import ctypes
import json
import logging
import math
from typing import Any

from .alloc import dup_string, string_at
from .clist import PAYLOAD_OFFSET, iter_list, node_at
from .memory import load, load_pointer
from .model import (
    FLOAT_TYPES,
    INTEGER_TYPES,
    FieldDescriptor,
    FieldType,
    Missing,
    Schema,
    element_width,
    schema_fields,
)
from .scalar_lists import is_basic_list_model

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Public entry points
# ---------------------------------------------------------------------------

def encode_node(record: int | None, schema: Schema, n: int | None = None) -> Any:
    """Build a JSON tree (dicts, lists, scalars) mirroring *record*.

    A null record encodes as ``None``. Null pointer slots are left out of
    the object entirely. A descriptor with a null key (the scalar-list
    models) makes its value the result itself instead of a member.
    """
    if not record:
        return None

    root: Any = {}
    for desc in schema_fields(schema, n):
        if desc.type is FieldType.OBJ:
            continue
        value = _encode_field(record, desc)
        if desc.key is None:
            root = None if value is Missing else value
        elif value is not Missing:
            root[desc.key] = value
    return root


def encode_text(
    record: int | None,
    schema: Schema,
    n: int | None = None,
    buffer_hint: int = 0,
    pretty: bool = True,
) -> int | None:
    """Encode *record* and print it into an owned NUL-terminated buffer.

    The result must be released with :func:`cson_core.free_text`.
    *buffer_hint* is accepted for call compatibility and has no effect.
    """
    return _print(encode_node(record, schema, n), pretty)


def encode_text_compact(
    record: int | None, schema: Schema, n: int | None = None
) -> int | None:
    return _print(encode_node(record, schema, n), pretty=False)


def _print(tree: Any, pretty: bool) -> int | None:
    try:
        if pretty:
            text = json.dumps(tree, indent="\t", ensure_ascii=False, allow_nan=False)
        else:
            text = json.dumps(
                tree, separators=(",", ":"), ensure_ascii=False, allow_nan=False
            )
    except (TypeError, ValueError) as exc:
        logger.warning("cannot print JSON tree: %s", exc)
        return None
    return dup_string(text)


# ---------------------------------------------------------------------------
# Scalars
# ---------------------------------------------------------------------------

def _float32(value: float) -> float:
    """Shortest decimal that reads back as the same single-precision value."""
    for digits in range(6, 10):
        candidate = float(f"{value:.{digits}g}")
        if ctypes.c_float(candidate).value == value:
            return candidate
    return value


def _encode_scalar(address: int, ftype: FieldType) -> Any:
    value = load(address, ftype)
    if ftype in INTEGER_TYPES:
        return int(value)
    if ftype in FLOAT_TYPES:
        if not math.isfinite(value):
            return None
        return _float32(value) if ftype is FieldType.FLOAT else value
    if ftype is FieldType.BOOL:
        return bool(value)
    if ftype is FieldType.STRING:
        return string_at(value) if value else Missing
    return Missing


# ---------------------------------------------------------------------------
# Per-descriptor encoding
# ---------------------------------------------------------------------------

def _encode_field(record: int, desc: FieldDescriptor) -> Any:
    slot = record + desc.offset
    ftype = desc.type

    if ftype is FieldType.STRUCT:
        pointer = load_pointer(slot)
        if not pointer:
            return Missing
        return encode_node(pointer, desc.sub.schema, desc.sub.size)

    if ftype is FieldType.LIST:
        head = load_pointer(slot)
        if not head:
            return Missing
        return _encode_list(head, desc)

    if ftype is FieldType.ARRAY:
        return _encode_array(slot, desc)

    if ftype is FieldType.JSON:
        return _encode_json(load_pointer(slot), desc.key)

    return _encode_scalar(slot, ftype)


def _encode_list(head: int, desc: FieldDescriptor) -> list:
    sub = desc.sub
    items = []
    if is_basic_list_model(sub.schema):
        for address in iter_list(head):
            items.append(encode_node(address + PAYLOAD_OFFSET, sub.schema, sub.size))
    else:
        for address in iter_list(head):
            payload = node_at(address).obj
            if payload:
                items.append(encode_node(payload, sub.schema, sub.size))
    return items


def _encode_array(base: int, desc: FieldDescriptor) -> list:
    element_type = desc.array.element_type
    width = element_width(element_type)
    if width is None:
        return []

    items = []
    for i in range(desc.array.size):
        value = _encode_scalar(base + i * width, element_type)
        items.append(None if value is Missing else value)
    return items


def _parse_number(text: str) -> float | None:
    value = float(text)
    return value if math.isfinite(value) else None


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not a JSON value")


def _encode_json(pointer: int | None, key: str | None) -> Any:
    if not pointer:
        return Missing
    try:
        return json.loads(
            string_at(pointer),
            parse_float=_parse_number,
            parse_constant=_reject_constant,
        )
    except ValueError as exc:
        logger.warning("field %r holds unparsable JSON: %s", key, exc)
        return Missing

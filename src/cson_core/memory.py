"""Typed loads and stores at raw addresses."""

from __future__ import annotations

import ctypes

from .model import CTYPES, FieldType, INTEGER_TYPES


def _wrap(value: int, width: int) -> int:
    """Two's-complement wrap of *value* to *width* bytes."""
    bits = width * 8
    value &= (1 << bits) - 1
    if value >= 1 << (bits - 1):
        value -= 1 << bits
    return value


def load(address: int, ftype: FieldType):
    """Read one scalar of *ftype*; pointer types yield ``int | None``."""
    return CTYPES[ftype].from_address(address).value


def store(address: int, ftype: FieldType, value) -> None:
    ctype = CTYPES[ftype]
    if ftype in INTEGER_TYPES:
        value = _wrap(int(value), ctypes.sizeof(ctype))
    elif ftype is FieldType.BOOL:
        value = bool(value)
    ctype.from_address(address).value = value


def load_pointer(address: int) -> int | None:
    return ctypes.c_void_p.from_address(address).value


def store_pointer(address: int, pointer: int | None) -> None:
    ctypes.c_void_p.from_address(address).value = pointer

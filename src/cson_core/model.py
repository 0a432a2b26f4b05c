"""Schema model: field type tags, descriptors and construction helpers."""

from __future__ import annotations

import ctypes
from dataclasses import dataclass
from enum import Enum
from typing import Sequence, Union

from .errors import CsonError


# ---------------------------------------------------------------------------
# Missing — singleton for absent JSON members
# ---------------------------------------------------------------------------

class _MissingType:
    """Sentinel for a key that is not present (distinct from JSON null)."""

    _instance: _MissingType | None = None

    def __new__(cls) -> _MissingType:
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "Missing"

    def __bool__(self) -> bool:
        return False


Missing = _MissingType()


# ---------------------------------------------------------------------------
# FieldType
# ---------------------------------------------------------------------------

class FieldType(Enum):
    OBJ = 0
    CHAR = 1
    SHORT = 2
    INT = 3
    LONG = 4
    FLOAT = 5
    DOUBLE = 6
    BOOL = 7
    STRING = 8
    STRUCT = 9
    LIST = 10
    ARRAY = 11
    JSON = 12


INTEGER_TYPES = frozenset(
    {FieldType.CHAR, FieldType.SHORT, FieldType.INT, FieldType.LONG}
)
FLOAT_TYPES = frozenset({FieldType.FLOAT, FieldType.DOUBLE})
POINTER_TYPES = frozenset(
    {FieldType.STRING, FieldType.STRUCT, FieldType.LIST, FieldType.JSON}
)

CTYPES: dict[FieldType, type] = {
    FieldType.CHAR: ctypes.c_byte,
    FieldType.SHORT: ctypes.c_short,
    FieldType.INT: ctypes.c_int,
    FieldType.LONG: ctypes.c_long,
    FieldType.FLOAT: ctypes.c_float,
    FieldType.DOUBLE: ctypes.c_double,
    FieldType.BOOL: ctypes.c_bool,
    FieldType.STRING: ctypes.c_void_p,
    FieldType.STRUCT: ctypes.c_void_p,
    FieldType.LIST: ctypes.c_void_p,
    FieldType.JSON: ctypes.c_void_p,
}

POINTER_SIZE = ctypes.sizeof(ctypes.c_void_p)


def scalar_size(ftype: FieldType) -> int:
    """In-memory width of one value of *ftype*."""
    return ctypes.sizeof(CTYPES[ftype])


# ---------------------------------------------------------------------------
# Descriptors
# ---------------------------------------------------------------------------

# Compared by identity: a schema may contain itself through its sub-model.
@dataclass(frozen=True, slots=True, eq=False)
class SubModel:
    schema: Sequence[FieldDescriptor]
    size: int


@dataclass(frozen=True, slots=True)
class ArrayModel:
    element_type: FieldType
    size: int


Param = Union[SubModel, ArrayModel, int, None]


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    type: FieldType
    key: str | None
    offset: int
    param: Param = None

    @property
    def sub(self) -> SubModel:
        if not isinstance(self.param, SubModel):
            raise CsonError(f"{self.type.name} field {self.key!r} has no sub-model")
        return self.param

    @property
    def array(self) -> ArrayModel:
        if not isinstance(self.param, ArrayModel):
            raise CsonError(f"{self.type.name} field {self.key!r} has no array param")
        return self.param

    @property
    def obj_size(self) -> int:
        if not isinstance(self.param, int):
            raise CsonError(f"{self.type.name} field has no obj_size")
        return self.param


Schema = Sequence[FieldDescriptor]


def schema_fields(schema: Schema, n: int | None = None) -> Schema:
    """The first *n* descriptors of *schema* (all of them when *n* is None)."""
    return schema if n is None else schema[:n]


def schema_size(schema: Schema, n: int | None = None) -> int:
    """Record size from the schema's OBJ descriptor.

    The whole schema is scanned and the last OBJ descriptor wins; 0 means
    the schema cannot size a record.
    """
    size = 0
    for desc in schema_fields(schema, n):
        if desc.type is FieldType.OBJ:
            size = desc.obj_size
    return size


# ---------------------------------------------------------------------------
# Construction helpers
# ---------------------------------------------------------------------------
#
# ``struct_type`` is a ``ctypes.Structure`` subclass; offsets come from its
# field descriptors and the record size from ``ctypes.sizeof``.

def _offset(struct_type: type, key: str) -> int:
    return getattr(struct_type, key).offset


def model_obj(struct_type: type) -> FieldDescriptor:
    return FieldDescriptor(FieldType.OBJ, None, 0, ctypes.sizeof(struct_type))


def _scalar(ftype: FieldType, struct_type: type, key: str) -> FieldDescriptor:
    return FieldDescriptor(ftype, key, _offset(struct_type, key))


def model_char(struct_type: type, key: str) -> FieldDescriptor:
    return _scalar(FieldType.CHAR, struct_type, key)


def model_short(struct_type: type, key: str) -> FieldDescriptor:
    return _scalar(FieldType.SHORT, struct_type, key)


def model_int(struct_type: type, key: str) -> FieldDescriptor:
    return _scalar(FieldType.INT, struct_type, key)


def model_long(struct_type: type, key: str) -> FieldDescriptor:
    return _scalar(FieldType.LONG, struct_type, key)


def model_float(struct_type: type, key: str) -> FieldDescriptor:
    return _scalar(FieldType.FLOAT, struct_type, key)


def model_double(struct_type: type, key: str) -> FieldDescriptor:
    return _scalar(FieldType.DOUBLE, struct_type, key)


def model_bool(struct_type: type, key: str) -> FieldDescriptor:
    return _scalar(FieldType.BOOL, struct_type, key)


def model_string(struct_type: type, key: str) -> FieldDescriptor:
    return _scalar(FieldType.STRING, struct_type, key)


def model_json(struct_type: type, key: str) -> FieldDescriptor:
    return _scalar(FieldType.JSON, struct_type, key)


def model_struct(
    struct_type: type, key: str, sub: Schema, sub_n: int | None = None
) -> FieldDescriptor:
    size = len(sub) if sub_n is None else sub_n
    return FieldDescriptor(
        FieldType.STRUCT, key, _offset(struct_type, key), SubModel(sub, size)
    )


def model_list(
    struct_type: type, key: str, sub: Schema, sub_n: int | None = None
) -> FieldDescriptor:
    """List field; *sub* is a record schema or one of the scalar-list models.

    A schema may refer to itself (build it as a list and append the list
    field afterwards), in which case pass *sub_n* explicitly.
    """
    size = len(sub) if sub_n is None else sub_n
    return FieldDescriptor(
        FieldType.LIST, key, _offset(struct_type, key), SubModel(sub, size)
    )


def model_array(
    struct_type: type, key: str, element_type: FieldType, count: int
) -> FieldDescriptor:
    return FieldDescriptor(
        FieldType.ARRAY,
        key,
        _offset(struct_type, key),
        ArrayModel(element_type, count),
    )


def element_width(ftype: FieldType) -> int | None:
    """Stride of one ARRAY element of *ftype*, or None if unsupported."""
    if ftype is FieldType.STRING:
        return POINTER_SIZE
    if ftype in INTEGER_TYPES or ftype in FLOAT_TYPES or ftype is FieldType.BOOL:
        return scalar_size(ftype)
    return None

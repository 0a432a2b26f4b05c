"""Built-in two-descriptor models for lists of primitive values.

A ``LIST`` field whose sub-model is one of these tuples stores each element
inline in the node's payload slot instead of pointing at a record. Callers
reference them directly::

    model_list(Sensor, "readings", INT_LIST)

Membership is decided by identity, so an equal-looking copy of one of these
tuples is treated as an ordinary record schema.
"""

from __future__ import annotations

from .model import FieldDescriptor, FieldType, Schema, scalar_size


def _basic_list_model(ftype: FieldType) -> tuple[FieldDescriptor, FieldDescriptor]:
    return (
        FieldDescriptor(FieldType.OBJ, None, 0, scalar_size(ftype)),
        FieldDescriptor(ftype, None, 0),
    )


CHAR_LIST = _basic_list_model(FieldType.CHAR)
SHORT_LIST = _basic_list_model(FieldType.SHORT)
INT_LIST = _basic_list_model(FieldType.INT)
LONG_LIST = _basic_list_model(FieldType.LONG)
FLOAT_LIST = _basic_list_model(FieldType.FLOAT)
DOUBLE_LIST = _basic_list_model(FieldType.DOUBLE)
STRING_LIST = _basic_list_model(FieldType.STRING)

BASIC_LIST_MODELS = (
    CHAR_LIST,
    SHORT_LIST,
    INT_LIST,
    LONG_LIST,
    FLOAT_LIST,
    DOUBLE_LIST,
    STRING_LIST,
)

BASIC_LIST_MODEL_SIZE = 2


def is_basic_list_model(schema: Schema) -> bool:
    return any(schema is model for model in BASIC_LIST_MODELS)

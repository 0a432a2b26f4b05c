"""CSON Core — schema-driven JSON marshalling for C-layout records."""

from .alloc import HeapAllocator, current_allocator, dup_string, init, string_at
from .clist import ListNode, list_append, list_length, list_payloads, list_remove
from .decoder import decode_node, decode_text
from .encoder import encode_node, encode_text, encode_text_compact
from .errors import AllocatorError, CsonError, SchemaMismatchError
from .model import (
    ArrayModel,
    FieldDescriptor,
    FieldType,
    SubModel,
    model_array,
    model_bool,
    model_char,
    model_double,
    model_float,
    model_int,
    model_json,
    model_list,
    model_long,
    model_obj,
    model_short,
    model_string,
    model_struct,
    schema_size,
)
from .scalar_lists import (
    BASIC_LIST_MODEL_SIZE,
    BASIC_LIST_MODELS,
    CHAR_LIST,
    DOUBLE_LIST,
    FLOAT_LIST,
    INT_LIST,
    LONG_LIST,
    SHORT_LIST,
    STRING_LIST,
    is_basic_list_model,
)
from .walker import free_record, free_text

__all__ = [
    "init",
    "current_allocator",
    "HeapAllocator",
    "dup_string",
    "string_at",
    "decode_text",
    "decode_node",
    "encode_node",
    "encode_text",
    "encode_text_compact",
    "free_record",
    "free_text",
    "ListNode",
    "list_append",
    "list_remove",
    "list_length",
    "list_payloads",
    "FieldType",
    "FieldDescriptor",
    "SubModel",
    "ArrayModel",
    "schema_size",
    "model_obj",
    "model_char",
    "model_short",
    "model_int",
    "model_long",
    "model_float",
    "model_double",
    "model_bool",
    "model_string",
    "model_struct",
    "model_list",
    "model_array",
    "model_json",
    "BASIC_LIST_MODELS",
    "BASIC_LIST_MODEL_SIZE",
    "CHAR_LIST",
    "SHORT_LIST",
    "INT_LIST",
    "LONG_LIST",
    "FLOAT_LIST",
    "DOUBLE_LIST",
    "STRING_LIST",
    "is_basic_list_model",
    "CsonError",
    "AllocatorError",
    "SchemaMismatchError",
]

"""Exception types for CSON Core.

The engine itself is permissive and reports failure by returning ``None``;
these are raised only by the default allocator and by strict decoding.
"""

from __future__ import annotations


class CsonError(Exception):
    """Base class for every error raised by cson_core."""


class AllocatorError(CsonError):
    """An address was released that the allocator does not own."""

    def __init__(self, address: int) -> None:
        super().__init__(f"release of unknown block 0x{address:x}")
        self.address = address


class SchemaMismatchError(CsonError):
    """A JSON value has the wrong JSON type for its field (strict mode)."""

    def __init__(self, key: str | None, expected: str, actual: str) -> None:
        where = repr(key) if key is not None else "<element>"
        super().__init__(f"field {where}: expected {expected}, got {actual}")
        self.key = key
        self.expected = expected
        self.actual = actual

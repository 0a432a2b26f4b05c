"""Allocator shim: process-wide allocation hooks.

Every dynamic allocation the engine makes (records, strings, list nodes,
opaque JSON text, encoded output) goes through the two hooks installed by
:func:`init`. Addresses are plain integers; ``None`` is the null pointer.
"""

from __future__ import annotations

import ctypes
import logging
from dataclasses import dataclass
from typing import Callable

from .errors import AllocatorError
from .guards import cson_assert

logger = logging.getLogger(__name__)

MallocFunc = Callable[[int], "int | None"]
FreeFunc = Callable[[int], None]


# ---------------------------------------------------------------------------
# HeapAllocator — default hooks backed by ctypes buffers
# ---------------------------------------------------------------------------

class HeapAllocator:
    """Allocator that hands out zero-filled ``ctypes`` buffers.

    Each block is kept alive in a table keyed by its address until it is
    released. Releasing an address that is not in the table (a double free
    or a pointer the allocator never produced) raises :class:`AllocatorError`.

    Usage::

        heap = HeapAllocator()
        heap.install()
        ...
        assert heap.live_blocks == 0
    """

    def __init__(self) -> None:
        self._blocks: dict[int, ctypes.Array] = {}
        self._sizes: dict[int, int] = {}
        self.total_allocated = 0
        self.total_released = 0

    def malloc(self, size: int) -> int:
        buf = ctypes.create_string_buffer(max(int(size), 1))
        address = ctypes.addressof(buf)
        self._blocks[address] = buf
        self._sizes[address] = int(size)
        self.total_allocated += 1
        return address

    def free(self, address: int | None) -> None:
        if not address:
            return
        if self._blocks.pop(address, None) is None:
            raise AllocatorError(address)
        del self._sizes[address]
        self.total_released += 1

    def size_of(self, address: int) -> int:
        """Requested size of a live block."""
        return self._sizes[address]

    def owns(self, address: int | None) -> bool:
        return bool(address) and address in self._blocks

    @property
    def live_blocks(self) -> int:
        return len(self._blocks)

    @property
    def live_bytes(self) -> int:
        return sum(self._sizes.values())

    def install(self) -> HeapAllocator:
        """Install this allocator's hooks process-wide."""
        init(self.malloc, self.free)
        return self


# ---------------------------------------------------------------------------
# Installed hooks
# ---------------------------------------------------------------------------

@dataclass
class _Hooks:
    malloc: MallocFunc
    free: FreeFunc


_default_heap = HeapAllocator()
_hooks = _Hooks(malloc=_default_heap.malloc, free=_default_heap.free)


def init(malloc_func: MallocFunc, free_func: FreeFunc) -> None:
    """Install the allocation hooks used by every cson_core operation.

    Reinstalling while decoded records are still alive leaves those records
    owned by the previous allocator; release them before switching.
    """
    _hooks.malloc = malloc_func
    _hooks.free = free_func


def current_allocator() -> tuple[MallocFunc, FreeFunc]:
    return _hooks.malloc, _hooks.free


def allocate(size: int) -> int | None:
    """Allocate *size* bytes through the installed hook."""
    address = _hooks.malloc(size)
    if not address:
        logger.error("allocation of %d bytes failed", size)
        return None
    return address


def release(address: int | None) -> None:
    """Return *address* to the installed hook; null is ignored."""
    if address:
        _hooks.free(address)


def zero_fill(address: int, size: int) -> None:
    ctypes.memset(address, 0, size)


# ---------------------------------------------------------------------------
# Owned strings
# ---------------------------------------------------------------------------

def dup_string(src: str | bytes | None) -> int | None:
    """Copy *src* into an owned NUL-terminated buffer.

    Use this when assigning string slots of a record by hand so that
    :func:`cson_core.free_record` can release them later. ``str`` input is
    encoded as UTF-8; an unpaired surrogate is copied through as its
    three-byte form rather than raising.
    """
    if not cson_assert(src is not None, "src"):
        return None
    if isinstance(src, str):
        data = src.encode("utf-8", errors="surrogatepass")
    else:
        data = bytes(src)
    address = allocate(len(data) + 1)
    if address is None:
        return None
    ctypes.memmove(address, data, len(data))
    ctypes.c_char.from_address(address + len(data)).value = b"\x00"
    return address


def string_at(address: int | None) -> str | None:
    """Read an owned NUL-terminated UTF-8 buffer back as ``str``."""
    if not address:
        return None
    return ctypes.string_at(address).decode("utf-8", errors="replace")

import pytest

from cson_core import HeapAllocator, current_allocator, init


@pytest.fixture(autouse=True)
def heap():
    """A fresh allocator per test, so leaks and double frees are visible."""
    previous = current_allocator()
    heap = HeapAllocator().install()
    yield heap
    init(*previous)

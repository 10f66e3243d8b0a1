"""Forward cursors over a single stack in a StackPool.

A cursor is a (pool, handle) pair. It owns no storage and reads through the
pool's public ``value``/``next`` accessors, so it must not outlive the pool
and is not valid across a ``pop``/``free_stack`` that recycles nodes it has
yet to visit.
"""

from __future__ import annotations

from typing import Iterator

from pool_core.domains import NULL_HANDLE, Handle, _handle


class StackCursor:
    __slots__ = ("pool", "handle")

    def __init__(self, pool, handle=NULL_HANDLE):
        self.pool = pool
        self.handle = _handle(handle)

    def __repr__(self) -> str:
        return f"{type(self).__name__}(handle={self.handle})"

    def __eq__(self, other) -> bool:
        if not isinstance(other, StackCursor):
            return NotImplemented
        return self.pool is other.pool and self.handle == other.handle

    __hash__ = None

    @property
    def at_end(self) -> bool:
        return self.handle == NULL_HANDLE

    @property
    def value(self):
        return self.pool.value(self.handle)

    @value.setter
    def value(self, new_value) -> None:
        self.pool.set_value(self.handle, new_value)

    @property
    def next(self) -> Handle:
        return self.pool.next(self.handle)

    def advance(self) -> StackCursor:
        # Raises PoolHandleError at the end position.
        self.handle = self.pool.next(self.handle)
        return self

    def copy(self) -> StackCursor:
        return type(self)(self.pool, self.handle)

    def __iter__(self) -> Iterator:
        # Walks a copy; this cursor keeps its position.
        cursor = self.copy()
        while not cursor.at_end:
            yield cursor.value
            cursor.advance()


class ConstStackCursor(StackCursor):
    """Read-only cursor: ``value`` cannot be assigned."""

    __slots__ = ()

    @property
    def value(self):
        return self.pool.value(self.handle)


__all__ = ["StackCursor", "ConstStackCursor"]

"""Stack pool: many singly-linked stacks sharing one growable node array.

Nodes live in two parallel numpy columns (values and links) sized to the
pool's capacity. A stack is just the handle of its top node; handle 0 is the
empty stack. Unused nodes are threaded into a free list through the same link
column, so ``pop`` and ``free_stack`` recycle slots instead of leaking them.

Handles stay valid across growth because they are indices, not addresses.
Cursors and handles are not protected against recycling: once a node is
popped or freed, any handle or cursor still pointing at it reads whatever the
next ``push`` writes there.
"""

from __future__ import annotations

from typing import Iterable, Iterator, List

import numpy as np

from pool_core.config import DEFAULT_POOL_CONFIG, GrowthPolicy, PoolConfig
from pool_core.domains import NULL_HANDLE, Handle, _handle, _slot
from pool_core.errors import PoolCorruptError, PoolExhaustedError, PoolHandleError
from pool_core.guards import guard_disjoint, guard_links
from stack_pool.cursor import ConstStackCursor, StackCursor


class StackPool:
    def __init__(self, capacity: int = 0, *, cfg: PoolConfig = DEFAULT_POOL_CONFIG):
        self.cfg = cfg
        self._max_nodes = cfg.max_nodes
        self._guard = cfg.guards_enabled()
        self._values = np.empty(0, dtype=cfg.value_dtype)
        self._links = np.zeros(0, dtype=cfg.handle_dtype)
        self._size = 0
        self._free_head = int(NULL_HANDLE)
        if capacity:
            self.reserve(capacity)

    def __repr__(self) -> str:
        return (
            f"StackPool(nodes={self._size}, capacity={self.capacity()}, "
            f"free_head={self._free_head})"
        )

    # -- storage ---------------------------------------------------------

    def _require_node(self, handle, op: str) -> int:
        h = int(handle)
        if h < 1 or h > self._size:
            raise PoolHandleError(handle=h, size=self._size, op=op)
        return h - 1

    def _require_head(self, head, op: str) -> None:
        if int(head) != NULL_HANDLE:
            self._require_node(head, op)

    def _coerce_value(self, value):
        dtype = self._values.dtype
        if dtype == object:
            return value
        if np.ndim(value) != 0:
            raise ValueError(f"{value!r} is not a scalar for a {dtype} column")
        cell = dtype.type(value)
        # NaN is the only value allowed to differ from itself.
        if cell != value and not (cell != cell and value != value):
            raise ValueError(f"{value!r} does not fit a {dtype} column")
        return cell

    def _read(self, slot: int):
        cell = self._values[slot]
        if self._values.dtype == object:
            return cell
        return cell.item()

    def _release(self, slots) -> None:
        # Drop payload references held by recycled object slots.
        if self._values.dtype == object:
            self._values[slots] = None

    def _grown_capacity(self, needed: int) -> int:
        if self.cfg.growth == GrowthPolicy.EXACT:
            return needed
        target = max(needed, 2 * self.capacity(), 1)
        return min(target, max(needed, self._max_nodes))

    def _grow_to(self, new_capacity: int, op: str) -> None:
        if new_capacity > self._max_nodes:
            raise PoolExhaustedError(
                requested=new_capacity, limit=self._max_nodes, op=op
            )
        try:
            values = np.empty(new_capacity, dtype=self._values.dtype)
            links = np.zeros(new_capacity, dtype=self._links.dtype)
        except (MemoryError, ValueError) as err:
            raise PoolExhaustedError(
                requested=new_capacity, limit=self._max_nodes, op=op
            ) from err
        n = self._size
        values[:n] = self._values[:n]
        links[:n] = self._links[:n]
        self._values = values
        self._links = links

    def _append_free_node(self) -> None:
        # The only place storage grows.
        if self._size == self.capacity():
            self._grow_to(self._grown_capacity(self._size + 1), "push")
        self._links[self._size] = NULL_HANDLE
        self._size += 1
        self._free_head = self._size

    def _check_links(self, label: str) -> None:
        if self._guard:
            guard_links(self._links, self._size, self._free_head, label)

    def reserve(self, n: int) -> None:
        """Ensure capacity for at least ``n`` nodes. Never shrinks."""
        n = int(n)
        if n < 0:
            raise ValueError(f"reserve: n must be non-negative, got {n}")
        if n > self.capacity():
            self._grow_to(n, "reserve")

    def capacity(self) -> int:
        return int(self._links.shape[0])

    def node_count(self) -> int:
        """Nodes ever created (live plus free)."""
        return self._size

    def free_count(self) -> int:
        return self.depth(self._free_head)

    def live_count(self) -> int:
        return self._size - self.free_count()

    # -- stacks ----------------------------------------------------------

    def new_stack(self) -> Handle:
        return NULL_HANDLE

    def is_empty(self, head) -> bool:
        return int(head) == NULL_HANDLE

    def value(self, handle):
        return self._read(self._require_node(handle, "value"))

    def set_value(self, handle, value) -> None:
        slot = self._require_node(handle, "set_value")
        self._values[slot] = self._coerce_value(value)

    def next(self, handle) -> Handle:
        return _handle(self._links[self._require_node(handle, "next")])

    def push(self, value, head) -> Handle:
        """Put ``value`` on top of the stack at ``head``; return the new head."""
        self._require_head(head, "push")
        cell = self._coerce_value(value)
        if self._free_head == NULL_HANDLE:
            self._append_free_node()
        node = self._free_head
        slot = _slot(node)
        self._free_head = int(self._links[slot])
        self._values[slot] = cell
        self._links[slot] = int(head)
        self._check_links("push")
        return _handle(node)

    def push_all(self, values: Iterable, head=NULL_HANDLE) -> Handle:
        """Push every item in order; the last item ends up on top."""
        for value in values:
            head = self.push(value, head)
        return _handle(head)

    def pop(self, head) -> Handle:
        """Drop the top node of ``head`` and return the rest of the stack."""
        slot = self._require_node(head, "pop")
        new_head = _handle(self._links[slot])
        self._links[slot] = self._free_head
        self._release(slot)
        self._free_head = int(head)
        self._check_links("pop")
        return new_head

    def free_stack(self, head) -> Handle:
        """Recycle a whole stack in one splice; O(depth) to find its bottom.

        Returns the empty stack. Freeing the empty stack is a no-op.
        """
        if self.is_empty(head):
            return NULL_HANDLE
        chain = list(self.iter_handles(head))
        bottom = _slot(chain[-1])
        self._links[bottom] = self._free_head
        self._release(np.asarray(chain, dtype=np.int64) - 1)
        self._free_head = int(head)
        self._check_links("free_stack")
        return NULL_HANDLE

    # -- traversal -------------------------------------------------------

    def iter_handles(self, head) -> Iterator[Handle]:
        h = int(head)
        steps = 0
        while h != NULL_HANDLE:
            slot = self._require_node(h, "iter_handles")
            steps += 1
            if steps > self._size:
                raise PoolCorruptError(
                    f"chain from handle {int(head)} does not terminate",
                    "iter_handles",
                )
            yield _handle(h)
            h = int(self._links[slot])

    def iter_values(self, head) -> Iterator:
        for h in self.iter_handles(head):
            yield self._read(_slot(h))

    def to_list(self, head) -> List:
        return list(self.iter_values(head))

    def depth(self, head) -> int:
        return sum(1 for _ in self.iter_handles(head))

    def begin(self, head) -> StackCursor:
        return StackCursor(self, head)

    def end(self, head=NULL_HANDLE) -> StackCursor:
        # Every stack shares the same end position.
        return StackCursor(self, NULL_HANDLE)

    def cbegin(self, head) -> ConstStackCursor:
        return ConstStackCursor(self, head)

    def cend(self, head=NULL_HANDLE) -> ConstStackCursor:
        return ConstStackCursor(self, NULL_HANDLE)

    def validate(self, *heads) -> None:
        """Check links, termination, and that no two chains share a node.

        The free list is always included; pass each live stack once.
        """
        guard_links(self._links, self._size, self._free_head, "validate")
        visited = list(self.iter_handles(self._free_head))
        for head in heads:
            self._require_head(head, "validate")
            visited.extend(self.iter_handles(head))
        guard_disjoint([int(h) for h in visited], self._size, "validate")


__all__ = ["StackPool"]

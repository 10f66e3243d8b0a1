"""Link-table guards for stack pools.

Guards copy the live prefix of a pool's link column onto the default JAX
device, check it there, and pull the verdict back with ``jax.device_get``.
They run after every mutating pool operation when enabled (see
``PoolConfig.guards_enabled``), and always from ``StackPool.validate``.
"""

from __future__ import annotations

from typing import Sequence

import jax
import jax.numpy as jnp
import numpy as np

from pool_core.errors import PoolCorruptError


def _host_bool(value) -> bool:
    return bool(jax.device_get(value))


def _host_int(value) -> int:
    return int(jax.device_get(value))


def links_to_device(links: np.ndarray, size: int) -> jnp.ndarray:
    # Handles above int32 range wrap negative and fail the bounds check.
    return jnp.asarray(links[:size], dtype=jnp.int32)


def links_in_bounds(links: jnp.ndarray, size) -> jnp.ndarray:
    """True iff every link is the sentinel or a handle in 1..size."""
    size_i = jnp.asarray(size, dtype=jnp.int32)
    return jnp.all((links >= 0) & (links <= size_i))


def self_linked(links: jnp.ndarray) -> jnp.ndarray:
    """Mask of nodes whose link points back at themselves."""
    handles = jnp.arange(1, links.shape[0] + 1, dtype=jnp.int32)
    return links == handles


def visit_counts(handles: jnp.ndarray, size: int) -> jnp.ndarray:
    """Per-handle visit counts (index 0 is the sentinel bucket)."""
    return jnp.bincount(handles, length=size + 1)


def guard_links(links: np.ndarray, size: int, free_head: int, label: str) -> None:
    if free_head < 0 or free_head > size:
        raise PoolCorruptError(
            f"free head {free_head} out of bounds (size={size})", label
        )
    if size == 0:
        return
    dev = links_to_device(links, size)
    if not _host_bool(links_in_bounds(dev, size)):
        lo = _host_int(jnp.min(dev))
        hi = _host_int(jnp.max(dev))
        raise PoolCorruptError(
            f"link out of bounds (min={lo}, max={hi}, size={size})", label
        )
    looped = self_linked(dev)
    if _host_bool(jnp.any(looped)):
        handle = _host_int(jnp.argmax(looped)) + 1
        raise PoolCorruptError(f"node {handle} links to itself", label)


def guard_disjoint(handles: Sequence[int], size: int, label: str) -> None:
    """Raise if any handle was visited by more than one chain walk."""
    if not handles:
        return
    counts = visit_counts(jnp.asarray(handles, dtype=jnp.int32), size)
    shared = counts.at[0].set(0) > 1
    if _host_bool(jnp.any(shared)):
        handle = _host_int(jnp.argmax(shared))
        raise PoolCorruptError(f"node {handle} is shared by two chains", label)


__all__ = [
    "links_to_device",
    "links_in_bounds",
    "self_linked",
    "visit_counts",
    "guard_links",
    "guard_disjoint",
]

"""Shared handle types and sentinel conventions.

Handles are 1-based indices into pool storage; 0 is reserved so that an
all-zero link can mean "no node" without a nullable type.
"""

from typing import NewType

# Host-only domain tag (type checkers only).
Handle = NewType("Handle", int)

NULL_HANDLE = Handle(0)  # Empty stack / end of traversal / bottom of a chain.


def _handle(value) -> Handle:
    return Handle(int(value))


def _slot(handle: Handle) -> int:
    # Storage position for a non-null handle.
    return int(handle) - 1


__all__ = [
    "Handle",
    "NULL_HANDLE",
    "_handle",
    "_slot",
]

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


# Not frozen: contextlib assigns __traceback__ on exceptions leaving a
# generator-based context manager.
@dataclass(eq=False)
class PoolHandleError(IndexError):
    handle: int
    size: int
    op: str = "access"

    def __str__(self) -> str:
        if self.handle == 0:
            return f"{self.op}: handle 0 is the empty stack"
        return (
            f"{self.op}: handle {self.handle} out of range "
            f"(valid 1..{self.size})"
        )


@dataclass(eq=False)
class PoolExhaustedError(MemoryError):
    requested: int
    limit: int
    op: str = "grow"

    def __str__(self) -> str:
        return (
            f"{self.op}: cannot hold {self.requested} nodes "
            f"(limit {self.limit})"
        )


@dataclass(eq=False)
class PoolCorruptError(RuntimeError):
    message: str
    label: str | None = None

    def __str__(self) -> str:
        if self.label is None:
            return self.message
        return f"{self.message} in {self.label}"


@dataclass(eq=False)
class PoolConfigError(ValueError):
    field: str
    value: object
    allowed: tuple[str, ...] | None = None

    def __str__(self) -> str:
        return f"unknown {self.field}={self.value!r}"


def _allowed_tuple(values: Iterable[str] | None) -> tuple[str, ...] | None:
    if values is None:
        return None
    return tuple(values)


__all__ = [
    "PoolHandleError",
    "PoolExhaustedError",
    "PoolCorruptError",
    "PoolConfigError",
    "_allowed_tuple",
]

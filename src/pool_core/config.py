from __future__ import annotations

import os
from dataclasses import dataclass
from enum import Enum

import numpy as np

from pool_core.errors import PoolConfigError, _allowed_tuple

HANDLE_DTYPES = ("uint8", "uint16", "uint32", "uint64")


class GrowthPolicy(str, Enum):
    DOUBLE = "double"
    EXACT = "exact"


def coerce_growth_policy(policy: GrowthPolicy | str | None) -> GrowthPolicy:
    if policy is None:
        return GrowthPolicy.DOUBLE
    if isinstance(policy, GrowthPolicy):
        return policy
    if isinstance(policy, str):
        if policy == GrowthPolicy.DOUBLE.value:
            return GrowthPolicy.DOUBLE
        if policy == GrowthPolicy.EXACT.value:
            return GrowthPolicy.EXACT
    raise PoolConfigError(
        field="growth",
        value=policy,
        allowed=_allowed_tuple(p.value for p in GrowthPolicy),
    )


def coerce_handle_dtype(dtype) -> np.dtype:
    """Normalize a handle dtype, accepting only unsigned integer widths."""
    try:
        resolved = np.dtype(dtype)
    except TypeError:
        resolved = None
    if resolved is None or resolved.name not in HANDLE_DTYPES:
        raise PoolConfigError(
            field="handle_dtype", value=dtype, allowed=HANDLE_DTYPES
        )
    return resolved


def _env_flag(name: str) -> bool:
    return os.environ.get(name, "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True, slots=True)
class PoolConfig:
    """Pool DI bundle.

    handle_dtype bounds the number of nodes: handles run 1..iinfo(dtype).max.
    guards=None defers to STACK_POOL_TEST_GUARDS / STACK_POOL_LINK_GUARD.
    """

    handle_dtype: object = "uint32"
    value_dtype: object = object
    growth: GrowthPolicy | str = GrowthPolicy.DOUBLE
    guards: bool | None = None

    def __post_init__(self):
        object.__setattr__(self, "handle_dtype", coerce_handle_dtype(self.handle_dtype))
        try:
            value_dtype = np.dtype(self.value_dtype)
        except TypeError as err:
            raise PoolConfigError(field="value_dtype", value=self.value_dtype) from err
        if value_dtype.kind in "USV":
            # Fixed-width columns would truncate longer payloads.
            raise PoolConfigError(field="value_dtype", value=self.value_dtype)
        object.__setattr__(self, "value_dtype", value_dtype)
        object.__setattr__(self, "growth", coerce_growth_policy(self.growth))

    @property
    def max_nodes(self) -> int:
        return int(np.iinfo(self.handle_dtype).max)

    def guards_enabled(self) -> bool:
        if self.guards is not None:
            return bool(self.guards)
        return _env_flag("STACK_POOL_TEST_GUARDS") or _env_flag("STACK_POOL_LINK_GUARD")


DEFAULT_POOL_CONFIG = PoolConfig()


__all__ = [
    "HANDLE_DTYPES",
    "GrowthPolicy",
    "coerce_growth_policy",
    "coerce_handle_dtype",
    "PoolConfig",
    "DEFAULT_POOL_CONFIG",
]

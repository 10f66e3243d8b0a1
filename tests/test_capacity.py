import pytest

from pool_core.config import GrowthPolicy, PoolConfig
from pool_core.errors import PoolConfigError, PoolExhaustedError
from stack_pool.arena import StackPool


def test_initial_capacity_hint():
    pool = StackPool(8)
    assert pool.capacity() == 8
    assert pool.node_count() == 0
    head = pool.push_all(range(8))
    assert pool.capacity() == 8
    assert pool.depth(head) == 8


def test_default_capacity_is_zero(pool):
    assert pool.capacity() == 0
    assert pool.push(10, 0) == 1


def test_doubling_growth(pool):
    caps = []
    head = 0
    for v in range(9):
        head = pool.push(v, head)
        caps.append(pool.capacity())
    assert caps == [1, 2, 4, 4, 8, 8, 8, 8, 16]


def test_exact_growth():
    pool = StackPool(cfg=PoolConfig(growth=GrowthPolicy.EXACT))
    head = pool.push_all(range(5))
    assert pool.capacity() == 5
    assert pool.node_count() == 5
    assert pool.to_list(head) == [4, 3, 2, 1, 0]


def test_reserve_keeps_handles_and_values(pool):
    head = pool.push_all(["a", "b", "c"])
    pool.reserve(100)
    assert pool.capacity() == 100
    assert pool.to_list(head) == ["c", "b", "a"]
    assert pool.push("d", head) == 4


def test_reserve_never_shrinks(pool):
    pool.reserve(10)
    pool.reserve(3)
    assert pool.capacity() == 10


def test_reserve_rejects_negative(pool):
    with pytest.raises(ValueError):
        pool.reserve(-1)


def test_handle_dtype_limit_exhausts():
    pool = StackPool(cfg=PoolConfig(handle_dtype="uint8", guards=False))
    head = pool.push_all(range(255))
    assert pool.capacity() == 255
    with pytest.raises(PoolExhaustedError) as excinfo:
        pool.push(255, head)
    assert excinfo.value.limit == 255
    assert pool.node_count() == 255
    assert pool.capacity() == 255
    assert pool.depth(head) == 255
    assert pool.free_count() == 0


def test_exhausted_pool_still_recycles():
    pool = StackPool(cfg=PoolConfig(handle_dtype="uint8", guards=False))
    head = pool.push_all(range(255))
    head = pool.pop(head)
    assert pool.push("again", head) == 255


def test_reserve_beyond_limit_leaves_pool_unchanged():
    pool = StackPool(cfg=PoolConfig(handle_dtype="uint8"))
    head = pool.push_all([1, 2])
    capacity = pool.capacity()
    with pytest.raises(PoolExhaustedError):
        pool.reserve(256)
    assert pool.capacity() == capacity
    assert pool.to_list(head) == [2, 1]


def test_capacity_hint_beyond_limit_raises():
    with pytest.raises(PoolExhaustedError):
        StackPool(1 << 16, cfg=PoolConfig(handle_dtype="uint16"))


def test_failed_push_leaves_state_unchanged():
    pool = StackPool(cfg=PoolConfig(value_dtype="int64"))
    with pytest.raises(ValueError):
        pool.push("not a number", 0)
    assert pool.node_count() == 0
    assert pool.capacity() == 0
    head = pool.push(7, 0)
    with pytest.raises(ValueError):
        pool.push("still not", head)
    assert pool.node_count() == 1
    assert pool.free_count() == 0
    assert pool.depth(head) == 1


def test_lossy_push_is_rejected():
    pool = StackPool(cfg=PoolConfig(value_dtype="int64"))
    head = pool.push(3, 0)
    with pytest.raises(ValueError, match="does not fit"):
        pool.push(1.5, head)
    assert pool.node_count() == 1
    assert pool.to_list(head) == [3]
    with pytest.raises(ValueError):
        pool.set_value(head, 2.25)
    assert pool.value(head) == 3


def test_exact_casts_are_accepted():
    pool = StackPool(cfg=PoolConfig(value_dtype="float64"))
    head = pool.push_all([1, 2.5, float("nan")])
    values = pool.to_list(head)
    assert values[0] != values[0]
    assert values[1:] == [2.5, 1.0]


def test_non_scalar_push_is_rejected():
    pool = StackPool(cfg=PoolConfig(value_dtype="int64"))
    with pytest.raises(ValueError, match="not a scalar"):
        pool.push([1, 2], 0)
    assert pool.node_count() == 0


def test_fixed_width_value_dtypes_are_rejected():
    for dtype in (str, bytes, "U5", "S3", "V8"):
        with pytest.raises(PoolConfigError):
            PoolConfig(value_dtype=dtype)

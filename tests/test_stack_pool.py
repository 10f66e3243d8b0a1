import gc
import weakref

import pytest

from stack_pool.arena import StackPool


def test_scenario_push_pop_free_reuse(pool):
    h = pool.push(10, pool.new_stack())
    assert h == 1
    h = pool.push(20, h)
    assert h == 2
    assert list(pool.begin(h)) == [20, 10]
    h = pool.pop(h)
    assert h == 1
    h = pool.free_stack(h)
    assert h == 0
    assert pool.push(30, h) == 1


def test_push_order_is_reverse_chronological(pool):
    head = pool.new_stack()
    for v in range(6):
        head = pool.push(v, head)
    assert pool.to_list(head) == [5, 4, 3, 2, 1, 0]
    assert pool.depth(head) == 6


def test_pop_undoes_push_and_reuses_slot(pool):
    base = pool.push_all(["a", "b"])
    top = pool.push("c", base)
    assert pool.pop(top) == base
    assert pool.push("d", base) == top
    assert pool.node_count() == 3


def test_new_stack_is_empty(pool):
    head = pool.new_stack()
    assert head == 0
    assert pool.is_empty(head)
    assert pool.to_list(head) == []
    assert pool.depth(head) == 0


def test_value_and_next_accessors(pool):
    a = pool.push("x", 0)
    b = pool.push("y", a)
    assert pool.value(b) == "y"
    assert pool.next(b) == a
    assert pool.next(a) == 0
    pool.set_value(a, "z")
    assert pool.to_list(b) == ["y", "z"]


def test_independent_stacks_do_not_share_nodes(pool):
    a = pool.push_all([1, 2, 3])
    b = pool.push_all([10, 20])
    before = pool.to_list(b)
    for v in range(5):
        a = pool.push(v, a)
    assert pool.to_list(b) == before
    a = pool.pop(a)
    a = pool.free_stack(a)
    assert pool.to_list(b) == before
    pool.validate(b)


def test_interleaved_stacks_validate_disjoint(pool):
    heads = [pool.new_stack() for _ in range(3)]
    for v in range(12):
        k = v % 3
        heads[k] = pool.push(v, heads[k])
    assert pool.to_list(heads[0]) == [9, 6, 3, 0]
    assert pool.to_list(heads[2]) == [11, 8, 5, 2]
    heads[1] = pool.pop(heads[1])
    pool.validate(*heads)


def test_depth_matches_live_length_after_pops(pool):
    head = pool.push_all(range(10))
    for _ in range(4):
        head = pool.pop(head)
    assert pool.depth(head) == 6
    assert pool.live_count() == 6
    assert pool.free_count() == 4


def test_push_all_on_existing_head(pool):
    head = pool.push_all([1, 2])
    head = pool.push_all([3, 4], head)
    assert pool.to_list(head) == [4, 3, 2, 1]


def test_pop_releases_payload_reference(pool):
    class Payload:
        pass

    obj = Payload()
    ref = weakref.ref(obj)
    head = pool.push(obj, 0)
    del obj
    pool.pop(head)
    gc.collect()
    assert ref() is None


def test_free_stack_releases_payload_references(pool):
    class Payload:
        pass

    objs = [Payload() for _ in range(3)]
    refs = [weakref.ref(o) for o in objs]
    head = pool.push_all(objs)
    del objs
    pool.free_stack(head)
    gc.collect()
    assert all(r() is None for r in refs)


def test_typed_value_column():
    from pool_core.config import PoolConfig

    pool = StackPool(cfg=PoolConfig(value_dtype="int64"))
    head = pool.push_all([1, 2, 3])
    assert pool.to_list(head) == [3, 2, 1]
    assert all(type(v) is int for v in pool.iter_values(head))
    assert type(pool.value(head)) is int
    assert type(pool.begin(head).value) is int


def test_repr_reports_counts(pool):
    pool.push(1, 0)
    text = repr(pool)
    assert "nodes=1" in text
    assert "capacity=1" in text


@pytest.mark.parametrize("n", [1, 7, 33])
def test_push_pop_cycles_never_grow_nodes(pool, n):
    head = pool.push_all(range(n))
    nodes = pool.node_count()
    for _ in range(3):
        while not pool.is_empty(head):
            head = pool.pop(head)
        head = pool.push_all(range(n))
    assert pool.node_count() == nodes

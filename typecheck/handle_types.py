from typing import TYPE_CHECKING, assert_type

from pool_core.domains import Handle
from stack_pool.arena import StackPool
from stack_pool.cursor import ConstStackCursor, StackCursor


if TYPE_CHECKING:
    pool = StackPool()

    empty = pool.new_stack()
    assert_type(empty, Handle)
    head = pool.push(10, empty)
    assert_type(head, Handle)
    assert_type(pool.pop(head), Handle)
    assert_type(pool.free_stack(head), Handle)
    assert_type(pool.next(head), Handle)
    assert_type(pool.is_empty(head), bool)

    assert_type(pool.begin(head), StackCursor)
    assert_type(pool.cbegin(head), ConstStackCursor)
    assert_type(pool.begin(head).advance(), StackCursor)

    bad: Handle = "top"  # type: ignore

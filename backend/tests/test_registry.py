from grnd.session.controller import SessionController
from grnd.session.registry import SessionRegistry
from grnd.session.slots import MemorySlotStore


def test_put_if_absent_keeps_the_first_controller():
    registry = SessionRegistry()
    first = SessionController(1, MemorySlotStore())
    second = SessionController(1, MemorySlotStore())

    assert registry.put_if_absent(first) is first
    assert registry.put_if_absent(second) is first
    assert registry.get(1) is first

    registry.discard(1)
    assert registry.put_if_absent(second) is second


def test_start_lock_is_shared_per_user():
    registry = SessionRegistry()
    assert registry.starting(1) is registry.starting(1)
    assert registry.starting(1) is not registry.starting(2)

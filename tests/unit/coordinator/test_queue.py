"""
Unit tests for EventQueue.
"""

from logstream_shipper.coordinator import EventQueue, LogEvent


def ev(message: str) -> LogEvent:
    return LogEvent(message=message, timestamp=0)


def messages(events) -> list[str]:
    return [e.message for e in events]


def test_append_preserves_order():
    q = EventQueue()
    for m in "abc":
        q.append(ev(m))
    assert len(q) == 3
    assert messages(q) == ["a", "b", "c"]


def test_take_removes_head_prefix():
    q = EventQueue(ev(m) for m in "abcde")
    assert messages(q.take(2)) == ["a", "b"]
    assert messages(q) == ["c", "d", "e"]


def test_take_everything():
    q = EventQueue(ev(m) for m in "ab")
    assert messages(q.take(5)) == ["a", "b"]
    assert not q


def test_push_front_keeps_relative_order_ahead_of_queue():
    q = EventQueue(ev(m) for m in "de")
    q.push_front([ev("a"), ev("b"), ev("c")])
    assert messages(q) == ["a", "b", "c", "d", "e"]


def test_detach_returns_contents_and_empties():
    q = EventQueue(ev(m) for m in "abc")
    old = q.detach()
    assert messages(old) == ["a", "b", "c"]
    assert len(q) == 0

    # detached list is independent of the live queue
    q.append(ev("z"))
    assert messages(old) == ["a", "b", "c"]

import errno
import socket

import pytest

from sockkit.errors import Direction, SocketError
from sockkit.selectset import SelectSet


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    yield a, b
    a.close()
    b.close()


def test_readable_socket_is_reported(pair):
    a, b = pair
    sset = SelectSet()
    sset.add_fd(a, Direction.READ)
    b.sendall(b"hello")
    ready = sset.wait(1_000_000)
    assert ready.readable == [a]
    assert ready.writable == []


def test_timeout_returns_empty_lists(pair):
    a, _ = pair
    sset = SelectSet()
    sset.add_fd(a, Direction.READ)
    ready = sset.wait(1000)
    assert ready.readable == []
    assert ready.writable == []


def test_writable_socket_is_reported(pair):
    a, _ = pair
    sset = SelectSet()
    sset.add_fd(a, Direction.WRITE)
    ready = sset.wait(1_000_000)
    assert ready.writable == [a]
    assert ready.readable == []


def test_read_and_write_combined(pair):
    a, b = pair
    sset = SelectSet()
    sset.add_fd(a, Direction.READ | Direction.WRITE)
    b.sendall(b"x")
    readable, writable = sset.wait(1_000_000)
    assert readable == [a]
    assert writable == [a]


def test_only_ready_sockets_are_returned(pair):
    a, b = pair
    sset = SelectSet()
    sset.add_fd(a, Direction.READ)
    sset.add_fd(b, Direction.READ)
    a.sendall(b"ping")
    ready = sset.wait(1_000_000)
    assert ready.readable == [b]


def test_unknown_method_is_ignored(pair):
    a, b = pair
    sset = SelectSet()
    sset.add_fd(a, 4)
    b.sendall(b"data")
    ready = sset.wait(1000)
    assert ready.readable == []
    assert ready.writable == []


def test_negative_timeout_raises(pair):
    a, _ = pair
    sset = SelectSet()
    sset.add_fd(a, Direction.READ)
    with pytest.raises(SocketError) as info:
        sset.wait(-5)
    assert info.value.err == errno.EINVAL
import errno
import socket

import pytest

from sockkit.epollset import EpollSet
from sockkit.errors import Direction, SocketError


@pytest.fixture
def pair():
    a, b = socket.socketpair()
    yield a, b
    a.close()
    b.close()


@pytest.fixture
def eset():
    s = EpollSet()
    yield s
    s.close()


def test_readable_after_send(pair, eset):
    a, b = pair
    eset.add_fd(b, Direction.READ)
    a.sendall(b"hello")
    ready = eset.wait(1000)
    assert ready.readable == [b]
    assert ready.writable == []


def test_nothing_ready_with_zero_timeout(pair, eset):
    _, b = pair
    eset.add_fd(b, Direction.READ)
    ready = eset.wait(0)
    assert ready.readable == []
    assert ready.writable == []


def test_writable_socket_reported(pair, eset):
    a, _ = pair
    eset.add_fd(a, Direction.WRITE)
    ready = eset.wait(1000)
    assert ready.writable == [a]
    assert ready.readable == []


def test_read_and_write_combined(pair, eset):
    a, b = pair
    eset.add_fd(b, Direction.READ | Direction.WRITE)
    a.sendall(b"x")
    ready = eset.wait(1000)
    assert ready.readable == [b]
    assert ready.writable == [b]


def test_returns_same_objects(pair, eset):
    a, b = pair
    eset.add_fd(b, Direction.READ)
    a.sendall(b"data")
    ready = eset.wait(1000)
    assert ready.readable[0] is b


def test_duplicate_add_raises(pair, eset):
    _, b = pair
    eset.add_fd(b, Direction.READ)
    with pytest.raises(SocketError) as info:
        eset.add_fd(b, Direction.READ)
    assert info.value.err == errno.EEXIST


def test_del_unknown_raises(pair, eset):
    _, b = pair
    with pytest.raises(SocketError) as info:
        eset.del_fd(b)
    assert info.value.err == errno.ENOENT


def test_del_fd_stops_reporting(pair, eset):
    a, b = pair
    eset.add_fd(b, Direction.READ)
    a.sendall(b"x")
    eset.del_fd(b)
    ready = eset.wait(0)
    assert ready.readable == []


def test_maxevents_limits_events():
    a1, b1 = socket.socketpair()
    a2, b2 = socket.socketpair()
    try:
        with EpollSet(1) as s:
            s.add_fd(b1, Direction.READ)
            s.add_fd(b2, Direction.READ)
            a1.sendall(b"1")
            a2.sendall(b"2")
            ready = s.wait(1000)
            assert len(ready.readable) == 1
            assert ready.readable[0] in (b1, b2)
    finally:
        for s_ in (a1, b1, a2, b2):
            s_.close()


def test_invalid_maxevents():
    with pytest.raises(SocketError) as info:
        EpollSet(0)
    assert info.value.err == errno.EINVAL


def test_context_manager_closes(pair):
    _, b = pair
    with EpollSet() as s:
        s.add_fd(b, Direction.READ)
        assert s.closed is False
    assert s.closed is True
    with pytest.raises(SocketError) as info:
        s.wait(0)
    assert info.value.err == errno.EBADF


def test_add_closed_socket_raises(eset):
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    sock.close()
    with pytest.raises(SocketError) as info:
        eset.add_fd(sock, Direction.READ)
    assert info.value.err == errno.EBADF


def test_default_maxevents(eset):
    assert eset.maxevents == 128
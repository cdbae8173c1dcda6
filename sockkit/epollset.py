"""Readiness waiting over several sockets using Linux ``epoll``."""

from __future__ import annotations

import errno
import select
from typing import Any

from sockkit.errors import Direction, SocketError
from sockkit.selectset import ReadySockets


class EpollSet:
    """Watches sockets for readiness with the ``epoll`` interface of Linux.

    Sockets are anything with ``fileno()``. :meth:`wait` returns the very
    objects that were added, so callers can identify them by identity.
    The set may be used as a context manager; leaving it closes the set.
    """

    def __init__(self, maxevents: int = 128) -> None:
        if maxevents < 1:
            raise SocketError("epoll_create1 failed: maxevents must be positive", errno.EINVAL)
        self._maxevents = maxevents
        self._sockets: dict[int, Any] = {}
        try:
            self._epoll = select.epoll()
        except OSError as exc:
            raise SocketError("epoll_create1 failed", exc.errno) from exc

    @property
    def maxevents(self) -> int:
        """Largest number of events reported by one :meth:`wait`."""
        return self._maxevents

    @property
    def closed(self) -> bool:
        """Whether the set has been closed."""
        return self._epoll.closed

    def _require_open(self, where: str) -> None:
        if self._epoll.closed:
            raise SocketError(f"{where} failed: epoll set is closed", errno.EBADF)

    def add_fd(self, sock: Any, method: int) -> None:
        """Watch ``sock``; ``method`` combines ``Direction.READ`` and ``Direction.WRITE``."""
        self._require_open("epoll_ctl")
        events = 0
        if method & Direction.READ:
            events |= select.EPOLLIN
        if method & Direction.WRITE:
            events |= select.EPOLLOUT
        fd = sock.fileno()
        try:
            self._epoll.register(fd, events)
        except OSError as exc:
            raise SocketError("epoll_ctl failed", exc.errno) from exc
        except ValueError as exc:
            raise SocketError("epoll_ctl failed", errno.EBADF) from exc
        self._sockets[fd] = sock

    def del_fd(self, sock: Any) -> None:
        """Stop watching ``sock``."""
        self._require_open("epoll_ctl")
        fd = sock.fileno()
        try:
            self._epoll.unregister(fd)
        except OSError as exc:
            raise SocketError("epoll_ctl failed", exc.errno) from exc
        except ValueError as exc:
            raise SocketError("epoll_ctl failed", errno.EBADF) from exc
        self._sockets.pop(fd, None)

    def wait(self, timeout: int = -1) -> ReadySockets:
        """Wait for an event on any watched socket.

        ``timeout`` is in milliseconds: -1 waits without limit, 0 returns at
        once. Returns the readable and the writable sockets.
        """
        self._require_open("epoll_wait")
        seconds = -1 if timeout < 0 else timeout / 1000
        try:
            events = self._epoll.poll(seconds, self._maxevents)
        except OSError as exc:
            raise SocketError("epoll_wait failed", exc.errno) from exc

        ready = ReadySockets([], [])
        for fd, mask in events:
            sock = self._sockets.get(fd)
            if sock is None:
                continue
            if mask & select.EPOLLIN:
                ready.readable.append(sock)
            if mask & select.EPOLLOUT:
                ready.writable.append(sock)
        return ready

    def close(self) -> None:
        """Release the epoll descriptor; closing twice does nothing."""
        self._epoll.close()
        self._sockets.clear()

    def __enter__(self) -> EpollSet:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()
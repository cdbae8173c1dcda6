"""Readiness waiting over several sockets using ``poll``."""

from __future__ import annotations

import errno
import select
from typing import Any, NamedTuple

from sockkit.errors import Direction, SocketError

_EVENTS = {
    Direction.READ: select.POLLIN,
    Direction.WRITE: select.POLLOUT,
    Direction.READ | Direction.WRITE: select.POLLIN | select.POLLOUT,
}


class ReadySockets(NamedTuple):
    """Sockets found ready by a wait: readable ones first, writable ones second."""

    readable: list[Any]
    writable: list[Any]


class SelectSet:
    """Watches sockets for the possibility to read or write.

    Add sockets (anything with ``fileno()``) with :meth:`add_fd`, then call
    :meth:`wait`, which returns the added objects that became ready.
    """

    def __init__(self) -> None:
        self._entries: list[tuple[int, int]] = []
        self._sockets: dict[int, Any] = {}

    def add_fd(self, sock: Any, method: int) -> None:
        """Watch ``sock`` for reading, writing or both.

        ``method`` is ``Direction.READ``, ``Direction.WRITE`` or their
        combination; any other value is ignored.
        """
        try:
            events = _EVENTS[Direction(method)]
        except (ValueError, KeyError):
            return
        fd = sock.fileno()
        self._entries.append((fd, events))
        self._sockets[fd] = sock

    def wait(self, microsecs: int = 0) -> ReadySockets:
        """Wait until a watched socket is ready.

        ``microsecs`` is a timeout in microseconds; 0 waits without limit.
        Returns empty lists when the timeout expires.
        """
        if microsecs < 0:
            raise SocketError(
                "selectset.wait(): Error at ppoll(): negative timeout", errno.EINVAL
            )
        timeout = None if microsecs == 0 else microsecs / 1000

        poller = select.poll()
        registered: dict[int, int] = {}
        for fd, events in self._entries:
            registered[fd] = registered.get(fd, 0) | events
        for fd, events in registered.items():
            poller.register(fd, events)

        try:
            results = dict(poller.poll(timeout))
        except OSError as exc:
            raise SocketError(
                f"selectset.wait(): Error at ppoll(): {exc.strerror}", exc.errno
            ) from exc

        ready = ReadySockets([], [])
        if not results:
            return ready
        for fd, events in self._entries:
            revents = results.get(fd, 0) & events
            if revents & select.POLLIN:
                ready.readable.append(self._sockets[fd])
            if revents & select.POLLOUT:
                ready.writable.append(self._sockets[fd])
        return ready
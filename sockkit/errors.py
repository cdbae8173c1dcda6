"""Exception type and symbolic constants shared by all socket helpers."""

from __future__ import annotations

import enum
import os
import socket

BACKLOG = 128
"""Backlog passed to ``listen()`` by server sockets."""

NUMERIC = 1
"""Flag asking for numeric host and service names (no name resolution)."""


class SocketError(Exception):
    """Raised whenever a socket operation fails.

    ``err`` holds the operating-system error number when one is known,
    otherwise ``None``.
    """

    def __init__(self, message: str, err: int | None = None) -> None:
        self.message = message
        self.err = err
        if err is not None:
            text = f"{message}: {os.strerror(err)}"
        else:
            text = message
        super().__init__(text)


class Family(enum.IntEnum):
    """Internet protocol version of a socket (OSI layer 3)."""

    IPV4 = 3
    IPV6 = 4
    BOTH = 5

    @property
    def address_family(self) -> int:
        """The matching ``socket.AF_*`` value; ``BOTH`` lets the resolver choose."""
        return {
            Family.IPV4: socket.AF_INET,
            Family.IPV6: socket.AF_INET6,
            Family.BOTH: socket.AF_UNSPEC,
        }[self]


class Transport(enum.IntEnum):
    """Transport protocol of an internet socket (OSI layer 4)."""

    TCP = 1
    UDP = 2

    @property
    def socket_type(self) -> int:
        """The matching ``socket.SOCK_*`` value."""
        return socket.SOCK_STREAM if self is Transport.TCP else socket.SOCK_DGRAM


class Direction(enum.IntFlag):
    """Direction for shutdown and readiness polling; may be combined with ``|``."""

    READ = 1
    WRITE = 2


class UnixType(enum.IntEnum):
    """Kind of a UNIX-domain socket."""

    STREAM = 1
    DGRAM = 2

    @property
    def socket_type(self) -> int:
        """The matching ``socket.SOCK_*`` value."""
        return socket.SOCK_STREAM if self is UnixType.STREAM else socket.SOCK_DGRAM
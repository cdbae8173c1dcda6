"""Client-side helpers for TCP and UDP sockets over IPv4 and IPv6."""

from __future__ import annotations

import errno
import os
import socket
from typing import NamedTuple

from sockkit.errors import NUMERIC, Direction, Family, SocketError

_CONNECT_IN_PROGRESS = {0, errno.EINPROGRESS, errno.EALREADY, errno.EINTR}


class Datagram(NamedTuple):
    """A received datagram and the address it came from."""

    data: bytes
    host: str
    service: str


def _family(proto_osi3: int, allowed: tuple[Family, ...], where: str) -> Family:
    try:
        family = Family(proto_osi3)
    except ValueError:
        family = None
    if family not in allowed:
        raise SocketError(f"{where}: invalid address family argument {proto_osi3!r}")
    return family


def _resolve(where: str, host: str, service: str | int, family: int, socktype: int):
    try:
        return socket.getaddrinfo(host, service, family, socktype)
    except socket.gaierror as exc:
        raise SocketError(f"{where}: name resolution failed: {exc.strerror}") from exc


def _require_open(sock: socket.socket, where: str) -> None:
    if sock.fileno() < 0:
        raise SocketError(f"{where}: socket is closed")


def create_inet_stream_socket(
    host: str, service: str | int, proto_osi3: int, flags: int = 0
) -> socket.socket:
    """Create a TCP socket connected to ``host``:``service``.

    ``proto_osi3`` is ``Family.IPV4``, ``Family.IPV6`` or ``Family.BOTH``;
    ``flags`` are added to the socket type (e.g. ``socket.SOCK_NONBLOCK``).
    For non-blocking sockets a connection still in progress counts as success.
    """
    where = "create_inet_stream_socket"
    if host is None or service is None:
        raise SocketError(f"{where}: host and service are required")
    family = _family(proto_osi3, (Family.IPV4, Family.IPV6, Family.BOTH), where)

    last_errno: int | None = None
    for af, socktype, proto, _, addr in _resolve(
        where, host, service, family.address_family, socket.SOCK_STREAM
    ):
        try:
            sock = socket.socket(af, socktype | flags, proto)
        except OSError as exc:
            last_errno = exc.errno
            continue
        result = sock.connect_ex(addr)
        if result in _CONNECT_IN_PROGRESS:
            return sock
        last_errno = result
        sock.close()

    raise SocketError(f"{where}: could not connect to any address", last_errno)


def create_inet_dgram_socket(proto_osi3: int, flags: int = 0) -> socket.socket:
    """Create an unconnected UDP socket for IPv4 or IPv6."""
    where = "create_inet_dgram_socket"
    family = _family(proto_osi3, (Family.IPV4, Family.IPV6), where)
    try:
        return socket.socket(family.address_family, socket.SOCK_DGRAM | flags)
    except OSError as exc:
        raise SocketError(f"{where}: socket creation failed", exc.errno) from exc


def sendto_inet_dgram_socket(
    sock: socket.socket,
    data: bytes,
    host: str,
    service: str | int,
    sendto_flags: int = 0,
) -> int:
    """Send ``data`` to ``host``:``service``; returns the number of bytes sent."""
    where = "sendto_inet_dgram_socket"
    _require_open(sock, where)
    if data is None:
        raise SocketError(f"{where}: no data given")
    if len(data) == 0:
        return 0
    if host is None or service is None:
        raise SocketError(f"{where}: host and service are required")

    last_errno: int | None = None
    for *_, addr in _resolve(where, host, service, sock.family, socket.SOCK_DGRAM):
        try:
            return sock.sendto(data, sendto_flags, addr)
        except OSError as exc:
            last_errno = exc.errno
    raise SocketError(f"{where}: could not send to any address", last_errno)


def recvfrom_inet_dgram_socket(
    sock: socket.socket, size: int, recvfrom_flags: int = 0, numeric: int = 0
) -> Datagram:
    """Receive up to ``size`` bytes and the sender's host and service.

    With ``numeric`` set to ``NUMERIC`` the sender's address and port are
    returned as numbers instead of being resolved to names.
    """
    where = "recvfrom_inet_dgram_socket"
    _require_open(sock, where)
    if size <= 0:
        raise SocketError(f"{where}: buffer size must be positive")
    try:
        data, addr = sock.recvfrom(size, recvfrom_flags)
    except OSError as exc:
        raise SocketError(f"{where}: recvfrom failed", exc.errno) from exc

    ni_flags = (
        socket.NI_NUMERICHOST | socket.NI_NUMERICSERV if numeric == NUMERIC else numeric
    )
    try:
        host, service = socket.getnameinfo(addr, ni_flags)
    except (socket.gaierror, OSError) as exc:
        raise SocketError(f"{where}: address lookup failed: {exc}") from exc
    return Datagram(data, host, service)


def _disconnect(sock: socket.socket) -> None:
    """Dissolve the association of a datagram socket with its peer."""
    local = sock.getsockname()
    timeout = sock.gettimeout()
    fresh = socket.socket(sock.family, sock.type, sock.proto)
    try:
        os.dup2(fresh.fileno(), sock.fileno(), inheritable=False)
    finally:
        fresh.close()
    sock.settimeout(timeout)
    port = local[1]
    if port:
        wildcard = "::" if sock.family == socket.AF_INET6 else "0.0.0.0"
        try:
            sock.bind((wildcard, port))
        except OSError:
            pass


def connect_inet_dgram_socket(
    sock: socket.socket, host: str | None, service: str | int | None = None
) -> None:
    """Connect a UDP socket to ``host``:``service``.

    With ``host`` set to ``None`` the socket is disconnected instead.
    """
    where = "connect_inet_dgram_socket"
    _require_open(sock, where)
    if host is None:
        try:
            _disconnect(sock)
        except OSError as exc:
            raise SocketError(f"{where}: disconnect failed", exc.errno) from exc
        return

    last_errno: int | None = None
    for *_, addr in _resolve(where, host, service, sock.family, socket.SOCK_DGRAM):
        try:
            sock.connect(addr)
            return
        except OSError as exc:
            last_errno = exc.errno
    raise SocketError(f"{where}: could not connect to any address", last_errno)


def destroy_inet_socket(sock: socket.socket) -> None:
    """Close a socket; closing one that is already closed is an error."""
    where = "destroy_inet_socket"
    _require_open(sock, where)
    try:
        sock.close()
    except OSError as exc:
        raise SocketError(f"{where}: close failed", exc.errno) from exc


def shutdown_inet_stream_socket(sock: socket.socket, method: int) -> None:
    """Shut a stream socket down for reading, writing or both."""
    where = "shutdown_inet_stream_socket"
    _require_open(sock, where)
    valid = (Direction.READ, Direction.WRITE, Direction.READ | Direction.WRITE)
    if method not in valid:
        raise SocketError(f"{where}: invalid shutdown method {method!r}")
    try:
        if method & Direction.READ:
            sock.shutdown(socket.SHUT_RD)
        if method & Direction.WRITE:
            sock.shutdown(socket.SHUT_WR)
    except OSError as exc:
        raise SocketError(f"{where}: shutdown failed", exc.errno) from exc
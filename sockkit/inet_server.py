"""Server-side helpers for TCP and UDP sockets, plus address and multicast utilities."""

from __future__ import annotations

import socket
import struct
from typing import NamedTuple

from sockkit.errors import BACKLOG, NUMERIC, Family, SocketError, Transport


class Connection(NamedTuple):
    """An accepted connection and the peer's host and service.

    ``host`` and ``service`` are empty strings when the peer's address could
    not be translated.
    """

    sock: socket.socket
    host: str
    service: str


def _resolve(
    where: str,
    host: str,
    service: str | int,
    family: int,
    socktype: int,
    flags: int = 0,
):
    try:
        return socket.getaddrinfo(host, service, family, socktype, 0, flags)
    except socket.gaierror as exc:
        raise SocketError(f"{where}: name resolution failed: {exc.strerror}") from exc


def create_inet_server_socket(
    bind_addr: str,
    bind_port: str | int,
    proto_osi4: int,
    proto_osi3: int,
    flags: int = 0,
) -> socket.socket:
    """Create a socket bound to ``bind_addr``:``bind_port``.

    ``proto_osi4`` is ``Transport.TCP`` (the socket also listens) or
    ``Transport.UDP``; ``proto_osi3`` is ``Family.IPV4``, ``Family.IPV6`` or
    ``Family.BOTH``. ``flags`` are added to the socket type.
    """
    where = "create_inet_server_socket"
    if bind_addr is None or bind_port is None:
        raise SocketError(f"{where}: bind address and port are required")
    try:
        transport = Transport(proto_osi4)
    except ValueError:
        raise SocketError(
            f"{where}: invalid transport argument {proto_osi4!r}"
        ) from None
    try:
        family = Family(proto_osi3)
    except ValueError:
        raise SocketError(
            f"{where}: invalid address family argument {proto_osi3!r}"
        ) from None

    last_errno: int | None = None
    for af, socktype, proto, _, addr in _resolve(
        where,
        bind_addr,
        bind_port,
        family.address_family,
        transport.socket_type,
        socket.AI_PASSIVE,
    ):
        try:
            sock = socket.socket(af, socktype | flags, proto)
        except OSError as exc:
            last_errno = exc.errno
            continue
        try:
            sock.bind(addr)
            if transport is Transport.TCP:
                sock.listen(BACKLOG)
        except OSError as exc:
            last_errno = exc.errno
            sock.close()
            continue
        return sock

    raise SocketError(f"{where}: could not bind to any address", last_errno)


def accept_inet_stream_socket(
    sock: socket.socket, numeric: int = 0, accept_flags: int = 0
) -> Connection:
    """Accept a connection on a listening socket.

    With ``numeric`` set to ``NUMERIC`` the peer's address and port are given
    as numbers. ``accept_flags`` may hold ``socket.SOCK_NONBLOCK`` and
    ``socket.SOCK_CLOEXEC`` and apply to the new socket.
    """
    where = "accept_inet_stream_socket"
    if sock.fileno() < 0:
        raise SocketError(f"{where}: socket is closed")
    try:
        client, addr = sock.accept()
    except OSError as exc:
        raise SocketError(f"{where}: accept failed", exc.errno) from exc

    if accept_flags & getattr(socket, "SOCK_NONBLOCK", 0):
        client.setblocking(False)
    if accept_flags & getattr(socket, "SOCK_CLOEXEC", 0):
        client.set_inheritable(False)

    ni_flags = socket.NI_NUMERICHOST | socket.NI_NUMERICSERV if numeric == NUMERIC else 0
    try:
        host, service = socket.getnameinfo(addr, ni_flags)
    except (socket.gaierror, OSError):
        # A failed name lookup does not invalidate the connection.
        host, service = "", ""
    return Connection(client, host, service)


def get_address_family(hostname: str) -> Family:
    """Return the address family the resolver prefers for ``hostname``."""
    where = "get_address_family"
    if hostname is None:
        raise SocketError(f"{where}: hostname is required")
    results = _resolve(where, hostname, "0", socket.AF_UNSPEC, 0)
    if not results:
        raise SocketError(f"{where}: no address found for {hostname!r}")
    af = results[0][0]
    if af == socket.AF_INET:
        return Family.IPV4
    if af == socket.AF_INET6:
        return Family.IPV6
    raise SocketError(f"{where}: unknown address family {af!r}")


def _interface_index(where: str, if_name: str | None) -> int:
    if if_name is None:
        return 0
    try:
        return socket.if_nametoindex(if_name)
    except OSError as exc:
        raise SocketError(
            f"{where}: unknown interface {if_name!r}", exc.errno
        ) from exc


def create_multicast_socket(
    group: str, port: str | int, if_name: str | None = None
) -> socket.socket:
    """Create a UDP socket bound to ``group``:``port`` and join that group.

    ``if_name`` names the interface to use; ``None`` lets the kernel choose.
    The chosen interface is also set as the outgoing multicast interface.
    """
    where = "create_multicast_socket"
    sock = create_inet_server_socket(group, port, Transport.UDP, Family.BOTH)
    try:
        results = _resolve(where, group, port, socket.AF_UNSPEC, socket.SOCK_DGRAM)
        af, *_, addr = results[0]
        ifindex = _interface_index(where, if_name)
        try:
            if af == socket.AF_INET:
                mreqn = struct.pack(
                    "=4s4si",
                    socket.inet_pton(socket.AF_INET, addr[0]),
                    socket.inet_pton(socket.AF_INET, "0.0.0.0"),
                    ifindex,
                )
                sock.setsockopt(socket.IPPROTO_IP, socket.IP_ADD_MEMBERSHIP, mreqn)
                sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_IF, mreqn)
            elif af == socket.AF_INET6:
                mreq6 = struct.pack(
                    "=16sI", socket.inet_pton(socket.AF_INET6, addr[0]), ifindex
                )
                sock.setsockopt(socket.IPPROTO_IPV6, socket.IPV6_JOIN_GROUP, mreq6)
                sock.setsockopt(
                    socket.IPPROTO_IPV6,
                    socket.IPV6_MULTICAST_IF,
                    struct.pack("=I", ifindex),
                )
        except OSError as exc:
            raise SocketError(f"{where}: joining the group failed", exc.errno) from exc
    except BaseException:
        sock.close()
        raise
    return sock
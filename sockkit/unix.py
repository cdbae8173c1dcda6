"""Helpers for UNIX-domain stream and datagram sockets."""

from __future__ import annotations

import errno
import os
import socket
from typing import NamedTuple, Union

from sockkit.errors import BACKLOG, Direction, SocketError, UnixType

_SUN_PATH_SIZE = 108
"""Size of ``sun_path`` in ``struct sockaddr_un``."""

PathLike = Union[str, bytes, "os.PathLike[str]", "os.PathLike[bytes]"]


class UnixDatagram(NamedTuple):
    """A received datagram and the path of the socket that sent it.

    ``path`` is empty when the sender is not bound to any address. An
    abstract sender address starts with a NUL character.
    """

    data: bytes
    path: str


def _address(path: PathLike, where: str) -> bytes:
    """Turn ``path`` into a socket address.

    A path starting with a NUL byte names an abstract address; it is padded
    to the full size of ``sun_path`` so every socket of this module agrees
    on the name.
    """
    raw = os.fsencode(path)
    if raw[:1] != b"\0":
        name = raw.split(b"\0", 1)[0]
        if len(name) > _SUN_PATH_SIZE - 1:
            raise SocketError(f"{where}: UNIX socket path too long", errno.ENAMETOOLONG)
        return name

    rest = raw[1:].split(b"\0", 1)[0]
    if not rest:
        raise SocketError(f"{where}: socket address is too many 0s", errno.EINVAL)
    if 1 + len(rest) > _SUN_PATH_SIZE - 1:
        raise SocketError(
            f"{where}: abstract socket address is too long", errno.ENAMETOOLONG
        )
    return (b"\0" + rest).ljust(_SUN_PATH_SIZE, b"\0")


def _is_abstract(address: bytes) -> bool:
    return address[:1] == b"\0"


def _unlink(address: bytes, where: str) -> None:
    """Remove a stale file at a filesystem address; a missing file is fine."""
    if _is_abstract(address):
        return
    try:
        os.unlink(address)
    except FileNotFoundError:
        pass
    except OSError as exc:
        raise SocketError(f"{where}: could not remove {address!r}", exc.errno) from exc


def _source_path(addr: str | bytes | None) -> str:
    if not addr:
        return ""
    if isinstance(addr, bytes):
        return os.fsdecode(addr.rstrip(b"\0"))
    return addr


def _require_open(sock: socket.socket, where: str) -> None:
    if sock.fileno() < 0:
        raise SocketError(f"{where}: socket is closed")


def _new_socket(socktype: int, flags: int, where: str) -> socket.socket:
    try:
        return socket.socket(socket.AF_UNIX, socktype | flags)
    except OSError as exc:
        raise SocketError(f"{where}: socket creation failed", exc.errno) from exc


def create_unix_stream_socket(path: PathLike, flags: int = 0) -> socket.socket:
    """Create a stream socket connected to the socket at ``path``.

    A path beginning with a NUL character is an abstract address.
    ``flags`` are added to the socket type.
    """
    where = "create_unix_stream_socket"
    if path is None:
        raise SocketError(f"{where}: path is required")
    address = _address(path, where)
    sock = _new_socket(socket.SOCK_STREAM, flags, where)
    try:
        sock.connect(address)
    except OSError as exc:
        sock.close()
        raise SocketError(f"{where}: connect failed", exc.errno) from exc
    return sock


def create_unix_dgram_socket(
    bind_path: PathLike | None = None, flags: int = 0
) -> socket.socket:
    """Create a datagram socket, bound to ``bind_path`` when one is given.

    An existing file at ``bind_path`` is removed before binding.
    """
    where = "create_unix_dgram_socket"
    sock = _new_socket(socket.SOCK_DGRAM, flags, where)
    if bind_path is None:
        return sock
    try:
        address = _address(bind_path, where)
        _unlink(address, where)
        try:
            sock.bind(address)
        except OSError as exc:
            raise SocketError(f"{where}: bind failed", exc.errno) from exc
    except BaseException:
        sock.close()
        raise
    return sock


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
    if isinstance(local, bytes) and local:
        sock.bind(local)
    elif isinstance(local, str) and local:
        try:
            os.unlink(local)
        except FileNotFoundError:
            pass
        sock.bind(local)


def connect_unix_dgram_socket(sock: socket.socket, path: PathLike | None) -> None:
    """Connect a datagram socket to ``path``; ``None`` disconnects it."""
    where = "connect_unix_dgram_socket"
    _require_open(sock, where)
    if path is None:
        try:
            _disconnect(sock)
        except OSError as exc:
            raise SocketError(f"{where}: disconnect failed", exc.errno) from exc
        return
    address = _address(path, where)
    try:
        sock.connect(address)
    except OSError as exc:
        raise SocketError(f"{where}: connect failed", exc.errno) from exc


def destroy_unix_socket(sock: socket.socket) -> None:
    """Close a socket; closing one that is already closed is an error."""
    where = "destroy_unix_socket"
    _require_open(sock, where)
    try:
        sock.close()
    except OSError as exc:
        raise SocketError(f"{where}: close failed", exc.errno) from exc


def shutdown_unix_stream_socket(sock: socket.socket, method: int) -> None:
    """Shut a stream socket down for reading, writing or both."""
    where = "shutdown_unix_stream_socket"
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


def create_unix_server_socket(
    path: PathLike, socktype: int, flags: int = 0
) -> socket.socket:
    """Create a socket bound to ``path``.

    ``socktype`` is ``UnixType.STREAM`` (the socket also listens) or
    ``UnixType.DGRAM``. An existing file at ``path`` is removed first.
    """
    where = "create_unix_server_socket"
    if path is None:
        raise SocketError(f"{where}: path is required")
    address = _address(path, where)
    try:
        kind = UnixType(socktype)
    except ValueError:
        raise SocketError(f"{where}: invalid socket type {socktype!r}") from None

    sock = _new_socket(kind.socket_type, flags, where)
    try:
        _unlink(address, where)
        try:
            sock.bind(address)
            if kind is UnixType.STREAM:
                sock.listen(BACKLOG)
        except OSError as exc:
            raise SocketError(f"{where}: bind or listen failed", exc.errno) from exc
    except BaseException:
        sock.close()
        raise
    return sock


def accept_unix_stream_socket(sock: socket.socket, flags: int = 0) -> socket.socket:
    """Accept a connection on a listening socket and return the new socket.

    ``flags`` may hold ``socket.SOCK_NONBLOCK`` and ``socket.SOCK_CLOEXEC``
    and apply to the accepted socket.
    """
    where = "accept_unix_stream_socket"
    _require_open(sock, where)
    try:
        client, _ = sock.accept()
    except OSError as exc:
        raise SocketError(f"{where}: accept failed", exc.errno) from exc
    if flags & getattr(socket, "SOCK_NONBLOCK", 0):
        client.setblocking(False)
    if flags & getattr(socket, "SOCK_CLOEXEC", 0):
        client.set_inheritable(False)
    return client


def recvfrom_unix_dgram_socket(
    sock: socket.socket, size: int, recvfrom_flags: int = 0
) -> UnixDatagram:
    """Receive up to ``size`` bytes and the path of the sending socket."""
    where = "recvfrom_unix_dgram_socket"
    _require_open(sock, where)
    if size < 0:
        raise SocketError(f"{where}: buffer size must not be negative")
    try:
        data, addr = sock.recvfrom(size, recvfrom_flags)
    except OSError as exc:
        raise SocketError(f"{where}: recvfrom failed", exc.errno) from exc
    return UnixDatagram(data, _source_path(addr))


def sendto_unix_dgram_socket(
    sock: socket.socket, data: bytes, path: PathLike, sendto_flags: int = 0
) -> int:
    """Send ``data`` to the socket at ``path``; returns the number of bytes sent."""
    where = "sendto_unix_dgram_socket"
    _require_open(sock, where)
    if path is None:
        raise SocketError(f"{where}: path is required")
    address = _address(path, where)
    try:
        return sock.sendto(data, sendto_flags, address)
    except OSError as exc:
        raise SocketError(f"{where}: sendto failed", exc.errno) from exc
import errno
import socket

import pytest

from sockkit.errors import NUMERIC, Family, SocketError, Transport
from sockkit.inet_server import (
    accept_inet_stream_socket,
    create_inet_server_socket,
    create_multicast_socket,
    get_address_family,
)


@pytest.fixture
def tcp_server():
    srv = create_inet_server_socket("127.0.0.1", "0", Transport.TCP, Family.IPV4)
    yield srv
    srv.close()


def test_tcp_server_is_bound_stream_socket(tcp_server):
    assert tcp_server.family == socket.AF_INET
    assert tcp_server.type == socket.SOCK_STREAM
    assert tcp_server.getsockname()[0] == "127.0.0.1"
    assert tcp_server.getsockname()[1] > 0


def test_accept_numeric_reports_peer_and_carries_data(tcp_server):
    port = tcp_server.getsockname()[1]
    with socket.create_connection(("127.0.0.1", port)) as client:
        conn = accept_inet_stream_socket(tcp_server, NUMERIC)
        with conn.sock:
            assert conn.host == "127.0.0.1"
            assert conn.service == str(client.getsockname()[1])
            client.sendall(b"abcde")
            assert conn.sock.recv(16) == b"abcde"
            conn.sock.sendall(b"back")
            assert client.recv(16) == b"back"


def test_accept_nonblock_flag_applies_to_client(tcp_server):
    port = tcp_server.getsockname()[1]
    with socket.create_connection(("127.0.0.1", port)):
        conn = accept_inet_stream_socket(tcp_server, NUMERIC, socket.SOCK_NONBLOCK)
        with conn.sock:
            assert conn.sock.getblocking() is False


def test_accept_on_nonblocking_server_without_client_raises():
    srv = create_inet_server_socket(
        "127.0.0.1", "0", Transport.TCP, Family.IPV4, socket.SOCK_NONBLOCK
    )
    with srv:
        with pytest.raises(SocketError) as info:
            accept_inet_stream_socket(srv)
        assert info.value.err in (errno.EAGAIN, errno.EWOULDBLOCK)


def test_accept_on_closed_socket_raises(tcp_server):
    tcp_server.close()
    with pytest.raises(SocketError):
        accept_inet_stream_socket(tcp_server)


def test_port_in_use_raises_with_errno(tcp_server):
    port = tcp_server.getsockname()[1]
    with pytest.raises(SocketError) as info:
        create_inet_server_socket("127.0.0.1", port, Transport.TCP, Family.IPV4)
    assert info.value.err == errno.EADDRINUSE


@pytest.mark.parametrize(
    "addr, port, osi4, osi3",
    [
        (None, "0", Transport.TCP, Family.IPV4),
        ("127.0.0.1", None, Transport.TCP, Family.IPV4),
        ("127.0.0.1", "0", 7, Family.IPV4),
        ("127.0.0.1", "0", Transport.TCP, 9),
    ],
)
def test_invalid_server_arguments_raise(addr, port, osi4, osi3):
    with pytest.raises(SocketError):
        create_inet_server_socket(addr, port, osi4, osi3)


def test_address_family_mismatch_raises():
    with pytest.raises(SocketError):
        create_inet_server_socket("127.0.0.1", "0", Transport.TCP, Family.IPV6)


@pytest.mark.parametrize(
    "host, expected", [("127.0.0.1", Family.IPV4), ("::1", Family.IPV6)]
)
def test_get_address_family(host, expected):
    assert get_address_family(host) is expected


def test_get_address_family_without_host_raises():
    with pytest.raises(SocketError):
        get_address_family(None)


def test_multicast_with_unknown_interface_raises():
    with pytest.raises(SocketError) as info:
        create_multicast_socket("239.255.255.250", "0", "nosuchif0")
    assert "nosuchif0" in str(info.value)


def test_multicast_with_invalid_port_raises():
    with pytest.raises(SocketError):
        create_multicast_socket("239.255.255.250", None)
# sockkit

Helpers that remove the boilerplate from socket work on POSIX systems. The package covers:

- TCP clients and servers over IPv4 or IPv6, or with the resolver choosing the family;
- UDP sockets, connected or unconnected;
- UNIX-domain stream and datagram sockets, including abstract addresses;
- multicast group membership (Linux);
- readiness sets built on `poll` (`SelectSet`) and on `epoll` (`EpollSet`, Linux only).

Every helper returns an ordinary `socket.socket`, so you can use the result with the rest of the standard library as usual. When an operation fails, the helper raises `sockkit.errors.SocketError`. The exception has a `message` attribute and an `err` attribute. `err` holds the `errno` value when one is known and `None` otherwise.

## Installation

```
pip install sockkit
```

To install the test dependencies too:

```
pip install "sockkit[test]"
```

## Constants

`sockkit.errors` defines the following:

| Name | Members | Use |
| --- | --- | --- |
| `Family` | `IPV4`, `IPV6`, `BOTH` | `BOTH` lets the resolver choose |
| `Transport` | `TCP`, `UDP` | transport protocol |
| `Direction` | `READ`, `WRITE` | flag values you can combine with `\|`; used for shutdown and readiness sets |
| `UnixType` | `STREAM`, `DGRAM` | kind of UNIX-domain socket |
| `NUMERIC` | — | asks for numeric host and port instead of name lookup |
| `BACKLOG` | — | the `listen()` backlog (128) |

## TCP

```python
from sockkit.errors import NUMERIC, Direction, Family, Transport
from sockkit.inet_client import create_inet_stream_socket, shutdown_inet_stream_socket
from sockkit.inet_server import accept_inet_stream_socket, create_inet_server_socket

server = create_inet_server_socket("127.0.0.1", "4445", Transport.TCP, Family.IPV4, 0)
client = create_inet_stream_socket("127.0.0.1", "4445", Family.IPV4, 0)
conn, host, port = accept_inet_stream_socket(server, NUMERIC, 0)

client.sendall(b"hello")
shutdown_inet_stream_socket(client, Direction.WRITE)
print(conn.recv(16))
```

`accept_inet_stream_socket` returns a `Connection` named tuple with the fields `sock`, `host` and `service`. If the peer's address cannot be translated, `host` and `service` are empty strings.

`flags` are added to the socket type. For a non-blocking socket (`socket.SOCK_NONBLOCK`), `create_inet_stream_socket` also counts a connection that is still in progress as success.

## UDP

```python
from sockkit.errors import NUMERIC, Family, Transport
from sockkit.inet_client import (
    connect_inet_dgram_socket,
    create_inet_dgram_socket,
    recvfrom_inet_dgram_socket,
    sendto_inet_dgram_socket,
)
from sockkit.inet_server import create_inet_server_socket

server = create_inet_server_socket("127.0.0.1", "1234", Transport.UDP, Family.IPV4, 0)
client = create_inet_dgram_socket(Family.IPV4, 0)
sendto_inet_dgram_socket(client, b"abcde", "127.0.0.1", "1234", 0)
data, host, port = recvfrom_inet_dgram_socket(server, 16, 0, NUMERIC)

connect_inet_dgram_socket(client, "127.0.0.1", "1234")  # associate a peer
connect_inet_dgram_socket(client, None)                 # and dissolve it again
```

`recvfrom_inet_dgram_socket` returns a `Datagram` named tuple with the fields `data`, `host` and `service`.

Sending an empty payload sends nothing and returns `0`.

`destroy_inet_socket` closes a socket. Calling it on a socket that is already closed raises `SocketError`.

`get_address_family(hostname)` returns `Family.IPV4` or `Family.IPV6`, whichever family the resolver returns first for the host.

## Multicast (Linux)

```python
from sockkit.inet_server import create_multicast_socket

sock = create_multicast_socket("239.255.255.250", "1900", None)
```

This call binds a UDP socket to the group address and port and joins the group. The `if_name` argument names the interface to use. The socket also uses that interface as its outgoing multicast interface. Pass `None` to let the kernel choose.

## UNIX-domain sockets

```python
from sockkit.errors import UnixType
from sockkit.unix import (
    accept_unix_stream_socket,
    create_unix_dgram_socket,
    create_unix_server_socket,
    create_unix_stream_socket,
    recvfrom_unix_dgram_socket,
    sendto_unix_dgram_socket,
)

server = create_unix_server_socket("/tmp/echosock", UnixType.STREAM, 0)
client = create_unix_stream_socket("/tmp/echosock", 0)
conn = accept_unix_stream_socket(server, 0)

dserver = create_unix_server_socket("/tmp/dgramsock", UnixType.DGRAM, 0)
dclient = create_unix_dgram_socket("/tmp/clientsock", 0)
sendto_unix_dgram_socket(dclient, b"hi", "/tmp/dgramsock", 0)
data, sender = recvfrom_unix_dgram_socket(dserver, 64, 0)
```

Server and bound datagram sockets remove any file already at their path before they bind.

A path that starts with a NUL character is an abstract address (Linux only). A path longer than 107 bytes raises `SocketError`.

The module also provides:

- `connect_unix_dgram_socket(sock, path)`, which connects a datagram socket; passing `None` as the path disconnects it;
- `shutdown_unix_stream_socket`;
- `destroy_unix_socket`.

## Readiness sets

```python
from sockkit.errors import Direction
from sockkit.selectset import SelectSet

watch = SelectSet()
watch.add_fd(server, Direction.READ)
readable, writable = watch.wait(5_000_000)  # microseconds; 0 waits without limit
```

`wait` returns the objects that you added, so you can tell them apart by identity. It returns empty lists when the timeout expires.

On Linux, `EpollSet` does the same job with `epoll`:

- its timeout is in milliseconds;
- `-1` waits without limit and `0` returns at once;
- `del_fd` stops watching a socket;
- it works as a context manager and is closed when the block ends.

```python
from sockkit.epollset import EpollSet

with EpollSet(128) as eset:
    eset.add_fd(server, Direction.READ)
    readable, writable = eset.wait(-1)
```

## What this package does not do

sockkit is a set of functions that you call from your own code. It does not provide:

- a command-line tool;
- socket wrapper classes;
- message framing over streams.

Reading and writing data is left to the usual `socket.socket` methods.
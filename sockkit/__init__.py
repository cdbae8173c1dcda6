"""Socket helpers for TCP, UDP, UNIX-domain and multicast sockets, with poll and epoll readiness sets."""

__version__ = "0.1.0"
__all__ = ["errors", "selectset", "inet_client", "inet_server", "unix", "epollset"]
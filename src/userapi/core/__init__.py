"""
Networking and concurrency: the listening socket, per-client connections
and the worker pool that runs requests.

    SocketServer ──accept()──► Connection ──submit()──► ThreadPool
"""

from .socket_server import SocketServer
from .connection import Connection, ConnectionState
from .thread_pool import ThreadPool

__all__ = [
    "SocketServer",
    "Connection",
    "ConnectionState",
    "ThreadPool",
]

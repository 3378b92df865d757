"""
Unit tests for Connection reads over a local socket pair.
"""

import socket

import pytest

from userapi.core.connection import Connection, ConnectionState
from userapi.http.request import HTTPParseError


@pytest.fixture
def pair():
    server_side, client_side = socket.socketpair()
    yield server_side, client_side
    client_side.close()
    server_side.close()


class TestReadRequest:
    def test_reads_headers_and_body(self, pair):
        server_side, client_side = pair
        conn = Connection(server_side, ("127.0.0.1", 5000), timeout=2.0)
        raw = b"POST /api/users HTTP/1.1\r\nContent-Length: 4\r\n\r\nbody"

        client_side.sendall(raw)

        assert conn.read_request() == raw
        assert conn.requests_handled == 1
        assert conn.state == ConnectionState.PROCESSING

    def test_pipelined_requests_are_split(self, pair):
        server_side, client_side = pair
        conn = Connection(server_side, ("127.0.0.1", 5000), timeout=2.0)
        first = b"GET /api/users HTTP/1.1\r\n\r\n"
        second = b"GET /api/users/1 HTTP/1.1\r\n\r\n"

        client_side.sendall(first + second)

        assert conn.read_request() == first
        assert conn.read_request() == second

    def test_client_close_gives_none(self, pair):
        server_side, client_side = pair
        conn = Connection(server_side, ("127.0.0.1", 5000), timeout=2.0)

        client_side.shutdown(socket.SHUT_WR)

        assert conn.read_request() is None

    def test_first_request_timeout(self, pair):
        server_side, _ = pair
        conn = Connection(server_side, ("127.0.0.1", 5000), timeout=0.1)

        with pytest.raises(TimeoutError):
            conn.read_request()

    def test_idle_keep_alive_gives_none(self, pair):
        server_side, client_side = pair
        conn = Connection(
            server_side, ("127.0.0.1", 5000), timeout=2.0, keep_alive_timeout=0.1
        )
        client_side.sendall(b"GET / HTTP/1.1\r\n\r\n")
        conn.read_request()

        assert conn.read_request() is None

    def test_oversized_request(self, pair):
        server_side, client_side = pair
        conn = Connection(
            server_side, ("127.0.0.1", 5000), timeout=2.0, max_request_size=1024
        )

        client_side.sendall(
            b"POST /api/users HTTP/1.1\r\nContent-Length: 4096\r\n\r\n" + b"x" * 2048
        )

        with pytest.raises(HTTPParseError) as exc_info:
            conn.read_request()
        assert exc_info.value.status_code == 413


class TestSendAndClose:
    def test_send_response(self, pair):
        server_side, client_side = pair
        conn = Connection(server_side, ("127.0.0.1", 5000), timeout=2.0)

        assert conn.send_response(b"HTTP/1.1 204 No Content\r\n\r\n")
        assert client_side.recv(1024) == b"HTTP/1.1 204 No Content\r\n\r\n"

    def test_close_is_idempotent(self, pair):
        server_side, _ = pair
        conn = Connection(server_side, ("127.0.0.1", 5000), timeout=2.0)

        with conn:
            pass
        conn.close()

        assert conn.state == ConnectionState.CLOSED

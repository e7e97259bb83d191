"""Tests for endpoint resolution and the socket transport."""

import re
import socket
import socketserver
import threading

import httpx
import pytest

from gurl.config import GurlConfig
from gurl.errors import GracefulClose, NetworkError, URLError, UsageError
from gurl.http.request import build_request
from gurl.http.transport import (
    ConnectionState,
    Endpoint,
    SocketTransport,
    parse_endpoint,
    parse_url,
    resolve_endpoint,
    serialize_request,
)


class TestParseUrl:
    def test_scheme_is_optional(self):
        url = parse_url("example.com/path")
        assert url.scheme == "http"
        assert url.host == "example.com"

    def test_rejects_other_schemes(self):
        with pytest.raises(URLError, match="scheme"):
            parse_url("ftp://example.com/")

    def test_rejects_missing_host(self):
        with pytest.raises(URLError):
            parse_url("http:///path")

    def test_rejects_garbage(self):
        with pytest.raises(URLError):
            parse_url("http://example.com:notaport/")


class TestResolveEndpoint:
    def test_default_port(self):
        assert str(resolve_endpoint(httpx.URL("http://example.com/path"))) == "example.com:80"

    def test_url_port(self):
        assert resolve_endpoint(httpx.URL("http://example.com:8080/")) == Endpoint("example.com", 8080)

    def test_override_without_port(self):
        assert str(resolve_endpoint(httpx.URL("http://example.com/"), "10.0.0.5")) == "10.0.0.5:80"

    def test_override_with_port(self):
        assert str(resolve_endpoint(httpx.URL("http://example.com/"), "10.0.0.5:9090")) == "10.0.0.5:9090"

    def test_ipv6_override(self):
        assert parse_endpoint("[::1]:8080") == Endpoint("::1", 8080)
        assert parse_endpoint("[::1]") == Endpoint("::1", 80)
        assert str(Endpoint("::1", 8080)) == "[::1]:8080"

    @pytest.mark.parametrize("server", [":8080", "host:http", "host:70000"])
    def test_bad_override(self, server):
        with pytest.raises(UsageError):
            parse_endpoint(server)


def _spec(method="GET", url="http://example.com/path", *items, **options):
    config = GurlConfig.build(method=method, url=url, items=items, **options)
    return build_request(config, parse_url(config.url))


def test_serialize_request_keeps_original_host():
    wire = serialize_request(_spec("POST", "http://example.com/path", "name=joe"))
    head, _, body = wire.partition(b"\r\n\r\n")
    lines = head.split(b"\r\n")
    assert lines[0] == b"POST /path HTTP/1.1"
    assert b"Host: example.com" in lines
    assert b"Content-Type: application/x-www-form-urlencoded; charset=utf-8" in lines
    assert b"Content-Length: 8" in lines
    assert body == b"name=joe"


def test_serialize_rejects_illegal_header_name():
    with pytest.raises(UsageError, match="Cannot build request"):
        serialize_request(_spec("GET", "http://example.com/", "Bad Name:x"))


class _Handler(socketserver.BaseRequestHandler):
    def handle(self):
        data = b""
        while b"\r\n\r\n" not in data:
            chunk = self.request.recv(4096)
            if not chunk:
                return
            data += chunk
        match = re.search(rb"Content-Length: (\d+)", data)
        length = int(match.group(1)) if match else 0
        while len(data.partition(b"\r\n\r\n")[2]) < length:
            data += self.request.recv(4096)
        self.server.received.append(data)

        self.request.sendall(self.server.reply)
        if self.server.keep_open:
            # wait for the client to hang up
            while self.request.recv(4096):
                pass


@pytest.fixture
def server():
    srv = socketserver.ThreadingTCPServer(("127.0.0.1", 0), _Handler)
    srv.daemon_threads = True
    srv.received = []
    srv.keep_open = False
    srv.reply = b""
    thread = threading.Thread(target=srv.serve_forever, daemon=True)
    thread.start()
    yield srv
    srv.shutdown()
    srv.server_close()


def _endpoint(srv):
    host, port = srv.server_address
    return Endpoint(host, port)


def test_exchange_with_persistent_connection(server):
    server.keep_open = True
    server.reply = b"HTTP/1.1 200 OK\r\nContent-Type: text/plain\r\nContent-Length: 5\r\n\r\nhello"

    conn = SocketTransport().dial(_endpoint(server))
    assert conn.state is ConnectionState.CONNECTED
    try:
        response = conn.exchange(_spec())
        assert conn.state is ConnectionState.RESPONSE_RECEIVED
    finally:
        conn.close()

    assert conn.state is ConnectionState.CLOSED
    assert response.status_code == 200
    assert response.status_line == "HTTP/1.1 200 OK"
    assert response.body_bytes == b"hello"
    assert server.received[0].startswith(b"GET /path HTTP/1.1\r\n")
    assert b"\r\nHost: example.com\r\n" in server.received[0]


def test_close_delimited_body_is_graceful(server):
    server.reply = b"HTTP/1.0 200 OK\r\nContent-Type: application/json\r\n\r\n{\"a\":1}"

    conn = SocketTransport().dial(_endpoint(server))
    try:
        with pytest.raises(GracefulClose) as closed:
            conn.exchange(_spec())
    finally:
        conn.close()

    assert closed.value.response.body_bytes == b'{"a":1}'
    assert closed.value.response.http_version == "1.0"


def test_connection_close_header_is_graceful(server):
    server.reply = b"HTTP/1.1 204 No Content\r\nConnection: close\r\n\r\n"

    conn = SocketTransport().dial(_endpoint(server))
    try:
        with pytest.raises(GracefulClose) as closed:
            conn.exchange(_spec())
    finally:
        conn.close()

    assert closed.value.response.status_code == 204


def test_truncated_body_is_network_error(server):
    server.reply = b"HTTP/1.1 200 OK\r\nContent-Length: 10\r\n\r\nabc"

    conn = SocketTransport().dial(_endpoint(server))
    try:
        with pytest.raises(NetworkError, match="Bad response"):
            conn.exchange(_spec())
    finally:
        conn.close()


def test_dial_refused():
    sock = socket.socket()
    sock.bind(("127.0.0.1", 0))
    port = sock.getsockname()[1]
    sock.close()

    with pytest.raises(NetworkError, match="Cannot connect"):
        SocketTransport().dial(Endpoint("127.0.0.1", port))

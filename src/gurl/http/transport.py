"""
Connection resolution and the raw HTTP/1.1 transport.

The dial target is chosen independently of the URL's host: with a server
override the socket goes to another address while the request line and
Host header still name the original host.

Wire encoding and response parsing are done by h11; this module owns the
socket and decides what an end-of-stream means.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import logging
import socket
from dataclasses import dataclass
from enum import Enum
from typing import Protocol

import h11
import httpx

from gurl.config import DEFAULT_PORT
from gurl.errors import GracefulClose, NetworkError, URLError, UsageError
from gurl.http.models import HTTPResponse
from gurl.http.request import RequestSpec

logger = logging.getLogger(__name__)


READ_SIZE = 65536


class ConnectionState(str, Enum):
    """Lifecycle of a single-exchange connection."""
    UNCONNECTED = "unconnected"
    CONNECTED = "connected"
    REQUEST_SENT = "request_sent"
    RESPONSE_RECEIVED = "response_received"
    CLOSED = "closed"


@dataclass(frozen=True)
class Endpoint:
    """Resolved dial target, always with an explicit port."""
    host: str
    port: int

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


def parse_url(raw: str) -> httpx.URL:
    """
    Parse a URL, assuming http:// when no scheme is given.

    Raises:
        URLError: if the URL cannot be parsed, has no host, or the
            scheme is not http
    """
    if "://" not in raw:
        raw = f"http://{raw}"
    try:
        url = httpx.URL(raw)
    except httpx.InvalidURL as e:
        raise URLError(f"Invalid URL {raw!r}: {e}") from e

    if not url.scheme.startswith("http"):
        raise URLError(f"Invalid URL {raw!r}: scheme must be http")
    if not url.host:
        raise URLError(f"Invalid URL {raw!r}: missing host")
    if url.scheme != "http":
        logger.warning(f"TLS is not supported; connecting to {url.host} in plain text")
    return url


def _split_host_port(hostport: str) -> tuple[str, str | None]:
    if hostport.startswith("["):
        host, _, rest = hostport[1:].partition("]")
        return host, rest[1:] if rest.startswith(":") else None
    if hostport.count(":") == 1:
        host, port = hostport.split(":")
        return host, port
    return hostport, None


def parse_endpoint(hostport: str) -> Endpoint:
    """
    Parse HOST[:PORT], defaulting the port to 80.

    Raises:
        UsageError: if the host is empty or the port is not a number
    """
    host, port = _split_host_port(hostport)
    if not host:
        raise UsageError(f"Invalid server {hostport!r}: missing host")
    if port is None or port == "":
        return Endpoint(host, DEFAULT_PORT)
    if not port.isdigit() or not 0 < int(port) < 65536:
        raise UsageError(f"Invalid server {hostport!r}: bad port {port!r}")
    return Endpoint(host, int(port))


def resolve_endpoint(url: httpx.URL, server: str | None = None) -> Endpoint:
    """Pick the dial target: the override if given, else the URL's authority."""
    if server:
        endpoint = parse_endpoint(server)
        logger.debug(f"Dialing {endpoint} instead of {url.host}")
    else:
        endpoint = Endpoint(url.host, url.port or DEFAULT_PORT)
    return endpoint


def _to_wire(text: str) -> bytes:
    # argv undecodable bytes come back as surrogates; send them unchanged
    return text.encode("utf-8", errors="surrogateescape")


def _request_events(spec: RequestSpec) -> list:
    events = [
        h11.Request(
            method=spec.method,
            target=spec.target,
            headers=[(_to_wire(name), _to_wire(value)) for name, value in spec.wire_headers()],
        )
    ]
    if spec.body:
        events.append(h11.Data(data=spec.body))
    events.append(h11.EndOfMessage())
    return events


def _serialize(conn: h11.Connection, spec: RequestSpec) -> bytes:
    try:
        return b"".join(conn.send(event) for event in _request_events(spec))
    except h11.LocalProtocolError as e:
        raise UsageError(f"Cannot build request: {e}") from e


def serialize_request(spec: RequestSpec) -> bytes:
    """Exact bytes that will be written for this request."""
    return _serialize(h11.Connection(our_role=h11.CLIENT), spec)


class Connection(Protocol):
    state: ConnectionState

    def exchange(self, spec: RequestSpec) -> HTTPResponse:
        ...

    def close(self) -> None:
        ...


class Transport(Protocol):
    def dial(self, endpoint: Endpoint) -> Connection:
        ...


class SocketConnection:
    """
    One TCP connection carrying exactly one request and one response.

    `exchange` raises GracefulClose, carrying the complete response, when
    the server ends the connection after answering.
    """

    def __init__(self, sock: socket.socket, endpoint: Endpoint):
        self._sock = sock
        self._h11 = h11.Connection(our_role=h11.CLIENT)
        self.endpoint = endpoint
        self.state = ConnectionState.CONNECTED

    def _send(self, spec: RequestSpec) -> None:
        data = _serialize(self._h11, spec)
        try:
            self._sock.sendall(data)
        except OSError as e:
            raise NetworkError(f"Write to {self.endpoint} failed: {e}") from e
        logger.debug(f"Sent {len(data)} bytes to {self.endpoint}")
        self.state = ConnectionState.REQUEST_SENT

    def _next_event(self):
        try:
            return self._h11.next_event()
        except h11.RemoteProtocolError as e:
            raise NetworkError(f"Bad response from {self.endpoint}: {e}") from e

    def _receive(self) -> tuple[HTTPResponse, bool]:
        head = None
        chunks: list[bytes] = []
        peer_closed = False

        while True:
            event = self._next_event()
            if event is h11.NEED_DATA:
                try:
                    data = self._sock.recv(READ_SIZE)
                except OSError as e:
                    raise NetworkError(f"Read from {self.endpoint} failed: {e}") from e
                logger.debug(f"Received {len(data)} bytes from {self.endpoint}")
                if not data:
                    peer_closed = True
                self._h11.receive_data(data)
            elif isinstance(event, h11.InformationalResponse):
                continue
            elif isinstance(event, h11.Response):
                head = event
            elif isinstance(event, h11.Data):
                chunks.append(bytes(event.data))
            elif isinstance(event, h11.EndOfMessage):
                break
            elif isinstance(event, h11.ConnectionClosed):
                raise NetworkError(f"Connection to {self.endpoint} closed before a response")

        response = HTTPResponse(
            status_code=head.status_code,
            status_text=head.reason.decode("latin-1"),
            http_version=head.http_version.decode("ascii"),
            raw_headers=[
                (name.decode("latin-1"), value.decode("latin-1"))
                for name, value in head.headers.raw_items()
            ],
            body_bytes=b"".join(chunks),
        )
        closing = peer_closed or self._h11.their_state is h11.MUST_CLOSE
        return response, closing

    def exchange(self, spec: RequestSpec) -> HTTPResponse:
        self._send(spec)
        response, closing = self._receive()
        self.state = ConnectionState.RESPONSE_RECEIVED
        if closing:
            raise GracefulClose(response)
        return response

    def close(self) -> None:
        if self.state is ConnectionState.CLOSED:
            return
        try:
            self._sock.close()
        finally:
            self.state = ConnectionState.CLOSED


class SocketTransport:
    """Dials plain TCP connections."""

    def dial(self, endpoint: Endpoint) -> SocketConnection:
        logger.debug(f"Connecting to {endpoint}")
        try:
            sock = socket.create_connection((endpoint.host, endpoint.port))
        except OSError as e:
            raise NetworkError(f"Cannot connect to {endpoint}: {e}") from e
        return SocketConnection(sock, endpoint)

"""Shared fixtures: an in-memory transport standing in for sockets."""

from __future__ import annotations

import pytest

from gurl.errors import GracefulClose, NetworkError
from gurl.http.models import HTTPResponse
from gurl.http.transport import ConnectionState, serialize_request


class FakeConnection:
    def __init__(self, response=None, error=None, graceful=False):
        self.response = response
        self.error = error
        self.graceful = graceful
        self.state = ConnectionState.CONNECTED
        self.sent = []
        self.wire = []

    def exchange(self, spec):
        self.sent.append(spec)
        self.wire.append(serialize_request(spec))
        self.state = ConnectionState.REQUEST_SENT
        if self.error is not None:
            raise self.error
        self.state = ConnectionState.RESPONSE_RECEIVED
        if self.graceful:
            raise GracefulClose(self.response)
        return self.response

    def close(self):
        self.state = ConnectionState.CLOSED


class FakeTransport:
    def __init__(self, connection=None, dial_error=None):
        self.connection = connection or FakeConnection(make_response())
        self.dial_error = dial_error
        self.dialed = []

    def dial(self, endpoint):
        self.dialed.append(endpoint)
        if self.dial_error is not None:
            raise self.dial_error
        return self.connection


def make_response(status_code=200, headers=None, body=b"", reason="OK"):
    return HTTPResponse(
        status_code=status_code,
        status_text=reason,
        raw_headers=list(headers or []),
        body_bytes=body,
    )


@pytest.fixture
def fake_transport():
    return FakeTransport()


@pytest.fixture
def install_transport(monkeypatch):
    """Route every HTTPClient built without a transport to the given fake."""

    def install(transport):
        monkeypatch.setattr("gurl.http.client.SocketTransport", lambda: transport)
        return transport

    return install


@pytest.fixture
def refused():
    return NetworkError("Cannot connect to example.com:80: [Errno 111] Connection refused")

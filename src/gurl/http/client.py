"""
Request dispatch and response formatting.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import json
import logging
import time

from gurl.config import GurlConfig
from gurl.errors import GracefulClose, NetworkError
from gurl.http.models import HTTPResponse, HTTPResult
from gurl.http.request import RequestSpec, build_request
from gurl.http.transport import (
    Endpoint,
    SocketTransport,
    Transport,
    parse_url,
    resolve_endpoint,
    serialize_request,
)

logger = logging.getLogger(__name__)


JSON_INDENT = 4
JSON_WHITESPACE = " \t\r\n"
JSON_CLOSERS = {"{": "}", "[": "]"}


class HTTPClient:
    """Sends one request over a freshly dialed connection."""

    def __init__(self, transport: Transport | None = None):
        self.transport = transport or SocketTransport()

    def send(self, spec: RequestSpec, endpoint: Endpoint, verbose: bool = False) -> HTTPResult:
        """
        Dial the endpoint, exchange one request/response and close.

        The request is serialized before dialing so a malformed header
        fails without touching the network. Network failures are reported
        in the result rather than raised. A peer close right after the
        response still counts as success.
        """
        request_bytes = serialize_request(spec)
        result = HTTPResult(request=spec)
        if verbose:
            result.request_bytes = request_bytes

        conn = None
        try:
            conn = self.transport.dial(endpoint)
            start_time = time.time()
            try:
                response = conn.exchange(spec)
            except GracefulClose as closed:
                logger.info(f"{endpoint} closed the connection after responding")
                response = closed.response
                result.peer_closed = True
            result.elapsed_ms = (time.time() - start_time) * 1000
            logger.debug(f"{endpoint} answered {response.status_code} in {result.elapsed_ms:.0f}ms")
            result.response = response
            result.success = True
        except NetworkError as e:
            result.error = str(e)
        finally:
            if conn is not None:
                conn.close()

        return result


def execute(config: GurlConfig, transport: Transport | None = None) -> HTTPResult:
    """
    Run a full invocation: parse URL, build the request, resolve the
    dial target and dispatch.

    Raises:
        UsageError, URLError, EncodingError: before any network activity
    """
    url = parse_url(config.url)
    spec = build_request(config, url)
    endpoint = resolve_endpoint(url, config.server)
    logger.debug(f"{spec.method} {url} via {endpoint}")
    return HTTPClient(transport).send(spec, endpoint, verbose=config.verbose)


def format_headers(response: HTTPResponse) -> list[tuple[str, str]]:
    """Response headers sorted by name."""
    return sorted(response.headers.items())


def _reject_constant(name: str):
    raise ValueError(f"{name} is not valid JSON")


def format_json(body: bytes | str, indent: int = JSON_INDENT) -> str:
    """
    Re-indent a JSON document without touching its values.

    Only whitespace between tokens changes: number literals, string
    escapes, key order and repeated keys are kept as received.

    Raises:
        ValueError: if the body is not valid UTF-8 JSON
    """
    text = body.decode("utf-8") if isinstance(body, bytes) else body
    json.loads(text, parse_constant=_reject_constant)

    pad = " " * indent
    out: list[str] = []
    depth = 0
    in_string = False
    escaped = False
    i = 0
    while i < len(text):
        ch = text[i]
        if in_string:
            out.append(ch)
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
        elif ch == '"':
            in_string = True
            out.append(ch)
        elif ch in JSON_CLOSERS:
            j = i + 1
            while j < len(text) and text[j] in JSON_WHITESPACE:
                j += 1
            if j < len(text) and text[j] == JSON_CLOSERS[ch]:
                # empty container stays on one line
                out.append(ch + text[j])
                i = j
            else:
                depth += 1
                out.append(ch + "\n" + pad * depth)
        elif ch in "}]":
            depth -= 1
            out.append("\n" + pad * depth + ch)
        elif ch == ",":
            out.append(",\n" + pad * depth)
        elif ch == ":":
            out.append(": ")
        elif ch not in JSON_WHITESPACE:
            out.append(ch)
        i += 1
    return "".join(out)


def format_body(response: HTTPResponse, indent: bool = True) -> bytes:
    """Body for display: indented JSON when applicable, raw bytes otherwise."""
    if indent and response.is_json and response.body_bytes:
        return format_json(response.body_bytes).encode("utf-8")
    return response.body_bytes

"""
Request assembly: header table, body encoding and the final RequestSpec.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping
from urllib.parse import urlencode

import httpx

from gurl.config import BODY_MODE_JSON, USER_AGENT, GurlConfig
from gurl.errors import EncodingError
from gurl.http.items import BodyItem, HeaderItem, parse_items

logger = logging.getLogger(__name__)


CONTENT_TYPE_FORM = "application/x-www-form-urlencoded; charset=utf-8"
CONTENT_TYPE_JSON = "application/json"

DEFAULT_HEADERS = (
    ("User-Agent", USER_AGENT),
    ("Accept", "*/*"),
)


class HeaderTable:
    """
    One value per header name, names compared exactly as written.

    `User-Agent` and `user-agent` are different keys here, so a request
    item only replaces or removes a default when spelled the same way.
    """

    def __init__(self, defaults: Iterable[tuple[str, str]] = DEFAULT_HEADERS):
        self._headers: dict[str, str] = dict(defaults)

    def set(self, name: str, value: str) -> None:
        """Set a header, deleting it when value is empty."""
        if value == "":
            self.delete(name)
        else:
            self._headers[name] = value

    def delete(self, name: str) -> None:
        self._headers.pop(name, None)

    def apply(self, item: HeaderItem) -> None:
        self.set(item.name, item.value)

    def get(self, name: str) -> str | None:
        return self._headers.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._headers

    def __len__(self) -> int:
        return len(self._headers)

    def items(self) -> list[tuple[str, str]]:
        return list(self._headers.items())


def collect_fields(items: Iterable[HeaderItem | BodyItem]) -> dict[str, str]:
    """Gather body fields; a repeated key keeps its last value."""
    fields: dict[str, str] = {}
    for item in items:
        if isinstance(item, BodyItem):
            fields[item.key] = item.value
    return fields


def encode_form(fields: Mapping[str, str]) -> str:
    """Percent-encode fields as `k=v&k=v` in insertion order."""
    return urlencode(list(fields.items()))


def encode_json(fields: Mapping[str, str]) -> str:
    """Serialize fields as a flat JSON object."""
    try:
        return json.dumps(dict(fields), separators=(",", ":"), ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise EncodingError(f"Cannot encode body as JSON: {e}") from e


def encode_body(fields: Mapping[str, str], body_mode: str) -> tuple[bytes, str]:
    """
    Encode body fields for the given mode.

    Returns:
        (body bytes, Content-Type value)
    """
    if body_mode == BODY_MODE_JSON:
        return encode_json(fields).encode("utf-8"), CONTENT_TYPE_JSON
    return encode_form(fields).encode("utf-8"), CONTENT_TYPE_FORM


def basic_auth_header(username: str, password: str) -> str:
    """Build the Authorization value for HTTP Basic credentials."""
    # BasicAuth only exposes the header by applying its auth flow to a request
    auth = httpx.BasicAuth(username, password)
    request = next(auth.auth_flow(httpx.Request("GET", "http://localhost/")))
    return request.headers["Authorization"]


@dataclass
class RequestSpec:
    """Fully assembled outbound request."""
    method: str
    url: httpx.URL
    headers: HeaderTable = field(default_factory=HeaderTable)
    body: bytes = b""
    has_body: bool = False

    @property
    def target(self) -> str:
        """Request-target for the request line: path plus query."""
        return self.url.raw_path.decode("ascii") or "/"

    @property
    def host(self) -> str:
        """Authority the request claims, as written in the URL."""
        return self.url.netloc.decode("ascii")

    def wire_headers(self) -> list[tuple[str, str]]:
        """
        Header list as sent on the wire.

        Host comes first unless a request item set it. Content-Length
        always reflects the encoded body for POST and PUT.
        """
        headers = []
        if "Host" not in self.headers:
            headers.append(("Host", self.host))
        headers.extend(
            (name, value) for name, value in self.headers.items()
            if not (self.has_body and name.lower() == "content-length")
        )
        if self.has_body:
            headers.append(("Content-Length", str(len(self.body))))
        return headers


def build_request(config: GurlConfig, url: httpx.URL) -> RequestSpec:
    """
    Turn config and request items into a RequestSpec.

    Order of header writes: defaults, Content-Type (POST/PUT only),
    Authorization, then request items, so items always win.
    """
    items = parse_items(config.items)
    headers = HeaderTable()
    body = b""

    if config.has_body:
        fields = collect_fields(items)
        body, content_type = encode_body(fields, config.body_mode)
        headers.set("Content-Type", content_type)
    elif any(isinstance(item, BodyItem) for item in items):
        logger.debug(f"Ignoring body fields for {config.method} request")

    if config.auth:
        if config.auth_type == "basic":
            headers.set("Authorization", basic_auth_header(*config.auth))
        else:
            logger.warning(f"Auth type {config.auth_type!r} is not implemented; sending no credentials")

    for item in items:
        if isinstance(item, HeaderItem):
            headers.apply(item)

    return RequestSpec(
        method=config.method,
        url=url,
        headers=headers,
        body=body,
        has_body=config.has_body,
    )

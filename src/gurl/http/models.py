"""
Response and result models shared by the transport and the client.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class HTTPResponse:
    """HTTP response details."""
    status_code: int
    status_text: str
    http_version: str = "1.1"
    raw_headers: list[tuple[str, str]] = field(default_factory=list)
    body_bytes: bytes = b""

    @property
    def status_line(self) -> str:
        return f"HTTP/{self.http_version} {self.status_code} {self.status_text}".rstrip()

    @property
    def headers(self) -> dict[str, str]:
        """Headers by name, repeated names joined with ', '."""
        merged: dict[str, list[str]] = {}
        for name, value in self.raw_headers:
            merged.setdefault(name, []).append(value)
        return {name: ", ".join(values) for name, values in merged.items()}

    @property
    def content_type(self) -> str | None:
        for name, value in self.raw_headers:
            if name.lower() == "content-type":
                return value
        return None

    @property
    def is_success(self) -> bool:
        return 200 <= self.status_code < 300

    @property
    def is_redirect(self) -> bool:
        return 300 <= self.status_code < 400

    @property
    def is_client_error(self) -> bool:
        return 400 <= self.status_code < 500

    @property
    def is_json(self) -> bool:
        return "application/json" in (self.content_type or "")


@dataclass
class HTTPResult:
    """Result of one request/response exchange."""
    success: bool = False
    request: Any = None
    response: HTTPResponse | None = None
    request_bytes: bytes | None = None
    peer_closed: bool = False
    elapsed_ms: float = 0.0
    error: str | None = None

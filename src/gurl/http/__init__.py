"""
HTTP request pipeline.

Provides:
- Request item classification (headers and body fields)
- Form and JSON body encoding
- Endpoint override with the original Host preserved
- A single-exchange HTTP/1.1 transport

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from gurl.http.client import HTTPClient, execute
from gurl.http.models import HTTPResponse, HTTPResult
from gurl.http.request import HeaderTable, RequestSpec, build_request
from gurl.http.transport import Endpoint, SocketTransport, resolve_endpoint

__all__ = [
    "Endpoint",
    "HTTPClient",
    "HTTPResponse",
    "HTTPResult",
    "HeaderTable",
    "RequestSpec",
    "SocketTransport",
    "build_request",
    "execute",
    "resolve_endpoint",
]

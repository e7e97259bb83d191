"""
Error types raised by the request pipeline.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from typing import Any


class GurlError(Exception):
    """Base class for fatal gurl errors."""


class UsageError(GurlError):
    """Malformed invocation: bad method, item, auth or flag combination."""


class URLError(GurlError):
    """Unparseable URL or a scheme other than http."""


class NetworkError(GurlError):
    """Dial, write or unexpected read failure."""


class EncodingError(GurlError):
    """Body fields could not be serialized."""


class GracefulClose(Exception):
    """
    The peer closed the connection right after a complete response.

    Not a failure: the response that was read is carried along and
    should be treated as the result of the exchange.
    """

    def __init__(self, response: Any):
        super().__init__("connection closed by peer after response")
        self.response = response

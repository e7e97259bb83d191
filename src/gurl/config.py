"""
Configuration management for gurl.

All command-line options are collected once into an immutable GurlConfig
which is then passed to every stage of the request pipeline.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from dataclasses import dataclass

from gurl import __version__
from gurl.errors import UsageError


ALLOWED_METHODS = ("GET", "HEAD", "DELETE", "OPTIONS", "POST", "PUT")
BODY_METHODS = frozenset({"POST", "PUT"})

BODY_MODE_FORM = "form"
BODY_MODE_JSON = "json"

AUTH_TYPES = ("basic", "digest")

DEFAULT_PORT = 80
USER_AGENT = f"gurl/{__version__}"

ENV_PREFIX = "GURL_"


@dataclass(frozen=True)
class GurlConfig:
    """Options for a single gurl invocation."""

    method: str
    url: str
    items: tuple[str, ...] = ()
    body_mode: str = BODY_MODE_FORM
    verbose: bool = False
    indent: bool = True
    auth: tuple[str, str] | None = None
    auth_type: str = "basic"
    server: str | None = None
    debug: bool = False
    log_file: str | None = None

    @property
    def has_body(self) -> bool:
        return self.method in BODY_METHODS

    @classmethod
    def build(
        cls,
        method: str,
        url: str,
        items: tuple[str, ...] | list[str] = (),
        json_mode: bool = False,
        form_mode: bool = False,
        verbose: bool = False,
        indent: bool = True,
        auth: str | None = None,
        auth_type: str = "basic",
        server: str | None = None,
        debug: bool = False,
        log_file: str | None = None,
    ) -> "GurlConfig":
        """
        Validate raw option values and build a config.

        Raises:
            UsageError: on an invalid method, flag combination or auth value
        """
        normalized = method.upper()
        if normalized not in ALLOWED_METHODS:
            raise UsageError(
                f"Invalid method {method!r} (expected one of {', '.join(ALLOWED_METHODS)})"
            )

        if json_mode and form_mode:
            raise UsageError("Invalid usage: --json and --form are mutually exclusive")
        body_mode = BODY_MODE_JSON if json_mode else BODY_MODE_FORM

        auth_type = auth_type.lower()
        if auth_type not in AUTH_TYPES:
            raise UsageError(f"Auth type {auth_type!r} is invalid")

        credentials = None
        if auth:
            parts = auth.split(":")
            if len(parts) != 2:
                raise UsageError(f"Invalid syntax for auth: {auth!r} (expected USER:PASS)")
            credentials = (parts[0], parts[1])

        return cls(
            method=normalized,
            url=url,
            items=tuple(items),
            body_mode=body_mode,
            verbose=verbose,
            indent=indent,
            auth=credentials,
            auth_type=auth_type,
            server=server or None,
            debug=debug,
            log_file=log_file,
        )

"""
Request item classification.

A request item is one command-line token:

    key=value     body field
    Name:Value    header assignment (an empty Value removes the header)

The token is classified by whichever separator appears first. That
separator may appear only once; the value may still contain the other
one, so `q=a:b` is a body field and `X-Filter:a=b` is a header.

Copyright (c) 2025 DNS Science.io, an After Dark Systems, LLC company.
All rights reserved.
"""

from dataclasses import dataclass
from typing import Iterable, Union

from gurl.errors import UsageError


SEP_HEADER = ":"
SEP_BODY = "="


@dataclass(frozen=True)
class HeaderItem:
    """`Name:Value` assignment. An empty value means delete."""
    name: str
    value: str

    @property
    def is_removal(self) -> bool:
        return self.value == ""


@dataclass(frozen=True)
class BodyItem:
    """`key=value` body field."""
    key: str
    value: str


@dataclass(frozen=True)
class Invalid:
    """Token that matches neither form."""
    token: str
    reason: str


ParsedItem = Union[HeaderItem, BodyItem, Invalid]


def _first_separator(token: str) -> str | None:
    positions = [
        (token.find(sep), sep)
        for sep in (SEP_HEADER, SEP_BODY)
        if sep in token
    ]
    if not positions:
        return None
    return min(positions)[1]


def classify(token: str) -> ParsedItem:
    """Classify a single request item token."""
    sep = _first_separator(token)
    if sep is None:
        return Invalid(token, "expected key=value or Name:Value")

    parts = token.split(sep)
    if len(parts) != 2:
        return Invalid(token, f"more than one '{sep}'")

    name, value = parts
    if not name:
        return Invalid(token, "empty name")

    if sep == SEP_HEADER:
        return HeaderItem(name=name, value=value.strip())
    return BodyItem(key=name, value=value)


def parse_items(tokens: Iterable[str]) -> list[HeaderItem | BodyItem]:
    """
    Classify every token in order.

    Raises:
        UsageError: on the first invalid token
    """
    parsed: list[HeaderItem | BodyItem] = []
    for token in tokens:
        item = classify(token)
        if isinstance(item, Invalid):
            raise UsageError(f"Invalid parameter {item.token!r}: {item.reason}")
        parsed.append(item)
    return parsed

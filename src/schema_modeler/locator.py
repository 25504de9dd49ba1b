"""Normalize and classify schema location references.

``schemaLocation`` attributes are URI references: either absolute URLs
(``http://example.org/schemas/Foo.xsd``) or paths relative to the referencing
document (``./data/types/Foo.xsd``, ``../Shared.xsd``). Both helpers here are
pure functions.

Normalization follows RFC 3986 dot-segment removal with one difference that
matters for relative references: leading ``..`` segments of a relative path
are kept, because they are resolved later against the store hierarchy rather
than against a base URI.

Example:
        >>> normalize("./data/types/../types/Foo.xsd")
        'data/types/Foo.xsd'
        >>> normalize("../Shared.xsd")
        '../Shared.xsd'
        >>> is_relative("http://example.org/Root.xsd")
        False
"""

from __future__ import annotations

import re
from typing import List
from urllib.parse import SplitResult, urlsplit, urlunsplit

from .exceptions import MalformedReferenceError

_INVALID_CHARS = re.compile(r"[\s<>\"{}|\\^`]")
_BAD_ESCAPE = re.compile(r"%(?![0-9A-Fa-f]{2})")


def normalize(raw: str) -> str:
    """Return the normalized form of a URI reference.

    Raises:
        MalformedReferenceError: If ``raw`` is empty or not a URI reference.
    """
    parts = _split(raw)
    return urlunsplit(parts._replace(path=_remove_dot_segments(parts.path)))


def is_relative(raw: str) -> bool:
    """Return True if ``raw`` has no scheme once normalized.

    Raises:
        MalformedReferenceError: If ``raw`` is empty or not a URI reference.
    """
    return not urlsplit(normalize(raw)).scheme


def _split(raw: str) -> SplitResult:
    if not isinstance(raw, str) or not raw.strip():
        raise MalformedReferenceError(raw, "empty reference")
    if _INVALID_CHARS.search(raw):
        raise MalformedReferenceError(raw, "illegal character")
    if _BAD_ESCAPE.search(raw):
        raise MalformedReferenceError(raw, "invalid percent escape")
    try:
        parts = urlsplit(raw)
    except ValueError as e:
        raise MalformedReferenceError(raw, str(e)) from e
    if parts.scheme and not (parts.netloc or parts.path):
        raise MalformedReferenceError(raw, "missing scheme-specific part")
    return parts


def _remove_dot_segments(path: str) -> str:
    if not path:
        return path
    absolute = path.startswith("/")
    segments = path.split("/")
    if absolute:
        segments = segments[1:]
    output: List[str] = []
    last = len(segments) - 1
    for index, segment in enumerate(segments):
        if segment == ".":
            if index == last:
                output.append("")
            continue
        if segment == "..":
            if output and output[-1] != "..":
                output.pop()
            elif not absolute:
                output.append("..")
            if index == last and (not output or output[-1] != ".."):
                output.append("")
            continue
        output.append(segment)
    normalized = "/".join(output)
    return "/" + normalized if absolute else normalized

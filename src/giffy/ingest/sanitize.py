"""Filename sanitising for user-supplied upload names."""

from __future__ import annotations

import re

PLACEHOLDER = "_"
DEFAULT_NAME = "upload"

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]")


def sanitize_filename(name: str | None) -> str:
    """Replace every character outside ``[A-Za-z0-9._-]`` with ``_``.

    The result is the only user-derived text that ends up in a scratch path
    and therefore on a command line. Characters with shell meaning (quotes,
    ``;``, ``$``, backticks, whitespace, path separators) are replaced rather
    than escaped.
    """
    if not name:
        return DEFAULT_NAME
    return _UNSAFE_CHARS.sub(PLACEHOLDER, name)


__all__ = ["sanitize_filename", "PLACEHOLDER", "DEFAULT_NAME"]

from __future__ import annotations

import re

# "*.py, *.md", "*.py;*.md" and "*.py *.md" all mean
# the same set of independent pathspecs.
_SEPARATORS = re.compile(r"[,; ]+")

_ALLOWED_PUNCTUATION = {".", "*", "/", "\\"}


def split_path_filters(filters: str | None) -> list[str]:
    """Split a delimited filter string into individual glob tokens, in order."""
    if not filters:
        return []
    return [token.strip() for token in _SEPARATORS.split(filters) if token.strip()]


def _is_valid_token(token: str) -> bool:
    if token.startswith("*"):
        return True
    return all(c.isalnum() or c in _ALLOWED_PUNCTUATION for c in token)


def validate_filter_syntax(filters: str | None) -> bool:
    """Return True if every token is a plausible pathspec.

    An empty string is valid (no filtering). A token is valid when it starts
    with ``*`` or consists only of letters, digits and ``. * / \\``.
    """
    return all(_is_valid_token(token) for token in split_path_filters(filters))

"""Utility functions for schema introspection.

Functions:
- error_code_token(): Upper-case identifier suitable for error codes
- normalize_type_name(): Lower-case catalog type without length/precision or collation
- leading_identifier(): Column named at the start of a check clause
"""

from __future__ import annotations

import re

_PARAMS_RE = re.compile(r"\(.*?\)")
_CHARSET_SUFFIX_RE = re.compile(
    r"\s+(?:character\s+set|charset|collate)\b.*$", re.IGNORECASE | re.DOTALL
)
_LEADING_IDENT_RE = re.compile(r'^\s*\(*\s*["`\[]?([A-Za-z_][A-Za-z0-9_]*)["`\]]?')


def error_code_token(name: str) -> str:
    """Upper-case `name` and replace runs of non-alphanumerics with '_'.

    Example:
        >>> error_code_token("order-items")
        'ORDER_ITEMS'
    """
    return re.sub(r"[^A-Z0-9]+", "_", name.upper()).strip("_")


def normalize_type_name(type_name: str) -> str:
    """Strip length/precision arguments and collation, then lower-case a type string.

    Example:
        >>> normalize_type_name("VARCHAR(255)")
        'varchar'
        >>> normalize_type_name("NUMERIC(10, 2)")
        'numeric'
        >>> normalize_type_name('VARCHAR(255) COLLATE "utf8mb4_bin"')
        'varchar'
    """
    bare = _PARAMS_RE.sub("", _CHARSET_SUFFIX_RE.sub("", type_name or ""))
    return re.sub(r"\s+", " ", bare).strip().lower()


def leading_identifier(clause: str) -> str | None:
    """Return the identifier a check clause starts with, if any.

    Example:
        >>> leading_identifier("((status)::text = ANY (ARRAY['a'::text]))")
        'status'
    """
    match = _LEADING_IDENT_RE.match(clause or "")
    return match.group(1) if match else None

"""Placeholder substitution for administrator SQL templates.

Templates use `{columns}` and `{filters}` as placeholders. Doubling the braces
(`{{columns}}`, `{{filters}}`) emits the placeholder text literally. Each
substitution runs in two passes around a sentinel so that an escaped token is
never expanded, whatever the replacement contains.
"""

from __future__ import annotations

from typing import Optional, Sequence

from .column_mapping import ColumnMapping

COLUMNS = "columns"
FILTERS = "filters"


def _sentinel(token: str) -> str:
    return f"\x00{token.upper()}\x00"


def escape_token(template: str, token: str) -> str:
    """Swap the literal `{{token}}` for a sentinel."""

    return template.replace("{{" + token + "}}", _sentinel(token))


def unescape_token(template: str, token: str) -> str:
    """Restore a swapped sentinel as the literal text `{token}`."""

    return template.replace(_sentinel(token), "{" + token + "}")


def has_token(template: str, token: str) -> bool:
    """Return whether `{token}` occurs outside any `{{token}}` escape."""

    return ("{" + token + "}") in escape_token(template, token)


def substitute(template: str, token: str, replacement: str) -> str:
    """Replace every `{token}` with `replacement`, keeping `{{token}}` literal."""

    escaped = escape_token(template, token)
    return unescape_token(escaped.replace("{" + token + "}", replacement), token)


def render_columns(
    template: str,
    mapping: ColumnMapping,
    columns: Optional[Sequence[str]] = None,
) -> str:
    """Expand `{columns}` in `template`.

    Args:
        template: Raw SQL template.
        mapping: Attribute mapping used when no explicit list is given.
        columns: Explicit select list, joined verbatim with `, `.

    Returns:
        The template with `{columns}` expanded and `{{columns}}` unescaped.
    """

    if columns:
        column_sql = ", ".join(columns)
    else:
        column_sql = ", ".join(mapping.select_list())
    return substitute(template, COLUMNS, column_sql)

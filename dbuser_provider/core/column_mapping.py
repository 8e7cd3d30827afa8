"""Attribute-to-column mapping parsed from administrator `attr=column` entries."""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping

from .errors import ConfigurationError

ID = "id"
USERNAME = "username"
FIRST_NAME = "firstName"
LAST_NAME = "lastName"
EMAIL = "email"


class ColumnMapping(Mapping[str, str]):
    """Read-only mapping of logical attribute name to physical column expression.

    Iteration follows the order the entries were configured in, which is also
    the order `{columns}` renders them in.
    """

    __slots__ = ("_columns",)

    def __init__(self, columns: Mapping[str, str] | None = None):
        self._columns: dict[str, str] = dict(columns or {})

    def __getitem__(self, attribute: str) -> str:
        return self._columns[attribute]

    def __iter__(self) -> Iterator[str]:
        return iter(self._columns)

    def __len__(self) -> int:
        return len(self._columns)

    def __repr__(self) -> str:
        return f"ColumnMapping({self._columns!r})"

    def select_list(self) -> list[str]:
        """Return `column AS attribute` terms in mapping order."""

        return [f"{column} AS {attribute}" for attribute, column in self._columns.items()]


def parse_column_mapping(entries: Iterable[str] | None) -> ColumnMapping:
    """Parse `attribute=column` entries into a `ColumnMapping`.

    Each entry is split on its first `=`. Entries without two non-empty
    trimmed parts are dropped. A repeated attribute is a configuration error.
    """

    columns: dict[str, str] = {}
    for entry in entries or ():
        attribute, sep, column = entry.partition("=")
        attribute = attribute.strip()
        column = column.strip()
        if not sep or not attribute or not column:
            continue
        if attribute in columns:
            raise ConfigurationError(f"Attribute {attribute!r} is mapped more than once.")
        columns[attribute] = column
    return ColumnMapping(columns)

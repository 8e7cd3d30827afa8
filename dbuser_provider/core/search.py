"""Compile search criteria into the `{filters}` fragment of a template.

This module turns a host search request into SQL conditions and positional
parameters. It keeps `UserRepository` focused on execution while making the
filter rules reusable by the configuration layer, which compiles the default
find-by-id/username/email statements through the same path.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional, Tuple

from .column_mapping import EMAIL, FIRST_NAME, LAST_NAME, USERNAME
from .templating import FILTERS, escape_token, has_token, unescape_token
from .types import PositionalParams, SearchCriteria

CONTROL_NAMESPACE = "keycloak."
SEARCH = "keycloak.session.realm.users.query.search"
EXACT = "keycloak.session.realm.users.query.exact"

_CONTROL_ALIASES = {"search": SEARCH, "exact": EXACT}

SEARCHABLE_ATTRIBUTES = frozenset({USERNAME, FIRST_NAME, LAST_NAME, EMAIL})

SELECT_ALL = "1=1"
SELECT_NONE = "1=0"
LIKE_ESCAPE = "!"


@dataclass(frozen=True)
class CompiledQuery:
    """SQL with `?` markers plus the positional values bound to them.

    `params` is `None` when the statement needs no parameters.
    """

    sql: str
    params: Optional[PositionalParams] = None


def compile_search(
    template: str,
    mapping: Mapping[str, str],
    criteria: Optional[SearchCriteria],
) -> CompiledQuery:
    """Compile `criteria` into `template`'s `{filters}` placeholder.

    Attribute keys produce `AND`-joined conditions on their mapped columns.
    Without attribute keys, a free-text keyword produces `OR`-joined
    conditions over the searchable attributes. Conditions compare
    `UPPER(column)` with `=` when the request is exact and with an escaped
    `LIKE` substring pattern otherwise.

    Args:
        template: SQL template, usually with `{columns}` already rendered.
        mapping: Attribute name to column expression.
        criteria: Search keys and values from the host.

    Returns:
        Final SQL and its parameters, ordered by column name.
    """

    escaped = escape_token(template, FILTERS)
    if not criteria or not mapping or not has_token(template, FILTERS):
        return CompiledQuery(_fill(escaped, SELECT_ALL))

    config, attributes = _partition(criteria)
    keyword = config.get(SEARCH)
    if keyword is None and not attributes:
        return CompiledQuery(_fill(escaped, SELECT_ALL))

    exact = config.get(EXACT, "false").strip().lower() == "true"
    if attributes:
        bound = {mapping[key]: value for key, value in attributes.items() if key in mapping}
    else:
        if keyword.strip() in ("", "*"):
            return CompiledQuery(_fill(escaped, SELECT_ALL))
        bound = {
            column: keyword
            for attribute, column in mapping.items()
            if attribute in SEARCHABLE_ATTRIBUTES
        }

    if not bound:
        return CompiledQuery(_fill(escaped, SELECT_NONE))

    ordered = sorted(bound.items())
    combinator = " AND " if attributes else " OR "
    clause = combinator.join(_condition(column, exact) for column, _ in ordered)
    params = [value if exact else like_pattern(value) for _, value in ordered]
    return CompiledQuery(_fill(escaped, clause), params)


def like_pattern(value: Optional[str]) -> Optional[str]:
    """Return an upper-cased, escaped `%value%` pattern for `LIKE ... ESCAPE '!'`."""

    if value is None:
        return None
    escaped = value.upper()
    for char in (LIKE_ESCAPE, "%", "_", "["):
        escaped = escaped.replace(char, LIKE_ESCAPE + char)
    return f"%{escaped}%"


def _condition(column: str, exact: bool) -> str:
    if exact:
        return f"UPPER({column}) = ?"
    return f"UPPER({column}) LIKE ? ESCAPE '{LIKE_ESCAPE}'"


def _partition(criteria: SearchCriteria) -> Tuple[dict[str, str], dict[str, str]]:
    config: dict[str, str] = {}
    attributes: dict[str, str] = {}
    for key, value in criteria.items():
        if key in _CONTROL_ALIASES:
            config[_CONTROL_ALIASES[key]] = value
        elif key.startswith(CONTROL_NAMESPACE):
            config[key] = value
        else:
            attributes[key] = value
    return config, attributes


def _fill(escaped: str, clause: str) -> str:
    return unescape_token(escaped.replace("{" + FILTERS + "}", clause), FILTERS)

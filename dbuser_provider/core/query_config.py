"""Immutable per-provider set of SQL templates and their derived statements."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Iterable, Optional, Sequence

from .column_mapping import EMAIL, ID, USERNAME, ColumnMapping, parse_column_mapping
from .contracts import DialectPort
from .hashing import HashAlgorithm, resolve_hash_algorithm
from .search import EXACT, CompiledQuery, compile_search
from .templating import render_columns
from .types import SearchCriteria


def _blank(template: Optional[str]) -> bool:
    return template is None or not template.strip()


@dataclass(frozen=True)
class QueryConfigurations:
    """Administrator templates plus the mapping and dialect they compile against.

    Blank count/find-by-* templates are derived from `base_query`. The hash
    function name is resolved when the configuration is built, so an unknown
    algorithm fails here rather than at login time.
    """

    base_query: str
    columns_mapping: ColumnMapping
    dialect: DialectPort
    hash_function: str
    count: Optional[str] = None
    find_by_id: Optional[str] = None
    find_by_username: Optional[str] = None
    find_by_email: Optional[str] = None
    find_password_hash: Optional[str] = None
    update_password: Optional[str] = None
    allow_keycloak_delete: bool = False
    allow_database_to_overwrite_keycloak: bool = False
    hash_algorithm: HashAlgorithm = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "hash_algorithm", resolve_hash_algorithm(self.hash_function))

    @classmethod
    def build(
        cls,
        base_query: str,
        columns_mapping: Iterable[str],
        dialect: DialectPort,
        hash_function: str,
        **templates: object,
    ) -> QueryConfigurations:
        """Build from raw `attribute=column` entries instead of a parsed mapping."""

        return cls(
            base_query=base_query,
            columns_mapping=parse_column_mapping(columns_mapping),
            dialect=dialect,
            hash_function=hash_function,
            **templates,  # type: ignore[arg-type]
        )

    def render_base_query(self, columns: Optional[Sequence[str]] = None) -> str:
        """Base query with `{columns}` expanded; `{filters}` is left in place."""

        return render_columns(self.base_query, self.columns_mapping, columns)

    def search(self, criteria: Optional[SearchCriteria] = None) -> CompiledQuery:
        """Compile the base query for `criteria` (all users when empty)."""

        return compile_search(self.render_base_query(), self.columns_mapping, criteria)

    def count_query(self) -> str:
        if _blank(self.count):
            return compile_search(
                self.render_base_query(["count(*)"]), self.columns_mapping, None
            ).sql
        return self._render(self.count)

    def find_by_id_query(self) -> str:
        return self._find_by(self.find_by_id, ID)

    def find_by_username_query(self) -> str:
        return self._find_by(self.find_by_username, USERNAME)

    def find_by_email_query(self) -> str:
        return self._find_by(self.find_by_email, EMAIL)

    def _find_by(self, template: Optional[str], attribute: str) -> str:
        if _blank(template):
            return self.search({attribute: "", EXACT: "true"}).sql
        return self._render(template)

    def _render(self, template: str) -> str:
        # Custom statements take no search criteria, so `{filters}` selects all.
        return compile_search(
            render_columns(template, self.columns_mapping), self.columns_mapping, None
        ).sql

    @property
    def can_update_password(self) -> bool:
        return not _blank(self.update_password)

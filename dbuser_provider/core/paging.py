"""Page requests and their dialect-specific SQL rewriting."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from .contracts import DialectPort


@dataclass(frozen=True)
class Pageable:
    """One page of results: zero-based `index` and positive `size`."""

    index: int
    size: int

    def __post_init__(self) -> None:
        if self.index < 0:
            raise ValueError("Page index must be >= 0.")
        if self.size < 1:
            raise ValueError("Page size must be >= 1.")

    @property
    def offset(self) -> int:
        return self.index * self.size

    @classmethod
    def from_range(cls, first_result: Optional[int], max_results: Optional[int]) -> Optional[Pageable]:
        """Build a page from a host `(first, max)` window.

        Returns `None` (no paging) when either bound is missing or `max_results`
        is not positive. `first_result` is rounded down to a page boundary.
        """

        if first_result is None or max_results is None or max_results < 1:
            return None
        return cls(index=max(first_result, 0) // max_results, size=max_results)


def format_with_pageable(sql: str, pageable: Optional[Pageable], dialect: DialectPort) -> str:
    """Rewrite `sql` to return only `pageable`'s rows.

    The statement is returned unchanged when `pageable` is `None`.
    """

    if pageable is None:
        return sql
    return dialect.limit_offset_sql(sql.rstrip().rstrip(";").rstrip(), pageable.size, pageable.offset)

"""Shared core type aliases used across contracts, repository, and ports."""

from __future__ import annotations

from typing import Any, Dict, List, Mapping, Optional

PositionalParams = List[Any]
QueryParams = Optional[PositionalParams]

SearchCriteria = Mapping[str, str]
UserRecord = Dict[str, Optional[str]]
RowMapping = Mapping[str, Any]
Rows = List[RowMapping]
MaybeRow = Optional[RowMapping]

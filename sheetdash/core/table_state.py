from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Set

ASC = "asc"
DESC = "desc"


@dataclass(frozen=True)
class SortKey:
    column: str
    direction: str = ASC

    @property
    def ascending(self) -> bool:
        return self.direction != DESC


@dataclass
class TableState:
    """
    Represents the current user view over the records.

    Fields:

    - filters: column -> filter value. Categorical/text columns hold a string,
      range columns hold a single [low, high] pair (None = unbounded side).
    - sorting: ordered sort keys; the first key is the most significant.
    - page_index: zero-based page of the sorted, filtered rows.
    - column_visibility: column -> bool; missing columns are visible.
    - selection: selected row ids, independent of filters, sort and page.
    """

    filters: Dict[str, Any] = field(default_factory=dict)
    sorting: List[SortKey] = field(default_factory=list)
    page_index: int = 0
    column_visibility: Dict[str, bool] = field(default_factory=dict)
    selection: Set[str] = field(default_factory=set)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "filters": {k: (list(v) if isinstance(v, (list, tuple)) else v) for k, v in self.filters.items()},
            "sorting": [[k.column, k.direction] for k in self.sorting],
            "page_index": self.page_index,
            "column_visibility": dict(self.column_visibility),
            "selection": sorted(self.selection),
        }

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> TableState:
        data = data or {}
        sorting = []
        for entry in data.get("sorting", []):
            column, direction = entry[0], entry[1] if len(entry) > 1 else ASC
            sorting.append(SortKey(column=str(column), direction=DESC if direction == DESC else ASC))

        return cls(
            filters=dict(data.get("filters", {})),
            sorting=sorting,
            page_index=int(data.get("page_index", 0) or 0),
            column_visibility={str(k): bool(v) for k, v in data.get("column_visibility", {}).items()},
            selection={str(s) for s in data.get("selection", [])},
        )

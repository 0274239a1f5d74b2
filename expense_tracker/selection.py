"""Filtering, sorting and pagination for the transaction list view.

The pipeline always runs in the same order: filter, then sort, then slice
the requested page.  Changing the page therefore never changes which
records match or how many there are.  Unknown parameter values fall back
to no-op defaults instead of raising.
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Mapping, Optional

import pandas as pd

from .config import PAGE_SIZE
from .records import TRANSACTION_TYPES, RecordsLike, clean_type, coerce_int, normalize_records, records_to_list

SORT_FIELDS = ('date', 'amount', 'title', 'type')
SORT_ASC = 'asc'
SORT_DESC = 'desc'
TYPE_FILTER_ALL = 'all'


@dataclass
class ListQuery:
    """Parameters of one list-view request."""

    search_term: str = ''
    type_filter: str = TYPE_FILTER_ALL
    sort_field: str = 'date'
    sort_order: str = SORT_DESC
    page: int = 1
    page_size: int = PAGE_SIZE

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> 'ListQuery':
        """Build a query from loosely typed input, ignoring unknown keys."""
        data = data or {}
        defaults = cls()
        search = data.get('search_term', defaults.search_term)
        return cls(
            search_term=search if isinstance(search, str) else '',
            type_filter=str(data.get('type_filter', defaults.type_filter)),
            sort_field=str(data.get('sort_field', defaults.sort_field)),
            sort_order=str(data.get('sort_order', defaults.sort_order)),
            page=coerce_int(data.get('page'), defaults.page),
            page_size=coerce_int(data.get('page_size'), defaults.page_size),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class PageResult:
    items: List[Dict[str, Any]] = field(default_factory=list)
    total_pages: int = 1
    total_count: int = 0
    page: int = 1
    page_size: int = PAGE_SIZE
    start_index: int = 0
    end_index: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# ---------------------------------------------------------------------------
# DataFrame stages
# ---------------------------------------------------------------------------


def filter_frame(df: pd.DataFrame, search_term: Optional[str] = '', type_filter: Optional[str] = TYPE_FILTER_ALL) -> pd.DataFrame:
    """Keep rows whose title or description contains ``search_term`` and whose type matches."""
    filtered = df
    wanted_type = clean_type(type_filter)
    if wanted_type in TRANSACTION_TYPES:
        filtered = filtered[filtered['type'] == wanted_type]

    term = (search_term or '').lower() if isinstance(search_term, str) else ''
    if term:
        in_title = filtered['title'].str.lower().str.contains(term, regex=False)
        in_description = filtered['description'].str.lower().str.contains(term, regex=False)
        filtered = filtered[in_title | in_description]
    return filtered


def sort_frame(df: pd.DataFrame, sort_field: Optional[str] = 'date', sort_order: Optional[str] = SORT_DESC) -> pd.DataFrame:
    """Stable sort by one of :data:`SORT_FIELDS`; unknown fields leave the order unchanged."""
    ascending = sort_order == SORT_ASC
    if sort_field == 'date':
        return df.sort_values('parsed_date', ascending=ascending, kind='mergesort', na_position='last')
    if sort_field == 'amount':
        return df.sort_values('amount', ascending=ascending, kind='mergesort')
    if sort_field == 'title':
        return df.sort_values('title', ascending=ascending, kind='mergesort', key=lambda s: s.str.lower())
    if sort_field == 'type':
        return df.sort_values('type', ascending=ascending, kind='mergesort')
    return df


# ---------------------------------------------------------------------------
# Record level API
# ---------------------------------------------------------------------------


def _take(records: List[Dict[str, Any]], df: pd.DataFrame) -> List[Dict[str, Any]]:
    return [dict(records[int(pos)]) for pos in df['position']]


def filter_transactions(records: RecordsLike, search_term: str = '', type_filter: str = TYPE_FILTER_ALL) -> List[Dict[str, Any]]:
    rows = records_to_list(records)
    return _take(rows, filter_frame(normalize_records(rows), search_term, type_filter))


def sort_transactions(records: RecordsLike, sort_field: str = 'date', sort_order: str = SORT_DESC) -> List[Dict[str, Any]]:
    rows = records_to_list(records)
    return _take(rows, sort_frame(normalize_records(rows), sort_field, sort_order))


def paginate(items: List[Dict[str, Any]], page: Any = 1, page_size: Any = PAGE_SIZE) -> PageResult:
    """Slice one page out of ``items``.

    ``page`` is 1-indexed and clamped into ``[1, total_pages]``;
    ``total_pages`` is at least 1 even when there are no items.
    """
    size = coerce_int(page_size, PAGE_SIZE)
    if size <= 0:
        size = PAGE_SIZE
    total_count = len(items)
    total_pages = max(1, math.ceil(total_count / size))
    current = min(max(coerce_int(page, 1), 1), total_pages)
    start = (current - 1) * size
    page_items = list(items[start:start + size])
    return PageResult(
        items=page_items,
        total_pages=total_pages,
        total_count=total_count,
        page=current,
        page_size=size,
        start_index=start + 1 if page_items else 0,
        end_index=start + len(page_items),
    )


def select(records: RecordsLike, query: Optional[ListQuery] = None, **overrides: Any) -> PageResult:
    """Filter, sort and paginate a snapshot for the list view.

    ``overrides`` replace individual fields of ``query`` (or of the default
    query), e.g. ``select(records, page=2)``.
    """
    query = query or ListQuery()
    if overrides:
        query = replace(query, **overrides)
    rows = records_to_list(records)
    df = normalize_records(rows)
    df = filter_frame(df, query.search_term, query.type_filter)
    df = sort_frame(df, query.sort_field, query.sort_order)
    return paginate(_take(rows, df), query.page, query.page_size)


def toggle_sort(query: ListQuery, sort_field: str) -> ListQuery:
    """Clicking the current sort column flips the order; a new column starts descending."""
    if query.sort_field == sort_field:
        order = SORT_ASC if query.sort_order == SORT_DESC else SORT_DESC
        return replace(query, sort_order=order)
    return replace(query, sort_field=sort_field, sort_order=SORT_DESC)

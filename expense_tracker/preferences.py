"""Lightweight persistent store for list-view defaults and the savings goal."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from .config import PREFERENCES_PATH, SAVINGS_GOAL
from .logging_setup import get_logger
from .selection import ListQuery

logger = get_logger(__name__)

DEFAULT_PREFERENCES: Dict[str, Any] = {
    'savings_goal': SAVINGS_GOAL,
    'list_query': {
        'search_term': '',
        'type_filter': 'all',
        'sort_field': 'date',
        'sort_order': 'desc',
    },
}


def _defaults() -> Dict[str, Any]:
    return json.loads(json.dumps(DEFAULT_PREFERENCES))


def load_preferences(path: Path | None = None) -> Dict[str, Any]:
    target = Path(path) if path is not None else PREFERENCES_PATH
    if not target.exists():
        return _defaults()
    try:
        with target.open('r', encoding='utf-8') as handle:
            data = json.load(handle)
    except (json.JSONDecodeError, OSError) as exc:
        logger.warning("Ignoring unreadable preferences file %s: %s", target, exc)
        return _defaults()
    if not isinstance(data, dict):
        return _defaults()
    merged = _defaults()
    goal = data.get('savings_goal')
    if isinstance(goal, (int, float)) and not isinstance(goal, bool) and goal >= 0:
        merged['savings_goal'] = float(goal)
    query = data.get('list_query')
    if isinstance(query, dict):
        merged['list_query'].update({k: v for k, v in query.items() if k in merged['list_query']})
    return merged


def save_preferences(preferences: Dict[str, Any], path: Path | None = None) -> None:
    target = Path(path) if path is not None else PREFERENCES_PATH
    target.parent.mkdir(parents=True, exist_ok=True)
    with target.open('w', encoding='utf-8') as handle:
        json.dump(preferences, handle, indent=2, sort_keys=True)


def list_query_from_preferences(preferences: Dict[str, Any]) -> ListQuery:
    """Restore the saved list filters; paging always starts on page 1."""
    return ListQuery.from_dict(preferences.get('list_query'))


def remember_list_query(preferences: Dict[str, Any], query: ListQuery) -> Dict[str, Any]:
    """Return ``preferences`` with ``query``'s filter and sort settings stored."""
    updated = dict(preferences)
    updated['list_query'] = {
        'search_term': query.search_term,
        'type_filter': query.type_filter,
        'sort_field': query.sort_field,
        'sort_order': query.sort_order,
    }
    return updated

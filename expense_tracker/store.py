"""In-memory transaction store with full-snapshot subscriptions.

This is the reference implementation of the store contract the engine
consumes: records are created, edited and deleted here, and after every
change each subscriber receives the complete current record set (never a
diff).  A subscriber also receives the current snapshot as soon as it
subscribes.

Writes are serialized with a lock.  Subscribers are notified outside the
lock, in subscription order, each with its own copy of the snapshot.
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional

from .logging_setup import get_logger
from .records import build_transaction

logger = get_logger(__name__)

Snapshot = List[Dict[str, Any]]
Subscriber = Callable[[Snapshot], None]


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


class TransactionStore:
    """Holds one user's transaction records keyed by id."""

    def __init__(self, records: Optional[Iterable[Mapping[str, Any]]] = None):
        self._records: Dict[str, Dict[str, Any]] = {}
        self._subscribers: List[Subscriber] = []
        self._lock = threading.RLock()
        for record in records or []:
            record = dict(record)
            record_id = str(record.get('id') or self._new_id())
            record['id'] = record_id
            self._records[record_id] = record

    @staticmethod
    def _new_id() -> str:
        return uuid.uuid4().hex

    def __len__(self) -> int:
        return len(self._records)

    def __contains__(self, record_id: object) -> bool:
        return record_id in self._records

    # -- reads -------------------------------------------------------------

    def snapshot(self) -> Snapshot:
        """Copies of all records in insertion order."""
        with self._lock:
            return [dict(record) for record in self._records.values()]

    def get(self, record_id: str) -> Dict[str, Any]:
        with self._lock:
            if record_id not in self._records:
                raise KeyError(record_id)
            return dict(self._records[record_id])

    # -- writes ------------------------------------------------------------

    def add(self, data: Mapping[str, Any]) -> str:
        """Validate and store a new record; returns its id.

        Raises
        ------
        TransactionValidationError
            If ``data`` fails the entry-form rules.
        """
        payload = build_transaction(data)
        now = _timestamp()
        with self._lock:
            record_id = self._new_id()
            while record_id in self._records:
                record_id = self._new_id()
            self._records[record_id] = {'id': record_id, **payload, 'createdAt': now, 'updatedAt': now}
        logger.debug("Added %s transaction %s", payload['type'], record_id)
        self._publish()
        return record_id

    def update(self, record_id: str, changes: Mapping[str, Any]) -> Dict[str, Any]:
        """Apply a validated partial edit; ``id`` and ``createdAt`` never change."""
        payload = build_transaction(changes, partial=True)
        with self._lock:
            if record_id not in self._records:
                raise KeyError(record_id)
            record = self._records[record_id]
            record.update(payload)
            record['updatedAt'] = _timestamp()
            updated = dict(record)
        logger.debug("Updated transaction %s (%s)", record_id, ", ".join(sorted(payload)) or "no fields")
        self._publish()
        return updated

    def delete(self, record_id: str) -> None:
        with self._lock:
            if record_id not in self._records:
                raise KeyError(record_id)
            del self._records[record_id]
        logger.debug("Deleted transaction %s", record_id)
        self._publish()

    # -- subscriptions -----------------------------------------------------

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback`` for snapshots and call it once immediately.

        Returns a function that removes the subscription.
        """
        with self._lock:
            self._subscribers.append(callback)
            snapshot = self.snapshot()
        callback(snapshot)

        def unsubscribe() -> None:
            with self._lock:
                if callback in self._subscribers:
                    self._subscribers.remove(callback)

        return unsubscribe

    def _publish(self) -> None:
        with self._lock:
            subscribers = list(self._subscribers)
        for callback in subscribers:
            callback(self.snapshot())

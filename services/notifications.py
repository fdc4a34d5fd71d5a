"""Notification inbox: newest-first list, unread count, mark-all-read and live updates.

Change events arrive from the backend subscription (possibly on a worker thread and
possibly more than once); `receive` deduplicates by notification id.
"""
from __future__ import annotations

import logging
import threading
from typing import Any, Dict, List, Optional

from domain.constants import NOTIFICATION_FETCH_LIMIT, NOTIFICATIONS_TABLE
from domain.models import Notification, notification_from_dict
from services.backend import Backend, ChangeEvent, Subscription

logger = logging.getLogger(__name__)


class NotificationInbox:
    def __init__(self, user_id: str):
        self.user_id = user_id
        self._items: List[Notification] = []
        self._lock = threading.Lock()
        self._subscription: Optional[Subscription] = None
        self._detached = False

    @property
    def items(self) -> List[Notification]:
        with self._lock:
            return list(self._items)

    @property
    def unread_count(self) -> int:
        with self._lock:
            return sum(1 for n in self._items if not n.is_read)

    @property
    def attached(self) -> bool:
        return self._subscription is not None

    def load(self, backend: Backend, limit: int = NOTIFICATION_FETCH_LIMIT) -> List[Notification]:
        rows = backend.select(NOTIFICATIONS_TABLE, {'user_id': self.user_id},
                              order='created_at', desc=True, limit=limit)
        loaded = [notification_from_dict(r) for r in rows]
        with self._lock:
            self._items = loaded
        return self.items

    def receive(self, row: Dict[str, Any]) -> bool:
        """Prepend a pushed notification; a repeated id replaces the earlier copy in place."""
        if self._detached:
            return False
        incoming = notification_from_dict(row)
        if incoming.user_id and incoming.user_id != self.user_id:
            return False
        with self._lock:
            for i, existing in enumerate(self._items):
                if existing.id == incoming.id:
                    self._items[i] = incoming
                    return False
            self._items.insert(0, incoming)
        return True

    def _on_change(self, event: ChangeEvent):
        if event.type == 'INSERT':
            self.receive(event.record)

    def attach(self, backend: Backend) -> None:
        if self._subscription is not None:
            return
        self._detached = False
        self._subscription = backend.subscribe(NOTIFICATIONS_TABLE, 'user_id', self.user_id,
                                               self._on_change, events=('INSERT',))
        logger.debug("Notification feed attached for %s", self.user_id)

    def detach(self) -> None:
        self._detached = True
        if self._subscription is not None:
            self._subscription.close()
            self._subscription = None
            logger.debug("Notification feed detached for %s", self.user_id)

    def mark_all_read(self, backend: Backend) -> int:
        """Mark every notification read on the backend, then locally.

        Returns how many local entries changed. A BackendError leaves the local list untouched.
        """
        backend.update(NOTIFICATIONS_TABLE, {'is_read': True},
                       {'user_id': self.user_id, 'is_read': False})
        changed = 0
        with self._lock:
            for n in self._items:
                if not n.is_read:
                    n.is_read = True
                    changed += 1
        return changed

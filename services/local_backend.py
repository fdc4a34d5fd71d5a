"""JSON-file backend used when no Supabase project is configured.

Tables are plain lists of dicts persisted through `services.persistence`; change
events are delivered synchronously to in-process subscribers. Streamlit gives every
browser session its own `LocalBackend`, so the subscriber registry is shared at
module level and an insert made in one session reaches inboxes open in another.
"""
from __future__ import annotations

import hashlib
import logging
import os
import secrets
import threading
from typing import Any, Dict, List, Optional

from domain.constants import (
    INCREMENT_REACTION_FN, NOTIFICATION_ICONS, NOTIFICATIONS_TABLE, PROJECTS_TABLE, REACTIONS,
    SESSIONS_TABLE,
)
from domain.models import AuthSession, now_iso
from services import persistence
from services.backend import BackendError, ChangeEvent
from utils.ids import create_id_with_prefix

logger = logging.getLogger(__name__)

_ID_PREFIX = {
    SESSIONS_TABLE: 'log',
    PROJECTS_TABLE: 'prj',
    NOTIFICATIONS_TABLE: 'ntf',
}

_subscribers: List[tuple] = []
_subscribers_lock = threading.Lock()


def _hash_password(password: str, salt: str) -> str:
    return hashlib.sha256(f"{salt}:{password}".encode('utf-8')).hexdigest()


def _matches(row: Dict[str, Any], filters: Optional[Dict[str, Any]]) -> bool:
    return all(row.get(k) == v for k, v in (filters or {}).items())


def _display_name(session: Optional[AuthSession]) -> str:
    if session is None or not session.email:
        return 'Someone'
    return session.email.split('@', 1)[0]


class _LocalSubscription:
    def __init__(self, entry):
        self._entry = entry

    def close(self):
        with _subscribers_lock:
            if self._entry in _subscribers:
                _subscribers.remove(self._entry)


class LocalBackend:
    def __init__(self):
        self.auth: Optional[AuthSession] = None

    # ── Rows ────────────────────────────────────────────────────────────────

    def _join_projects(self, rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        projects = {p['id']: p for p in persistence.load_list(PROJECTS_TABLE)}
        joined = []
        for r in rows:
            p = projects.get(r.get('project_id'))
            item = dict(r)
            item['projects'] = {'title': p.get('title'), 'status': p.get('status')} if p else None
            joined.append(item)
        return joined

    def select(self, table, filters=None, columns='*', order=None, desc=False, limit=None):
        rows = [dict(r) for r in persistence.load_list(table) if _matches(r, filters)]
        if order:
            rows.sort(key=lambda r: (r.get(order) is None, r.get(order) or ''), reverse=desc)
        if limit is not None:
            rows = rows[:int(limit)]
        if table == SESSIONS_TABLE and 'projects(' in columns.replace(' ', ''):
            rows = self._join_projects(rows)
        return rows

    def insert(self, table, row):
        item = dict(row)
        item.setdefault('id', create_id_with_prefix(_ID_PREFIX.get(table, 'row')))
        item.setdefault('created_at', now_iso())
        if table == SESSIONS_TABLE:
            item.setdefault('reactions', {})
        if table == NOTIFICATIONS_TABLE:
            item.setdefault('is_read', False)
        persistence.append_item(table, item)
        self._dispatch(ChangeEvent('INSERT', table, dict(item)))
        return item

    def update(self, table, values, filters):
        if not filters:
            raise ValueError("update requires at least one filter")
        changed = persistence.update_items(
            table, lambda r: _matches(r, filters), lambda r: r.update(values))
        for r in changed:
            self._dispatch(ChangeEvent('UPDATE', table, r))
        return changed

    def rpc(self, fn, params):
        if fn != INCREMENT_REACTION_FN:
            raise BackendError(f"Unknown function {fn}", 404)
        kind = params.get('reaction_type')

        def bump(row):
            reactions = row.setdefault('reactions', {})
            reactions[kind] = int(reactions.get(kind, 0)) + 1

        changed = persistence.update_items(
            SESSIONS_TABLE, lambda r: r.get('id') == params.get('log_id'), bump)
        if not changed:
            raise BackendError("Session not found", 404)
        row = changed[0]
        self._dispatch(ChangeEvent('UPDATE', SESSIONS_TABLE, row))
        self._notify_author(row, kind)
        return row['reactions'][kind]

    def _notify_author(self, row: Dict[str, Any], kind: str):
        """Tell the post's author about the reaction, as the hosted service's trigger does."""
        author = row.get('user_id')
        if not author or (self.auth is not None and self.auth.user_id == author):
            return
        self.insert(NOTIFICATIONS_TABLE, {
            'user_id': author,
            'type': kind if kind in NOTIFICATION_ICONS else 'reaction',
            'message': f"reacted {REACTIONS.get(kind, kind)} to your post",
            'from_user_name': _display_name(self.auth),
        })

    # ── Storage ─────────────────────────────────────────────────────────────

    def upload(self, bucket, key, data, content_type):
        path = persistence.write_blob(os.path.join(bucket, key), data)
        persistence.append_item('objects', {'bucket': bucket, 'key': key,
                                            'content_type': content_type, 'path': path})
        return path

    # ── Realtime ────────────────────────────────────────────────────────────

    def subscribe(self, table, column, value, callback, events=('INSERT',)):
        entry = (table, column, value, {e.upper() for e in events}, callback)
        with _subscribers_lock:
            _subscribers.append(entry)
        return _LocalSubscription(entry)

    def _dispatch(self, event: ChangeEvent):
        with _subscribers_lock:
            targets = list(_subscribers)
        for table, column, value, events, callback in targets:
            if table == event.table and event.type in events and event.record.get(column) == value:
                callback(event)

    # ── Auth ────────────────────────────────────────────────────────────────

    def sign_up(self, email, password):
        accounts = persistence.load_list('accounts')
        if any(a.get('email') == email for a in accounts):
            raise BackendError("User already registered", 422)
        salt = secrets.token_hex(8)
        account = {
            'id': create_id_with_prefix('usr'),
            'email': email,
            'salt': salt,
            'password_hash': _hash_password(password, salt),
            'created_at': now_iso(),
        }
        accounts.append(account)
        persistence.replace_all('accounts', accounts)
        logger.info("Registered local account %s", account['id'])
        # Local accounts are confirmed immediately
        self.auth = AuthSession(access_token=secrets.token_hex(16),
                                user_id=account['id'], email=email)
        return self.auth

    def sign_in(self, email, password):
        account = next((a for a in persistence.load_list('accounts') if a.get('email') == email), None)
        if account is None or account.get('password_hash') != _hash_password(password, account.get('salt', '')):
            raise BackendError("Invalid login credentials", 400)
        self.auth = AuthSession(access_token=secrets.token_hex(16),
                                user_id=account['id'], email=email)
        return self.auth

    def sign_out(self):
        self.auth = None

    def current_session(self):
        return self.auth

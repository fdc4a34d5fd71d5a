import datetime as dt

import pytest

from services.backend import BackendError, ChangeEvent
from services.local_backend import LocalBackend
from services.notifications import NotificationInbox
from services.reactions import react
from services.sessions import save_session
from utils.formatting import time_ago


def row(i, is_read=False, user_id='me', minutes_ago=0):
    created = dt.datetime(2026, 10, 19, 12, 0, tzinfo=dt.timezone.utc) - dt.timedelta(minutes=minutes_ago)
    return {'id': f'n{i}', 'user_id': user_id, 'type': 'reaction', 'message': 'reacted',
            'from_user_name': 'Senior B', 'is_read': is_read, 'created_at': created.isoformat()}


class FakeBackend:
    def __init__(self, rows=None, fail_update=False):
        self.rows = rows or []
        self.fail_update = fail_update
        self.updates = []
        self.selects = []
        self.callbacks = []
        self.closed = 0

    def select(self, table, filters=None, columns='*', order=None, desc=False, limit=None):
        self.selects.append((table, filters, order, desc, limit))
        return list(self.rows)

    def update(self, table, values, filters):
        if self.fail_update:
            raise BackendError("server down", 503)
        self.updates.append((table, values, filters))
        return []

    def subscribe(self, table, column, value, callback, events=('INSERT',)):
        self.callbacks.append(callback)
        backend = self

        class _Handle:
            def close(self_inner):
                backend.closed += 1
        return _Handle()


def loaded_inbox(backend):
    inbox = NotificationInbox('me')
    inbox.load(backend)
    return inbox


def test_load_queries_newest_first_for_user():
    backend = FakeBackend([row(1), row(2, minutes_ago=5)])
    inbox = loaded_inbox(backend)
    assert backend.selects == [('notifications', {'user_id': 'me'}, 'created_at', True, 20)]
    assert [n.id for n in inbox.items] == ['n1', 'n2']


def test_mark_all_read_updates_locally_and_on_backend():
    backend = FakeBackend([row(1), row(2), row(3), row(4, is_read=True)])
    inbox = loaded_inbox(backend)
    assert inbox.unread_count == 3
    assert inbox.mark_all_read(backend) == 3
    assert inbox.unread_count == 0
    assert all(n.is_read for n in inbox.items)
    assert len(inbox.items) == 4
    assert backend.updates == [('notifications', {'is_read': True}, {'user_id': 'me', 'is_read': False})]


def test_mark_all_read_failure_leaves_local_state():
    backend = FakeBackend([row(1), row(2)], fail_update=True)
    inbox = loaded_inbox(backend)
    with pytest.raises(BackendError):
        inbox.mark_all_read(backend)
    assert inbox.unread_count == 2


def test_pushed_notifications_are_prepended_and_deduplicated():
    backend = FakeBackend([row(1, minutes_ago=10)])
    inbox = loaded_inbox(backend)
    inbox.attach(backend)
    callback = backend.callbacks[0]
    callback(ChangeEvent('INSERT', 'notifications', row(2)))
    callback(ChangeEvent('INSERT', 'notifications', row(2)))
    assert [n.id for n in inbox.items] == ['n2', 'n1']
    assert inbox.unread_count == 2


def test_update_events_and_other_users_ignored():
    inbox = loaded_inbox(FakeBackend())
    assert inbox.receive(row(1, user_id='someone-else')) is False
    inbox._on_change(ChangeEvent('UPDATE', 'notifications', row(2)))
    assert inbox.items == []


def test_detach_closes_subscription_and_stops_updates():
    backend = FakeBackend()
    inbox = loaded_inbox(backend)
    inbox.attach(backend)
    inbox.attach(backend)  # already attached
    assert len(backend.callbacks) == 1
    inbox.detach()
    assert backend.closed == 1
    assert inbox.receive(row(1)) is False
    assert inbox.items == []


def test_local_backend_delivers_inserts_to_inbox(tmp_path, monkeypatch):
    monkeypatch.setattr('services.persistence.DATA_DIR', str(tmp_path))
    backend = LocalBackend()
    inbox = loaded_inbox(backend)
    inbox.attach(backend)
    backend.insert('notifications', {'user_id': 'me', 'type': 'heart', 'message': 'hi'})
    backend.insert('notifications', {'user_id': 'other', 'type': 'heart', 'message': 'hi'})
    assert len(inbox.items) == 1
    inbox.mark_all_read(backend)
    assert all(r['is_read'] for r in backend.select('notifications', {'user_id': 'me'}))
    assert backend.select('notifications', {'user_id': 'other'})[0]['is_read'] is False
    inbox.detach()
    backend.insert('notifications', {'user_id': 'me', 'type': 'heart', 'message': 'again'})
    assert len(inbox.items) == 1


def test_time_ago_labels():
    now = dt.datetime(2026, 10, 19, 12, 0, tzinfo=dt.timezone.utc)
    assert time_ago(now - dt.timedelta(seconds=30), now) == "just now"
    assert time_ago(now - dt.timedelta(minutes=5), now) == "5 min ago"
    assert time_ago(now - dt.timedelta(hours=3), now) == "3 h ago"
    assert time_ago(now - dt.timedelta(days=2), now) == "2 d ago"


def test_reaction_in_one_session_reaches_author_inbox_in_another(tmp_path, monkeypatch):
    monkeypatch.setattr('services.persistence.DATA_DIR', str(tmp_path))
    author_backend = LocalBackend()
    author = author_backend.sign_up('painter@example.com', 'x' * 12)
    record = save_session(author_backend, author.user_id, 600)
    inbox = NotificationInbox(author.user_id)
    inbox.load(author_backend)
    inbox.attach(author_backend)

    fan_backend = LocalBackend()
    fan_backend.sign_up('fan@example.com', 'y' * 12)
    try:
        assert react(record, 'fire', fan_backend) == 1
    finally:
        inbox.detach()

    stored = author_backend.select('notifications', {'user_id': author.user_id})
    assert len(stored) == 1
    assert stored[0]['from_user_name'] == 'fan'
    assert [n.from_user_name for n in inbox.items] == ['fan']
    assert inbox.unread_count == 1


def test_reacting_to_own_post_sends_no_notification(tmp_path, monkeypatch):
    monkeypatch.setattr('services.persistence.DATA_DIR', str(tmp_path))
    backend = LocalBackend()
    me = backend.sign_up('painter@example.com', 'x' * 12)
    record = save_session(backend, me.user_id, 60)
    react(record, 'heart', backend)
    assert backend.select('notifications', {'user_id': me.user_id}) == []

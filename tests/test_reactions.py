import datetime as dt

import pytest

from domain.models import SessionRecord
from services.backend import BackendError
from services.reactions import react


class FakeBackend:
    def __init__(self, result=None, error=None):
        self.result = result
        self.error = error
        self.calls = []

    def rpc(self, fn, params):
        self.calls.append((fn, params))
        if self.error:
            raise self.error
        return self.result


def make_record(reactions=None):
    return SessionRecord(id='log1', user_id='u1', project_id='p1', duration_seconds=60,
                         created_at=dt.datetime(2026, 10, 19, tzinfo=dt.timezone.utc),
                         reactions=reactions if reactions is not None else {})


def test_optimistic_increment_kept_when_server_agrees():
    rec = make_record({'fire': 2})
    backend = FakeBackend(result=3)
    assert react(rec, 'fire', backend) == 3
    assert rec.reactions == {'fire': 3}
    assert backend.calls == [('increment_reaction', {'log_id': 'log1', 'reaction_type': 'fire'})]


def test_server_count_wins_when_different():
    rec = make_record({'heart': 1})
    assert react(rec, 'heart', FakeBackend(result=[{'increment_reaction': 7}])) == 7
    assert rec.reactions['heart'] == 7


def test_void_server_result_keeps_local_value():
    rec = make_record()
    assert react(rec, 'sparkle', FakeBackend(result=None)) == 1


def test_failure_rolls_back_existing_count():
    rec = make_record({'fire': 4})
    with pytest.raises(BackendError):
        react(rec, 'fire', FakeBackend(error=BackendError("boom", 500)))
    assert rec.reactions == {'fire': 4}


def test_failure_rolls_back_new_key():
    rec = make_record()
    with pytest.raises(BackendError):
        react(rec, 'muscle', FakeBackend(error=BackendError("offline")))
    assert rec.reactions == {}


def test_unknown_kind_rejected_before_network():
    backend = FakeBackend(result=1)
    with pytest.raises(ValueError):
        react(make_record(), 'thumbs', backend)
    assert backend.calls == []

import json
from unittest.mock import MagicMock

import pytest
import requests

from services.backend import BackendError, PollingSubscription, SupabaseBackend


def make_response(status=200, body=None):
    resp = MagicMock()
    resp.status_code = status
    resp.content = b'' if body is None else json.dumps(body).encode()
    resp.text = '' if body is None else json.dumps(body)
    if body is None:
        resp.json.side_effect = ValueError("no body")
    else:
        resp.json.return_value = body
    return resp


def make_backend(*responses):
    http = MagicMock()
    http.request.side_effect = list(responses)
    return SupabaseBackend('https://proj.supabase.co/', 'anon-key', timeout=5, http=http), http


def test_select_builds_postgrest_query():
    backend, http = make_backend(make_response(body=[{'id': 'n1'}]))
    rows = backend.select('notifications', {'user_id': 'u1', 'is_read': False},
                          order='created_at', desc=True, limit=20)
    assert rows == [{'id': 'n1'}]
    method, url = http.request.call_args.args
    kwargs = http.request.call_args.kwargs
    assert method == 'GET'
    assert url == 'https://proj.supabase.co/rest/v1/notifications'
    assert kwargs['params'] == {'select': '*', 'user_id': 'eq.u1', 'is_read': 'eq.false',
                                'order': 'created_at.desc', 'limit': 20}
    assert kwargs['headers']['apikey'] == 'anon-key'
    assert kwargs['headers']['Authorization'] == 'Bearer anon-key'
    assert kwargs['timeout'] == 5


def test_insert_returns_representation():
    backend, http = make_backend(make_response(201, [{'id': 'log1', 'duration_seconds': 60}]))
    row = backend.insert('process_logs', {'duration_seconds': 60})
    assert row['id'] == 'log1'
    assert http.request.call_args.kwargs['headers']['Prefer'] == 'return=representation'


def test_update_scopes_with_filters():
    backend, http = make_backend(make_response(body=[]))
    backend.update('notifications', {'is_read': True}, {'user_id': 'u1', 'is_read': False})
    kwargs = http.request.call_args.kwargs
    assert http.request.call_args.args[0] == 'PATCH'
    assert kwargs['params'] == {'user_id': 'eq.u1', 'is_read': 'eq.false'}
    assert kwargs['json'] == {'is_read': True}


def test_update_without_filters_is_refused():
    backend, http = make_backend()
    with pytest.raises(ValueError):
        backend.update('notifications', {'is_read': True}, {})
    http.request.assert_not_called()


def test_http_error_becomes_backend_error():
    backend, _ = make_backend(make_response(401, {'message': 'JWT expired'}))
    with pytest.raises(BackendError) as exc:
        backend.select('process_logs')
    assert exc.value.status == 401
    assert exc.value.message == 'JWT expired'


def test_network_error_becomes_backend_error():
    backend, _ = make_backend(requests.ConnectionError("unreachable"))
    with pytest.raises(BackendError):
        backend.rpc('increment_reaction', {'log_id': 'x', 'reaction_type': 'fire'})


def test_upload_returns_public_url():
    backend, http = make_backend(make_response(body={'Key': 'evidence/u1/a.jpg'}))
    url = backend.upload('evidence', 'u1/a.jpg', b'jpeg', 'image/jpeg')
    assert url == 'https://proj.supabase.co/storage/v1/object/public/evidence/u1/a.jpg'
    assert http.request.call_args.kwargs['headers']['Content-Type'] == 'image/jpeg'


def test_sign_in_stores_session_and_uses_token():
    token_body = {'access_token': 'jwt', 'refresh_token': 'r', 'user': {'id': 'u1', 'email': 'a@b.c'}}
    backend, http = make_backend(make_response(body=token_body), make_response(body=[]))
    session = backend.sign_in('a@b.c', 'x' * 12)
    assert session.user_id == 'u1'
    assert backend.current_session() is session
    assert http.request.call_args.kwargs['params'] == {'grant_type': 'password'}
    backend.select('projects')
    assert http.request.call_args.kwargs['headers']['Authorization'] == 'Bearer jwt'


def test_sign_up_pending_confirmation_returns_none():
    backend, _ = make_backend(make_response(body={'id': 'u1', 'email': 'a@b.c'}))
    assert backend.sign_up('a@b.c', 'x' * 12) is None
    assert backend.current_session() is None


def test_sign_out_clears_session_even_on_failure():
    token_body = {'access_token': 'jwt', 'user': {'id': 'u1', 'email': 'a@b.c'}}
    backend, _ = make_backend(make_response(body=token_body), make_response(500, {'msg': 'oops'}))
    backend.sign_in('a@b.c', 'x' * 12)
    with pytest.raises(BackendError):
        backend.sign_out()
    assert backend.current_session() is None


def test_polling_subscription_reports_new_and_changed_rows():
    backend = MagicMock()
    first = [{'id': 'n1', 'user_id': 'u1', 'is_read': False}]
    second = [{'id': 'n2', 'user_id': 'u1', 'is_read': False},
              {'id': 'n1', 'user_id': 'u1', 'is_read': True}]
    backend.select.side_effect = [first, second, second]
    received = []
    sub = PollingSubscription(backend, 'notifications', 'user_id', 'u1', received.append,
                              events=('INSERT', 'UPDATE'), interval=60)
    assert sub.poll_once(deliver=False)[0].record['id'] == 'n1'  # baseline
    sub.poll_once()
    assert [(e.type, e.record['id']) for e in received] == [('UPDATE', 'n1'), ('INSERT', 'n2')]
    sub.poll_once()
    assert len(received) == 2
    backend.select.assert_called_with('notifications', {'user_id': 'u1'},
                                      order='created_at', desc=True, limit=50)


def test_closed_subscription_delivers_nothing():
    backend = MagicMock()
    backend.select.side_effect = [[], [{'id': 'n1', 'user_id': 'u1'}]]
    received = []
    sub = PollingSubscription(backend, 'notifications', 'user_id', 'u1', received.append,
                              events=('INSERT',), interval=60)
    sub.poll_once(deliver=False)
    sub.close()
    sub.poll_once()
    assert received == []


def test_expired_token_is_refreshed_before_request():
    now = [1000.0]
    token_body = {'access_token': 'jwt', 'refresh_token': 'r1', 'expires_in': 3600,
                  'user': {'id': 'u1', 'email': 'a@b.c'}}
    refreshed = {'access_token': 'jwt2', 'refresh_token': 'r2', 'expires_in': 3600,
                 'user': {'id': 'u1', 'email': 'a@b.c'}}
    backend, http = make_backend(make_response(body=token_body), make_response(body=refreshed),
                                 make_response(body=[]))
    backend.clock = lambda: now[0]
    backend.sign_in('a@b.c', 'x' * 12)
    assert backend.current_session().expires_at == 4600.0

    now[0] = 5000.0
    backend.select('projects')
    refresh_call, select_call = http.request.call_args_list[1:]
    assert refresh_call.args == ('POST', 'https://proj.supabase.co/auth/v1/token')
    assert refresh_call.kwargs['params'] == {'grant_type': 'refresh_token'}
    assert refresh_call.kwargs['json'] == {'refresh_token': 'r1'}
    assert refresh_call.kwargs['headers']['Authorization'] == 'Bearer anon-key'
    assert select_call.kwargs['headers']['Authorization'] == 'Bearer jwt2'
    assert backend.current_session().refresh_token == 'r2'


def test_failed_refresh_signs_the_user_out():
    now = [1000.0]
    token_body = {'access_token': 'jwt', 'refresh_token': 'r1', 'expires_at': 1100,
                  'user': {'id': 'u1', 'email': 'a@b.c'}}
    backend, http = make_backend(make_response(body=token_body),
                                 make_response(400, {'error_description': 'Invalid Refresh Token'}))
    backend.clock = lambda: now[0]
    backend.sign_in('a@b.c', 'x' * 12)
    now[0] = 2000.0
    with pytest.raises(BackendError) as exc:
        backend.select('projects')
    assert exc.value.status == 401
    assert backend.current_session() is None
    assert http.request.call_count == 2


def test_rejected_token_drops_session():
    token_body = {'access_token': 'jwt', 'user': {'id': 'u1', 'email': 'a@b.c'}}
    backend, _ = make_backend(make_response(body=token_body),
                              make_response(401, {'message': 'JWT expired'}))
    backend.sign_in('a@b.c', 'x' * 12)
    with pytest.raises(BackendError):
        backend.select('projects')
    assert backend.current_session() is None


def test_start_takes_baseline_before_returning():
    backend = MagicMock()
    backend.select.return_value = [{'id': 'n1', 'user_id': 'u1'}]
    received = []
    sub = PollingSubscription(backend, 'notifications', 'user_id', 'u1', received.append,
                              events=('INSERT',), interval=60)
    sub.start()
    try:
        assert backend.select.call_count == 1
        assert sub.poll_once() == []
    finally:
        sub.close()
    assert received == []

"""Backend access: the operations every view needs from the hosted data service.

`SupabaseBackend` talks to a Supabase project over HTTPS (PostgREST rows, storage
objects, RPC functions, GoTrue auth). `services.local_backend.LocalBackend` offers the
same surface on top of local JSON files for offline demos and tests.

Row-change subscriptions are delivered as `ChangeEvent` objects to a callback until
the returned handle is closed.
"""
from __future__ import annotations

import json
import logging
import threading
import time
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional, Protocol

import requests

from domain.models import AuthSession

logger = logging.getLogger(__name__)

# refresh this many seconds before the access token actually expires
TOKEN_EXPIRY_MARGIN = 30


class BackendError(Exception):
    """A request to the backend failed (network, auth or server side)."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class ValidationError(ValueError):
    """Input rejected before any backend call."""


@dataclass
class ChangeEvent:
    type: str  # INSERT | UPDATE
    table: str
    record: Dict[str, Any]


ChangeCallback = Callable[[ChangeEvent], None]


class Subscription(Protocol):
    def close(self) -> None: ...


class Backend(Protocol):
    def select(self, table: str, filters: Optional[Dict[str, Any]] = None, columns: str = '*',
               order: Optional[str] = None, desc: bool = False,
               limit: Optional[int] = None) -> List[Dict[str, Any]]: ...

    def insert(self, table: str, row: Dict[str, Any]) -> Dict[str, Any]: ...

    def update(self, table: str, values: Dict[str, Any],
               filters: Dict[str, Any]) -> List[Dict[str, Any]]: ...

    def rpc(self, fn: str, params: Dict[str, Any]) -> Any: ...

    def upload(self, bucket: str, key: str, data: bytes, content_type: str) -> str: ...

    def subscribe(self, table: str, column: str, value: Any, callback: ChangeCallback,
                  events: Iterable[str] = ('INSERT',)) -> Subscription: ...

    def sign_up(self, email: str, password: str) -> Optional[AuthSession]: ...

    def sign_in(self, email: str, password: str) -> AuthSession: ...

    def sign_out(self) -> None: ...

    def current_session(self) -> Optional[AuthSession]: ...


def _filter_value(value: Any) -> str:
    if isinstance(value, bool):
        return 'true' if value else 'false'
    if value is None:
        return 'null'
    return str(value)


def _error_message(resp: requests.Response) -> str:
    try:
        body = resp.json()
    except ValueError:
        return resp.text or f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        for key in ('message', 'msg', 'error_description', 'error'):
            if body.get(key):
                return str(body[key])
    return f"HTTP {resp.status_code}"


class PollingSubscription:
    """Watches one table for new or changed rows matching `column = value`.

    The first poll establishes a baseline; later polls deliver rows whose id was not
    seen before as INSERT and rows whose content changed as UPDATE. Events are
    delivered oldest first.
    """

    def __init__(self, backend: 'SupabaseBackend', table: str, column: str, value: Any,
                 callback: ChangeCallback, events: Iterable[str], interval: float):
        self.backend = backend
        self.table = table
        self.column = column
        self.value = value
        self.callback = callback
        self.events = {e.upper() for e in events}
        self.interval = interval
        self._snapshots: Dict[str, str] = {}
        self._baselined = False
        self._stop = threading.Event()
        self._thread = threading.Thread(
            target=self._run, name=f"poll-{table}", daemon=True)

    def start(self) -> 'PollingSubscription':
        """Take the baseline on the calling thread, then keep polling in the background.

        Rows that exist before `start` returns are never reported; anything written
        afterwards is.
        """
        self._take_baseline()
        self._thread.start()
        return self

    def close(self) -> None:
        self._stop.set()

    @property
    def closed(self) -> bool:
        return self._stop.is_set()

    def _fetch(self) -> List[Dict[str, Any]]:
        return self.backend.select(self.table, {self.column: self.value},
                                   order='created_at', desc=True, limit=50)

    def poll_once(self, deliver: bool = True) -> List[ChangeEvent]:
        rows = self._fetch()
        found: List[ChangeEvent] = []
        for row in reversed(rows):
            row_id = str(row.get('id'))
            snapshot = json.dumps(row, sort_keys=True, default=str)
            previous = self._snapshots.get(row_id)
            self._snapshots[row_id] = snapshot
            if previous is None:
                kind = 'INSERT'
            elif previous != snapshot:
                kind = 'UPDATE'
            else:
                continue
            if kind in self.events:
                found.append(ChangeEvent(kind, self.table, row))
        if deliver:
            for event in found:
                if self.closed:
                    break
                self.callback(event)
        return found

    def _take_baseline(self):
        try:
            self.poll_once(deliver=False)
        except BackendError as e:
            logger.warning("Initial poll of %s failed: %s", self.table, e)
        else:
            self._baselined = True

    def _run(self):
        if not self._baselined:
            self._take_baseline()
        while not self._stop.wait(self.interval):
            try:
                self.poll_once()
            except BackendError as e:
                logger.warning("Polling %s failed: %s", self.table, e)


class SupabaseBackend:
    def __init__(self, url: str, key: str, timeout: float = 10.0, poll_interval: float = 3.0,
                 http: Optional[requests.Session] = None, clock: Callable[[], float] = time.time):
        self.url = url.rstrip('/')
        self.key = key
        self.timeout = timeout
        self.poll_interval = poll_interval
        self.http = http or requests.Session()
        self.clock = clock
        self.auth: Optional[AuthSession] = None
        # the polling thread and the script thread may both find the token expired
        self._auth_lock = threading.Lock()

    # ── HTTP plumbing ───────────────────────────────────────────────────────

    def _headers(self, extra: Optional[Dict[str, str]] = None) -> Dict[str, str]:
        token = self.auth.access_token if self.auth else self.key
        headers = {
            'apikey': self.key,
            'Authorization': f"Bearer {token}",
        }
        if extra:
            headers.update(extra)
        return headers

    def _send(self, method: str, path: str, headers: Optional[Dict[str, str]] = None,
              **kwargs) -> requests.Response:
        url = f"{self.url}{path}"
        logger.debug("%s %s", method, path)
        try:
            resp = self.http.request(method, url, headers=self._headers(headers),
                                     timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise BackendError(f"Network error: {e}") from e
        if resp.status_code >= 400:
            message = _error_message(resp)
            logger.warning("%s %s -> %s %s", method, path, resp.status_code, message)
            raise BackendError(message, resp.status_code)
        return resp

    def _request(self, method: str, path: str, headers: Optional[Dict[str, str]] = None,
                 **kwargs) -> requests.Response:
        self._ensure_fresh_token()
        try:
            return self._send(method, path, headers, **kwargs)
        except BackendError as e:
            if e.status == 401 and self.auth is not None:
                logger.warning("Access token rejected, dropping session for %s", self.auth.user_id)
                self.auth = None
            raise

    @staticmethod
    def _json(resp: requests.Response) -> Any:
        if not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise BackendError("Malformed response from backend", resp.status_code) from e

    # ── Rows ────────────────────────────────────────────────────────────────

    def select(self, table, filters=None, columns='*', order=None, desc=False, limit=None):
        params: Dict[str, Any] = {'select': columns}
        for col, value in (filters or {}).items():
            params[col] = f"eq.{_filter_value(value)}"
        if order:
            params['order'] = f"{order}.{'desc' if desc else 'asc'}"
        if limit is not None:
            params['limit'] = int(limit)
        return self._json(self._request('GET', f"/rest/v1/{table}", params=params)) or []

    def insert(self, table, row):
        resp = self._request('POST', f"/rest/v1/{table}", json=row,
                             headers={'Prefer': 'return=representation'})
        data = self._json(resp) or []
        if isinstance(data, list):
            if not data:
                raise BackendError(f"Insert into {table} returned no row")
            return data[0]
        return data

    def update(self, table, values, filters):
        if not filters:
            raise ValueError("update requires at least one filter")
        params = {col: f"eq.{_filter_value(v)}" for col, v in filters.items()}
        resp = self._request('PATCH', f"/rest/v1/{table}", params=params, json=values,
                             headers={'Prefer': 'return=representation'})
        return self._json(resp) or []

    def rpc(self, fn, params):
        return self._json(self._request('POST', f"/rest/v1/rpc/{fn}", json=params))

    # ── Storage ─────────────────────────────────────────────────────────────

    def upload(self, bucket, key, data, content_type):
        self._request('POST', f"/storage/v1/object/{bucket}/{key}", data=data,
                      headers={'Content-Type': content_type, 'x-upsert': 'false'})
        return f"{self.url}/storage/v1/object/public/{bucket}/{key}"

    # ── Realtime ────────────────────────────────────────────────────────────

    def subscribe(self, table, column, value, callback, events=('INSERT',)):
        return PollingSubscription(self, table, column, value, callback, events,
                                   self.poll_interval).start()

    # ── Auth ────────────────────────────────────────────────────────────────

    def _session_from(self, data: Dict[str, Any]) -> Optional[AuthSession]:
        if not data or not data.get('access_token'):
            return None
        user = data.get('user') or {}
        expires_at = data.get('expires_at')
        if expires_at is None and data.get('expires_in') is not None:
            expires_at = self.clock() + float(data['expires_in'])
        return AuthSession(
            access_token=data['access_token'],
            refresh_token=data.get('refresh_token'),
            user_id=str(user.get('id', '')),
            email=user.get('email') or '',
            expires_at=float(expires_at) if expires_at is not None else None,
        )

    def _ensure_fresh_token(self):
        """Trade the refresh token for a new access token once the current one has expired.

        If that is not possible the session is dropped, so the caller sees a signed-out user.
        """
        with self._auth_lock:
            session = self.auth
            if session is None or session.expires_at is None:
                return
            if self.clock() < session.expires_at - TOKEN_EXPIRY_MARGIN:
                return
            # refresh with the anon key; a failure leaves the session cleared
            self.auth = None
            if not session.refresh_token:
                raise BackendError("Session expired, please sign in again.", 401)
            try:
                data = self._json(self._send('POST', '/auth/v1/token',
                                             params={'grant_type': 'refresh_token'},
                                             json={'refresh_token': session.refresh_token}))
            except BackendError as e:
                logger.warning("Token refresh failed for %s: %s", session.user_id, e)
                raise BackendError("Session expired, please sign in again.", 401) from e
            refreshed = self._session_from(data or {})
            if refreshed is None:
                raise BackendError("Session expired, please sign in again.", 401)
            logger.info("Refreshed access token for %s", refreshed.user_id)
            self.auth = refreshed

    def sign_up(self, email, password):
        data = self._json(self._send('POST', '/auth/v1/signup',
                                     json={'email': email, 'password': password}))
        session = self._session_from(data or {})
        if session:
            self.auth = session
        return session

    def sign_in(self, email, password):
        data = self._json(self._send('POST', '/auth/v1/token', params={'grant_type': 'password'},
                                     json={'email': email, 'password': password}))
        session = self._session_from(data or {})
        if session is None:
            raise BackendError("Sign-in response did not include a session")
        self.auth = session
        return session

    def sign_out(self):
        if self.auth is None:
            return
        try:
            self._send('POST', '/auth/v1/logout')
        finally:
            self.auth = None

    def current_session(self):
        return self.auth

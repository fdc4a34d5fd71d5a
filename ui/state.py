"""Per-browser-session objects kept in `st.session_state`.

Each visitor gets their own backend client (it carries the auth session), their own
stopwatch and, once signed in, their own notification inbox. Views receive these
objects explicitly instead of reaching for globals.
"""
import logging
from typing import Callable, List, Optional

import streamlit as st

from domain.models import AuthSession
from services.backend import Backend, BackendError, SupabaseBackend
from services.local_backend import LocalBackend
from services.notifications import NotificationInbox
from services.stopwatch import Stopwatch
from utils.config import AppConfig, load_config

logger = logging.getLogger(__name__)


def get_config() -> AppConfig:
    if 'app_config' not in st.session_state:
        st.session_state.app_config = load_config()
    return st.session_state.app_config


def get_backend() -> Backend:
    if 'backend' not in st.session_state:
        cfg = get_config()
        if cfg.use_supabase:
            st.session_state.backend = SupabaseBackend(
                cfg.supabase_url, cfg.supabase_key,
                timeout=cfg.http_timeout, poll_interval=cfg.poll_interval)
        else:
            logger.info("No Supabase credentials configured, using local JSON backend")
            st.session_state.backend = LocalBackend()
    return st.session_state.backend


def get_stopwatch() -> Stopwatch:
    if 'stopwatch' not in st.session_state:
        st.session_state.stopwatch = Stopwatch()
    return st.session_state.stopwatch


def current_user() -> Optional[AuthSession]:
    return get_backend().current_session()


def get_inbox() -> Optional[NotificationInbox]:
    """Inbox for the signed-in user, attached to the live feed on first use."""
    session = current_user()
    if session is None:
        return None
    inbox = st.session_state.get('inbox')
    if inbox is None or inbox.user_id != session.user_id:
        if inbox is not None:
            inbox.detach()
        inbox = NotificationInbox(session.user_id)
        backend = get_backend()
        # Subscribe before the first fetch; anything that lands in between arrives twice
        # and the inbox drops the duplicate by id.
        inbox.attach(backend)
        try:
            inbox.load(backend)
        except BackendError:
            inbox.detach()
            raise
        st.session_state.inbox = inbox
    return inbox


def drop_inbox() -> None:
    inbox = st.session_state.pop('inbox', None)
    if inbox is not None:
        inbox.detach()


# ── View lifetime ───────────────────────────────────────────────────────────

def enter_view(page_key: str) -> None:
    """Run the disposers of the previously displayed view when the page changes."""
    if st.session_state.get('active_view') == page_key:
        return
    disposers: List[Callable[[], None]] = st.session_state.get('view_disposers', [])
    for dispose in disposers:
        dispose()
    st.session_state.view_disposers = []
    st.session_state.active_view = page_key


def on_view_exit(dispose: Callable[[], None]) -> None:
    st.session_state.setdefault('view_disposers', []).append(dispose)

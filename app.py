import logging

import streamlit as st

from services import auth
from services.backend import BackendError
from ui.components import inject_base_css, notification_bell, timer_bar
from ui.state import (
    current_user, drop_inbox, enter_view, get_backend, get_config, get_inbox, get_stopwatch,
)
from utils.config import load_config

# Import the page rendering functions from the view modules
from views import login, home, feed, portfolio, profile, board

logger = logging.getLogger(__name__)

LOGIN_PAGE = "login"

# --- Page Registry ---
# Maps a page key to its label, rendering function and whether a signed-in session is required.
PAGE_REGISTRY = {
    "login": {
        "label": "🔑 Sign in",
        "render_func": login.view,
        "auth": False,
    },
    "home": {
        "label": "⏱️ Timer",
        "render_func": home.view,
        "auth": True,
    },
    "feed": {
        "label": "🖼️ Board",
        "render_func": feed.view,
        "auth": True,
    },
    "portfolio": {
        "label": "📁 Portfolio",
        "render_func": portfolio.view,
        "auth": True,
    },
    "board": {
        "label": "💬 Consult",
        "render_func": board.view,
        "auth": True,
    },
    "profile": {
        "label": "🙍 Profile",
        "render_func": profile.view,
        "auth": True,
    },
}


def resolve_page(requested, signed_in: bool) -> str:
    """Entry guard: without a session every page resolves to the sign-in screen."""
    if not signed_in:
        return LOGIN_PAGE
    if requested not in PAGE_REGISTRY or requested == LOGIN_PAGE:
        return "home"
    return requested


def configure_logging():
    if getattr(configure_logging, "_done", False):
        return
    configure_logging._done = True
    cfg = load_config()
    logging.basicConfig(
        level=getattr(logging, cfg.log_level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _sign_out():
    try:
        auth.sign_out(get_backend())
    except BackendError:
        logger.exception("Sign-out request failed")
    drop_inbox()
    get_stopwatch().reset()
    st.session_state.pop('feed_ranked', None)


def main():
    """
    Main application router.

    Controls the sidebar navigation, applies the sign-in guard and renders the
    selected page with the shared chrome (notification bell, timer bar).
    """
    configure_logging()
    st.set_page_config(page_title="ART APP | Track your creative practice", layout="centered")
    inject_base_css()

    session = current_user()
    signed_in = session is not None

    # Navigation request from a view (e.g. after sign-in) or the query string
    requested = st.session_state.pop('nav_target', None)
    if requested is None and 'navigation_radio' not in st.session_state:
        requested = st.query_params.get('page')
    if requested in PAGE_REGISTRY and signed_in and requested != LOGIN_PAGE:
        st.session_state.navigation_radio = requested

    if signed_in:
        nav_keys = [k for k, v in PAGE_REGISTRY.items() if v['auth']]
        if st.session_state.get('navigation_radio') not in nav_keys:
            st.session_state.navigation_radio = resolve_page(requested, True)
        selected = st.sidebar.radio(
            "Menu", nav_keys,
            format_func=lambda k: PAGE_REGISTRY[k]['label'],
            key="navigation_radio",
        )
        page_key = resolve_page(selected, True)
    else:
        # the session may have been dropped by the backend (expired token)
        drop_inbox()
        page_key = LOGIN_PAGE
    st.query_params['page'] = page_key
    enter_view(page_key)

    if signed_in:
        head_l, head_r = st.columns([5, 1])
        with head_l:
            if page_key != "home":
                timer_bar(get_stopwatch())
        with head_r:
            try:
                inbox = get_inbox()
            except BackendError:
                logger.exception("Loading notifications failed")
                inbox = None
            if inbox is not None:
                notification_bell(inbox, get_backend(), refresh_seconds=get_config().poll_interval)
        st.sidebar.markdown("---")
        st.sidebar.caption(session.email)
        st.sidebar.button("Sign out", on_click=_sign_out)

    PAGE_REGISTRY[page_key]["render_func"]()

    # --- Footer ---
    cfg = get_config()
    backend_label = "Supabase" if cfg.use_supabase else f"local data: {cfg.data_dir}"
    st.sidebar.caption(f"{backend_label} | tz {cfg.timezone}")


if __name__ == "__main__":
    main()

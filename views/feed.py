import datetime as dt
import logging

import pandas as pd
import streamlit as st

from domain.constants import FEED_TABS
from services import sessions as session_svc
from services.backend import BackendError
from services.reactions import react
from services.scoring import feed_for_tab, rank_sessions
from ui.components import session_tile
from ui.state import get_backend, get_config

logger = logging.getLogger(__name__)

COLUMNS = 3


def _on_react(item, kind):
    try:
        react(item.record, kind, get_backend())
    except BackendError:
        logger.exception("Reaction failed")
        st.toast("Could not send your reaction. Please try again.", icon="⚠️")


def view():
    st.header("Board")
    tz = get_config().tz
    search = st.text_input("Search", placeholder="Search by project title", label_visibility="collapsed")

    if st.button("↻ Refresh") or 'feed_ranked' not in st.session_state:
        try:
            records = session_svc.list_feed(get_backend())
        except BackendError:
            logger.exception("Loading feed failed")
            st.error("Could not load the feed. Please try again.")
            return
        st.session_state.feed_ranked = rank_sessions(records, tz, today=dt.datetime.now(tz).date())

    ranked = st.session_state.feed_ranked
    if not ranked:
        st.info("No posts yet. Record a session to be the first!")
        return

    tab_labels = list(FEED_TABS.values())
    tab_keys = list(FEED_TABS.keys())
    tabs = st.tabs(tab_labels)
    for tab_key, tab in zip(tab_keys, tabs):
        with tab:
            items = feed_for_tab(ranked, tab_key)
            if search:
                needle = search.lower()
                items = [s for s in items if needle in (s.record.project_title or '').lower()]
            if not items:
                st.caption("Nothing to show here.")
                continue
            cols = st.columns(COLUMNS)
            for i, item in enumerate(items):
                with cols[i % COLUMNS]:
                    session_tile(item, i, show_rank=(tab_key == 'popular'),
                                 on_react=_on_react, key_prefix=tab_key)
            with st.expander("Score details"):
                df = pd.DataFrame([
                    {
                        'post': s.record.id,
                        'minutes': s.record.duration_seconds // 60,
                        'streak': s.streak,
                        'reactions': s.record.reaction_total,
                        'posts_by_author': s.author_post_count,
                        'score': round(s.score, 1),
                    } for s in items
                ])
                st.dataframe(df, hide_index=True, use_container_width=True)

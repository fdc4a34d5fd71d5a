import datetime as dt
import logging

import pandas as pd
import streamlit as st

from domain.constants import WEEKDAY_LABELS
from services import sessions as session_svc
from services.backend import BackendError
from services.stats import profile_stats
from ui.components import stat_card
from ui.state import current_user, get_backend, get_config

logger = logging.getLogger(__name__)


def view():
    st.header("Profile")
    backend = get_backend()
    user = current_user()
    tz = get_config().tz

    st.markdown(f"### {user.email[:1].upper() or 'U'} · {user.email}")

    try:
        records = session_svc.list_user_sessions(backend, user.user_id)
    except BackendError:
        logger.exception("Loading profile stats failed")
        st.error("Could not load your stats. Please try again.")
        return

    stats = profile_stats(records, tz, now=dt.datetime.now(tz))

    c1, c2 = st.columns(2)
    with c1:
        stat_card("Total time", f"{stats.total_hours}h", "⏱️")
        stat_card("Streak", f"{stats.streak} days", "🔥")
    with c2:
        stat_card("Posts", stats.total_posts, "⭐")
        stat_card("Rank", stats.rank, "🏆")
    st.metric("Experience", f"{stats.experience_points} XP")

    st.subheader("📈 Weekly activity (minutes)")
    df = pd.DataFrame({'day': WEEKDAY_LABELS, 'minutes': stats.weekly_minutes})
    df['day'] = pd.Categorical(df['day'], categories=WEEKDAY_LABELS, ordered=True)
    st.bar_chart(df, x='day', y='minutes')
    st.caption(f"Timezone: {get_config().timezone}")

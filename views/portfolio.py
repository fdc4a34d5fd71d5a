import logging

import pandas as pd
import streamlit as st

from services import sessions as session_svc
from services.backend import BackendError
from ui.components import project_card
from ui.state import current_user, get_backend
from utils.formatting import format_hours

logger = logging.getLogger(__name__)


def _load_summaries(backend, user_id):
    projects = session_svc.list_projects(backend, user_id)
    records = []
    for p in projects:
        records.extend(session_svc.list_project_sessions(backend, p.id))
    return session_svc.project_summaries(projects, records)


def view():
    st.header("Portfolio & Projects")
    backend = get_backend()
    user = current_user()
    try:
        summaries = _load_summaries(backend, user.user_id)
    except BackendError:
        logger.exception("Loading projects failed")
        st.error("Could not load your projects. Please try again.")
        return

    if not summaries:
        st.info("No projects yet. Your first saved session creates one automatically.")
        return

    view_mode = st.radio("View", ["Grid", "List"], horizontal=True, key="portfolio_view_mode")
    if view_mode == "List":
        df = pd.DataFrame([
            {
                'title': s.project.title,
                'status': s.project.status,
                'images': s.image_count,
                'time': format_hours(s.total_seconds),
            } for s in summaries
        ])
        st.dataframe(df, hide_index=True, use_container_width=True)
        return

    cols = st.columns(2)
    for i, summary in enumerate(summaries):
        with cols[i % 2]:
            project_card(summary)

import datetime as dt
import logging

import streamlit as st

from domain.constants import NOTIFICATION_ICONS
from services.backend import Backend, BackendError
from services.notifications import NotificationInbox
from .cards import notification_row

logger = logging.getLogger(__name__)


def notification_bell(inbox: NotificationInbox, backend: Backend, refresh_seconds: float = 3.0):
    """Bell with unread count; new notifications show up on the next refresh tick."""

    @st.fragment(run_every=refresh_seconds)
    def _bell():
        unread = inbox.unread_count
        label = f"🔔 {unread}" if unread else "🔔"
        with st.popover(label):
            st.markdown("**Notifications**")
            if unread and st.button("✔ Mark all read", key="notif_mark_all"):
                try:
                    inbox.mark_all_read(backend)
                except BackendError:
                    logger.exception("Marking notifications read failed")
                    st.error("Could not update notifications. Please try again.")
            items = inbox.items
            if not items:
                st.caption("No notifications yet.")
                return
            now = dt.datetime.now(dt.timezone.utc)
            for n in items:
                notification_row(NOTIFICATION_ICONS.get(n.type, "🔔"), n.from_user_name,
                                 n.message, n.created_at, n.is_read, now)

    _bell()

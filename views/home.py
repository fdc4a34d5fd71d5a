import datetime as dt
import logging

import streamlit as st

from domain.constants import RESIZE_MAX_SIZE, RESIZE_QUALITY, WEEKLY_MISSIONS
from services import sessions as session_svc
from services.backend import BackendError, ValidationError
from services.imaging import optimize_or_original
from services.stats import login_streak, weekly_minutes
from ui.components import clock, inject_base_css
from ui.state import current_user, get_backend, get_config, get_stopwatch, on_view_exit
from utils.formatting import format_hours, time_ago

logger = logging.getLogger(__name__)


def _watch_stopwatch(stopwatch):
    """While this screen is displayed, remember the duration of a finished run so it can be saved."""
    if 'home_unsubscribe' in st.session_state:
        return

    def _on_change(sw):
        if not sw.is_active and sw.seconds > 0:
            st.session_state.pending_save = sw.seconds
        elif sw.seconds == 0:
            st.session_state.pop('pending_save', None)

    unsubscribe = stopwatch.subscribe(_on_change)
    st.session_state.home_unsubscribe = unsubscribe

    def _dispose():
        unsubscribe()
        st.session_state.pop('home_unsubscribe', None)

    on_view_exit(_dispose)


def _uploader_key():
    return f"evidence_upload_{st.session_state.get('evidence_nonce', 0)}"


def _clear_evidence():
    """Forget the attached image. The uploader gets a fresh key, so it renders empty next run."""
    st.session_state.evidence_nonce = st.session_state.get('evidence_nonce', 0) + 1
    st.session_state.pop('evidence', None)


def _evidence_uploader():
    upload = st.file_uploader("📷 Evidence image", type=["jpg", "jpeg", "png", "webp", "gif"], key=_uploader_key())
    if upload is None:
        st.session_state.pop('evidence', None)
        return None
    cached = st.session_state.get('evidence')
    if cached is None or cached[0] != upload.file_id:
        with st.spinner(f"Optimizing image... ({RESIZE_MAX_SIZE}px / JPEG {int(RESIZE_QUALITY * 100)}%)"):
            result = optimize_or_original(upload.getvalue(), upload.name)
        cached = (upload.file_id, result)
        st.session_state.evidence = cached
    result = cached[1]
    with st.container(border=True):
        st.image(result.image.data, use_container_width=True)
        note = "optimized" if result.optimized else "original"
        st.caption(f"Evidence set · {result.image.size_kb}KB ({note})")
    return result.image


def _weekly_missions(records, tz, now):
    minutes = sum(weekly_minutes(records, tz, now=now))
    cutoff = now - dt.timedelta(days=7)
    images = sum(1 for r in records if r.image_url and r.created_at > cutoff)
    progress = {
        'minutes': minutes,
        'images': images,
        'streak': login_streak(records, tz, today=now.astimezone(tz).date()),
    }
    with st.container(border=True):
        st.markdown("**🎯 Weekly Mission**")
        for label, metric, target in WEEKLY_MISSIONS:
            ratio = min(1.0, progress[metric] / target)
            st.progress(ratio, text=f"{label} · {int(ratio * 100)}%")


def view():
    inject_base_css()
    backend = get_backend()
    stopwatch = get_stopwatch()
    user = current_user()
    tz = get_config().tz
    now = dt.datetime.now(tz)
    _watch_stopwatch(stopwatch)

    try:
        records = session_svc.list_user_sessions(backend, user.user_id)
    except BackendError:
        logger.exception("Loading sessions failed")
        st.error("Could not load your sessions. Please reload to try again.")
        records = []

    st.header("🔥 Keep it up today!")
    if records:
        last = records[0]
        st.caption(f"Last: {time_ago(last.created_at, now)} · {format_hours(last.duration_seconds)}")

    clock(stopwatch)

    c1, c2 = st.columns(2)
    c1.button("■ STOP" if stopwatch.is_active else "▶ START", on_click=stopwatch.toggle,
              use_container_width=True, type="primary")
    if c2.button("↺ RESET", use_container_width=True, disabled=stopwatch.is_active):
        stopwatch.reset()
        st.rerun()

    image = _evidence_uploader()

    pending = st.session_state.get('pending_save')
    if pending and not stopwatch.is_active:
        if st.button(f"💾 Save session ({format_hours(pending)})", use_container_width=True):
            try:
                saved = session_svc.save_session(backend, user.user_id, pending, image=image)
            except ValidationError as e:
                st.error(str(e))
            except BackendError:
                logger.exception("Saving session failed")
                st.error("Saving failed. Your time is kept, please try again.")
            else:
                stopwatch.reset()
                _clear_evidence()
                st.success(f"Saved! ({format_hours(saved.duration_seconds)})")
                records = [saved] + records

    _weekly_missions(records, tz, now)

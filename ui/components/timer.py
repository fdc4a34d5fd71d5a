import streamlit as st

from services.stopwatch import Stopwatch
from utils.formatting import format_time
from .base import inject_base_css


def timer_bar(stopwatch: Stopwatch):
    """Mini bar shown on other screens while the stopwatch runs."""
    if not stopwatch.is_active:
        return
    inject_base_css()

    @st.fragment(run_every=1)
    def _bar():
        st.markdown(f"<div class='timer-bar'>🔥 Recording {format_time(stopwatch.seconds)}</div>",
                    unsafe_allow_html=True)

    _bar()


def clock(stopwatch: Stopwatch):
    """Large HH:MM:SS display; refreshes once per second only while running."""
    inject_base_css()

    @st.fragment(run_every=1 if stopwatch.is_active else None)
    def _clock():
        stopwatch.tick()
        status = "● Recording..." if stopwatch.is_active else "Standby"
        st.caption(status)
        st.markdown(f"<div class='clock'>{format_time(stopwatch.seconds)}</div>", unsafe_allow_html=True)

    _clock()

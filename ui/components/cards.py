import datetime as dt
from html import escape
from typing import Callable, Optional

import streamlit as st

from domain.constants import REACTIONS
from domain.models import ProjectSummary, Thread
from services.scoring import ScoredSession
from utils.formatting import format_hours, time_ago
from .base import inject_base_css, badge, rank_badge


def stat_card(label: str, value, icon: str = ""):
    """
    Displays a single profile statistic as a bordered block.
    """
    inject_base_css()
    st.markdown(
        f"""
        <div class="block">
            <div style="font-size:1.3rem;">{icon}</div>
            <div style="font-size:1.8rem; font-weight:900;">{value}</div>
            <div style="font-size:.7rem; font-weight:800; text-transform:uppercase; color:#4B5563;">{label}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def session_tile(item: ScoredSession, position: int, show_rank: bool,
                 on_react: Optional[Callable[[ScoredSession, str], None]] = None,
                 key_prefix: str = "feed"):
    """
    Displays one feed post: evidence image, effort score, project and reaction buttons.
    """
    inject_base_css()
    rec = item.record
    with st.container(border=True):
        header = rank_badge(position) if show_rank else ""
        if item.is_new_creator:
            header += badge("NEW", "yellow")
        if header:
            st.markdown(header, unsafe_allow_html=True)
        if rec.image_url:
            st.image(rec.image_url, use_container_width=True)
        else:
            st.markdown("<div style='font-size:2rem;text-align:center;'>🎨</div>", unsafe_allow_html=True)
        st.markdown(f"🔥 **{int(item.score)}** · {format_hours(rec.duration_seconds)}")
        if rec.project_title:
            st.caption(f"{rec.project_title} ({rec.project_status or '—'})")
        if on_react is not None:
            cols = st.columns(len(REACTIONS))
            for col, (kind, emoji) in zip(cols, REACTIONS.items()):
                count = rec.reactions.get(kind, 0)
                col.button(f"{emoji} {count}", key=f"{key_prefix}_{rec.id}_{kind}",
                           on_click=on_react, args=(item, kind))


def project_card(summary: ProjectSummary):
    inject_base_css()
    p = summary.project
    with st.container(border=True):
        if summary.last_image:
            st.image(summary.last_image, use_container_width=True)
        st.markdown(f"**{p.title}** {badge(p.status or '—', 'yellow')}", unsafe_allow_html=True)
        c1, c2 = st.columns(2)
        c1.metric("Time", format_hours(summary.total_seconds))
        c2.metric("Images", summary.image_count)


def thread_card(thread: Thread):
    inject_base_css()
    pin = "📌 " if thread.pinned else ""
    st.markdown(
        f"""
        <div class="block">
            <div>{badge(thread.category)} <b>{pin}{thread.title}</b></div>
            <div style="font-size:.75rem; color:#6B7280; margin-top:6px;">
                {thread.author} · 💬 {thread.replies} · 👍 {thread.likes} · {thread.time_label}
            </div>
        </div>
        """,
        unsafe_allow_html=True,
    )


def notification_row(icon: str, sender: Optional[str], message: str, created_at: dt.datetime,
                     is_read: bool, now: dt.datetime):
    inject_base_css()
    dot = "" if is_read else badge("●", "red")
    css = "" if is_read else "unread"
    st.markdown(
        f"""
        <div class="{css}" style="padding:6px 4px; border-bottom:2px solid #000;">
            <div>{icon} <b>{escape(sender or "Anonymous")}</b> {dot}</div>
            <div style="font-size:.8rem;">{escape(message)}</div>
            <div style="font-size:.7rem; color:#9CA3AF;">{time_ago(created_at, now)}</div>
        </div>
        """,
        unsafe_allow_html=True,
    )

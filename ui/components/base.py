import streamlit as st

INK = "#000000"
ORANGE = "#F97316"  # orange-500
YELLOW = "#FACC15"  # yellow-400
RED = "#EF4444"  # red-500
GRAY = "#9CA3AF"
PAPER = "#FFFFFF"


def inject_base_css():
    if getattr(inject_base_css, "_applied", False):
        return
    inject_base_css._applied = True
    st.markdown(
        f"""
        <style>
        .badge {{
            display:inline-block; padding:2px 8px; border:2px solid {INK};
            font-size:12px; line-height:16px; font-weight:800;
            background:{PAPER}; color:{INK}; margin-right:4px; margin-bottom:4px;
        }}
        .badge.orange {{background:{ORANGE}; color:{PAPER};}}
        .badge.yellow {{background:{YELLOW};}}
        .badge.red {{background:{RED}; color:{PAPER};}}
        .badge.gray {{background:#E5E7EB; color:{GRAY};}}
        .block {{border:4px solid {INK}; padding:12px 16px; box-shadow:6px 6px 0 0 {INK}; background:{PAPER}; margin-bottom:12px;}}
        .clock {{font-size:4.5rem; font-weight:900; text-align:center; font-variant-numeric:tabular-nums;
                 border-top:4px solid {INK}; border-bottom:4px solid {INK}; padding:.5rem 0;}}
        .timer-bar {{background:{ORANGE}; color:{PAPER}; text-align:center; font-weight:900; padding:4px; font-size:.8rem;}}
        .unread {{background:#FFF7ED;}}
        </style>
        """,
        unsafe_allow_html=True,
    )


def badge(label: str, color: str = "") -> str:
    return f'<span class="badge {color}">{label}</span>'


def rank_badge(position: int) -> str:
    """#1 yellow, #2 gray, #3 orange; nothing below the podium."""
    colors = {0: "yellow", 1: "gray", 2: "orange"}
    if position not in colors:
        return ""
    return badge(f"#{position + 1}", colors[position])

import streamlit as st

from domain.constants import BOARD_CATEGORIES
from services.board import filter_threads
from ui.components import thread_card


def view():
    st.header("Discussion board")
    st.caption("Let's get better together")
    category = st.radio("Category", BOARD_CATEGORIES, horizontal=True, key="board_category")
    threads = filter_threads(category)
    if not threads:
        st.info("No threads in this category yet.")
        return
    for t in threads:
        thread_card(t)

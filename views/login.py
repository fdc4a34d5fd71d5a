import logging

import streamlit as st

from domain.constants import MIN_PASSWORD_LENGTH
from services import auth
from services.backend import BackendError, ValidationError
from ui.state import get_backend

logger = logging.getLogger(__name__)


def view():
    st.title("ART APP")
    st.caption("Track your creative practice")

    mode = st.radio("Mode", ["Sign in", "Create account"], horizontal=True,
                    key="login_mode", label_visibility="collapsed")
    is_sign_up = mode == "Create account"

    with st.form("auth_form"):
        email = st.text_input("Email", placeholder="painter@example.com")
        pw_label = f"Password ({MIN_PASSWORD_LENGTH}+ characters)" if is_sign_up else "Password"
        password = st.text_input(pw_label, type="password")
        submitted = st.form_submit_button("Create account" if is_sign_up else "Sign in")

    if not submitted:
        return

    backend = get_backend()
    try:
        if is_sign_up:
            session = auth.sign_up(backend, email, password)
            if session is None:
                st.success("Check your inbox to confirm your email, then sign in.")
                return
        else:
            auth.sign_in(backend, email, password)
    except ValidationError as e:
        st.error(str(e))
        return
    except BackendError as e:
        logger.warning("Authentication failed: %s", e)
        st.error(auth.describe_error(e))
        return
    st.session_state.nav_target = 'home'
    st.rerun()

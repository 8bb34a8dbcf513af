"""
Streamlit login page.

Role, email and password; on success the app lands on the dashboard for the
server-reported role and the page reruns.
"""

import streamlit as st

from taskdesk.models import Role
from taskdesk.ui.common import get_app, run


def show_login():
    """Render the login page and handle authentication."""
    app = get_app()

    st.markdown(
        """
        <style>
        .login-header { text-align: center; padding: 2rem 0 1rem 0; }
        .login-header h1 { color: #3730a3; margin-bottom: 0.2rem; }
        .login-header p { color: #757575; font-size: 1rem; }
        </style>
        <div class="login-header">
            <h1>Welcome Back</h1>
            <p>Please sign in to your account</p>
        </div>
        """,
        unsafe_allow_html=True,
    )

    with st.form("login_form"):
        role = st.selectbox(
            "Select Role",
            [None, Role.ADMIN, Role.USER],
            format_func=lambda r: "Select a role" if r is None else r.value.title(),
        )
        email = st.text_input("Email address", placeholder="Enter your email")
        password = st.text_input("Password", type="password", placeholder="Enter your password")
        submitted = st.form_submit_button("Sign in", use_container_width=True)

    if submitted:
        with st.spinner("Signing in..."):
            route = run(app.sign_in(email, password, role, poll=False))
        if route is not None:
            st.rerun()

    if app.login.error:
        st.error(app.login.error)

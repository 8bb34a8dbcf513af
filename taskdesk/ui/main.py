"""
TaskDesk Streamlit app. Sends visitors without a session to the login form
and everyone else to the dashboard for their role.

    streamlit run taskdesk/ui/main.py

Every rerun re-reads the stored session, so a session cleared elsewhere
(another tab, an expired token) drops the visitor back to login.

  admin → admin_dashboard
  user  → user_dashboard
"""

import streamlit as st

st.set_page_config(
    page_title="TaskDesk",
    page_icon="✅",
    layout="wide",
)

from taskdesk.config import configure_logging
from taskdesk.route_guard import Route
from taskdesk.ui.common import get_app, run
from taskdesk.ui.login import show_login

configure_logging()
app = get_app()

# ── Gate: re-checked on every rerun ───────────────────
session = run(app.resume(poll=False))
if session is None:
    show_login()
    st.stop()

# ── Sidebar ───────────────────────────────────────────
st.sidebar.markdown(f"**Logged in as:** {session.profile.name or session.profile.email}")
st.sidebar.markdown(f"**Role:** {session.role.value}")
st.sidebar.divider()

if st.sidebar.button("Refresh Data", use_container_width=True):
    run(app.refresh())

if st.sidebar.button("Logout", use_container_width=True):
    run(app.logout())
    st.rerun()

# ── Route to the dashboard ────────────────────────────
if app.route is Route.ADMIN_DASHBOARD:
    from taskdesk.ui.admin_dashboard import show_admin_dashboard
    show_admin_dashboard(app)
elif app.route is Route.USER_DASHBOARD:
    from taskdesk.ui.user_dashboard import show_user_dashboard
    show_user_dashboard(app, session)

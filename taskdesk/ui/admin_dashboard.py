"""
Admin Dashboard: users, task assignment and attendance reports.

Renders AdminDashboardController state; every button calls one controller
action. The data section re-runs on the admin poll interval.

Entry point:  show_admin_dashboard(app)
"""

import pandas as pd
import streamlit as st

from taskdesk.app import TaskDeskApp
from taskdesk.controllers.admin import AdminDashboardController
from taskdesk.forms import TaskForm, UserForm
from taskdesk.models import Role
from taskdesk.ui.common import run, show_banners, status_label, sync_due


def _tasks_frame(tasks) -> pd.DataFrame:
    return pd.DataFrame([
        {
            "Title": t.title,
            "Description": t.description,
            "Assigned To": t.assigned_to.name if t.assigned_to else "",
            "Status": status_label(t.status),
            "Created At": t.created_at.date() if t.created_at else None,
        }
        for t in tasks
    ])


# ═══════════════════════════════════════════════════════
# SHOW_ADMIN_DASHBOARD: entry point
# ═══════════════════════════════════════════════════════

def show_admin_dashboard(app: TaskDeskApp):
    ctrl: AdminDashboardController = app.dashboard

    st.title("Admin Dashboard")

    @st.fragment(run_every=ctrl.poll_interval)
    def _live():
        if sync_due("admin", ctrl.poll_interval):
            run(ctrl.reload())
        show_banners(ctrl.state)
        tab_users, tab_tasks, tab_attendance = st.tabs(
            ["User Management", "Task Management", "Attendance Reports"]
        )
        with tab_users:
            _page_users(ctrl)
        with tab_tasks:
            _page_tasks(ctrl)
        with tab_attendance:
            _page_attendance(ctrl)
        if ctrl.overlay_open:
            _user_tasks_overlay(ctrl)

    _live()


# ═══════════════════════════════════════════════════════
# TAB: USERS
# ═══════════════════════════════════════════════════════

def _page_users(ctrl: AdminDashboardController):
    st.subheader("Register New User")
    form = ctrl.state.new_user
    with st.form("register_user"):
        c1, c2 = st.columns(2)
        name = c1.text_input("Name", value=form.name)
        email = c2.text_input("Email", value=form.email)
        password = c1.text_input("Password", type="password", value=form.password)
        role = c2.selectbox("Role", [Role.USER, Role.ADMIN], format_func=lambda r: r.value.title())
        submitted = st.form_submit_button("Register User", use_container_width=True)
    if submitted:
        ctrl.state.new_user = UserForm(name=name, email=email, password=password, role=role)
        run(ctrl.register_user())
        st.rerun(scope="fragment")

    st.subheader("User List")
    users = ctrl.visible_users
    if not users:
        st.info("No users registered yet")
        return
    for user in users:
        c1, c2, c3, c4 = st.columns([3, 4, 1, 2])
        c1.write(user.name)
        c2.write(user.email)
        if c3.button("Tasks", key=f"view_{user.id}"):
            run(ctrl.view_user_tasks(user.id))
            st.rerun(scope="fragment")
        if c4.button("Delete", key=f"del_user_{user.id}", disabled=ctrl.state.delete_loading):
            run(ctrl.delete_user(user.id))
            st.rerun(scope="fragment")


# ═══════════════════════════════════════════════════════
# TAB: TASKS
# ═══════════════════════════════════════════════════════

def _page_tasks(ctrl: AdminDashboardController):
    st.subheader("Create New Task")
    users = ctrl.visible_users
    form = ctrl.state.new_task
    with st.form("create_task"):
        title = st.text_input("Title", value=form.title)
        description = st.text_area("Description", value=form.description)
        assignee = st.selectbox(
            "Assign To",
            [None] + [u.id for u in users],
            format_func=lambda uid: "Select a user" if uid is None
            else next((u.name for u in users if u.id == uid), uid),
        )
        submitted = st.form_submit_button("Create Task", use_container_width=True)
    if submitted:
        ctrl.state.new_task = TaskForm(title=title, description=description, assigned_to=assignee or "")
        run(ctrl.create_task())
        st.rerun(scope="fragment")

    st.subheader("Task List")
    if ctrl.state.tasks:
        st.dataframe(_tasks_frame(ctrl.state.tasks), width="stretch", hide_index=True)
    else:
        st.info("No tasks assigned yet")


# ═══════════════════════════════════════════════════════
# TAB: ATTENDANCE
# ═══════════════════════════════════════════════════════

def _page_attendance(ctrl: AdminDashboardController):
    st.subheader("Attendance Reports")
    day = st.date_input("Date", value=ctrl.state.selected_date)
    if day != ctrl.state.selected_date:
        ctrl.select_date(day)

    c1, c2, c3 = st.columns(3)
    if c1.button("Mark My Attendance", disabled=ctrl.state.loading):
        run(ctrl.mark_attendance())
        st.rerun(scope="fragment")
    if c2.button("Generate Report"):
        run(ctrl.generate_attendance())
        st.rerun(scope="fragment")
    if c3.button("Clear All Records"):
        run(ctrl.clear_attendance())
        st.rerun(scope="fragment")

    if ctrl.state.attendance:
        df = pd.DataFrame([
            {"Employee": r.display_name, "Date": r.date, "Status": r.status.value}
            for r in ctrl.state.attendance
        ])
        st.dataframe(df, width="stretch", hide_index=True)
    else:
        st.info("No attendance records for this date")


# ═══════════════════════════════════════════════════════
# OVERLAY: ONE USER'S TASKS
# ═══════════════════════════════════════════════════════

def _user_tasks_overlay(ctrl: AdminDashboardController):
    user_id = ctrl.state.overlay_user_id
    name = next((u.name for u in ctrl.state.users if u.id == user_id), user_id)
    with st.expander(f"Tasks for {name}", expanded=True):
        if not ctrl.state.overlay_tasks:
            st.info("No tasks assigned to this user")
        for task in ctrl.state.overlay_tasks:
            c1, c2, c3 = st.columns([5, 2, 1])
            c1.markdown(f"**{task.title}**: {task.description}")
            c2.write(status_label(task.status))
            if c3.button("Delete", key=f"del_task_{task.id}"):
                run(ctrl.delete_task(user_id, task.id))
                st.rerun(scope="fragment")
        if st.button("Close", key="close_overlay"):
            ctrl.close_user_tasks()
            st.rerun(scope="fragment")

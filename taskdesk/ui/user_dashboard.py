"""
User Dashboard: overview counts, own tasks, own attendance.

Entry point:  show_user_dashboard(app, session)
"""

import pandas as pd
import streamlit as st

from taskdesk.app import TaskDeskApp
from taskdesk.controllers.user import UserDashboardController
from taskdesk.models import Session, TaskStatus
from taskdesk.ui.common import run, show_banners, status_label, sync_due


def show_user_dashboard(app: TaskDeskApp, session: Session):
    ctrl: UserDashboardController = app.dashboard
    profile = session.profile

    st.title("User Dashboard")
    st.caption(f"Welcome, {profile.name or profile.email}")

    @st.fragment(run_every=ctrl.poll_interval)
    def _live():
        if sync_due("user", ctrl.poll_interval):
            run(ctrl.reload())
        show_banners(ctrl.state)
        tab_overview, tab_tasks, tab_attendance = st.tabs(["Overview", "My Tasks", "Attendance"])
        with tab_overview:
            _page_overview(ctrl)
        with tab_tasks:
            _page_tasks(ctrl)
        with tab_attendance:
            _page_attendance(ctrl)

    _live()


def _page_overview(ctrl: UserDashboardController):
    counts = ctrl.task_counts
    m1, m2, m3, m4 = st.columns(4)
    m1.metric("Pending Tasks", counts[TaskStatus.PENDING])
    m2.metric("Accepted", counts[TaskStatus.ACCEPTED])
    m3.metric("In Progress", counts[TaskStatus.IN_PROGRESS])
    m4.metric("Completed", counts[TaskStatus.COMPLETED])


def _page_tasks(ctrl: UserDashboardController):
    if not ctrl.state.tasks:
        st.info("No tasks assigned yet")
        return

    for task in ctrl.state.tasks:
        c1, c2, c3, c4 = st.columns([5, 2, 2, 2])
        c1.markdown(f"**{task.title}**  \n{task.description}")
        c2.write(status_label(task.status))
        c3.write(task.assigned_by.name if task.assigned_by and task.assigned_by.name else "Unknown")
        if task.status is TaskStatus.PENDING:
            if c4.button("Accept", key=f"accept_{task.id}", disabled=ctrl.state.loading):
                run(ctrl.accept_task(task.id))
                st.rerun(scope="fragment")
        elif task.status is TaskStatus.ACCEPTED:
            if c4.button("Complete", key=f"complete_{task.id}", disabled=ctrl.state.loading):
                ctrl.begin_completion(task.id)
                st.rerun(scope="fragment")

    # ── Completion modal ──
    if ctrl.state.selected_task_id:
        with st.form("complete_task"):
            notes = st.text_area("Completion Notes", value=ctrl.state.completion_notes, height=120)
            c1, c2 = st.columns(2)
            cancel = c1.form_submit_button("Cancel")
            submit = c2.form_submit_button("Complete Task")
        if cancel:
            ctrl.cancel_completion()
            st.rerun(scope="fragment")
        if submit:
            run(ctrl.complete_task(notes=notes))
            st.rerun(scope="fragment")


def _page_attendance(ctrl: UserDashboardController):
    day = st.date_input("Date", value=ctrl.state.selected_date, key="user_attendance_date")
    if st.button("Mark Attendance"):
        run(ctrl.mark_attendance(day))
        st.rerun(scope="fragment")

    if ctrl.state.attendance:
        df = pd.DataFrame([
            {"Date": r.date, "Status": r.status.value} for r in ctrl.state.attendance
        ])
        st.dataframe(df, width="stretch", hide_index=True)
    else:
        st.info("No attendance records yet")

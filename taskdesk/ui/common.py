"""
Helpers shared by the Streamlit pages.
"""

import asyncio
import time

import streamlit as st

from taskdesk.app import TaskDeskApp
from taskdesk.controllers.base import ViewState


def run(coro):
    """Drive one controller coroutine to completion from a Streamlit rerun."""
    return asyncio.run(coro)


def get_app() -> TaskDeskApp:
    """One TaskDeskApp per browser session, backed by the durable store."""
    if "taskdesk_app" not in st.session_state:
        st.session_state.taskdesk_app = TaskDeskApp()
    return st.session_state.taskdesk_app


def show_banners(state: ViewState) -> None:
    if state.error:
        st.error(state.error)
    if state.success:
        st.success(state.success)
    if state.loading:
        st.info("Loading...")


def status_label(status) -> str:
    return str(getattr(status, "value", status)).replace("_", " ")


def sync_due(name: str, interval: float) -> bool:
    """True once per `interval` seconds for the named view.

    Button reruns skip the poll so an action's banner is not wiped by an
    immediate reload.
    """
    key = f"last_sync_{name}"
    now = time.monotonic()
    last = st.session_state.get(key)
    if last is None or now - last >= interval:
        st.session_state[key] = now
        return True
    return False

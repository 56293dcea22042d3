import sqlite3

import pandas as pd
import streamlit as st

from jerp.db import add_task, list_clients, list_items, list_tasks
from jerp.models import Profile

RECENT_ITEM_LIMIT = 5


def _render_tasks(conn: sqlite3.Connection) -> None:
    st.markdown("### Tasks")
    with st.form("add_task_form", clear_on_submit=True):
        task_name = st.text_input("New task", placeholder="e.g. Polish ring for Mehta order")
        add_submit = st.form_submit_button("Add task")

    if add_submit:
        if task_name.strip():
            add_task(conn, task_name.strip())
            st.rerun()
        else:
            st.error("Task name is required.")

    tasks = list_tasks(conn)
    if not tasks:
        st.caption("No tasks yet.")
    for task in tasks:
        st.write(f"• {task['name']}")


def render(conn: sqlite3.Connection, profile: Profile) -> None:
    st.subheader(f"🏠 Welcome back, {profile.name}")

    items = list_items(conn)
    clients = list_clients(conn)
    total_fine = sum(float(item["fine"]) for item in items)

    c1, c2, c3 = st.columns(3)
    c1.metric("Clients", len(clients))
    c2.metric("Items", len(items))
    c3.metric("Total fine", f"{total_fine:,.2f}")

    st.markdown("### Recent items")
    if not items:
        st.info("No items yet. Add your first item from the Items page.")
    else:
        recent_df = pd.DataFrame(items[:RECENT_ITEM_LIMIT])[
            ["item_id", "name", "client_name", "carate", "net_weight", "fine"]
        ]
        st.dataframe(recent_df, width="stretch", hide_index=True)

    _render_tasks(conn)

import sqlite3

import pandas as pd
import streamlit as st

from jerp.actions import create_client_action, get_clients_action
from jerp.search import filter_clients

DISPLAY_COLUMNS = ["client_id", "name", "phone", "email", "created_at"]


def _render_add_form(conn: sqlite3.Connection) -> None:
    with st.form("add_client_form", clear_on_submit=False):
        name = st.text_input("Name *", placeholder="Enter client name")
        phone = st.text_input("Phone *", placeholder="+91 98765 43210")
        email = st.text_input("Email", placeholder="client@example.com (optional)")
        submitted = st.form_submit_button("Add client", type="primary")

    if not submitted:
        return

    result = create_client_action(conn, {"name": name, "phone": phone, "email": email})
    if result.success:
        st.toast(f"Client \"{result.data['name']}\" added. ID: {result.data['client_id']}", icon="✅")
        st.rerun()
    elif result.field_errors:
        for message in result.field_errors.values():
            st.error(message)
    else:
        st.error(result.error)


def render(conn: sqlite3.Connection) -> None:
    st.subheader("👥 Clients")

    list_tab, add_tab = st.tabs(["Clients", "Add client"])

    with list_tab:
        result = get_clients_action(conn)
        if not result.success:
            st.error(result.error)
        else:
            search_text = st.text_input("Search clients", placeholder="Search by name or email...")
            clients = filter_clients(result.data, search_text)
            if not clients:
                st.info("No clients found")
            else:
                clients_df = pd.DataFrame([dict(row) for row in clients])[DISPLAY_COLUMNS]
                clients_df["email"] = clients_df["email"].fillna("")
                clients_df["created_at"] = pd.to_datetime(
                    clients_df["created_at"], errors="coerce", utc=True
                ).dt.strftime("%Y-%m-%d")
                st.dataframe(clients_df, width="stretch", hide_index=True)
                st.download_button(
                    "Export clients CSV",
                    data=clients_df.to_csv(index=False).encode("utf-8"),
                    file_name="clients_export.csv",
                    mime="text/csv",
                )

    with add_tab:
        _render_add_form(conn)

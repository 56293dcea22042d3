import sqlite3

import streamlit as st

from jerp.actions import onboarding_action


def render(conn: sqlite3.Connection) -> None:
    st.subheader("Welcome to JERP")
    st.caption("Let's get you set up with your account")

    with st.form("onboarding_form"):
        name = st.text_input("Full name", placeholder="Enter your name")
        phone_number = st.text_input("Phone number", placeholder="+91 98765 43210")
        submitted = st.form_submit_button("Complete setup", type="primary")

    if not submitted:
        return

    result = onboarding_action(conn, {"name": name, "phone_number": phone_number})
    if result.success:
        st.rerun()
    elif result.field_errors:
        for message in result.field_errors.values():
            st.error(message)
    else:
        st.error(result.error)

from pathlib import Path

import streamlit as st
from dotenv import load_dotenv

from jerp.auth import authenticate_user, create_user, delete_user_account, update_user_password
from jerp.config import load_config
from jerp.db import delete_user_data, get_auth_connection, get_profile, get_user_connection, init_db
from jerp.logging_config import setup_logging
from jerp.ui import camera, clients, home, items, onboarding, theme


# Load environment variables from local .env file.
load_dotenv(dotenv_path=Path(__file__).parent / ".env")

config = load_config()
setup_logging(config.log_dir, config.log_level)

st.set_page_config(page_title="JERP", page_icon="💍", layout="wide")

PAGES = {
    "Home": home,
    "Items": items,
    "Clients": clients,
    "Camera": camera,
}


def _render_auth_gate() -> bool:
    if "auth_username" not in st.session_state:
        st.session_state["auth_username"] = None

    if st.session_state["auth_username"]:
        return True

    st.markdown("## Enterprise Resource Planning, Simplified")
    st.caption("Keep your clients, pieces, and valuations in one place.")

    auth_conn = get_auth_connection()
    login_tab, signup_tab = st.tabs(["Sign in", "Get started"])

    with login_tab:
        with st.form("login_form"):
            login_username = st.text_input("Username", key="login_username")
            login_password = st.text_input("Password", type="password", key="login_password")
            login_submit = st.form_submit_button("Sign in", type="primary")
        if login_submit:
            authenticated_username = authenticate_user(auth_conn, login_username, login_password)
            if authenticated_username:
                st.session_state["auth_username"] = authenticated_username
                st.rerun()
            else:
                st.error("Invalid username or password.")

    with signup_tab:
        with st.form("signup_form"):
            signup_username = st.text_input("Username", key="signup_username")
            signup_password = st.text_input("Password", type="password", key="signup_password")
            signup_submit = st.form_submit_button("Create account", type="primary")
        if signup_submit:
            created, message = create_user(auth_conn, signup_username, signup_password)
            if created:
                st.session_state["auth_username"] = message
                st.rerun()
            else:
                st.error(message)

    st.caption("© 2026 JERP. All rights reserved.")
    return False


def _render_account_sidebar(username: str) -> None:
    st.sidebar.caption(f"Signed in: {username}")

    with st.sidebar.expander("Security"):
        with st.form("change_password_form"):
            current_password = st.text_input("Current password", type="password")
            new_password = st.text_input("New password", type="password")
            confirm_password = st.text_input("Confirm new password", type="password")
            change_password_submit = st.form_submit_button("Change password")

        if change_password_submit:
            if new_password != confirm_password:
                st.sidebar.error("New passwords do not match.")
            else:
                updated, message = update_user_password(
                    get_auth_connection(),
                    username,
                    current_password,
                    new_password,
                )
                if updated:
                    st.sidebar.success(message)
                else:
                    st.sidebar.error(message)

        st.caption("Danger zone")
        with st.form("delete_account_form"):
            delete_password = st.text_input("Password to confirm", type="password")
            delete_confirmation = st.text_input("Type DELETE to confirm")
            delete_submit = st.form_submit_button("Delete account")

        if delete_submit:
            if delete_confirmation.strip().upper() != "DELETE":
                st.sidebar.error("Type DELETE to confirm account removal.")
            else:
                deleted, message = delete_user_account(get_auth_connection(), username, delete_password)
                if deleted:
                    delete_user_data(username)
                    st.session_state.clear()
                    st.rerun()
                else:
                    st.sidebar.error(message)

    if st.sidebar.button("Log out"):
        st.session_state.clear()
        st.rerun()


def main() -> None:
    st.title("💍 JERP")

    if not _render_auth_gate():
        return

    username = str(st.session_state["auth_username"])
    _render_account_sidebar(username)

    conn = get_user_connection(username)
    init_db(conn)

    profile = get_profile(conn)
    if profile is None or not profile.onboarding_completed:
        onboarding.render(conn)
        return

    selected_theme = theme.render_switcher(conn, profile.theme)
    theme.apply_theme(selected_theme)

    page = st.sidebar.radio("Navigate", list(PAGES))
    if page == "Home":
        home.render(conn, profile)
    else:
        PAGES[page].render(conn)


if __name__ == "__main__":
    main()

import sqlite3

import streamlit as st

from jerp.db import THEMES, save_theme

THEME_LABELS = {"light": "☀️ Light", "dark": "🌙 Dark", "system": "🖥️ System"}

_PALETTES = {
    "light": {"background": "#ffffff", "sidebar": "#f3f4f6", "text": "#111827", "accent": "#4f46e5"},
    "dark": {"background": "#111827", "sidebar": "#1f2937", "text": "#f9fafb", "accent": "#818cf8"},
}


def resolve_theme(preference: str, system_theme: str | None) -> str:
    """Turns the stored preference into the palette to draw with; `system` follows the browser."""
    if preference in ("light", "dark"):
        return preference
    return system_theme if system_theme in ("light", "dark") else "light"


def _browser_theme() -> str | None:
    context_theme = getattr(st.context, "theme", None)
    return getattr(context_theme, "type", None)


def apply_theme(preference: str) -> None:
    browser_theme = _browser_theme()
    # Unknown browser theme: leave Streamlit's own choice alone.
    if preference == "system" and browser_theme is None:
        return
    palette = _PALETTES[resolve_theme(preference, browser_theme)]
    st.markdown(
        f"""
        <style>
        .stApp {{ background-color: {palette["background"]}; color: {palette["text"]}; }}
        [data-testid="stSidebar"] {{ background-color: {palette["sidebar"]}; }}
        .stApp h1, .stApp h2, .stApp h3, .stApp p, .stApp label, .stApp span {{ color: {palette["text"]}; }}
        [data-testid="stMetricValue"] {{ color: {palette["accent"]}; }}
        </style>
        """,
        unsafe_allow_html=True,
    )


def render_switcher(conn: sqlite3.Connection, current: str) -> str:
    selected = st.sidebar.radio(
        "Theme",
        options=list(THEMES),
        index=list(THEMES).index(current) if current in THEMES else THEMES.index("system"),
        format_func=lambda theme: THEME_LABELS[theme],
        horizontal=True,
    )
    if selected != current:
        save_theme(conn, selected)
    return selected

import logging
import sqlite3
import time

import streamlit as st

from jerp.db import add_photo, delete_photo, list_photos

logger = logging.getLogger(__name__)


def _widget_key(name: str) -> str:
    return f"{name}_{st.session_state.get('camera_generation', 0)}"


def _pending_photo():
    captured = st.session_state.get(_widget_key("camera_capture"))
    if captured is not None:
        return f"photo-{time.time_ns() // 1_000_000}.jpg", captured
    uploaded = st.session_state.get(_widget_key("camera_upload"))
    if uploaded is not None:
        return uploaded.name, uploaded
    return None, None


def render(conn: sqlite3.Connection) -> None:
    st.subheader("📷 Camera")
    st.caption("Capture or upload photos of pieces and keep them in your gallery.")

    capture_tab, upload_tab = st.tabs(["Camera", "Upload"])
    with capture_tab:
        st.camera_input("Take a photo", key=_widget_key("camera_capture"))
    with upload_tab:
        st.file_uploader("Upload a photo", type=["png", "jpg", "jpeg", "webp"], key=_widget_key("camera_upload"))

    name, pending = _pending_photo()
    if pending is not None:
        st.image(pending.getvalue(), caption=name, width=320)
        if st.button("Save photo", type="primary"):
            add_photo(conn, name, pending.type or "image/jpeg", pending.getvalue())
            logger.info("Saved photo %s", name)
            # Fresh widget keys empty the capture and upload widgets.
            st.session_state["camera_generation"] = st.session_state.get("camera_generation", 0) + 1
            st.toast("Photo saved.")
            st.rerun()

    st.divider()
    st.markdown("### Gallery")
    photos = list_photos(conn)
    if not photos:
        st.info("No photos yet.")
        return

    columns = st.columns(3)
    for index, photo in enumerate(photos):
        with columns[index % 3]:
            st.image(photo["data"], caption=photo["name"], width="stretch")
            download_col, delete_col = st.columns(2)
            download_col.download_button(
                "Download",
                data=photo["data"],
                file_name=photo["name"],
                mime=photo["mime"],
                key=f"download_photo_{photo['id']}",
            )
            if delete_col.button("Delete", key=f"delete_photo_{photo['id']}"):
                delete_photo(conn, int(photo["id"]))
                st.rerun()

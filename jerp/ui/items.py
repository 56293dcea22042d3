import sqlite3
from datetime import date

import pandas as pd
import streamlit as st

from jerp.actions import delete_item_action, get_item_by_id_action, get_items_action
from jerp.search import filter_items
from jerp.ui.item_editor import render_item_editor, reset_editor

CSV_COLUMNS = [
    "item_id",
    "name",
    "client_name",
    "date",
    "carate",
    "gross_weight",
    "net_weight",
    "percentage",
    "making",
    "fine",
    "description",
]


def _format_date(value: str) -> str:
    try:
        return date.fromisoformat(value).strftime("%d %b %Y")
    except (TypeError, ValueError):
        return value or "-"


def _render_card(item: dict) -> None:
    with st.container(border=True):
        st.markdown(f"**{item['name']}**")
        if item["description"]:
            st.caption(item["description"])
        left, right = st.columns(2)
        left.write(f"Carate: **{item['carate']}**")
        right.write(f"Date: **{_format_date(item['date'])}**")
        left.write(f"Gross: **{item['gross_weight']:.3f}g**")
        right.write(f"Net: **{item['net_weight']:.3f}g**")
        left.write(f"Diamonds: **{len(item['diamonds'])}**")
        right.write(f"Stones: **{len(item['stones'])}**")
        if item["client_name"]:
            st.caption(f"Client: {item['client_name']} · {item['client_phone']}")
        st.markdown(f"### {item['fine']:.2f}")


def _render_list(conn: sqlite3.Connection) -> None:
    result = get_items_action(conn)
    if not result.success:
        st.error(result.error)
        return

    search_text = st.text_input("Search items", placeholder="Search items...")
    items = filter_items(result.data, search_text)
    if not items:
        st.info("No items found")
        return

    columns = st.columns(3)
    for index, item in enumerate(items):
        with columns[index % 3]:
            _render_card(item)

    export_df = pd.DataFrame(items)
    csv_bytes = export_df[CSV_COLUMNS].to_csv(index=False).encode("utf-8")
    st.download_button(
        "Export items CSV",
        data=csv_bytes,
        file_name="items_export.csv",
        mime="text/csv",
    )

    st.divider()
    st.markdown("### Edit item")
    selected_id = st.selectbox(
        "Select item to edit/delete",
        options=[int(item["id"]) for item in items],
        format_func=lambda pk: next(f"{i['item_id']} - {i['name']}" for i in items if i["id"] == pk),
    )
    detail = get_item_by_id_action(conn, selected_id)
    if not detail.success:
        st.error(detail.error)
        return

    prefix = f"edit_item_{selected_id}"
    if render_item_editor(conn, prefix, existing=detail.data):
        st.rerun()

    if st.button("Delete item", type="secondary"):
        deleted = delete_item_action(conn, selected_id)
        if deleted.success:
            reset_editor(prefix)
            st.toast("Item deleted.")
            st.rerun()
        else:
            st.error(deleted.error)


def render(conn: sqlite3.Connection) -> None:
    st.subheader("📦 Items")

    list_tab, add_tab = st.tabs(["Items", "Add item"])

    with list_tab:
        _render_list(conn)

    with add_tab:
        st.caption("Create a new item by filling in the required information below.")
        if render_item_editor(conn, "new_item"):
            st.rerun()

"""
Item entry/edit widgets.

Widgets are live (not inside `st.form`) so every change fires a callback that
routes the value through `ItemForm`, which keeps net weight and fine current.
All state for one editor lives in session state under a shared key prefix.
"""

import sqlite3
import time
from datetime import date
from typing import Any

import streamlit as st

from jerp.actions import create_item_action, get_clients_action, update_item_action
from jerp.item_form import NUMERIC_FIELDS, ItemForm
from jerp.validation import CARATE_OPTIONS

IMAGE_TYPES = ["png", "jpg", "jpeg", "webp"]


def _key(prefix: str, name: str) -> str:
    return f"{prefix}_{name}"


def _form(prefix: str) -> ItemForm:
    return st.session_state[_key(prefix, "form")]


def reset_editor(prefix: str) -> None:
    for key in [key for key in st.session_state.keys() if str(key).startswith(f"{prefix}_")]:
        del st.session_state[key]


def _ensure_state(prefix: str, existing: dict[str, Any] | None) -> ItemForm:
    form_key = _key(prefix, "form")
    if form_key not in st.session_state:
        form = ItemForm.from_record(existing) if existing else ItemForm()
        st.session_state[form_key] = form
        st.session_state[_key(prefix, "errors")] = {}
        for field_name in ("name", "gross_weight", "percentage", "making", "description"):
            st.session_state[_key(prefix, field_name)] = getattr(form, field_name)
        st.session_state[_key(prefix, "carate")] = form.carate
        st.session_state[_key(prefix, "client")] = form.client_id
        st.session_state[_key(prefix, "date")] = date.fromisoformat(form.date) if form.date else None
    form = _form(prefix)
    # Derived fields are display-only; refresh them before the widgets are drawn.
    st.session_state[_key(prefix, "net_weight")] = form.net_weight
    st.session_state[_key(prefix, "fine")] = form.fine
    return form


def _clear_error(prefix: str, field_name: str) -> None:
    st.session_state[_key(prefix, "errors")].pop(field_name, None)


def _on_field_change(prefix: str, field_name: str) -> None:
    form = _form(prefix)
    form.set_field(field_name, st.session_state[_key(prefix, field_name)])
    if field_name in NUMERIC_FIELDS:
        st.session_state[_key(prefix, field_name)] = getattr(form, field_name)
    _clear_error(prefix, field_name)


def _on_date_change(prefix: str) -> None:
    picked = st.session_state[_key(prefix, "date")]
    _form(prefix).set_field("date", picked.isoformat() if picked else "")
    _clear_error(prefix, "date")


def _on_client_change(prefix: str) -> None:
    _form(prefix).set_client(st.session_state[_key(prefix, "client")])


def _inclusion_key(prefix: str, kind: str, inclusion_id: str, field_name: str) -> str:
    return _key(prefix, f"{kind}_{inclusion_id}_{field_name}")


def _on_inclusion_change(prefix: str, kind: str, inclusion_id: str, field_name: str) -> None:
    widget_key = _inclusion_key(prefix, kind, inclusion_id, field_name)
    form = _form(prefix)
    form.update_inclusion(kind, inclusion_id, field_name, st.session_state[widget_key])
    for row in form.inclusions(kind):
        if row.id == inclusion_id:
            st.session_state[widget_key] = getattr(row, field_name)


def _on_add_inclusion(prefix: str, kind: str) -> None:
    _form(prefix).add_inclusion(kind)


def _on_remove_inclusion(prefix: str, kind: str, inclusion_id: str) -> None:
    _form(prefix).remove_inclusion(kind, inclusion_id)
    for field_name in ("weight", "pieces", "rate"):
        st.session_state.pop(_inclusion_key(prefix, kind, inclusion_id, field_name), None)


def _on_image_upload(prefix: str, source: str) -> None:
    uploaded = st.session_state.get(_key(prefix, source))
    if uploaded is None:
        return
    name = uploaded.name
    if source == "camera":
        name = f"photo-{time.time_ns() // 1_000_000}.jpg"
    _form(prefix).set_image(name, uploaded.type or "image/jpeg", uploaded.getvalue())


def _on_remove_image(prefix: str) -> None:
    _form(prefix).clear_image()


def _show_error(errors: dict[str, str], field_name: str) -> None:
    if field_name in errors:
        st.caption(f":red[{errors[field_name]}]")


def _render_inclusions(prefix: str, form: ItemForm, kind: str, label: str) -> None:
    header, button = st.columns([4, 1])
    header.markdown(f"**{label}**")
    button.button(
        "Add",
        key=_key(prefix, f"add_{kind}"),
        on_click=_on_add_inclusion,
        args=(prefix, kind),
        width="stretch",
    )

    rows = form.inclusions(kind)
    if not rows:
        st.caption(f"No {label.lower()} added.")
        return

    for row in rows:
        weight_col, pieces_col, rate_col, remove_col = st.columns([2, 2, 2, 1])
        for column, field_name, placeholder in (
            (weight_col, "weight", "Weight (ct)"),
            (pieces_col, "pieces", "Pieces"),
            (rate_col, "rate", "Rate"),
        ):
            widget_key = _inclusion_key(prefix, kind, row.id, field_name)
            if widget_key not in st.session_state:
                st.session_state[widget_key] = getattr(row, field_name)
            column.text_input(
                placeholder,
                key=widget_key,
                placeholder=placeholder,
                label_visibility="collapsed",
                on_change=_on_inclusion_change,
                args=(prefix, kind, row.id, field_name),
            )
        remove_col.button(
            "✕",
            key=_key(prefix, f"remove_{kind}_{row.id}"),
            on_click=_on_remove_inclusion,
            args=(prefix, kind, row.id),
        )


def render_item_editor(
    conn: sqlite3.Connection,
    prefix: str,
    existing: dict[str, Any] | None = None,
) -> bool:
    """Draws the editor. Returns True once the item has been saved."""
    form = _ensure_state(prefix, existing)
    errors: dict[str, str] = st.session_state[_key(prefix, "errors")]

    clients_result = get_clients_action(conn, order_by_name=True)
    if not clients_result.success:
        st.warning(clients_result.error)
    clients = {int(row["id"]): row for row in clients_result.data}

    st.text_input(
        "Item name *",
        key=_key(prefix, "name"),
        placeholder="Enter item name",
        on_change=_on_field_change,
        args=(prefix, "name"),
    )
    _show_error(errors, "name")

    client_options: list[int | None] = [None, *clients.keys()]
    if st.session_state[_key(prefix, "client")] not in client_options:
        st.session_state[_key(prefix, "client")] = None
    st.selectbox(
        "Client",
        options=client_options,
        key=_key(prefix, "client"),
        format_func=lambda pk: "No client"
        if pk is None
        else f"{clients[pk]['name']} · {clients[pk]['phone']} ({clients[pk]['client_id']})",
        on_change=_on_client_change,
        args=(prefix,),
    )

    col1, col2 = st.columns(2)
    with col1:
        st.date_input("Date *", key=_key(prefix, "date"), on_change=_on_date_change, args=(prefix,))
        _show_error(errors, "date")
    with col2:
        carate_options = ["", *CARATE_OPTIONS]
        if form.carate not in carate_options:
            carate_options.append(form.carate)
        st.selectbox(
            "Carate *",
            options=carate_options,
            key=_key(prefix, "carate"),
            format_func=lambda value: value or "Select carate",
            on_change=_on_field_change,
            args=(prefix, "carate"),
        )
        _show_error(errors, "carate")

    st.text_input(
        "Gross weight (g) *",
        key=_key(prefix, "gross_weight"),
        placeholder="0.000",
        on_change=_on_field_change,
        args=(prefix, "gross_weight"),
    )
    _show_error(errors, "gross_weight")

    _render_inclusions(prefix, form, "diamonds", "Diamonds")
    _render_inclusions(prefix, form, "stones", "Stones")

    col3, col4 = st.columns(2)
    with col3:
        st.text_input(
            "Net weight (g) *",
            key=_key(prefix, "net_weight"),
            disabled=True,
            help="Gross weight plus diamond and stone carats at 0.2 g per carat.",
        )
        _show_error(errors, "net_weight")
        st.text_input(
            "Making",
            key=_key(prefix, "making"),
            placeholder="0.00",
            on_change=_on_field_change,
            args=(prefix, "making"),
        )
        _show_error(errors, "making")
    with col4:
        st.text_input(
            "Percentage (%) *",
            key=_key(prefix, "percentage"),
            placeholder="0.00",
            on_change=_on_field_change,
            args=(prefix, "percentage"),
        )
        _show_error(errors, "percentage")
        st.text_input(
            "Fine *",
            key=_key(prefix, "fine"),
            disabled=True,
            help="Net weight scaled by the percentage.",
        )
        _show_error(errors, "fine")

    st.text_area(
        "Description",
        key=_key(prefix, "description"),
        placeholder="Enter item description (optional)",
        on_change=_on_field_change,
        args=(prefix, "description"),
    )

    st.markdown("**Image**")
    if form.image_data:
        st.image(form.image_data, caption=form.image_name or "Item image", width=220)
        st.button("Remove image", key=_key(prefix, "remove_image"), on_click=_on_remove_image, args=(prefix,))
    else:
        upload_tab, camera_tab = st.tabs(["Upload", "Camera"])
        with upload_tab:
            st.file_uploader(
                "Upload image",
                type=IMAGE_TYPES,
                key=_key(prefix, "upload"),
                on_change=_on_image_upload,
                args=(prefix, "upload"),
            )
        with camera_tab:
            st.camera_input(
                "Take a photo",
                key=_key(prefix, "camera"),
                on_change=_on_image_upload,
                args=(prefix, "camera"),
            )

    submit_col, cancel_col = st.columns([1, 1])
    submit_label = "Save changes" if existing else "Add item"
    submitted = submit_col.button(submit_label, type="primary", key=_key(prefix, "submit"), width="stretch")
    cancelled = cancel_col.button("Cancel", key=_key(prefix, "cancel"), width="stretch")

    if cancelled:
        reset_editor(prefix)
        st.rerun()

    if not submitted:
        return False

    payload = form.to_payload()
    if existing:
        result = update_item_action(conn, int(existing["id"]), payload)
    else:
        result = create_item_action(conn, payload)

    if not result.success:
        st.session_state[_key(prefix, "errors")] = result.field_errors
        if result.field_errors:
            st.toast("Please fix the validation errors", icon="⚠️")
            st.rerun()
        st.error(result.error)
        return False

    saved = result.data
    st.toast(f"Item \"{saved['name']}\" saved. ID: {saved['item_id']}", icon="✅")
    reset_editor(prefix)
    return True

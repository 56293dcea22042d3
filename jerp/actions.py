"""
Validate-then-persist operations used by the Streamlit pages.

Each action returns an `ActionResult` instead of raising so pages can show a
message next to the form. Database failures are logged here with the full
traceback and reported to the user with a short generic message.
"""

import logging
import sqlite3
from dataclasses import dataclass, field
from typing import Any

from jerp import db
from jerp.models import Inclusion
from jerp.validation import ITEM_FIELDS, validate_client, validate_item, validate_onboarding
from jerp.valuation import parse_decimal

logger = logging.getLogger(__name__)


@dataclass
class ActionResult:
    success: bool
    data: Any = None
    error: str | None = None
    field_errors: dict[str, str] = field(default_factory=dict)


def _invalid(field_errors: dict[str, str]) -> ActionResult:
    first_message = next(iter(field_errors.values()))
    return ActionResult(success=False, error=first_message, field_errors=field_errors)


def onboarding_action(conn: sqlite3.Connection, data: dict[str, Any]) -> ActionResult:
    errors = validate_onboarding(data)
    if errors:
        return _invalid(errors)

    try:
        db.save_profile(conn, data["name"], data["phone_number"])
    except sqlite3.Error:
        logger.exception("Failed to save onboarding profile")
        return ActionResult(success=False, error="Failed to save user data to database")

    logger.info("Onboarding completed")
    return ActionResult(success=True, data=db.get_profile(conn))


def create_client_action(conn: sqlite3.Connection, data: dict[str, Any]) -> ActionResult:
    errors = validate_client(data)
    if errors:
        return _invalid(errors)

    try:
        client_pk = db.add_client(
            conn,
            {"name": data["name"], "phone": data["phone"], "email": data.get("email") or None},
        )
        created = db.get_client(conn, client_pk)
    except sqlite3.Error:
        logger.exception("Failed to create client %r", data.get("name"))
        return ActionResult(success=False, error="Failed to create client")

    logger.info("Created client %s", created["client_id"] if created else client_pk)
    return ActionResult(success=True, data=created)


def get_clients_action(conn: sqlite3.Connection, order_by_name: bool = False) -> ActionResult:
    try:
        return ActionResult(success=True, data=db.list_clients(conn, order_by_name=order_by_name))
    except sqlite3.Error:
        logger.exception("Failed to fetch clients")
        return ActionResult(success=False, data=[], error="Failed to fetch clients")


def _optional_number(raw: Any) -> float | None:
    text = "" if raw is None else str(raw).strip()
    if not text:
        return None
    return float(parse_decimal(text))


def _clean_inclusions(rows: Any) -> list[dict[str, str]]:
    cleaned = []
    for row in rows or []:
        inclusion = row if isinstance(row, Inclusion) else Inclusion.from_dict(dict(row))
        cleaned.append(inclusion.to_dict())
    return cleaned


def _item_columns(payload: dict[str, Any]) -> dict[str, Any]:
    """Converts form strings into the typed column values stored for an item."""
    converters = {
        "gross_weight": lambda value: float(parse_decimal(value)),
        "net_weight": lambda value: float(parse_decimal(value)),
        "percentage": lambda value: float(parse_decimal(value)),
        "fine": lambda value: float(parse_decimal(value)),
        "making": _optional_number,
        "description": lambda value: value or None,
        "client_id": lambda value: int(value) if value not in (None, "") else None,
        "diamonds": _clean_inclusions,
        "stones": _clean_inclusions,
    }
    columns: dict[str, Any] = {}
    for column in db.ITEM_COLUMNS:
        if column not in payload:
            continue
        convert = converters.get(column)
        columns[column] = convert(payload[column]) if convert else payload[column]
    return columns


def create_item_action(conn: sqlite3.Connection, payload: dict[str, Any]) -> ActionResult:
    errors = validate_item(payload)
    if errors:
        return _invalid(errors)

    columns = _item_columns(payload)
    columns.setdefault("diamonds", [])
    columns.setdefault("stones", [])
    try:
        item_pk = db.add_item(conn, columns)
        created = db.get_item(conn, item_pk)
    except sqlite3.Error as exc:
        logger.exception("Failed to create item %r", payload.get("name"))
        return ActionResult(success=False, error=f"Failed to create item: {exc}")

    logger.info("Created item %s", created["item_id"] if created else item_pk)
    return ActionResult(success=True, data=created)


def get_items_action(conn: sqlite3.Connection) -> ActionResult:
    try:
        return ActionResult(success=True, data=db.list_items(conn))
    except sqlite3.Error:
        logger.exception("Failed to fetch items")
        return ActionResult(success=False, data=[], error="Failed to fetch items")


def get_item_by_id_action(conn: sqlite3.Connection, item_pk: int) -> ActionResult:
    try:
        item = db.get_item(conn, item_pk)
    except sqlite3.Error:
        logger.exception("Failed to fetch item %s", item_pk)
        return ActionResult(success=False, error="Failed to fetch item")

    if item is None:
        return ActionResult(success=False, error="Item not found")
    return ActionResult(success=True, data=item)


def update_item_action(conn: sqlite3.Connection, item_pk: int, payload: dict[str, Any]) -> ActionResult:
    """Partial update: only the keys present in `payload` are validated and written."""
    errors = validate_item(payload, fields=[key for key in ITEM_FIELDS if key in payload])
    if errors:
        return _invalid(errors)

    columns = _item_columns(payload)
    try:
        updated = db.update_item(conn, item_pk, columns)
    except sqlite3.Error as exc:
        logger.exception("Failed to update item %s", item_pk)
        return ActionResult(success=False, error=f"Failed to update item: {exc}")

    if updated is None:
        return ActionResult(success=False, error="Item not found")

    logger.info("Updated item %s (%s)", updated["item_id"], ", ".join(sorted(columns)) or "no fields")
    return ActionResult(success=True, data=updated)


def delete_item_action(conn: sqlite3.Connection, item_pk: int) -> ActionResult:
    try:
        deleted = db.delete_item(conn, item_pk)
    except sqlite3.Error as exc:
        logger.exception("Failed to delete item %s", item_pk)
        return ActionResult(success=False, error=f"Failed to delete item: {exc}")

    if not deleted:
        return ActionResult(success=False, error="Item not found")

    logger.info("Deleted item %s", item_pk)
    return ActionResult(success=True)

import re
from collections.abc import Iterable
from typing import Any

from jerp.valuation import try_parse_decimal

PHONE_PATTERN = re.compile(r"[+]?[\d\s\-()]+")
EMAIL_PATTERN = re.compile(r"[^@\s]+@[^@\s]+\.[^@\s]+")
CARATE_OPTIONS = ["18K", "14K", "20K", "22K"]

ITEM_FIELDS = (
    "name",
    "date",
    "gross_weight",
    "carate",
    "net_weight",
    "percentage",
    "making",
    "fine",
    "client_id",
)


def _text(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    return "" if value is None else str(value)


def validate_client(data: dict[str, Any]) -> dict[str, str]:
    errors: dict[str, str] = {}

    name = _text(data, "name")
    if len(name) < 1:
        errors["name"] = "Name is required"
    elif len(name) > 100:
        errors["name"] = "Name must be less than 100 characters"

    phone = _text(data, "phone")
    if len(phone) < 1:
        errors["phone"] = "Phone number is required"
    elif not PHONE_PATTERN.fullmatch(phone):
        errors["phone"] = "Please enter a valid phone number"

    email = _text(data, "email")
    if email and not EMAIL_PATTERN.fullmatch(email):
        errors["email"] = "Please enter a valid email address"

    return errors


def validate_onboarding(data: dict[str, Any]) -> dict[str, str]:
    errors: dict[str, str] = {}

    name = _text(data, "name")
    if len(name) < 2:
        errors["name"] = "Name must be at least 2 characters"
    elif len(name) > 50:
        errors["name"] = "Name must be less than 50 characters"

    phone_number = _text(data, "phone_number")
    if len(phone_number) < 10:
        errors["phone_number"] = "Phone number must be at least 10 digits"
    elif len(phone_number) > 15:
        errors["phone_number"] = "Phone number must be less than 15 digits"
    elif not PHONE_PATTERN.fullmatch(phone_number):
        errors["phone_number"] = "Invalid phone number format"

    return errors


def _is_record_key(value: Any) -> bool:
    if isinstance(value, bool):
        return False
    if isinstance(value, int):
        return True
    return isinstance(value, str) and value.strip().isdecimal()


def _check_number(
    errors: dict[str, str],
    field: str,
    raw: str,
    *,
    label: str,
    strictly_positive: bool,
) -> None:
    value = try_parse_decimal(raw)
    if strictly_positive:
        if value is None or value <= 0:
            errors[field] = f"{label} must be a positive number"
    elif value is None or value < 0:
        errors[field] = f"{label} must be 0 or greater"


def validate_item(data: dict[str, Any], fields: Iterable[str] | None = None) -> dict[str, str]:
    """
    Submit-time checks for an item payload.

    `fields` restricts validation to the given keys, which is how partial updates
    are checked; by default every item field is validated.
    """
    selected = set(ITEM_FIELDS if fields is None else fields)
    errors: dict[str, str] = {}

    if "name" in selected:
        name = _text(data, "name")
        if len(name.strip()) < 1:
            errors["name"] = "Item name is required"
        elif len(name) > 200:
            errors["name"] = "Name must be less than 200 characters"

    if "date" in selected and not _text(data, "date").strip():
        errors["date"] = "Date is required"

    if "carate" in selected and not _text(data, "carate").strip():
        errors["carate"] = "Carate is required"

    required_numbers = [
        ("gross_weight", "Gross weight", True),
        ("net_weight", "Net weight", True),
        ("percentage", "Percentage", False),
        ("fine", "Fine", False),
    ]
    for field, label, strictly_positive in required_numbers:
        if field not in selected:
            continue
        raw = _text(data, field).strip()
        if not raw:
            errors[field] = f"{label} is required"
            continue
        _check_number(errors, field, raw, label=label, strictly_positive=strictly_positive)

    if "making" in selected:
        making = _text(data, "making").strip()
        if making:
            value = try_parse_decimal(making)
            if value is None or value < 0:
                errors["making"] = "Please enter a valid making amount"

    if "client_id" in selected:
        client_id = data.get("client_id")
        if client_id not in (None, "") and not _is_record_key(client_id):
            errors["client_id"] = "Please select a valid client"

    return errors

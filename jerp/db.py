import json
import logging
import re
import secrets
import sqlite3
import string
import time
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from jerp.config import load_config
from jerp.models import Profile

logger = logging.getLogger(__name__)

AUTH_DB_NAME = "auth.db"
CLIENT_ID_ALPHABET = string.ascii_uppercase + string.digits
BASE36_ALPHABET = string.digits + string.ascii_uppercase
THEMES = ("light", "dark", "system")

ITEM_COLUMNS = (
    "client_id",
    "name",
    "description",
    "date",
    "gross_weight",
    "carate",
    "net_weight",
    "diamonds",
    "stones",
    "percentage",
    "making",
    "fine",
    "image_name",
    "image_mime",
    "image_data",
)
JSON_ITEM_COLUMNS = {"diamonds": "diamonds_json", "stones": "stones_json"}


def utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def get_data_dir() -> Path:
    return load_config().data_dir


def get_connection(db_path: Path) -> sqlite3.Connection:
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(db_path)
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA foreign_keys = ON")
    return conn


def _safe_username(username: str) -> str:
    cleaned = re.sub(r"[^a-z0-9_.-]+", "_", username.strip().lower())
    return cleaned[:32] or "user"


def get_user_db_path(username: str) -> Path:
    return get_data_dir() / f"jerp_{_safe_username(username)}.db"


def get_user_connection(username: str) -> sqlite3.Connection:
    return get_connection(get_user_db_path(username))


def delete_user_data(username: str) -> None:
    user_db_path = get_user_db_path(username)
    if user_db_path.exists():
        user_db_path.unlink(missing_ok=True)
        logger.warning("Removed private database %s", user_db_path.name)


def init_auth_db(conn: sqlite3.Connection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS users (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            username TEXT NOT NULL UNIQUE,
            password_salt TEXT NOT NULL,
            password_hash TEXT NOT NULL,
            created_at TEXT NOT NULL
        )
        """
    )
    conn.commit()


def get_auth_connection() -> sqlite3.Connection:
    conn = get_connection(get_data_dir() / AUTH_DB_NAME)
    init_auth_db(conn)
    return conn


def init_db(conn: sqlite3.Connection) -> None:
    cursor = conn.cursor()

    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS profile (
            id INTEGER PRIMARY KEY CHECK (id = 1),
            name TEXT NOT NULL DEFAULT '',
            phone_number TEXT NOT NULL DEFAULT '',
            theme TEXT NOT NULL DEFAULT 'system',
            onboarding_completed INTEGER NOT NULL DEFAULT 0,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """
    )

    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS clients (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            client_id TEXT NOT NULL UNIQUE,
            name TEXT NOT NULL,
            phone TEXT NOT NULL,
            email TEXT,
            created_at TEXT NOT NULL
        )
        """
    )

    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS items (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            item_id TEXT NOT NULL UNIQUE,
            client_id INTEGER REFERENCES clients(id) ON DELETE SET NULL,
            name TEXT NOT NULL,
            description TEXT,
            date TEXT NOT NULL,
            gross_weight REAL NOT NULL,
            carate TEXT NOT NULL,
            net_weight REAL NOT NULL,
            diamonds_json TEXT NOT NULL DEFAULT '[]',
            stones_json TEXT NOT NULL DEFAULT '[]',
            percentage REAL NOT NULL,
            making REAL,
            fine REAL NOT NULL,
            image_name TEXT,
            image_mime TEXT,
            image_data BLOB,
            created_at TEXT NOT NULL,
            updated_at TEXT NOT NULL
        )
        """
    )

    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS photos (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            mime TEXT NOT NULL,
            data BLOB NOT NULL,
            created_at TEXT NOT NULL
        )
        """
    )

    cursor.execute(
        """
        CREATE TABLE IF NOT EXISTS tasks (
            id INTEGER PRIMARY KEY AUTOINCREMENT,
            name TEXT NOT NULL,
            created_at TEXT NOT NULL
        )
        """
    )

    conn.commit()


# Profile


def get_profile(conn: sqlite3.Connection) -> Profile | None:
    row = conn.execute(
        "SELECT name, phone_number, theme, onboarding_completed FROM profile WHERE id = 1"
    ).fetchone()
    if row is None:
        return None
    return Profile(
        name=row["name"],
        phone_number=row["phone_number"],
        theme=row["theme"],
        onboarding_completed=bool(row["onboarding_completed"]),
    )


def save_profile(conn: sqlite3.Connection, name: str, phone_number: str) -> None:
    now = utc_now_iso()
    conn.execute(
        """
        INSERT INTO profile (id, name, phone_number, onboarding_completed, created_at, updated_at)
        VALUES (1, ?, ?, 1, ?, ?)
        ON CONFLICT(id) DO UPDATE SET
            name = excluded.name,
            phone_number = excluded.phone_number,
            onboarding_completed = 1,
            updated_at = excluded.updated_at
        """,
        (name, phone_number, now, now),
    )
    conn.commit()


def save_theme(conn: sqlite3.Connection, theme: str) -> None:
    if theme not in THEMES:
        raise ValueError(f"Unsupported theme: {theme}")
    now = utc_now_iso()
    conn.execute(
        """
        INSERT INTO profile (id, theme, created_at, updated_at)
        VALUES (1, ?, ?, ?)
        ON CONFLICT(id) DO UPDATE SET theme = excluded.theme, updated_at = excluded.updated_at
        """,
        (theme, now, now),
    )
    conn.commit()


# Clients


def generate_client_id() -> str:
    return "".join(secrets.choice(CLIENT_ID_ALPHABET) for _ in range(8))


def add_client(conn: sqlite3.Connection, client: dict[str, Any]) -> int:
    cursor = conn.execute(
        """
        INSERT INTO clients (client_id, name, phone, email, created_at)
        VALUES (?, ?, ?, ?, ?)
        """,
        (
            client.get("client_id") or generate_client_id(),
            client["name"],
            client["phone"],
            client.get("email") or None,
            utc_now_iso(),
        ),
    )
    conn.commit()
    return int(cursor.lastrowid)


def get_client(conn: sqlite3.Connection, client_pk: int) -> sqlite3.Row | None:
    return conn.execute("SELECT * FROM clients WHERE id = ?", (client_pk,)).fetchone()


def list_clients(conn: sqlite3.Connection, order_by_name: bool = False) -> list[sqlite3.Row]:
    order = "name COLLATE NOCASE ASC" if order_by_name else "created_at DESC, id DESC"
    return conn.execute(f"SELECT * FROM clients ORDER BY {order}").fetchall()


# Items


def _to_base36(value: int) -> str:
    if value == 0:
        return "0"
    digits = []
    while value:
        value, remainder = divmod(value, 36)
        digits.append(BASE36_ALPHABET[remainder])
    return "".join(reversed(digits))


def generate_item_id() -> str:
    timestamp = _to_base36(time.time_ns() // 1_000_000)
    random_part = "".join(secrets.choice(BASE36_ALPHABET) for _ in range(4))
    return f"ITEM-{timestamp}-{random_part}"


def _decode_inclusions(payload: str | None) -> list[dict[str, Any]]:
    if not payload:
        return []
    try:
        parsed = json.loads(payload)
    except json.JSONDecodeError:
        logger.warning("Discarding unreadable inclusion list: %r", payload[:80])
        return []
    return [entry for entry in parsed if isinstance(entry, dict)] if isinstance(parsed, list) else []


def _item_from_row(row: sqlite3.Row) -> dict[str, Any]:
    item = dict(row)
    item["diamonds"] = _decode_inclusions(item.pop("diamonds_json", None))
    item["stones"] = _decode_inclusions(item.pop("stones_json", None))
    return item


_ITEM_SELECT = """
    SELECT
        i.*,
        c.name AS client_name,
        c.phone AS client_phone,
        c.email AS client_email
    FROM items i
    LEFT JOIN clients c ON c.id = i.client_id
"""


def add_item(conn: sqlite3.Connection, item: dict[str, Any]) -> int:
    now = utc_now_iso()
    cursor = conn.execute(
        """
        INSERT INTO items
        (item_id, client_id, name, description, date, gross_weight, carate, net_weight,
         diamonds_json, stones_json, percentage, making, fine, image_name, image_mime, image_data,
         created_at, updated_at)
        VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
        """,
        (
            item.get("item_id") or generate_item_id(),
            item.get("client_id"),
            item["name"],
            item.get("description") or None,
            item["date"],
            item["gross_weight"],
            item["carate"],
            item["net_weight"],
            json.dumps(item.get("diamonds", [])),
            json.dumps(item.get("stones", [])),
            item["percentage"],
            item.get("making"),
            item["fine"],
            item.get("image_name"),
            item.get("image_mime"),
            item.get("image_data"),
            now,
            now,
        ),
    )
    conn.commit()
    return int(cursor.lastrowid)


def get_item(conn: sqlite3.Connection, item_pk: int) -> dict[str, Any] | None:
    row = conn.execute(f"{_ITEM_SELECT} WHERE i.id = ?", (item_pk,)).fetchone()
    return _item_from_row(row) if row is not None else None


def list_items(conn: sqlite3.Connection) -> list[dict[str, Any]]:
    rows = conn.execute(f"{_ITEM_SELECT} ORDER BY i.created_at DESC, i.id DESC").fetchall()
    return [_item_from_row(row) for row in rows]


def update_item(conn: sqlite3.Connection, item_pk: int, changes: dict[str, Any]) -> dict[str, Any] | None:
    """Applies only the supplied columns; returns the updated item or None if it does not exist."""
    unknown = set(changes) - set(ITEM_COLUMNS)
    if unknown:
        raise ValueError(f"Unknown item columns: {', '.join(sorted(unknown))}")

    assignments = []
    values: list[Any] = []
    for column in ITEM_COLUMNS:
        if column not in changes:
            continue
        if column in JSON_ITEM_COLUMNS:
            assignments.append(f"{JSON_ITEM_COLUMNS[column]} = ?")
            values.append(json.dumps(changes[column]))
        else:
            assignments.append(f"{column} = ?")
            values.append(changes[column])

    assignments.append("updated_at = ?")
    values.extend([utc_now_iso(), item_pk])

    cursor = conn.execute(f"UPDATE items SET {', '.join(assignments)} WHERE id = ?", values)
    conn.commit()
    if cursor.rowcount == 0:
        return None
    return get_item(conn, item_pk)


def delete_item(conn: sqlite3.Connection, item_pk: int) -> bool:
    cursor = conn.execute("DELETE FROM items WHERE id = ?", (item_pk,))
    conn.commit()
    return cursor.rowcount > 0


# Photos


def add_photo(conn: sqlite3.Connection, name: str, mime: str, data: bytes) -> int:
    cursor = conn.execute(
        "INSERT INTO photos (name, mime, data, created_at) VALUES (?, ?, ?, ?)",
        (name, mime, data, utc_now_iso()),
    )
    conn.commit()
    return int(cursor.lastrowid)


def list_photos(conn: sqlite3.Connection) -> list[sqlite3.Row]:
    return conn.execute("SELECT * FROM photos ORDER BY created_at DESC, id DESC").fetchall()


def delete_photo(conn: sqlite3.Connection, photo_id: int) -> None:
    conn.execute("DELETE FROM photos WHERE id = ?", (photo_id,))
    conn.commit()


# Tasks


def add_task(conn: sqlite3.Connection, name: str) -> int:
    cursor = conn.execute(
        "INSERT INTO tasks (name, created_at) VALUES (?, ?)",
        (name, utc_now_iso()),
    )
    conn.commit()
    return int(cursor.lastrowid)


def list_tasks(conn: sqlite3.Connection) -> list[sqlite3.Row]:
    return conn.execute("SELECT * FROM tasks ORDER BY id ASC").fetchall()

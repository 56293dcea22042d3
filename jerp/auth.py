import hashlib
import hmac
import logging
import re
import secrets
import sqlite3

from jerp.config import load_config
from jerp.db import utc_now_iso

logger = logging.getLogger(__name__)

USERNAME_PATTERN = re.compile(r"[a-z0-9_.-]{3,32}")
MIN_PASSWORD_LENGTH = 8


def normalize_username(username: str) -> str:
    return username.strip().lower()


def _hash_password(password: str, salt_hex: str) -> str:
    digest = hashlib.pbkdf2_hmac(
        "sha256",
        password.encode("utf-8"),
        bytes.fromhex(salt_hex),
        load_config().password_iterations,
    )
    return digest.hex()


def _password_matches(row: sqlite3.Row, password: str) -> bool:
    attempted_hash = _hash_password(password, row["password_salt"])
    return hmac.compare_digest(attempted_hash, row["password_hash"])


def _find_credentials(auth_conn: sqlite3.Connection, username: str) -> sqlite3.Row | None:
    return auth_conn.execute(
        "SELECT username, password_salt, password_hash FROM users WHERE username = ?",
        (username,),
    ).fetchone()


def create_user(auth_conn: sqlite3.Connection, username: str, password: str) -> tuple[bool, str]:
    """Registers an account. On success the message is the normalized username."""
    normalized = normalize_username(username)
    if not USERNAME_PATTERN.fullmatch(normalized):
        return False, "Username must be 3-32 chars and use letters, numbers, ., _, or -."
    if len(password) < MIN_PASSWORD_LENGTH:
        return False, f"Password must be at least {MIN_PASSWORD_LENGTH} characters."

    salt_hex = secrets.token_hex(16)
    try:
        auth_conn.execute(
            """
            INSERT INTO users (username, password_salt, password_hash, created_at)
            VALUES (?, ?, ?, ?)
            """,
            (normalized, salt_hex, _hash_password(password, salt_hex), utc_now_iso()),
        )
        auth_conn.commit()
    except sqlite3.IntegrityError:
        logger.info("Sign-up rejected, username %s already taken", normalized)
        return False, "That username already exists."

    logger.info("Created account %s", normalized)
    return True, normalized


def authenticate_user(auth_conn: sqlite3.Connection, username: str, password: str) -> str | None:
    normalized = normalize_username(username)
    row = _find_credentials(auth_conn, normalized)
    if row is None or not _password_matches(row, password):
        logger.info("Failed sign-in for %s", normalized or "<blank>")
        return None
    return str(row["username"])


def update_user_password(
    auth_conn: sqlite3.Connection,
    username: str,
    current_password: str,
    new_password: str,
) -> tuple[bool, str]:
    normalized = normalize_username(username)
    row = _find_credentials(auth_conn, normalized)
    if row is None:
        return False, "User not found."
    if not _password_matches(row, current_password):
        return False, "Current password is incorrect."
    if len(new_password) < MIN_PASSWORD_LENGTH:
        return False, f"New password must be at least {MIN_PASSWORD_LENGTH} characters."

    new_salt = secrets.token_hex(16)
    auth_conn.execute(
        "UPDATE users SET password_salt = ?, password_hash = ? WHERE username = ?",
        (new_salt, _hash_password(new_password, new_salt), normalized),
    )
    auth_conn.commit()
    logger.info("Password changed for %s", normalized)
    return True, "Password updated."


def delete_user_account(auth_conn: sqlite3.Connection, username: str, password: str) -> tuple[bool, str]:
    """Removes the login only; the caller deletes the private database file."""
    normalized = normalize_username(username)
    row = _find_credentials(auth_conn, normalized)
    if row is None:
        return False, "User not found."
    if not _password_matches(row, password):
        return False, "Password is incorrect."

    auth_conn.execute("DELETE FROM users WHERE username = ?", (normalized,))
    auth_conn.commit()
    logger.warning("Deleted account %s", normalized)
    return True, "Account deleted."

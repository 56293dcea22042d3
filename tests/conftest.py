"""
Shared test fixtures: temporary data directory, auth and per-user SQLite databases.
"""

import logging

import pytest

from jerp.db import get_auth_connection, get_user_connection, init_db


@pytest.fixture(autouse=True)
def data_dir(tmp_path, monkeypatch):
    """Points every database at a throwaway directory and keeps password hashing fast."""
    target = tmp_path / "data"
    monkeypatch.setenv("JERP_DATA_DIR", str(target))
    monkeypatch.setenv("JERP_PASSWORD_ITERATIONS", "1000")
    return target


@pytest.fixture
def auth_conn():
    conn = get_auth_connection()
    yield conn
    conn.close()


@pytest.fixture
def conn():
    """Initialised private database for a test user."""
    connection = get_user_connection("tester")
    init_db(connection)
    yield connection
    connection.close()


@pytest.fixture
def clean_root_logger():
    root_logger = logging.getLogger()
    original_handlers = list(root_logger.handlers)
    original_level = root_logger.level
    yield root_logger
    for handler in list(root_logger.handlers):
        if handler not in original_handlers:
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(original_level)

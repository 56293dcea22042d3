import pytest

from jerp.auth import authenticate_user, create_user, delete_user_account, update_user_password


def test_create_user_normalizes_username(auth_conn):
    assert create_user(auth_conn, "  Goldsmith.Asha ", "strongpass") == (True, "goldsmith.asha")


@pytest.mark.parametrize(
    "username, password, message",
    [
        ("ab", "strongpass", "Username must be 3-32 chars and use letters, numbers, ., _, or -."),
        ("has space", "strongpass", "Username must be 3-32 chars and use letters, numbers, ., _, or -."),
        ("asha", "short", "Password must be at least 8 characters."),
    ],
)
def test_create_user_rejects_bad_input(auth_conn, username, password, message):
    assert create_user(auth_conn, username, password) == (False, message)


def test_create_user_rejects_duplicates(auth_conn):
    create_user(auth_conn, "asha", "strongpass")
    assert create_user(auth_conn, "ASHA", "otherpass1") == (False, "That username already exists.")


def test_authenticate_user(auth_conn):
    create_user(auth_conn, "asha", "strongpass")
    assert authenticate_user(auth_conn, " Asha", "strongpass") == "asha"
    assert authenticate_user(auth_conn, "asha", "wrongpass") is None
    assert authenticate_user(auth_conn, "nobody", "strongpass") is None


def test_update_user_password(auth_conn):
    create_user(auth_conn, "asha", "strongpass")

    assert update_user_password(auth_conn, "asha", "wrongpass", "newpassword") == (
        False,
        "Current password is incorrect.",
    )
    assert update_user_password(auth_conn, "asha", "strongpass", "short") == (
        False,
        "New password must be at least 8 characters.",
    )
    assert update_user_password(auth_conn, "ghost", "strongpass", "newpassword") == (False, "User not found.")

    assert update_user_password(auth_conn, "asha", "strongpass", "newpassword") == (True, "Password updated.")
    assert authenticate_user(auth_conn, "asha", "strongpass") is None
    assert authenticate_user(auth_conn, "asha", "newpassword") == "asha"


def test_delete_user_account(auth_conn):
    create_user(auth_conn, "asha", "strongpass")

    assert delete_user_account(auth_conn, "asha", "wrongpass") == (False, "Password is incorrect.")
    assert delete_user_account(auth_conn, "asha", "strongpass") == (True, "Account deleted.")
    assert authenticate_user(auth_conn, "asha", "strongpass") is None
    assert delete_user_account(auth_conn, "asha", "strongpass") == (False, "User not found.")

"""
Initialises the authentication database and, optionally, a user's private database.
Run this once before first use, or anytime to repair missing tables:

    python scripts/init_db.py [username ...]
"""

import sys

from jerp.db import get_auth_connection, get_user_connection, get_user_db_path, init_db


def main(usernames: list[str]) -> None:
    get_auth_connection().close()
    print("Authentication database initialised.")

    for username in usernames:
        conn = get_user_connection(username)
        init_db(conn)
        conn.close()
        print(f"Private database ready: {get_user_db_path(username)}")


if __name__ == "__main__":
    main(sys.argv[1:])

#!/usr/bin/env python
"""Create a user from the command line.

Usage:
    python add_user.py "Alice" alice@example.com password123
"""
import logging
import sys

from taskboard.config import Settings
from taskboard.database import Database
from taskboard.exceptions import TaskboardError
from taskboard.routers.users import create_user

logger = logging.getLogger("add_user")


def main(argv) -> int:
    if len(argv) != 4:
        print(__doc__.strip())
        return 2

    logging.basicConfig(level=logging.INFO, format="%(asctime)s - %(name)s - %(levelname)s - %(message)s")
    _, name, email, password = argv

    settings = Settings.from_env()
    database = Database(settings.database_url)

    # Create tables if not exist
    database.create_tables()

    with database.session() as db:
        try:
            user = create_user(db, settings, name, email, password)
        except TaskboardError as e:
            logger.error(f"Could not create user: {e.message}")
            return 1

    print(f"User created: {user.email} ({user.id})")
    return 0


if __name__ == "__main__":
    sys.exit(main(sys.argv))

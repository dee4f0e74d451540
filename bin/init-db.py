"""Create the database and its tables if they do not exist.

Usage: python bin/init-db.py [--env-file PATH] [--reset]

Reads DB_* settings from the environment (or the given dotenv file).
Safe to run repeatedly. --reset also deletes every user, auth token,
and game.
"""

import argparse
import sys
from pathlib import Path

# Add backend to path for imports
sys.path.insert(0, str(Path(__file__).resolve().parent.parent / "backend"))

import structlog

from persistence.db import DataAccess
from persistence.errors import DataAccessError
from persistence.logging import setup_logging
from persistence.settings import load_settings

logger = structlog.get_logger()


def main() -> None:
    parser = argparse.ArgumentParser(description="Bootstrap the chess server database")
    parser.add_argument("--env-file", help="dotenv file with DB_* settings")
    parser.add_argument("--reset", action="store_true", help="delete all rows after bootstrapping")
    args = parser.parse_args()

    setup_logging()

    try:
        settings = load_settings(args.env_file)
        data = DataAccess.from_settings(settings)
        data.schema.configure_database()
        if args.reset:
            data.clear_all()
            logger.info("database reset", database=settings.name)
    except DataAccessError as e:
        print(f"Error ({e.status_code}): {e.message}")
        sys.exit(1)


if __name__ == "__main__":
    main()

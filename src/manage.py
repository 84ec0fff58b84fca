"""FridgeLink database management CLI.

Creates or drops the relational schema for the ordering domain when it is
configured with a sqlite or postgresql provider (see PROTEAN_ENV).

Usage:
    PROTEAN_ENV=production python src/manage.py setup-db
    PROTEAN_ENV=production python src/manage.py drop-db
"""

import argparse
import sys

import structlog

from ordering.utils.logging import configure_logging

logger = structlog.get_logger(__name__)


def setup_databases():
    from ordering.domain import ordering
    from ordering.utils.db import setup_db

    ordering.init()
    logger.info("Creating ordering database schema")
    setup_db(ordering)
    logger.info("Ordering schema ready")


def drop_databases():
    from ordering.domain import ordering
    from ordering.utils.db import drop_db

    ordering.init()
    logger.info("Dropping ordering database schema")
    drop_db(ordering)
    logger.info("Ordering schema dropped")


def main():
    parser = argparse.ArgumentParser(description="FridgeLink database management")
    subparsers = parser.add_subparsers(dest="command", required=True)
    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    args = parser.parse_args()
    configure_logging()

    if args.command == "setup-db":
        setup_databases()
    elif args.command == "drop-db":
        drop_databases()
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()

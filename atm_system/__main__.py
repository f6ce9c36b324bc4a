"""
Command-line entry point.

    python -m atm_system run                 # interactive terminal
    python -m atm_system init-db             # create tables
    python -m atm_system create-admin LOGIN NAME --pin 12345
"""

import argparse
import getpass
import logging
import sys

from atm_system.config import Settings, get_settings
from atm_system.exceptions import ATMError
from atm_system.logging_config import setup_logging
from atm_system.models.base import create_schema, make_engine, make_session_factory
from atm_system.repositories.account_repository import AccountRepository
from atm_system.services.account_service import AccountService
from atm_system.terminal import ATMTerminal

logger = logging.getLogger("atm_system")


def build_service(settings: Settings) -> AccountService:
    return AccountService(AccountRepository(make_session_factory(settings)))


def cmd_run(settings: Settings, args) -> int:
    ATMTerminal(build_service(settings)).start()
    return 0


def cmd_init_db(settings: Settings, args) -> int:
    create_schema(make_engine(settings))
    logger.info("Schema created at %s", settings.DATABASE_URL)
    return 0


def cmd_create_admin(settings: Settings, args) -> int:
    pin = args.pin or getpass.getpass("Pin code: ")
    try:
        user_id = build_service(settings).provision_administrator(
            args.login, pin, args.name
        )
    except ATMError as e:
        logger.error("Could not create administrator: %s", e)
        return 1
    print(f"Administrator {args.login} created (id {user_id})")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="atm-system",
        description="Banking terminal over a small account ledger",
    )
    parser.add_argument(
        "--database-url",
        help="Override DATABASE_URL for this run",
    )
    parser.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        help="Override LOG_LEVEL for this run",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    run = subparsers.add_parser("run", help="Start the interactive ATM terminal")
    run.set_defaults(handler=cmd_run)

    init_db = subparsers.add_parser("init-db", help="Create the database tables")
    init_db.set_defaults(handler=cmd_init_db)

    admin = subparsers.add_parser("create-admin", help="Provision an administrator")
    admin.add_argument("login")
    admin.add_argument("name")
    admin.add_argument("--pin", help="5-digit PIN (prompted for if omitted)")
    admin.set_defaults(handler=cmd_create_admin)

    return parser


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    if args.database_url or args.log_level:
        settings = Settings(database_url=args.database_url, log_level=args.log_level)
    else:
        settings = get_settings()

    setup_logging(settings.LOG_LEVEL)
    return args.handler(settings, args)


if __name__ == "__main__":
    sys.exit(main())

"""Apply, roll back or generate schema migrations for the scheduling database."""

import argparse
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

ALEMBIC_INI = Path(__file__).resolve().parent.parent / "alembic.ini"


def _config() -> Config:
    cfg = Config(str(ALEMBIC_INI))
    cfg.set_main_option("script_location", str(ALEMBIC_INI.parent / "alembic"))
    return cfg


def upgrade(revision: str) -> None:
    print(f"Upgrading schema to {revision}...")
    command.upgrade(_config(), revision)
    print("✓ Schema is up to date")


def downgrade(revision: str) -> None:
    print(f"Downgrading schema to {revision}...")
    command.downgrade(_config(), revision)
    print("✓ Downgrade complete")


def current() -> None:
    command.current(_config(), verbose=True)


def create(message: str) -> None:
    print(f"Creating migration: {message}")
    command.revision(_config(), message=message, autogenerate=True)
    print("✓ Migration created")


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__)
    sub = parser.add_subparsers(dest="action")

    up = sub.add_parser("upgrade", help="apply migrations (default: head)")
    up.add_argument("revision", nargs="?", default="head")
    down = sub.add_parser("downgrade", help="roll back migrations (default: one step)")
    down.add_argument("revision", nargs="?", default="-1")
    sub.add_parser("current", help="show the applied revision")
    new = sub.add_parser("create", help="autogenerate a revision from the models")
    new.add_argument("message", nargs="+")

    args = parser.parse_args(argv)
    try:
        if args.action == "downgrade":
            downgrade(args.revision)
        elif args.action == "current":
            current()
        elif args.action == "create":
            create(" ".join(args.message))
        else:
            upgrade(getattr(args, "revision", "head"))
    except Exception as e:
        print(f"✗ Migration failed: {e}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())

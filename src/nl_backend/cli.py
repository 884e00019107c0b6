from __future__ import annotations

import argparse
import sys
from pathlib import Path

from sqlalchemy import func, select

from .config import get_data_dir, get_database_config
from .db import Base, get_engine, get_session
from .logging_config import configure_logging
from .models import District, Municipality, Province, WardGroup
from .seeds import seed_hierarchy, seed_wards

# === Command implementations ===


def cmd_check_db(args: argparse.Namespace) -> None:
    """
    Simple connectivity check for the configured database.
    """
    db_cfg = get_database_config()
    print("Nepal Locations Backend – Database Check")
    print("----------------------------------------")
    print(f"Database URL: {db_cfg.database_url}")

    try:
        with get_session() as session:
            counts = {
                model.__tablename__: session.scalar(select(func.count(model.id))) or 0
                for model in (Province, District, Municipality, WardGroup)
            }
    except Exception as exc:  # broad, just for a simple health check
        print(f"ERROR: Database check failed: {exc}")
        sys.exit(1)

    for table, count in counts.items():
        print(f"{table + ':':<16}{count}")


def cmd_init_db(args: argparse.Namespace) -> None:
    """
    Create missing tables straight from the ORM metadata.

    Handy for local development; deployed databases are managed with Alembic.
    """
    engine = get_engine()
    Base.metadata.create_all(engine)
    print("Tables created (existing tables left untouched).")


def _resolve_data_dir(args: argparse.Namespace) -> Path:
    data_dir = Path(args.data_dir) if args.data_dir else get_data_dir()
    if not data_dir.is_dir():
        print(f"ERROR: Data directory not found: {data_dir}")
        sys.exit(1)
    return data_dir


def cmd_seed(args: argparse.Namespace) -> None:
    data_dir = _resolve_data_dir(args)
    with get_session() as session:
        summary = seed_hierarchy(session, data_dir)
    print(
        f"Created {summary.provinces} provinces, {summary.districts} districts, "
        f"{summary.municipalities} municipalities from {data_dir}."
    )


def cmd_seed_wards(args: argparse.Namespace) -> None:
    data_dir = _resolve_data_dir(args)
    with get_session() as session:
        created = seed_wards(session, data_dir, replace=args.replace)
    print(f"Created {created} ward rows from {data_dir}.")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nl-backend",
        description="Operator commands for the Nepal Locations backend.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # check-db
    p_db = subparsers.add_parser(
        "check-db",
        help="Check database connectivity and print row counts.",
    )
    p_db.set_defaults(func=cmd_check_db)

    # init-db
    p_init = subparsers.add_parser(
        "init-db",
        help="Create tables from the ORM models (development).",
    )
    p_init.set_defaults(func=cmd_init_db)

    # seed
    p_seed = subparsers.add_parser(
        "seed",
        help="Load provinces, districts and municipalities from seed JSON.",
    )
    p_seed.add_argument(
        "--data-dir",
        help="Seed data root (defaults to NEPAL_LOCATIONS_DATA_DIR or data/seed).",
    )
    p_seed.set_defaults(func=cmd_seed)

    # seed-wards
    p_wards = subparsers.add_parser(
        "seed-wards",
        help="Load per-municipality ward lists from seed JSON.",
    )
    p_wards.add_argument(
        "--data-dir",
        help="Seed data root (defaults to NEPAL_LOCATIONS_DATA_DIR or data/seed).",
    )
    p_wards.add_argument(
        "--replace",
        action="store_true",
        default=False,
        help="Delete all existing ward rows before loading.",
    )
    p_wards.set_defaults(func=cmd_seed_wards)

    return parser


def main(argv: list[str] | None = None) -> None:
    configure_logging()
    parser = build_parser()
    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        sys.exit(1)
    args.func(args)


if __name__ == "__main__":
    main()

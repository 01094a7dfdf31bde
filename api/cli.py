#!/usr/bin/env python3
"""
FuelPool API CLI Tool.

Command-line interface for administrative tasks:
- Database setup and route seeding
- Compliance balance computation
- API key management (create, list, revoke)

Usage:
    python -m api.cli init-db
    python -m api.cli seed-routes
    python -m api.cli compute-cb --year 2024
    python -m api.cli create-api-key --name "My App"
    python -m api.cli list-api-keys
    python -m api.cli revoke-api-key --id <uuid>
"""
import argparse
import sys
from datetime import datetime, timedelta, timezone
from typing import Optional


def init_db() -> None:
    """Initialize the database."""
    from api.database import init_db as do_init

    print("Initializing database...")
    do_init()
    print("Database initialized successfully.")


def seed_routes() -> None:
    """Replace all routes with the sample route set."""
    from api.database import get_db_context
    from api.repositories import SqlRouteStore
    from src.compliance.seed import build_route_seed
    from src.compliance.services import RouteService

    seed = build_route_seed()
    with get_db_context() as db:
        RouteService(SqlRouteStore(db)).seed(seed)

    print(f"\nSeeded {len(seed)} routes.")


def compute_cb(year: Optional[int] = None) -> None:
    """Compute and store compliance balances, then print them."""
    from api.database import get_db_context
    from api.repositories import SqlBankStore, SqlComplianceStore, SqlRouteStore
    from src.compliance.services import ComplianceService

    with get_db_context() as db:
        service = ComplianceService(SqlRouteStore(db), SqlComplianceStore(db), SqlBankStore(db))
        balances = service.compute_balances(year)

    if not balances:
        print("\nNo routes found.")
        return

    print("\n" + "=" * 60)
    print("COMPLIANCE BALANCES")
    print("=" * 60)
    print(f"{'Ship':<12} {'Year':<6} {'CB (gCO2eq)':>20} {'Status':>10}")
    print("-" * 60)
    for b in balances:
        print(f"{b.ship_id:<12} {b.year:<6} {b.cb_gco2eq:>20,.2f} {b.status:>10}")
    print("=" * 60)
    print(f"Total: {len(balances)} balance(s)\n")


def create_api_key(name: str, expires_days: Optional[int] = None) -> None:
    """Create a new API key."""
    from api.database import get_db_context
    from api.auth import create_api_key_in_db

    expires_at = None
    if expires_days:
        expires_at = datetime.now(timezone.utc) + timedelta(days=expires_days)

    with get_db_context() as db:
        plain_key, api_key_obj = create_api_key_in_db(
            db=db,
            name=name,
            expires_at=expires_at,
        )
        key_id = str(api_key_obj.id)

    print("\n" + "=" * 60)
    print("API KEY CREATED SUCCESSFULLY")
    print("=" * 60)
    print(f"\nName: {name}")
    print(f"Key ID: {key_id}")
    if expires_at:
        print(f"Expires: {expires_at.isoformat()}")
    else:
        print("Expires: Never")
    print(f"\n{'*' * 60}")
    print(f"API KEY: {plain_key}")
    print(f"{'*' * 60}")
    print("\nSAVE THIS KEY NOW - IT CANNOT BE RETRIEVED LATER!")
    print("=" * 60 + "\n")


def list_api_keys() -> None:
    """List all API keys."""
    from api.database import get_db_context
    from api.auth import list_api_keys as list_keys

    with get_db_context() as db:
        rows = [
            (
                str(key.id),
                key.name,
                key.is_active,
                key.last_used_at.strftime("%Y-%m-%d %H:%M") if key.last_used_at else "Never",
            )
            for key in list_keys(db)
        ]

    if not rows:
        print("\nNo API keys found.")
        return

    print("\n" + "=" * 80)
    print("API KEYS")
    print("=" * 80)
    print(f"{'ID':<36} {'Name':<20} {'Active':<8} {'Last Used':<20}")
    print("-" * 80)

    for key_id, name, active, last_used in rows:
        print(
            f"{key_id:<36} "
            f"{name[:18]:<20} "
            f"{'Yes' if active else 'No':<8} "
            f"{last_used:<20}"
        )

    print("=" * 80)
    print(f"Total: {len(rows)} key(s)\n")


def revoke_api_key(key_id: str) -> None:
    """Revoke an API key."""
    from api.database import get_db_context
    from api.auth import revoke_api_key as revoke_key

    with get_db_context() as db:
        success = revoke_key(db, key_id)

    if success:
        print(f"\nAPI key {key_id} has been revoked.")
    else:
        print(f"\nError: API key {key_id} not found.")
        sys.exit(1)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="FuelPool API CLI Tool",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  Initialize database and load sample routes:
    python -m api.cli init-db
    python -m api.cli seed-routes

  Compute compliance balances for 2024:
    python -m api.cli compute-cb --year 2024

  Create an API key that expires in 90 days:
    python -m api.cli create-api-key --name "Trial Key" --expires-days 90

  Revoke an API key:
    python -m api.cli revoke-api-key --id 12345678-1234-1234-1234-123456789abc
        """
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init-db
    subparsers.add_parser("init-db", help="Initialize the database")

    # seed-routes
    subparsers.add_parser("seed-routes", help="Replace routes with the sample set")

    # compute-cb
    cb_parser = subparsers.add_parser("compute-cb", help="Compute compliance balances")
    cb_parser.add_argument("--year", type=int, help="Only routes of this year")

    # create-api-key
    create_parser = subparsers.add_parser("create-api-key", help="Create a new API key")
    create_parser.add_argument("--name", required=True, help="Name for the API key")
    create_parser.add_argument(
        "--expires-days",
        type=int,
        help="Number of days until expiration (default: never)"
    )

    # list-api-keys
    subparsers.add_parser("list-api-keys", help="List all API keys")

    # revoke-api-key
    revoke_parser = subparsers.add_parser("revoke-api-key", help="Revoke an API key")
    revoke_parser.add_argument("--id", required=True, help="UUID of the API key to revoke")

    args = parser.parse_args(argv)

    if args.command == "init-db":
        init_db()
    elif args.command == "seed-routes":
        seed_routes()
    elif args.command == "compute-cb":
        compute_cb(args.year)
    elif args.command == "create-api-key":
        create_api_key(args.name, args.expires_days)
    elif args.command == "list-api-keys":
        list_api_keys()
    elif args.command == "revoke-api-key":
        revoke_api_key(args.id)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()

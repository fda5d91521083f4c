"""Storefront management CLI.

Creates and drops the database schema, sweeps expired carts and bootstraps
administrator accounts.

Usage:
    python src/manage.py setup-db                      # Create all tables
    python src/manage.py drop-db                       # Drop all tables
    python src/manage.py expire-carts                  # Delete carts idle past CART_MAX_AGE_DAYS
    python src/manage.py expire-carts --max-age-days 7
    python src/manage.py create-admin --email ops@example.com
"""

import argparse
import sys


def _storefront():
    from storefront.bootstrap import init_storefront

    print("Initializing storefront domain...")
    return init_storefront()


def setup_database():
    """Create the storefront database schema."""
    from storefront.utils.db import setup_db

    domain = _storefront()
    print("Creating storefront database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    """Drop the storefront database schema."""
    from storefront.utils.db import drop_db

    domain = _storefront()
    print("Dropping storefront database schema...")
    drop_db(domain)
    print("Done.")


def expire_carts(max_age_days=None):
    """Delete carts whose last update is older than the max age."""
    from storefront.cart.expiry import ExpireCarts

    domain = _storefront()
    with domain.domain_context():
        deleted = domain.process(ExpireCarts(max_age_days=max_age_days), asynchronous=False)
    print(f"Deleted {deleted} expired cart(s).")
    return deleted


def create_admin(email, first_name=None, last_name=None):
    """Register an administrator account and print its id."""
    from storefront.identity.registration import RegisterUser
    from storefront.identity.user import Role

    domain = _storefront()
    with domain.domain_context():
        user_id = domain.process(
            RegisterUser(email=email, first_name=first_name, last_name=last_name, role=Role.ADMIN.value),
            asynchronous=False,
        )
    print(f"Administrator created: {user_id}")
    return user_id


def main(argv=None):
    parser = argparse.ArgumentParser(description="Storefront management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    expire_parser = subparsers.add_parser("expire-carts", help="Delete carts idle past the max age")
    expire_parser.add_argument(
        "--max-age-days",
        type=int,
        default=None,
        help="Override CART_MAX_AGE_DAYS",
    )

    admin_parser = subparsers.add_parser("create-admin", help="Register an administrator account")
    admin_parser.add_argument("--email", required=True)
    admin_parser.add_argument("--first-name")
    admin_parser.add_argument("--last-name")

    args = parser.parse_args(argv)

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "expire-carts":
        expire_carts(args.max_age_days)
    elif args.command == "create-admin":
        create_admin(args.email, args.first_name, args.last_name)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()

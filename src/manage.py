"""Ordering service management CLI.

Usage:
    python src/manage.py setup-db                    # Create all tables
    python src/manage.py drop-db                     # Drop all tables
    python src/manage.py seed-products products.json # Register products
"""

import argparse
import json
import sys
from pathlib import Path


def _initialized_domain():
    from ordering.config import apply_database_settings
    from ordering.domain import ordering

    apply_database_settings(ordering)
    print("Initializing ordering domain...")
    ordering.init()
    return ordering


def setup_database():
    """Create the ordering database schema."""
    from ordering.utils.db import setup_db

    domain = _initialized_domain()
    print("Creating ordering database schema...")
    setup_db(domain)
    print("Done.")


def drop_database():
    """Drop the ordering database schema."""
    from ordering.utils.db import drop_db

    domain = _initialized_domain()
    print("Dropping ordering database schema...")
    drop_db(domain)
    print("Done.")


def seed_products(path):
    """Register every product listed in a JSON file.

    The file holds a list of objects with ``title``, ``price``, ``stock`` and
    an optional ``id``.
    """
    from ordering.catalogue.registration import RegisterProduct

    records = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(records, list):
        print(f"{path}: expected a JSON list of products", file=sys.stderr)
        sys.exit(1)

    domain = _initialized_domain()
    with domain.domain_context():
        for record in records:
            product_id = domain.process(
                RegisterProduct(
                    product_id=record.get("id"),
                    title=record["title"],
                    price=record["price"],
                    stock=record["stock"],
                ),
                asynchronous=False,
            )
            print(f"  {product_id}  {record['title']} (stock {record['stock']})")

    print(f"Seeded {len(records)} products.")


def main():
    parser = argparse.ArgumentParser(description="Ordering service management")
    subparsers = parser.add_subparsers(dest="command", required=True)

    subparsers.add_parser("setup-db", help="Create all database tables")
    subparsers.add_parser("drop-db", help="Drop all database tables")

    seed_parser = subparsers.add_parser("seed-products", help="Register products from a JSON file")
    seed_parser.add_argument("path", help="JSON file with a list of products")

    args = parser.parse_args()

    if args.command == "setup-db":
        setup_database()
    elif args.command == "drop-db":
        drop_database()
    elif args.command == "seed-products":
        seed_products(args.path)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()

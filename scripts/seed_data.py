#!/usr/bin/env python3
"""Seed the Lumina tables with the default event data.

Writes the default guest list, venues, ticket tiers and event config into
empty tables, and optionally creates the tables and the admin credentials.

Usage:
    python scripts/seed_data.py --env dev
    python scripts/seed_data.py --env dev --create-tables
    LUMINA_ADMIN_PASSWORD=... python scripts/seed_data.py --env dev --admin-user admin
"""

import argparse
import os
import sys

import boto3

from lumina.services.credentials import AdminCredentialsService
from lumina.services.directory import GuestDirectoryService
from lumina.services.dynamodb import DynamoDBService
from lumina.services.realtime import EventFeed
from lumina.services.schema import create_tables
from lumina.services.seed import seed_defaults
from lumina.services.ssm_service import SSMService
from lumina.services.stock import StockService
from lumina.services.voting import VotingService


def main() -> int:
    """Run the seed script."""
    parser = argparse.ArgumentParser(description="Seed Lumina tables with default data")
    parser.add_argument(
        "--env",
        choices=["dev", "staging", "prod"],
        default="dev",
        help="Target environment (default: dev)",
    )
    parser.add_argument(
        "--region",
        default=os.environ.get("AWS_DEFAULT_REGION", "eu-west-1"),
        help="AWS region (default: eu-west-1 or AWS_DEFAULT_REGION env var)",
    )
    parser.add_argument(
        "--create-tables",
        action="store_true",
        help="Create missing tables before seeding",
    )
    parser.add_argument(
        "--admin-user",
        default=os.environ.get("LUMINA_ADMIN_USERNAME"),
        help="Store admin credentials if none exist (password from LUMINA_ADMIN_PASSWORD)",
    )

    args = parser.parse_args()
    os.environ["AWS_DEFAULT_REGION"] = args.region
    os.environ["ENVIRONMENT"] = args.env

    if args.env == "prod":
        confirm = input("WARNING: You are about to modify PRODUCTION data. Type 'yes' to continue: ")
        if confirm.lower() != "yes":
            print("Aborted.")
            return 1

    db = DynamoDBService(args.env)
    print(f"\nSeeding {args.env} environment (prefix: {db.name_prefix}, region: {args.region})\n")

    if args.create_tables:
        created = create_tables(boto3.client("dynamodb", region_name=args.region), db.name_prefix)
        for name in created:
            print(f"  Created table {name}")
        if not created:
            print("  All tables already exist")

    feed = EventFeed()
    written = seed_defaults(
        GuestDirectoryService(db),
        VotingService(db, feed),
        StockService(db, feed),
    )
    for collection, count in written.items():
        print(f"  {collection}: {count} written")

    if args.admin_user:
        password = os.environ.get("LUMINA_ADMIN_PASSWORD")
        if not password:
            print("  LUMINA_ADMIN_PASSWORD is not set, skipping admin credentials")
            return 1
        credentials = AdminCredentialsService(SSMService())
        if credentials.ensure_credentials(args.admin_user, password):
            print(f"  Admin credentials stored under {credentials.prefix}/admin/")
        else:
            print("  Admin credentials already exist, left unchanged")

    print("\nSeed completed successfully!")
    return 0


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""Create DynamoDB tables for local development.

Creates every Durdle table (quotes, bookings, pricing, fixed routes, document
comments, admin users) against DynamoDB Local, and optionally seeds an admin
account.

Usage:
    python scripts/create_local_tables.py
    python scripts/create_local_tables.py --admin-user admin --admin-password secret
"""

import argparse
import sys
from pathlib import Path

import boto3
from botocore.exceptions import ClientError

# Add src to path for config import
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from core.config import get_config
from core.db.tables import table_definitions
from core.services.admin_auth import create_admin_user


def create_table(dynamodb, definition):
    name = definition["TableName"]
    try:
        dynamodb.create_table(**definition)
        print(f"✓ Created {name} table")
    except ClientError as e:
        if e.response["Error"]["Code"] == "ResourceInUseException":
            print(f"✓ {name} table already exists")
        else:
            raise


def main():
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--admin-user", help="seed an admin account with this username")
    parser.add_argument("--admin-password", help="password for the seeded admin account")
    args = parser.parse_args()

    config = get_config()
    endpoint_url = config.dynamodb_endpoint or "http://localhost:8000"

    print(f"Creating DynamoDB tables at {endpoint_url}...")
    print()

    # For DynamoDB Local, use dummy credentials
    dynamodb = boto3.client(
        "dynamodb",
        endpoint_url=endpoint_url,
        region_name=config.aws_region,
        aws_access_key_id="dummy",
        aws_secret_access_key="dummy",
    )

    for definition in table_definitions(config):
        create_table(dynamodb, definition)

    if args.admin_user:
        if not args.admin_password:
            parser.error("--admin-password is required with --admin-user")
        create_admin_user(args.admin_user, args.admin_password, dynamodb, config.admin_users_table)
        print(f"✓ Seeded admin user {args.admin_user.lower()}")

    print()
    print("✅ All DynamoDB tables ready")


if __name__ == "__main__":
    main()

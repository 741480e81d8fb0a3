#!/usr/bin/env python3
"""
Grant the admin claim (optionally superadmin) to an existing Firebase user.

Usage:
    python scripts/make_admin.py someone@example.com
    python scripts/make_admin.py someone@example.com --superadmin
"""
import argparse
import logging
import os
import sys

# Add the project root to the Python path
sys.path.append(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from kalikascan_admin.infrastructure import get_service_factory
from kalikascan_admin.infrastructure.exceptions import BaseServiceException

logger = logging.getLogger("make_admin")


def parse_args(argv=None):
    parser = argparse.ArgumentParser(description="Grant admin custom claims to a Firebase user")
    parser.add_argument("email", help="Email of an existing Firebase Auth user")
    parser.add_argument("--superadmin", action="store_true", help="Also grant the superadmin claim")
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    logging.basicConfig(level=logging.INFO, format='%(asctime)s - %(name)s - %(levelname)s - %(message)s')

    service = get_service_factory().create_admin_account_service()
    try:
        uid = service.grant_admin(args.email, superadmin=args.superadmin)
    except BaseServiceException as e:
        print(f"❌ {e.message}")
        return 1

    role = "superadmin" if args.superadmin else "admin"
    print(f"✅ {role} claim set for: {uid}")
    print("   The user has to sign in again for the new claim to reach their ID token.")
    return 0


if __name__ == "__main__":
    sys.exit(main())

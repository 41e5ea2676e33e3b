#!/usr/bin/env python3
"""
Create an admin account, or reset an existing account to an active admin.
Run with: python -m scripts.create_admin_user --code admin --password <password>
"""
import argparse
import logging
import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from file_manager.database import get_db
from file_manager.models import Roles, UserStatus
from file_manager.utils.validators import ValidationError, validate_employee_code, validate_password

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


def main():
    parser = argparse.ArgumentParser(description='Create or reset an admin user')
    parser.add_argument('--code', default='admin', help='Employee code (default: admin)')
    parser.add_argument('--password', required=True, help='Password (at least 6 characters)')
    parser.add_argument('--name', default='Administrator', help='Display name')
    parser.add_argument('--mobile', default='', help='Mobile number')
    args = parser.parse_args()

    try:
        validate_employee_code(args.code)
        validate_password(args.password)
    except ValidationError as e:
        logger.error(str(e))
        return 1

    db = get_db()
    if db.get_user(args.code):
        db.update_user(
            args.code,
            password=args.password,
            role=Roles.ADMIN,
            status=UserStatus.ACTIVE
        )
        logger.info(f"Existing user '{args.code}' reset to active admin")
    else:
        db.create_user(
            args.code, args.password, args.name, args.mobile,
            role=Roles.ADMIN, status=UserStatus.ACTIVE
        )
        logger.info(f"Admin user '{args.code}' created")
    return 0


if __name__ == '__main__':
    sys.exit(main())

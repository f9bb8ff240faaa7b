"""Bootstrap the first admin account.

Self-registration only ever creates MEMBERs and every other admin
operation needs an admin caller, so a fresh database gets its first
admin from the command line:

    python -m camp_core.db.seed admin@example.com "Camp Lead" --password ...

An existing member with that email is promoted to ADMIN (and reactivated);
the password is only set when one is given.
"""

import argparse
import getpass
import logging
import sys

from ..auth.passwords import PasswordHasher
from ..auth.schemas import Member, Role
from ..auth.schemas.auth import PASSWORD_MIN_LENGTH
from ..config import Settings, get_settings
from . import get_core, init_db

logger = logging.getLogger(__name__)


def ensure_admin(
    settings: Settings,
    email: str,
    name: str,
    password: str | None = None,
) -> tuple[Member, bool]:
    """Create or promote an admin.

    Args:
        settings: Supplies database_path and bcrypt_work_factor
        email: Admin email (normalized before lookup)
        name: Display name for a newly created admin
        password: Optional password; a new admin without one stays Invited

    Returns:
        (member, created) where created is False for a promoted member
    """
    init_db(settings.database_path)
    hasher = PasswordHasher.from_settings(settings)
    password_hash = hasher.hash(password) if password else None

    with get_core(settings.database_path, atomic=True) as core:
        existing = core.member.get_by_email(email)
        if existing is None:
            member = core.member.create(
                email=email,
                name=name,
                role=Role.ADMIN,
                password_hash=password_hash,
                email_verified=password_hash is not None,
            )
            logger.info(f"Admin created: {member.email}")
            return member, True

        core.member.set_role(existing.id, Role.ADMIN)
        core.member.set_active(existing.id, True)
        if password_hash is not None:
            core.member.set_password_hash(existing.id, password_hash)
        logger.info(f"Existing member promoted to admin: {existing.email}")
        return core.member.get_by_id(existing.id), False


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Create or promote a Camp Core admin.")
    parser.add_argument("email")
    parser.add_argument("name")
    parser.add_argument("--password", help="Password to set (prompted if omitted)")
    parser.add_argument(
        "--no-password",
        action="store_true",
        help="Leave the password unset; the admin must be sent an invite",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    )

    password = None
    if not args.no_password:
        password = args.password or getpass.getpass("Password: ")
        if len(password) < PASSWORD_MIN_LENGTH:
            print(f"Password must be at least {PASSWORD_MIN_LENGTH} characters", file=sys.stderr)
            return 1

    member, created = ensure_admin(get_settings(), args.email, args.name, password)
    action = "Created" if created else "Promoted"
    print(f"✅ {action} admin {member.email} ({member.id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())

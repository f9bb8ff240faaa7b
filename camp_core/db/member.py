"""Member record operations.

IMPORT CONVENTION:
- Core accesses these through core.member property
- NO direct import needed when using Core API

Emails are normalized (trimmed, lowercased) on every read and write here,
so callers can pass raw input.
"""

import sqlite3

from ..auth.schemas import Member, Role, normalize_email
from ..exceptions import DuplicateEmail
from ..utils import isodatetime, uid
from .query import build_update_clause

# Columns a profile update may touch
PROFILE_COLUMNS = frozenset({"name", "playa_name", "phone"})


def _escape_like(term: str) -> str:
    """Escape LIKE wildcards so they match literally (used with ESCAPE '\\')."""
    return term.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def _row_to_member(row: sqlite3.Row) -> Member:
    return Member(
        id=row["id"],
        email=row["email"],
        name=row["name"],
        playa_name=row["playa_name"],
        phone=row["phone"],
        password_hash=row["password_hash"],
        role=Role(row["role"]),
        is_active=bool(row["is_active"]),
        email_verified=bool(row["email_verified"]),
        created_at=isodatetime.to_datetime(row["created_at"]),
        updated_at=isodatetime.to_datetime(row["updated_at"]),
    )


class MemberOperations:
    """Member CRUD against the members table."""

    def __init__(self, conn: sqlite3.Connection):
        """Initialize member operations with a database connection.

        Args:
            conn: SQLite connection with row_factory set to sqlite3.Row
        """
        self._conn = conn

    def get_by_id(self, member_id: str) -> Member | None:
        row = self._conn.execute(
            "SELECT * FROM members WHERE id = ?",
            (member_id,)
        ).fetchone()
        return _row_to_member(row) if row else None

    def get_by_email(self, email: str) -> Member | None:
        row = self._conn.execute(
            "SELECT * FROM members WHERE email = ?",
            (normalize_email(email),)
        ).fetchone()
        return _row_to_member(row) if row else None

    def create(
        self,
        email: str,
        name: str,
        role: Role = Role.MEMBER,
        password_hash: str | None = None,
        playa_name: str | None = None,
        phone: str | None = None,
        is_active: bool = True,
        email_verified: bool = False,
    ) -> Member:
        """Insert a member with an auto-generated UUID.

        Raises:
            DuplicateEmail: If a member with the normalized email exists
        """
        member_id = uid.generate_uuid()
        normalized = normalize_email(email)
        now = isodatetime.now()

        try:
            self._conn.execute(
                """INSERT INTO members
                   (id, email, name, playa_name, phone, password_hash, role,
                    is_active, email_verified, created_at, updated_at)
                   VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)""",
                (
                    member_id, normalized, name, playa_name, phone, password_hash,
                    Role(role).value, int(is_active), int(email_verified), now, now,
                )
            )
        except sqlite3.IntegrityError as e:
            if "members.email" in str(e):
                raise DuplicateEmail(
                    "A member with this email already exists",
                    {"email": normalized}
                )
            raise

        return self.get_by_id(member_id)

    def _update(self, member_id: str, clause: str, params: list, condition: str = "") -> bool:
        cursor = self._conn.execute(
            f"UPDATE members SET {clause}, updated_at = ? WHERE id = ?{condition}",
            [*params, isodatetime.now(), member_id]
        )
        return cursor.rowcount > 0

    def set_password_hash(
        self,
        member_id: str,
        password_hash: str,
        email_verified: bool | None = None,
        only_if_unset: bool = False
    ) -> bool:
        """Set the password hash, optionally flipping email_verified in the same statement.

        With only_if_unset, the row is written only while password_hash is
        NULL, so of two concurrent first-password writes exactly one wins.

        Returns:
            True if a row was updated
        """
        condition = " AND password_hash IS NULL" if only_if_unset else ""
        if email_verified is None:
            return self._update(member_id, "password_hash = ?", [password_hash], condition)
        return self._update(
            member_id,
            "password_hash = ?, email_verified = ?",
            [password_hash, int(email_verified)],
            condition
        )

    def set_active(self, member_id: str, is_active: bool) -> bool:
        return self._update(member_id, "is_active = ?", [int(is_active)])

    def set_role(self, member_id: str, role: Role) -> bool:
        return self._update(member_id, "role = ?", [Role(role).value])

    def update_profile(self, member_id: str, fields: dict) -> bool:
        """Update profile columns; None values are left unchanged.

        Raises:
            ValueError: If fields names a non-profile column
        """
        unknown = set(fields) - PROFILE_COLUMNS
        if unknown:
            raise ValueError(f"Not profile columns: {sorted(unknown)}")

        clause, params = build_update_clause(fields)
        if not clause:
            return self.get_by_id(member_id) is not None
        return self._update(member_id, clause, params)

    def list_pending(
        self,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0
    ) -> tuple[list[Member], int]:
        """List active members that have not set a password, newest first.

        Args:
            search: Case-insensitive substring matched against name or email
            limit: Maximum rows to return
            offset: Rows to skip

        Returns:
            (members, total) where total ignores limit/offset
        """
        where = "password_hash IS NULL AND is_active = 1"
        params: list = []
        if search:
            where += " AND (LOWER(name) LIKE ? ESCAPE '\\' OR email LIKE ? ESCAPE '\\')"
            pattern = f"%{_escape_like(search.strip().lower())}%"
            params.extend([pattern, pattern])

        total = self._conn.execute(
            f"SELECT COUNT(*) FROM members WHERE {where}",
            params
        ).fetchone()[0]

        rows = self._conn.execute(
            f"""SELECT * FROM members WHERE {where}
                ORDER BY created_at DESC, rowid DESC
                LIMIT ? OFFSET ?""",
            [*params, limit, offset]
        ).fetchall()

        return [_row_to_member(row) for row in rows], total


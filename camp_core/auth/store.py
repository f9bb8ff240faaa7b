"""Credential store consumed by the account service.

MemberStore is the narrow interface the auth core needs from persistence.
SqliteMemberStore implements it over camp_core.db, one atomic Core per
operation, so each update is a single committed statement.
"""

import logging
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Protocol

from ..db import Core, get_core
from ..exceptions import DatabaseError
from .schemas import Member, Role

logger = logging.getLogger(__name__)


class MemberStore(Protocol):
    """Member records keyed by id and by normalized email.

    Update methods return the updated member, or None if no member has
    that id. update_password_hash with only_if_unset also returns None when
    the member already has a password.
    """

    def find_by_email(self, email: str) -> Member | None: ...

    def find_by_id(self, member_id: str) -> Member | None: ...

    def create(
        self,
        *,
        email: str,
        name: str,
        role: Role = Role.MEMBER,
        password_hash: str | None = None,
        playa_name: str | None = None,
        phone: str | None = None,
        email_verified: bool = False,
    ) -> Member: ...

    def update_password_hash(
        self,
        member_id: str,
        password_hash: str,
        email_verified: bool | None = None,
        only_if_unset: bool = False,
    ) -> Member | None: ...

    def update_active(self, member_id: str, is_active: bool) -> Member | None: ...

    def update_role(self, member_id: str, role: Role) -> Member | None: ...

    def update_profile(self, member_id: str, fields: dict) -> Member | None: ...

    def list_pending(
        self,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Member], int]: ...


class SqliteMemberStore:
    """MemberStore backed by the SQLite members table."""

    def __init__(self, database_path: str):
        self.database_path = database_path

    @contextmanager
    def _core(self) -> Iterator[Core]:
        try:
            with get_core(self.database_path, atomic=True) as core:
                yield core
        except sqlite3.Error as e:
            logger.exception(f"Member store failure: {e}")
            raise DatabaseError("Database operation failed")

    def find_by_email(self, email: str) -> Member | None:
        with self._core() as core:
            return core.member.get_by_email(email)

    def find_by_id(self, member_id: str) -> Member | None:
        with self._core() as core:
            return core.member.get_by_id(member_id)

    def create(
        self,
        *,
        email: str,
        name: str,
        role: Role = Role.MEMBER,
        password_hash: str | None = None,
        playa_name: str | None = None,
        phone: str | None = None,
        email_verified: bool = False,
    ) -> Member:
        with self._core() as core:
            return core.member.create(
                email=email,
                name=name,
                role=role,
                password_hash=password_hash,
                playa_name=playa_name,
                phone=phone,
                email_verified=email_verified,
            )

    def update_password_hash(
        self,
        member_id: str,
        password_hash: str,
        email_verified: bool | None = None,
        only_if_unset: bool = False,
    ) -> Member | None:
        with self._core() as core:
            if not core.member.set_password_hash(
                member_id, password_hash, email_verified, only_if_unset
            ):
                return None
            return core.member.get_by_id(member_id)

    def update_active(self, member_id: str, is_active: bool) -> Member | None:
        with self._core() as core:
            if not core.member.set_active(member_id, is_active):
                return None
            return core.member.get_by_id(member_id)

    def update_role(self, member_id: str, role: Role) -> Member | None:
        with self._core() as core:
            if not core.member.set_role(member_id, role):
                return None
            return core.member.get_by_id(member_id)

    def update_profile(self, member_id: str, fields: dict) -> Member | None:
        with self._core() as core:
            if not core.member.update_profile(member_id, fields):
                return None
            return core.member.get_by_id(member_id)

    def list_pending(
        self,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> tuple[list[Member], int]:
        with self._core() as core:
            return core.member.list_pending(search, limit, offset)

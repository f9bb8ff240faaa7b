"""Member, identity and token schemas."""

from datetime import datetime
from enum import Enum
from typing import Annotated

from pydantic import BaseModel, BeforeValidator, ConfigDict, EmailStr, Field


def normalize_email(value: str) -> str:
    """Lowercase and trim an email address.

    Every lookup and every write goes through this so that exactly one
    member exists per normalized email.
    """
    return value.strip().lower()


def _normalize_email_input(value):
    if isinstance(value, str):
        return normalize_email(value)
    return value


NormalizedEmail = Annotated[EmailStr, BeforeValidator(_normalize_email_input)]


class Role(str, Enum):
    """Member roles. ADMIN includes MANAGER includes MEMBER."""

    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    MEMBER = "MEMBER"

    @property
    def rank(self) -> int:
        return _ROLE_RANK[self]

    def at_least(self, other: "Role") -> bool:
        """True if this role grants everything ``other`` grants."""
        return self.rank >= other.rank


_ROLE_RANK = {Role.MEMBER: 0, Role.MANAGER: 1, Role.ADMIN: 2}


class TokenKind(str, Enum):
    """Discriminator embedded in every non-access token."""

    ACCESS = "access"
    REFRESH = "refresh"
    INVITE = "invite"
    RESET = "reset"


class Member(BaseModel):
    """Full member record as held by the credential store.

    Carries password_hash, so it never leaves the service layer; use
    MemberResponse for anything returned to a client.
    """

    id: str
    email: str
    name: str
    playa_name: str | None = None
    phone: str | None = None
    password_hash: str | None = None
    role: Role = Role.MEMBER
    is_active: bool = True
    email_verified: bool = False
    created_at: datetime
    updated_at: datetime

    @property
    def has_password(self) -> bool:
        return self.password_hash is not None

    @property
    def is_invited(self) -> bool:
        """Active and never set a password."""
        return self.is_active and self.password_hash is None


class MemberResponse(BaseModel):
    """Public member view (no credential fields)."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    playa_name: str | None = None
    phone: str | None = None
    role: Role
    is_active: bool
    email_verified: bool
    created_at: datetime

    @classmethod
    def from_member(cls, member: Member) -> "MemberResponse":
        return cls.model_validate(member.model_dump())


class Identity(BaseModel):
    """Authenticated caller, resolved once per request."""

    model_config = ConfigDict(frozen=True)

    id: str
    email: str
    role: Role


class TokenPayload(BaseModel):
    """Decoded and verified token claims."""

    sub: str = Field(..., description="Member ID")
    kind: TokenKind
    role: Role | None = None
    iat: int
    exp: int | None = None

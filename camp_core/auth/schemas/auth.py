"""Request and response schemas for the auth and invitation endpoints."""

from typing import Literal

from pydantic import BaseModel, Field, field_validator

from .member import MemberResponse, NormalizedEmail, Role


PASSWORD_MIN_LENGTH = 8
PASSWORD_MAX_LENGTH = 128


# ============================================================================
# Requests
# ============================================================================


class RegisterRequest(BaseModel):
    """Public self-service registration."""

    email: NormalizedEmail
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)
    name: str = Field(..., min_length=1, max_length=100)
    playa_name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=20)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Name is required")
        return v


class LoginRequest(BaseModel):
    email: NormalizedEmail
    password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LENGTH)


class RefreshRequest(BaseModel):
    refresh_token: str = Field(..., min_length=1)


class ForgotPasswordRequest(BaseModel):
    email: NormalizedEmail


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)


class ChangePasswordRequest(BaseModel):
    current_password: str = Field(..., min_length=1, max_length=PASSWORD_MAX_LENGTH)
    new_password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)


class AcceptInviteRequest(BaseModel):
    invite_token: str = Field(..., min_length=1)
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH, max_length=PASSWORD_MAX_LENGTH)


class InviteCreate(BaseModel):
    """Admin invite for a single member."""

    email: NormalizedEmail
    name: str = Field(..., min_length=1, max_length=100)
    role: Role = Role.MEMBER
    playa_name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=20)


class BulkInviteEntry(BaseModel):
    email: NormalizedEmail
    name: str = Field(..., min_length=1, max_length=100)
    role: Role = Role.MEMBER


class BulkInviteCreate(BaseModel):
    invites: list[BulkInviteEntry] = Field(..., min_length=1)


class InviteTokenQuery(BaseModel):
    token: str = Field(..., min_length=1)


class PendingInvitesQuery(BaseModel):
    search: str | None = Field(default=None, max_length=100)
    limit: int = Field(default=50, ge=1, le=200)
    offset: int = Field(default=0, ge=0)


class RoleUpdate(BaseModel):
    role: Role


class ProfileUpdate(BaseModel):
    """Partial profile update; omitted fields are left unchanged."""

    name: str | None = Field(default=None, min_length=1, max_length=100)
    playa_name: str | None = Field(default=None, max_length=100)
    phone: str | None = Field(default=None, max_length=20)


# ============================================================================
# Responses
# ============================================================================


class TokenResponse(BaseModel):
    """Token pair issued by login, refresh and invite acceptance."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int = Field(..., description="Access token lifetime in seconds")
    user: MemberResponse


class MessageResponse(BaseModel):
    success: bool = True
    message: str


class InviteResponse(BaseModel):
    member: MemberResponse
    invite_token: str
    resent: bool = False


class ResendInviteResponse(BaseModel):
    member_id: str
    email: str
    invite_token: str


class InviteMemberSummary(BaseModel):
    email: str
    name: str
    role: Role | None = None


class InviteValidation(BaseModel):
    """Read-only invite check result."""

    valid: bool
    accepted: bool
    message: str
    member: InviteMemberSummary


BulkInviteStatus = Literal["created", "resent", "already_active", "error"]


class BulkInviteResult(BaseModel):
    email: str
    status: BulkInviteStatus
    invite_token: str | None = None
    error: str | None = None


class BulkInviteSummary(BaseModel):
    created: int = 0
    resent: int = 0
    skipped: int = 0
    errors: int = 0


class BulkInviteResponse(BaseModel):
    results: list[BulkInviteResult]
    summary: BulkInviteSummary


class PendingInvitesResponse(BaseModel):
    invitations: list[MemberResponse]
    total: int

"""Authentication Pydantic schemas for API validation."""

from .auth import (
    AcceptInviteRequest,
    BulkInviteCreate,
    BulkInviteEntry,
    BulkInviteResponse,
    BulkInviteResult,
    BulkInviteSummary,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    InviteCreate,
    InviteMemberSummary,
    InviteResponse,
    InviteTokenQuery,
    InviteValidation,
    LoginRequest,
    MessageResponse,
    PendingInvitesQuery,
    PendingInvitesResponse,
    ProfileUpdate,
    RefreshRequest,
    RegisterRequest,
    ResendInviteResponse,
    ResetPasswordRequest,
    RoleUpdate,
    TokenResponse,
)
from .member import (
    Identity,
    Member,
    MemberResponse,
    Role,
    TokenKind,
    TokenPayload,
    normalize_email,
)

__all__ = [
    "AcceptInviteRequest",
    "BulkInviteCreate",
    "BulkInviteEntry",
    "BulkInviteResponse",
    "BulkInviteResult",
    "BulkInviteSummary",
    "ChangePasswordRequest",
    "ForgotPasswordRequest",
    "InviteCreate",
    "InviteMemberSummary",
    "InviteResponse",
    "InviteTokenQuery",
    "InviteValidation",
    "LoginRequest",
    "MessageResponse",
    "PendingInvitesQuery",
    "PendingInvitesResponse",
    "ProfileUpdate",
    "RefreshRequest",
    "RegisterRequest",
    "ResendInviteResponse",
    "ResetPasswordRequest",
    "RoleUpdate",
    "TokenResponse",
    "Identity",
    "Member",
    "MemberResponse",
    "Role",
    "TokenKind",
    "TokenPayload",
    "normalize_email",
]

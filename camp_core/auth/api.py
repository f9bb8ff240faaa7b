"""Authentication, invitation and member-management endpoints.

Blueprints:
- auth_bp         /auth/*         login, registration, tokens, passwords, profile
- invitations_bp  /invitations/*  invite issue, validate, accept, resend, revoke
- members_bp      /members/*      role changes, deactivation (admin)

Views are thin: each one validates its input, passes the request context
to AccountService and serializes the result. Every failure is a CampError
raised by the service and turned into a JSON error by the app's handlers.
"""

import logging

from flask import Blueprint, current_app, jsonify
from pydantic import BaseModel

from ..api.validation import validate_request
from .decorators import admin_required, auth_required, manager_required, public
from .guards import RequestContext
from .schemas import (
    AcceptInviteRequest,
    BulkInviteCreate,
    ChangePasswordRequest,
    ForgotPasswordRequest,
    InviteCreate,
    InviteTokenQuery,
    LoginRequest,
    MessageResponse,
    PendingInvitesQuery,
    ProfileUpdate,
    RefreshRequest,
    RegisterRequest,
    ResetPasswordRequest,
    RoleUpdate,
)
from .service import AccountService

logger = logging.getLogger(__name__)


auth_bp = Blueprint("auth", __name__, url_prefix="/auth")
invitations_bp = Blueprint("invitations", __name__, url_prefix="/invitations")
members_bp = Blueprint("members", __name__, url_prefix="/members")


def get_accounts() -> AccountService:
    """AccountService bound to the current app by create_app()."""
    return current_app.extensions["camp"].accounts


def _json(model: BaseModel, status: int = 200):
    return jsonify(model.model_dump(mode="json")), status


# ============================================================================
# Login, registration and tokens
# ============================================================================


@auth_bp.post("/register")
@public
@validate_request
def register(ctx: RequestContext, data: RegisterRequest):
    """
    Self-service registration.

    Creates an active member with role MEMBER.

    Returns:
        201: MemberResponse
        400: Validation error
        409: Email already registered
    """
    return _json(get_accounts().register(data), 201)


@auth_bp.post("/login")
@public
@validate_request
def login(ctx: RequestContext, data: LoginRequest):
    """
    Authenticate with email and password.

    Example request:
    ```json
    {
        "email": "alice@example.com",
        "password": "longenough1"
    }
    ```

    Returns:
        200: TokenResponse (access_token, refresh_token, token_type, expires_in, user)
        401: Invalid email or password
        403: Account deactivated
    """
    return _json(get_accounts().login(data.email, data.password))


@auth_bp.post("/refresh")
@public
@validate_request
def refresh(ctx: RequestContext, data: RefreshRequest):
    """Exchange a refresh token for a new token pair."""
    return _json(get_accounts().refresh(data.refresh_token))


@auth_bp.post("/logout")
@public
def logout(ctx: RequestContext):
    """
    Logout (stateless).

    Tokens are self-validating; the client discards them. Always succeeds.
    """
    if ctx.identity is not None:
        logger.info(f"Logout: {ctx.identity.email}")
    return _json(MessageResponse(message="Logged out successfully"))


# ============================================================================
# Passwords
# ============================================================================


@auth_bp.post("/forgot-password")
@public
@validate_request
def forgot_password(ctx: RequestContext, data: ForgotPasswordRequest):
    """
    Request a password reset link.

    Always returns 200 with the same body, whether or not the email exists.
    """
    return _json(get_accounts().forgot_password(data.email))


@auth_bp.post("/reset-password")
@public
@validate_request
def reset_password(ctx: RequestContext, data: ResetPasswordRequest):
    """
    Set a new password using a reset token.

    Returns:
        200: MessageResponse
        400: Invalid, expired or wrong-kind token
        404: Member no longer exists
    """
    return _json(get_accounts().reset_password(data.token, data.new_password))


@auth_bp.post("/change-password")
@auth_required
@validate_request
def change_password(ctx: RequestContext, data: ChangePasswordRequest):
    """
    Change the caller's password.

    Returns:
        200: MessageResponse
        400: New password equals current, or current password is wrong
        401: Not authenticated
    """
    return _json(get_accounts().change_password(
        ctx.identity, data.current_password, data.new_password
    ))


# ============================================================================
# Profile
# ============================================================================


@auth_bp.get("/me")
@auth_required
def get_me(ctx: RequestContext):
    """Current member's profile."""
    return _json(get_accounts().get_profile(ctx.identity))


@auth_bp.patch("/me")
@auth_required
@validate_request
def update_me(ctx: RequestContext, data: ProfileUpdate):
    """Update name, playa_name or phone; omitted fields are unchanged."""
    return _json(get_accounts().update_profile(ctx.identity, data))


# ============================================================================
# Invitations
# ============================================================================


@invitations_bp.post("")
@admin_required
@validate_request
def create_invitation(ctx: RequestContext, data: InviteCreate):
    """
    Invite a member by email.

    Re-inviting a pending invitee issues a fresh token (resent=true)
    instead of creating a second record.

    Returns:
        201: InviteResponse
        409: Member already accepted an invite
    """
    result = get_accounts().invite(data, ctx.identity)
    return _json(result, 200 if result.resent else 201)


@invitations_bp.post("/bulk")
@admin_required
@validate_request
def bulk_invitations(ctx: RequestContext, data: BulkInviteCreate):
    """
    Invite several members at once.

    Each entry reports created, resent, already_active or error, and a
    summary counts each outcome.
    """
    return _json(get_accounts().bulk_invite(data.invites, ctx.identity))


@invitations_bp.get("/validate")
@public
@validate_request
def validate_invitation(ctx: RequestContext, data: InviteTokenQuery):
    """
    Pre-flight an invite token without consuming it.

    Returns:
        200: InviteValidation (valid / already accepted / deactivated)
        400: Invalid, expired or wrong-kind token
        404: Member no longer exists
    """
    return _json(get_accounts().validate_invite(data.token))


@invitations_bp.post("/accept")
@public
@validate_request
def accept_invitation(ctx: RequestContext, data: AcceptInviteRequest):
    """
    Accept an invite by setting a first password.

    Returns:
        200: TokenResponse
        400: Invalid token, or invite already accepted
        403: Invitation revoked
        404: Member no longer exists
    """
    return _json(get_accounts().accept_invite(data.invite_token, data.password))


@invitations_bp.get("/pending")
@manager_required
@validate_request
def pending_invitations(ctx: RequestContext, data: PendingInvitesQuery):
    """Active invitees who have not yet set a password, newest first."""
    return _json(get_accounts().list_pending_invites(data.search, data.limit, data.offset))


@invitations_bp.post("/<member_id>/resend")
@admin_required
def resend_invitation(ctx: RequestContext, member_id: str):
    """Issue a new invite token for a pending invitee."""
    return _json(get_accounts().resend_invite(member_id, ctx.identity))


@invitations_bp.post("/<member_id>/revoke")
@admin_required
def revoke_invitation(ctx: RequestContext, member_id: str):
    """Revoke a pending invitation; accepted members must be deactivated instead."""
    return _json(get_accounts().revoke_invite(member_id, ctx.identity))


# ============================================================================
# Member management
# ============================================================================


@members_bp.patch("/<member_id>/role")
@admin_required
@validate_request
def update_role(ctx: RequestContext, member_id: str, data: RoleUpdate):
    """
    Change a member's role.

    Returns:
        200: MemberResponse
        400: Caller targeted themselves, or unknown role
        404: Member not found
    """
    return _json(get_accounts().update_role(ctx.identity, member_id, data.role))


@members_bp.post("/<member_id>/deactivate")
@admin_required
def deactivate_member(ctx: RequestContext, member_id: str):
    return _json(get_accounts().deactivate(ctx.identity, member_id))


@members_bp.post("/<member_id>/reactivate")
@admin_required
def reactivate_member(ctx: RequestContext, member_id: str):
    return _json(get_accounts().reactivate(ctx.identity, member_id))

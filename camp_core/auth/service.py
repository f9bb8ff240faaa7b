"""Account lifecycle operations.

Credential states a member moves through:

    Invited      is_active, no password_hash
    Active       password_hash set
    Deactivated  not is_active
    Revoked      not is_active, no password_hash

Every failure is raised as a CampError subclass carrying its transport
code; nothing here knows about HTTP.
"""

import logging

from ..exceptions import (
    AccountDeactivated,
    AlreadyAccepted,
    CampError,
    DuplicateEmail,
    InvalidCredentials,
    InvalidState,
    ResourceNotFound,
    SelfActionForbidden,
    TokenExpired,
    TokenInvalid,
    TokenKindMismatch,
    ValidationError,
)
from .mail import LogMailer, Mailer
from .passwords import PasswordHasher
from .schemas import (
    BulkInviteEntry,
    BulkInviteResponse,
    BulkInviteResult,
    BulkInviteSummary,
    Identity,
    InviteCreate,
    InviteMemberSummary,
    InviteResponse,
    InviteValidation,
    Member,
    MemberResponse,
    MessageResponse,
    PendingInvitesResponse,
    ProfileUpdate,
    RegisterRequest,
    ResendInviteResponse,
    Role,
    TokenKind,
    TokenPayload,
    TokenResponse,
    normalize_email,
)
from .store import MemberStore
from .token import TokenService

logger = logging.getLogger(__name__)


# Shared by every login failure so responses never reveal which check failed
INVALID_LOGIN_MESSAGE = "Invalid email or password"

FORGOT_PASSWORD_MESSAGE = (
    "If an account with that email exists, a password reset link has been sent."
)


class AccountService:
    """Registration, login, refresh, invites, password and role management."""

    def __init__(
        self,
        store: MemberStore,
        tokens: TokenService,
        hasher: PasswordHasher,
        mailer: Mailer | None = None,
        bulk_invite_limit: int = 50,
    ):
        self.store = store
        self.tokens = tokens
        self.hasher = hasher
        self.mailer = mailer or LogMailer()
        self.bulk_invite_limit = bulk_invite_limit

    # ========================================================================
    # Helpers
    # ========================================================================

    def _issue_tokens(self, member: Member) -> TokenResponse:
        return TokenResponse(
            access_token=self.tokens.sign_access(member.id, member.role),
            refresh_token=self.tokens.sign_refresh(member.id),
            expires_in=int(self.tokens.access_ttl.total_seconds()),
            user=MemberResponse.from_member(member),
        )

    def _get_member(self, member_id: str, message: str = "Member not found") -> Member:
        member = self.store.find_by_id(member_id)
        if member is None:
            raise ResourceNotFound(message, {"member_id": member_id})
        return member

    def _verify_invite_token(self, token: str) -> TokenPayload:
        """Verify an invite token; expiry gets its own message."""
        try:
            return self.tokens.verify(token, TokenKind.INVITE)
        except TokenExpired:
            raise TokenExpired(
                "This invite has expired. Please request a new one.",
                {"code": "invite_expired"}
            )
        except TokenKindMismatch:
            raise TokenKindMismatch("Invalid token type", {"code": "wrong_token_type"})
        except TokenInvalid:
            raise TokenInvalid("Invalid invite token", {"code": "invalid_token"})

    # ========================================================================
    # Registration, login, refresh
    # ========================================================================

    def register(self, data: RegisterRequest) -> MemberResponse:
        """Create an Active member with role MEMBER.

        Raises:
            DuplicateEmail: If the email is already taken
        """
        if self.store.find_by_email(data.email) is not None:
            raise DuplicateEmail(
                "A member with this email already exists",
                {"email": data.email}
            )

        member = self.store.create(
            email=data.email,
            name=data.name,
            role=Role.MEMBER,
            password_hash=self.hasher.hash(data.password),
            playa_name=data.playa_name,
            phone=data.phone,
        )

        logger.info(f"Member registered: {member.email}")
        return MemberResponse.from_member(member)

    def login(self, email: str, password: str) -> TokenResponse:
        """Authenticate with email and password.

        Raises:
            InvalidCredentials: Unknown email, no password set, or wrong password
                (one message for all three)
            AccountDeactivated: Correct credentials on an inactive member
        """
        member = self.store.find_by_email(email)

        if (
            member is None
            or not member.has_password
            or not self.hasher.verify(password, member.password_hash)
        ):
            logger.warning(f"Failed login attempt for email: {normalize_email(email)}")
            raise InvalidCredentials(INVALID_LOGIN_MESSAGE)

        if not member.is_active:
            logger.warning(f"Login attempt on deactivated account: {member.email}")
            raise AccountDeactivated("This account has been deactivated")

        logger.info(f"Successful login: {member.email}")
        return self._issue_tokens(member)

    def refresh(self, refresh_token: str) -> TokenResponse:
        """Exchange a refresh token for a new access/refresh pair.

        Raises:
            InvalidCredentials: Bad, expired or wrong-kind token, or unknown subject
            AccountDeactivated: Subject is inactive
        """
        try:
            payload = self.tokens.verify(refresh_token, TokenKind.REFRESH)
        except TokenInvalid:
            raise InvalidCredentials("Invalid refresh token")

        member = self.store.find_by_id(payload.sub)
        if member is None:
            raise InvalidCredentials("Invalid refresh token")
        if not member.is_active:
            raise AccountDeactivated("This account has been deactivated")

        return self._issue_tokens(member)

    # ========================================================================
    # Invitations
    # ========================================================================

    def invite(self, data: InviteCreate, actor: Identity) -> InviteResponse:
        """Create an Invited member, or re-issue the invite if one is pending.

        Raises:
            DuplicateEmail: The member has accepted an invite, or their
                invitation was revoked
        """
        existing = self.store.find_by_email(data.email)

        if existing is not None:
            if not existing.is_invited:
                message = (
                    "A member with this email already exists and has accepted their invite"
                    if existing.has_password
                    else "A member with this email exists and their invitation was revoked"
                )
                raise DuplicateEmail(message, {"email": existing.email})

            invite_token = self.tokens.sign_invite(existing.id)
            self.mailer.send_invite(existing.email, existing.name, invite_token)
            logger.info(f"Invite re-sent for {existing.email} by {actor.email}")
            return InviteResponse(
                member=MemberResponse.from_member(existing),
                invite_token=invite_token,
                resent=True,
            )

        member = self.store.create(
            email=data.email,
            name=data.name,
            role=data.role,
            playa_name=data.playa_name,
            phone=data.phone,
        )
        invite_token = self.tokens.sign_invite(member.id)
        self.mailer.send_invite(member.email, member.name, invite_token)

        logger.info(f"Invitation created for {member.email} by {actor.email}")
        return InviteResponse(
            member=MemberResponse.from_member(member),
            invite_token=invite_token,
            resent=False,
        )

    def bulk_invite(self, entries: list[BulkInviteEntry], actor: Identity) -> BulkInviteResponse:
        """Invite many members; each entry succeeds or fails on its own.

        Raises:
            ValidationError: More entries than bulk_invite_limit
        """
        if len(entries) > self.bulk_invite_limit:
            raise ValidationError(
                f"Maximum {self.bulk_invite_limit} invites at a time",
                {"count": len(entries)}
            )

        results = []
        summary = BulkInviteSummary()

        for entry in entries:
            email = normalize_email(entry.email)
            try:
                existing = self.store.find_by_email(email)
                if existing is not None and existing.has_password:
                    results.append(BulkInviteResult(email=email, status="already_active"))
                    summary.skipped += 1
                    continue

                response = self.invite(
                    InviteCreate(email=email, name=entry.name, role=entry.role),
                    actor,
                )
            except CampError as e:
                logger.warning(f"Bulk invite failed for {email}: {e.message}")
                results.append(BulkInviteResult(email=email, status="error", error=e.message))
                summary.errors += 1
                continue

            if response.resent:
                summary.resent += 1
            else:
                summary.created += 1
            results.append(BulkInviteResult(
                email=email,
                status="resent" if response.resent else "created",
                invite_token=response.invite_token,
            ))

        logger.info(
            f"Bulk invitations by {actor.email}: {summary.created} created, "
            f"{summary.resent} resent, {summary.skipped} skipped, {summary.errors} errors"
        )
        return BulkInviteResponse(results=results, summary=summary)

    def validate_invite(self, token: str) -> InviteValidation:
        """Check an invite token without consuming it.

        Raises:
            TokenInvalid: Bad, expired (TokenExpired) or wrong-kind token
            ResourceNotFound: Subject no longer exists
        """
        payload = self._verify_invite_token(token)
        member = self._get_member(
            payload.sub, "The member associated with this invite no longer exists"
        )

        if member.has_password:
            return InviteValidation(
                valid=False,
                accepted=True,
                message="This invite has already been accepted. Please log in instead.",
                member=InviteMemberSummary(email=member.email, name=member.name),
            )

        if not member.is_active:
            return InviteValidation(
                valid=False,
                accepted=False,
                message="This member account has been deactivated.",
                member=InviteMemberSummary(email=member.email, name=member.name),
            )

        return InviteValidation(
            valid=True,
            accepted=False,
            message="Invite is valid. Set a password to complete registration.",
            member=InviteMemberSummary(email=member.email, name=member.name, role=member.role),
        )

    def accept_invite(self, invite_token: str, password: str) -> TokenResponse:
        """Set the first password for an Invited member and sign them in.

        Raises:
            TokenInvalid: Bad, expired or wrong-kind token
            ResourceNotFound: Subject no longer exists
            AlreadyAccepted: Subject already has a password
            AccountDeactivated: Invitation was revoked
        """
        payload = self._verify_invite_token(invite_token)
        member = self._get_member(
            payload.sub, "The member associated with this invite no longer exists"
        )

        if member.has_password:
            raise AlreadyAccepted(
                "This invite has already been accepted. Please log in instead.",
                {"member_id": member.id}
            )
        if not member.is_active:
            raise AccountDeactivated("This invitation has been revoked")

        updated = self.store.update_password_hash(
            member.id, self.hasher.hash(password), email_verified=True, only_if_unset=True
        )
        if updated is None:
            # Another accept set the password between the check and the write
            if self.store.find_by_id(member.id) is not None:
                raise AlreadyAccepted(
                    "This invite has already been accepted. Please log in instead.",
                    {"member_id": member.id}
                )
            raise ResourceNotFound(
                "The member associated with this invite no longer exists",
                {"member_id": member.id}
            )

        logger.info(f"Invite accepted: {updated.email}")
        return self._issue_tokens(updated)

    def resend_invite(self, member_id: str, actor: Identity) -> ResendInviteResponse:
        """Mint a new invite token for a pending invitee.

        Raises:
            ResourceNotFound: Unknown member
            InvalidState: Member already has a password or was revoked
        """
        member = self._get_member(member_id)

        if not member.is_invited:
            message = (
                "This member has already accepted their invite and set a password"
                if member.has_password
                else "This invitation has been revoked"
            )
            raise InvalidState(message, {"member_id": member_id})

        invite_token = self.tokens.sign_invite(member.id)
        self.mailer.send_invite(member.email, member.name, invite_token)

        logger.info(f"Invite resent for {member.email} by {actor.email}")
        return ResendInviteResponse(
            member_id=member.id,
            email=member.email,
            invite_token=invite_token,
        )

    def revoke_invite(self, member_id: str, actor: Identity) -> MemberResponse:
        """Deactivate a pending invitee so its invite token is no longer honoured.

        Raises:
            ResourceNotFound: Unknown member
            InvalidState: Member already accepted, or invitation already revoked
        """
        member = self._get_member(member_id)

        if not member.is_invited:
            message = (
                "Cannot revoke an accepted invitation. Deactivate the member instead."
                if member.has_password
                else "This invitation has already been revoked"
            )
            raise InvalidState(message, {"member_id": member_id})

        updated = self.store.update_active(member.id, False)
        if updated is None:
            raise ResourceNotFound("Member not found", {"member_id": member_id})

        logger.info(f"Invite revoked for {member.email} by {actor.email}")
        return MemberResponse.from_member(updated)

    def list_pending_invites(
        self,
        search: str | None = None,
        limit: int = 50,
        offset: int = 0,
    ) -> PendingInvitesResponse:
        members, total = self.store.list_pending(search, limit, offset)
        return PendingInvitesResponse(
            invitations=[MemberResponse.from_member(m) for m in members],
            total=total,
        )

    # ========================================================================
    # Passwords
    # ========================================================================

    def forgot_password(self, email: str) -> MessageResponse:
        """Start a password reset.

        Always returns the same success response. A reset token is minted
        and mailed only when an active member has this email.
        """
        try:
            member = self.store.find_by_email(email)
            if member is not None and member.is_active:
                reset_token = self.tokens.sign_reset(member.id)
                self.mailer.send_password_reset(member.email, reset_token)
                logger.info(f"Password reset requested for {member.email}")
            else:
                logger.info(f"Password reset requested for unknown or inactive email: {normalize_email(email)}")
        except Exception:
            # Response must not differ when lookup or delivery fails
            logger.exception("Password reset request failed")

        return MessageResponse(message=FORGOT_PASSWORD_MESSAGE)

    def reset_password(self, reset_token: str, new_password: str) -> MessageResponse:
        """Set a new password using a reset token.

        Raises:
            TokenInvalid: Bad, expired (TokenExpired) or wrong-kind token
            ResourceNotFound: Subject no longer exists
        """
        try:
            payload = self.tokens.verify(reset_token, TokenKind.RESET)
        except TokenExpired:
            raise TokenExpired(
                "This reset link has expired. Please request a new one.",
                {"code": "reset_expired"}
            )
        except TokenInvalid:
            raise TokenInvalid("Invalid or expired reset token", {"code": "invalid_token"})

        member = self._get_member(payload.sub)
        if self.store.update_password_hash(member.id, self.hasher.hash(new_password)) is None:
            raise ResourceNotFound("Member not found", {"member_id": member.id})

        logger.info(f"Password reset completed for {member.email}")
        return MessageResponse(
            message="Password reset successful. You can now log in with your new password."
        )

    def change_password(
        self,
        identity: Identity,
        current_password: str,
        new_password: str,
    ) -> MessageResponse:
        """Change the caller's password.

        Raises:
            ValidationError: New equals current, or current is wrong
            ResourceNotFound: Caller's record no longer exists
        """
        # Checked before touching the stored hash
        if new_password == current_password:
            raise ValidationError("New password must be different from the current password")

        member = self._get_member(identity.id)
        if not self.hasher.verify(current_password, member.password_hash):
            raise ValidationError("Current password is incorrect")

        self.store.update_password_hash(member.id, self.hasher.hash(new_password))

        logger.info(f"Password changed for {member.email}")
        return MessageResponse(message="Password changed successfully")

    # ========================================================================
    # Role and activation management (admin)
    # ========================================================================

    def update_role(self, actor: Identity, target_id: str, role: Role) -> MemberResponse:
        """Raises SelfActionForbidden if actor is target, ResourceNotFound if target is missing."""
        if actor.id == target_id:
            raise SelfActionForbidden("You cannot change your own role")

        updated = self.store.update_role(target_id, Role(role))
        if updated is None:
            raise ResourceNotFound("Member not found", {"member_id": target_id})

        logger.info(f"Role of {updated.email} set to {updated.role.value} by {actor.email}")
        return MemberResponse.from_member(updated)

    def deactivate(self, actor: Identity, target_id: str) -> MemberResponse:
        """Raises SelfActionForbidden, ResourceNotFound, or InvalidState if already inactive."""
        if actor.id == target_id:
            raise SelfActionForbidden("You cannot deactivate your own account")

        member = self._get_member(target_id)
        if not member.is_active:
            raise InvalidState("Member is already deactivated", {"member_id": target_id})

        updated = self.store.update_active(target_id, False)
        if updated is None:
            raise ResourceNotFound("Member not found", {"member_id": target_id})

        logger.info(f"Member {updated.email} deactivated by {actor.email}")
        return MemberResponse.from_member(updated)

    def reactivate(self, actor: Identity, target_id: str) -> MemberResponse:
        """Raises ResourceNotFound, or InvalidState if already active."""
        member = self._get_member(target_id)
        if member.is_active:
            raise InvalidState("Member is already active", {"member_id": target_id})

        updated = self.store.update_active(target_id, True)
        if updated is None:
            raise ResourceNotFound("Member not found", {"member_id": target_id})

        logger.info(f"Member {updated.email} reactivated by {actor.email}")
        return MemberResponse.from_member(updated)

    # ========================================================================
    # Profile
    # ========================================================================

    def get_profile(self, identity: Identity) -> MemberResponse:
        return MemberResponse.from_member(self._get_member(identity.id))

    def update_profile(self, identity: Identity, data: ProfileUpdate) -> MemberResponse:
        updated = self.store.update_profile(identity.id, data.model_dump(exclude_none=True))
        if updated is None:
            raise ResourceNotFound("Member not found", {"member_id": identity.id})
        return MemberResponse.from_member(updated)

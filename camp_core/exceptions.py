"""Custom exceptions for Camp Core.

Every exception carries a transport ``code`` (UNAUTHORIZED, FORBIDDEN,
BAD_REQUEST, NOT_FOUND, CONFLICT) and the matching HTTP status. The Flask
error handlers in ``camp_core.main`` turn them into JSON error envelopes.
"""


class CampError(Exception):
    """Base exception for all Camp Core errors."""

    code = "INTERNAL_SERVER_ERROR"
    status_code = 500

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# ============================================================================
# UNAUTHORIZED
# ============================================================================


class Unauthenticated(CampError):
    """No resolved identity where one is required."""

    code = "UNAUTHORIZED"
    status_code = 401


class InvalidCredentials(CampError):
    """Login or refresh rejected.

    Login uses one message for unknown email, missing password and wrong
    password so callers cannot tell which check failed.
    """

    code = "UNAUTHORIZED"
    status_code = 401


# ============================================================================
# FORBIDDEN
# ============================================================================


class AccountDeactivated(CampError):
    """Member exists but is_active is false."""

    code = "FORBIDDEN"
    status_code = 403


class InsufficientRole(CampError):
    """Authenticated, but the role is below what the endpoint requires."""

    code = "FORBIDDEN"
    status_code = 403


# ============================================================================
# BAD_REQUEST
# ============================================================================


class ValidationError(CampError):
    """Request data failed validation."""

    code = "BAD_REQUEST"
    status_code = 400


class TokenInvalid(CampError):
    """Malformed, forged or tampered token."""

    code = "BAD_REQUEST"
    status_code = 400


class TokenExpired(TokenInvalid):
    """Well-formed token whose exp is in the past."""


class TokenKindMismatch(TokenInvalid):
    """Token kind does not match the operation consuming it."""


class AlreadyAccepted(CampError):
    """Invite consumed by a member that already set a password."""

    code = "BAD_REQUEST"
    status_code = 400


class SelfActionForbidden(CampError):
    """Actor tried to change their own role or deactivate themselves."""

    code = "BAD_REQUEST"
    status_code = 400


class InvalidState(CampError):
    """Lifecycle transition not legal from the member's current state."""

    code = "BAD_REQUEST"
    status_code = 400


# ============================================================================
# NOT_FOUND / CONFLICT / INTERNAL
# ============================================================================


class ResourceNotFound(CampError):
    """Target record does not exist."""

    code = "NOT_FOUND"
    status_code = 404


class DuplicateEmail(CampError):
    """A member with this normalized email already exists."""

    code = "CONFLICT"
    status_code = 409


class DatabaseError(CampError):
    """Storage-layer failure."""

"""Resolve the caller's identity from a bearer access token.

Resolution never raises for a bad token: the request simply carries no
identity, and guards decide whether that is acceptable.
"""

import logging

from ..exceptions import TokenInvalid
from .guards import RequestContext
from .schemas import Identity, TokenKind
from .store import MemberStore
from .token import TokenService

logger = logging.getLogger(__name__)


BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: str | None) -> str | None:
    """Token from an ``Authorization: Bearer <token>`` header value, if present."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX):].strip()
    return token or None


def resolve_identity(token: str, tokens: TokenService, store: MemberStore) -> Identity | None:
    """Verify an access token and load its member.

    Returns None when the token is invalid, expired or of another kind,
    or when the member is missing or deactivated. The identity carries the
    stored role, so role changes apply to tokens already issued.
    """
    try:
        payload = tokens.verify(token, TokenKind.ACCESS)
    except TokenInvalid as e:
        logger.warning(f"Bearer token rejected: {e.message}")
        return None

    member = store.find_by_id(payload.sub)
    if member is None:
        logger.warning(f"Bearer token for unknown member {payload.sub}")
        return None
    if not member.is_active:
        logger.warning(f"Bearer token for deactivated member {member.email}")
        return None

    return Identity(id=member.id, email=member.email, role=member.role)


def resolve_context(
    authorization: str | None,
    remote_addr: str | None,
    tokens: TokenService,
    store: MemberStore,
) -> RequestContext:
    """Build the RequestContext for one inbound request."""
    token = extract_bearer_token(authorization)
    identity = resolve_identity(token, tokens, store) if token else None
    return RequestContext(identity=identity, remote_addr=remote_addr)

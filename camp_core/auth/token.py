"""JWT token service.

Signs and verifies the four token kinds with a single shared secret:

- access:  {sub, role, iat, exp}          (no kind claim)
- refresh: {sub, kind="refresh", iat, exp}
- invite:  {sub, kind="invite", iat[, exp]}
- reset:   {sub, kind="reset", iat, exp}

Because one secret signs every kind, the kind discriminator is the only
thing that stops a reset token being replayed as an invite (or an invite
as a refresh token). Callers pass ``expected_kind`` to verify() and get
TokenKindMismatch when it does not match.
"""

import logging
from datetime import timedelta

import jwt

from ..config import Settings
from ..exceptions import TokenExpired, TokenInvalid, TokenKindMismatch
from ..utils import isodatetime
from .schemas import Role, TokenKind, TokenPayload

logger = logging.getLogger(__name__)


class TokenService:
    """Issue and verify signed tokens.

    The secret and lifetimes are injected at startup; nothing here reads
    configuration on its own.
    """

    def __init__(
        self,
        secret_key: str,
        *,
        algorithm: str = "HS256",
        access_ttl: timedelta = timedelta(hours=8),
        refresh_ttl: timedelta = timedelta(days=7),
        reset_ttl: timedelta = timedelta(hours=1),
        invite_ttl: timedelta | None = timedelta(days=30),
    ):
        if not secret_key:
            raise ValueError("TokenService requires a non-empty secret key")
        self._secret_key = secret_key
        self._algorithm = algorithm
        self.access_ttl = access_ttl
        self.refresh_ttl = refresh_ttl
        self.reset_ttl = reset_ttl
        self.invite_ttl = invite_ttl

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenService":
        invite_ttl = None
        if settings.invite_token_expire_days is not None:
            invite_ttl = timedelta(days=settings.invite_token_expire_days)
        return cls(
            settings.jwt_secret_key,
            algorithm=settings.jwt_algorithm,
            access_ttl=timedelta(hours=settings.access_token_expire_hours),
            refresh_ttl=timedelta(days=settings.refresh_token_expire_days),
            reset_ttl=timedelta(minutes=settings.reset_token_expire_minutes),
            invite_ttl=invite_ttl,
        )

    # ------------------------------------------------------------------
    # Signing
    # ------------------------------------------------------------------

    def _encode(self, claims: dict, ttl: timedelta | None) -> str:
        now = isodatetime.now_unix()
        payload = {**claims, "iat": now}
        if ttl is not None:
            payload["exp"] = now + int(ttl.total_seconds())
        return jwt.encode(payload, self._secret_key, algorithm=self._algorithm)

    def sign_access(self, member_id: str, role: Role) -> str:
        """Short-lived proof of identity and role. Carries no kind claim."""
        return self._encode({"sub": member_id, "role": Role(role).value}, self.access_ttl)

    def sign_refresh(self, member_id: str) -> str:
        return self._encode({"sub": member_id, "kind": TokenKind.REFRESH.value}, self.refresh_ttl)

    def sign_invite(self, member_id: str) -> str:
        return self._encode({"sub": member_id, "kind": TokenKind.INVITE.value}, self.invite_ttl)

    def sign_reset(self, member_id: str) -> str:
        return self._encode({"sub": member_id, "kind": TokenKind.RESET.value}, self.reset_ttl)

    # ------------------------------------------------------------------
    # Verification
    # ------------------------------------------------------------------

    def verify(self, token: str, expected_kind: TokenKind | None = None) -> TokenPayload:
        """Verify signature, expiry and claims.

        Args:
            token: Encoded JWT
            expected_kind: If given, the token's kind must equal it

        Returns:
            TokenPayload with kind resolved (ACCESS for tokens without a kind claim)

        Raises:
            TokenExpired: Signature valid but exp is in the past
            TokenInvalid: Malformed, forged, or missing required claims
            TokenKindMismatch: Kind differs from expected_kind
        """
        try:
            claims = jwt.decode(
                token,
                self._secret_key,
                algorithms=[self._algorithm],
                options={"require": ["sub", "iat"]},
            )
        except jwt.ExpiredSignatureError:
            raise TokenExpired("Token has expired", {"code": "token_expired"})
        except jwt.InvalidTokenError as e:
            logger.warning(f"Rejected token: {e}")
            raise TokenInvalid("Invalid token", {"code": "invalid_token"})

        payload = self._to_payload(claims)

        if expected_kind is not None and payload.kind != expected_kind:
            logger.warning(
                f"Token kind mismatch: expected {expected_kind.value}, got {payload.kind.value}"
            )
            raise TokenKindMismatch(
                "Invalid token type",
                {"code": "wrong_token_type"}
            )

        return payload

    def _to_payload(self, claims: dict) -> TokenPayload:
        raw_kind = claims.get("kind")
        role = claims.get("role")

        if raw_kind is None:
            # Access tokens are identified by a role claim and no kind
            if role not in {r.value for r in Role}:
                raise TokenInvalid("Invalid token", {"code": "invalid_token"})
            kind = TokenKind.ACCESS
        else:
            try:
                kind = TokenKind(raw_kind)
            except ValueError:
                raise TokenInvalid("Invalid token", {"code": "invalid_token"})
            # An explicit "access" kind is never issued
            if kind is TokenKind.ACCESS:
                raise TokenInvalid("Invalid token", {"code": "invalid_token"})
            role = None

        sub = claims.get("sub")
        if not isinstance(sub, str) or not sub:
            raise TokenInvalid("Invalid token", {"code": "invalid_token"})

        return TokenPayload(
            sub=sub,
            kind=kind,
            role=role,
            iat=claims["iat"],
            exp=claims.get("exp"),
        )


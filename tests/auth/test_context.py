"""Tests for resolving a request's identity from a bearer token."""

from datetime import timedelta

import pytest

from camp_core.auth.context import extract_bearer_token, resolve_context, resolve_identity
from camp_core.auth.schemas import Role
from camp_core.auth.token import TokenService


class TestExtractBearerToken:
    """Tests for extract_bearer_token()."""

    def test_bearer_header(self):
        assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"

    @pytest.mark.parametrize("header", [None, "", "Bearer ", "Basic dXNlcjpwYXNz", "abc.def.ghi"])
    def test_missing_or_other_scheme(self, header):
        assert extract_bearer_token(header) is None


class TestResolveIdentity:
    """Tests for resolve_identity()."""

    def test_valid_access_token(self, tokens, store, member):
        identity = resolve_identity(tokens.sign_access(member.id, member.role), tokens, store)

        assert identity.id == member.id
        assert identity.email == member.email
        assert identity.role == Role.MEMBER

    def test_identity_uses_stored_role(self, tokens, store, member):
        """A promotion applies to access tokens issued before it."""
        token = tokens.sign_access(member.id, member.role)
        store.update_role(member.id, Role.MANAGER)

        assert resolve_identity(token, tokens, store).role == Role.MANAGER

    def test_refresh_token_not_accepted(self, tokens, store, member):
        assert resolve_identity(tokens.sign_refresh(member.id), tokens, store) is None

    def test_expired_token(self, settings, store, member):
        expired = TokenService(settings.jwt_secret_key, access_ttl=timedelta(seconds=-10))
        token = expired.sign_access(member.id, member.role)

        assert resolve_identity(token, expired, store) is None

    def test_unknown_member(self, tokens, store):
        token = tokens.sign_access("00000000-0000-0000-0000-000000000000", Role.ADMIN)
        assert resolve_identity(token, tokens, store) is None

    def test_deactivated_member(self, tokens, store, member):
        token = tokens.sign_access(member.id, member.role)
        store.update_active(member.id, False)

        assert resolve_identity(token, tokens, store) is None


class TestResolveContext:
    """Tests for resolve_context()."""

    def test_anonymous(self, tokens, store):
        ctx = resolve_context(None, "10.0.0.1", tokens, store)

        assert ctx.identity is None
        assert ctx.remote_addr == "10.0.0.1"

    def test_authenticated(self, tokens, store, admin):
        header = f"Bearer {tokens.sign_access(admin.id, admin.role)}"
        ctx = resolve_context(header, "10.0.0.1", tokens, store)

        assert ctx.identity.id == admin.id
        assert ctx.identity.role == Role.ADMIN

    def test_bad_token_is_anonymous(self, tokens, store):
        ctx = resolve_context("Bearer garbage", None, tokens, store)
        assert ctx.identity is None

"""Shared test fixtures for camp-core."""

import os
import tempfile

import jwt as pyjwt
import pytest

# Settings() refuses to load without a secret
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-camp-core")

from camp_core.auth.schemas import Identity, Member, Role
from camp_core.config import Settings
from camp_core.main import create_app

TEST_SECRET = "test-secret-key-for-camp-core"
PASSWORD = "longenough1"


class RecordingMailer:
    """Mailer that keeps every message so tests can read the tokens."""

    def __init__(self):
        self.invites = []
        self.resets = []

    def send_invite(self, email: str, name: str, invite_token: str) -> None:
        self.invites.append((email, name, invite_token))

    def send_password_reset(self, email: str, reset_token: str) -> None:
        self.resets.append((email, reset_token))

    def last_reset_for(self, email: str) -> str | None:
        for sent_to, token in reversed(self.resets):
            if sent_to == email:
                return token
        return None

    def last_invite_for(self, email: str) -> str | None:
        for sent_to, _name, token in reversed(self.invites):
            if sent_to == email:
                return token
        return None


@pytest.fixture
def db_path():
    """Temp file database (":memory:" would not be shared across connections)."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    yield path
    try:
        os.unlink(path)
    except OSError:
        pass


@pytest.fixture
def settings(db_path):
    """Test settings: temp database and the minimum bcrypt work factor."""
    return Settings(
        jwt_secret_key=TEST_SECRET,
        database_path=db_path,
        bcrypt_work_factor=4,
    )


@pytest.fixture
def mailer():
    return RecordingMailer()


@pytest.fixture
def app(settings, mailer):
    app = create_app(settings, mailer=mailer)
    app.config["TESTING"] = True
    return app


@pytest.fixture
def client(app):
    with app.test_client() as client:
        yield client


@pytest.fixture
def services(app):
    return app.extensions["camp"]


@pytest.fixture
def accounts(services):
    return services.accounts


@pytest.fixture
def store(services):
    return services.store


@pytest.fixture
def tokens(services):
    return services.tokens


@pytest.fixture
def hasher(services):
    return services.hasher


@pytest.fixture
def make_member(store, hasher):
    """Factory creating members directly in the store.

    password=None creates an Invited member.
    """
    def _make(
        email: str,
        name: str = "Test Member",
        role: Role = Role.MEMBER,
        password: str | None = PASSWORD,
        is_active: bool = True,
    ) -> Member:
        member = store.create(
            email=email,
            name=name,
            role=role,
            password_hash=hasher.hash(password) if password else None,
        )
        if not is_active:
            member = store.update_active(member.id, False)
        return member
    return _make


@pytest.fixture
def admin(make_member):
    return make_member("admin@example.com", name="Admin", role=Role.ADMIN)


@pytest.fixture
def manager(make_member):
    return make_member("manager@example.com", name="Manager", role=Role.MANAGER)


@pytest.fixture
def member(make_member):
    return make_member("member@example.com", name="Member", role=Role.MEMBER)


@pytest.fixture
def auth_headers(tokens):
    """Build Authorization headers carrying an access token for a member."""
    def _headers(member: Member) -> dict:
        return {"Authorization": f"Bearer {tokens.sign_access(member.id, member.role)}"}
    return _headers


@pytest.fixture
def identity_for():
    """Build the Identity a resolved request would carry for a member."""
    def _identity(member: Member) -> Identity:
        return Identity(id=member.id, email=member.email, role=member.role)
    return _identity


@pytest.fixture
def decode_token(settings):
    """Decode a token's raw claims with the test secret."""
    def _decode(token: str) -> dict:
        return pyjwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    return _decode

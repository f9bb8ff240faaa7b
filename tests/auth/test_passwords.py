"""Tests for bcrypt password hashing."""

import pytest

from camp_core.auth.passwords import PasswordHasher


@pytest.fixture
def hasher():
    return PasswordHasher(rounds=4)


class TestPasswordHasher:
    """Tests for PasswordHasher.hash and verify."""

    def test_hash_is_bcrypt(self, hasher):
        password_hash = hasher.hash("longenough1")

        assert password_hash.startswith("$2b$04$")
        assert len(password_hash) == 60

    def test_hash_is_salted(self, hasher):
        assert hasher.hash("longenough1") != hasher.hash("longenough1")

    def test_verify_correct_password(self, hasher):
        assert hasher.verify("longenough1", hasher.hash("longenough1"))

    def test_verify_wrong_password(self, hasher):
        assert not hasher.verify("wrongpassword", hasher.hash("longenough1"))

    @pytest.mark.parametrize("stored", [None, ""])
    def test_verify_missing_hash(self, hasher, stored):
        """Invited members have no hash; that is a failed check, not an error."""
        assert not hasher.verify("longenough1", stored)

    def test_verify_malformed_hash(self, hasher):
        assert not hasher.verify("longenough1", "not-a-bcrypt-hash")

    def test_long_password(self, hasher):
        """Passwords beyond bcrypt's 72-byte limit still hash and verify."""
        password = "x" * 128
        assert hasher.verify(password, hasher.hash(password))

    def test_from_settings_uses_work_factor(self, settings):
        assert PasswordHasher.from_settings(settings).rounds == 4

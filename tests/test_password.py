"""
Tests for the bcrypt credential codec.
"""

import pytest

from auth.password import PasswordHasher
from core.exceptions import EncodingError


class TestPasswordHasher:
    def setup_method(self):
        self.hasher = PasswordHasher(rounds=4)

    def test_hash_then_verify(self):
        hashed = self.hasher.hash("secret123")
        assert self.hasher.verify("secret123", hashed)

    @pytest.mark.parametrize("other", ["secret124", "Secret123", "", "secret123 "])
    def test_other_plaintext_rejected(self, other):
        hashed = self.hasher.hash("secret123")
        assert not self.hasher.verify(other, hashed)

    def test_hash_is_salted(self):
        assert self.hasher.hash("secret123") != self.hasher.hash("secret123")

    def test_hash_never_contains_plaintext(self):
        assert "secret123" not in self.hasher.hash("secret123")

    def test_long_password_not_truncated(self):
        base = "x" * 100
        hashed = self.hasher.hash(base + "a")
        assert self.hasher.verify(base + "a", hashed)
        assert not self.hasher.verify(base + "b", hashed)

    def test_nul_and_unicode_passwords_hash(self):
        for password in ("pa\x00ss", "pässwörd-🔑"):
            assert self.hasher.verify(password, self.hasher.hash(password))

    @pytest.mark.parametrize("stored", ["", "not-a-hash", "$2b$04$tooshort", "pbkdf2$1$2$3"])
    def test_malformed_hash_is_false_not_error(self, stored):
        assert self.hasher.verify("secret123", stored) is False

    def test_internal_failure_is_encoding_error(self):
        hasher = PasswordHasher(rounds=2)  # below bcrypt's minimum work factor
        with pytest.raises(EncodingError):
            hasher.hash("secret123")

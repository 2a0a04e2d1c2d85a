"""Tests for password hashing and validation."""

import pytest

from questline.auth.password import (
    PasswordStrengthError,
    check_needs_rehash,
    hash_password,
    validate_password_strength,
    verify_password,
)
from questline.errors import ServiceError


class TestPasswordHashing:
    def test_hash_and_verify(self):
        password = "SecureP@ss1"
        hashed = hash_password(password)
        assert verify_password(password, hashed) is True

    def test_wrong_password_rejected(self):
        hashed = hash_password("CorrectP@ss1")
        assert verify_password("WrongP@ss1", hashed) is False

    def test_garbage_hash_rejected(self):
        assert verify_password("anything", "not-a-hash") is False

    def test_hash_is_argon2id(self):
        hashed = hash_password("TestP@ss1")
        assert hashed.startswith("$argon2id$")

    def test_hash_is_salted(self):
        assert hash_password("same-password") != hash_password("same-password")

    def test_check_needs_rehash(self):
        hashed = hash_password("TestP@ss1")
        assert check_needs_rehash(hashed) is False


class TestPasswordStrength:
    def test_valid_password(self):
        validate_password_strength("longenough")  # Should not raise

    def test_empty_password_rejected(self):
        with pytest.raises(PasswordStrengthError):
            validate_password_strength("")

    def test_whitespace_only_rejected(self):
        with pytest.raises(PasswordStrengthError):
            validate_password_strength("          ")

    def test_short_password_message(self):
        with pytest.raises(PasswordStrengthError, match="at least 8 characters"):
            validate_password_strength("short")

    def test_too_long_password_rejected(self):
        with pytest.raises(PasswordStrengthError):
            validate_password_strength("a" * 129)

    def test_strength_error_is_a_400_service_error(self):
        assert issubclass(PasswordStrengthError, ServiceError)
        assert PasswordStrengthError.status_code == 400

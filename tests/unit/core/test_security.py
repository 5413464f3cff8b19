"""
Unit Tests for Security Module
"""
import pytest
from datetime import timedelta

from app.core.config import settings
from app.core.exceptions import AuthenticationError, BadRequestError
from app.core.security import (
    PASSWORD_ALPHABET,
    verify_password,
    get_password_hash,
    generate_random_password,
    create_access_token,
    decode_token,
    create_password_reset_token,
    verify_password_reset_token,
)


class TestPasswordHashing:
    """Test password hashing functions"""

    def test_hash_password(self):
        """Test password hashing"""
        password = 'securePassword123!'
        hashed = get_password_hash(password)

        assert hashed != password
        assert hashed.startswith('$2b$')

    def test_verify_password_correct(self):
        password = 'securePassword123!'
        hashed = get_password_hash(password)

        assert verify_password(password, hashed) is True

    def test_verify_password_incorrect(self):
        hashed = get_password_hash('securePassword123!')

        assert verify_password('wrongPassword', hashed) is False

    def test_hash_uniqueness(self):
        """Same password yields different hashes (salted)"""
        password = 'securePassword123!'

        assert get_password_hash(password) != get_password_hash(password)

    def test_long_passwords_truncated_at_72_bytes(self):
        password = 'a' * 72
        hashed = get_password_hash(password)

        assert verify_password(password + 'extra', hashed) is True


class TestGeneratedPasswords:
    """Passwords issued to accounts created without one"""

    def test_default_length(self):
        assert len(generate_random_password()) == settings.GENERATED_PASSWORD_LENGTH

    def test_custom_length(self):
        assert len(generate_random_password(32)) == 32

    def test_alphabet(self):
        password = generate_random_password(200)

        assert set(password) <= set(PASSWORD_ALPHABET)


class TestAccessTokens:
    """Test JWT access tokens"""

    def test_create_and_decode(self):
        token = create_access_token({'sub': '42'})
        payload = decode_token(token)

        assert payload['sub'] == '42'
        assert payload['type'] == 'access'
        assert 'exp' in payload

    def test_custom_expiry(self):
        token = create_access_token({'sub': '42'}, expires_delta=timedelta(minutes=5))

        assert decode_token(token)['sub'] == '42'

    def test_expired_token_rejected(self):
        token = create_access_token({'sub': '42'}, expires_delta=timedelta(seconds=-1))

        with pytest.raises(AuthenticationError):
            decode_token(token)

    def test_garbage_token_rejected(self):
        with pytest.raises(AuthenticationError):
            decode_token('not.a.token')


class TestPasswordResetTokens:
    """Reset tokens are bound to the user and to the current password hash"""

    def test_valid_token(self):
        password_hash = get_password_hash('oldPassword123')
        token = create_password_reset_token(7, password_hash)

        verify_password_reset_token(token, 7, password_hash)

    def test_other_user_rejected(self):
        password_hash = get_password_hash('oldPassword123')
        token = create_password_reset_token(7, password_hash)

        with pytest.raises(BadRequestError, match='Invalid token'):
            verify_password_reset_token(token, 8, password_hash)

    def test_token_dies_with_password_change(self):
        old_hash = get_password_hash('oldPassword123')
        token = create_password_reset_token(7, old_hash)
        new_hash = get_password_hash('newPassword456')

        with pytest.raises(BadRequestError, match='Invalid token'):
            verify_password_reset_token(token, 7, new_hash)

    def test_expired_token(self, monkeypatch):
        monkeypatch.setattr(settings, 'RESET_TOKEN_EXPIRE_MINUTES', -1)
        password_hash = get_password_hash('oldPassword123')
        token = create_password_reset_token(7, password_hash)

        with pytest.raises(BadRequestError, match='Token has expired'):
            verify_password_reset_token(token, 7, password_hash)

"""Password hashing, JWT access tokens and reset tokens."""

from datetime import datetime, timedelta, timezone
import uuid

import pytest

from devcamper.config import Settings
from devcamper.security import (
    create_access_token,
    decode_access_token,
    generate_reset_token,
    hash_password,
    hash_reset_token,
    verify_password,
)


@pytest.fixture
def jwt_settings():
    return Settings(jwt_secret="unit-test-secret", reset_token_expire_minutes=10)


class TestPasswords:

    def test_hash_is_not_plaintext_and_verifies(self):
        hashed = hash_password("123456")

        assert hashed != "123456"
        assert verify_password("123456", hashed)
        assert not verify_password("654321", hashed)


class TestAccessTokens:

    def test_round_trip(self, jwt_settings):
        user_id = uuid.uuid4()

        token = create_access_token(user_id, jwt_settings)

        assert decode_access_token(token, jwt_settings) == str(user_id)

    def test_expired_token_rejected(self, jwt_settings):
        token = create_access_token(uuid.uuid4(), jwt_settings, expires_delta=timedelta(seconds=-10))

        assert decode_access_token(token, jwt_settings) is None

    def test_wrong_secret_rejected(self, jwt_settings):
        token = create_access_token(uuid.uuid4(), jwt_settings)
        other = Settings(jwt_secret="someone-else")

        assert decode_access_token(token, other) is None

    def test_garbage_rejected(self, jwt_settings):
        assert decode_access_token("not-a-token", jwt_settings) is None


class TestResetTokens:

    def test_digest_matches_raw_token(self, jwt_settings):
        raw, digest, expire = generate_reset_token(jwt_settings)

        assert len(raw) == 40
        assert digest == hash_reset_token(raw)
        assert digest != raw

    def test_expiry_window(self, jwt_settings):
        before = datetime.now(timezone.utc)

        _, _, expire = generate_reset_token(jwt_settings)

        assert before + timedelta(minutes=9) < expire <= datetime.now(timezone.utc) + timedelta(minutes=10)

"""Unit tests for password hashing and JWT helpers."""
from datetime import datetime, timedelta, timezone

from jose import jwt

from finboard.core.config import settings
from finboard.core.security import (
    ACCESS,
    REFRESH,
    create_access_token,
    create_refresh_token,
    decode_token,
    hash_password,
    seconds_left,
    token_user_id,
    verify_password,
)


# ── passwords ────────────────────────────────────────────────────────────────

class TestPasswords:
    def test_round_trip(self):
        hashed = hash_password("CorrectHorse42!")
        assert hashed != "CorrectHorse42!"
        assert verify_password("CorrectHorse42!", hashed)
        assert not verify_password("wrong", hashed)


# ── tokens ───────────────────────────────────────────────────────────────────

class TestTokens:
    def test_access_token_claims(self):
        claims = decode_token(create_access_token(7), expected_type=ACCESS)
        assert claims["type"] == ACCESS
        assert token_user_id(claims) == 7
        assert claims["jti"]

    def test_refresh_token_not_accepted_as_access(self):
        assert decode_token(create_refresh_token(7), expected_type=ACCESS) is None
        assert decode_token(create_refresh_token(7), expected_type=REFRESH) is not None

    def test_each_token_has_unique_jti(self):
        a = decode_token(create_refresh_token(1))
        b = decode_token(create_refresh_token(1))
        assert a["jti"] != b["jti"]

    def test_garbage_token(self):
        assert decode_token("not-a-jwt") is None

    def test_wrong_signature(self):
        forged = jwt.encode({"sub": "1", "type": ACCESS}, "another-secret", algorithm=settings.algorithm)
        assert decode_token(forged) is None

    def test_expired_token(self):
        stale = jwt.encode(
            {"sub": "1", "type": ACCESS, "exp": datetime.now(timezone.utc) - timedelta(minutes=1)},
            settings.api_secret_key,
            algorithm=settings.algorithm,
        )
        assert decode_token(stale) is None


class TestClaims:
    def test_bad_subject(self):
        assert token_user_id({"sub": "abc"}) is None
        assert token_user_id({}) is None

    def test_seconds_left(self):
        exp = (datetime.now(timezone.utc) + timedelta(minutes=10)).timestamp()
        assert 590 <= seconds_left({"exp": exp}) <= 600

    def test_seconds_left_never_negative(self):
        assert seconds_left({"exp": 0}) == 0

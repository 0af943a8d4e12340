"""
Tests for session token issuing / verification.
"""

import uuid
from datetime import datetime, timedelta, timezone

import jwt
import pytest
from jwt.utils import base64url_encode

from auth.tokens import TokenIssuer
from core.exceptions import InvalidTokenError

SECRET = "token-test-secret-0123456789-abcdefghijklmnopqrstuvwxyz-ABCDEFGHIJ"
TTL = timedelta(hours=24)
NOW = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


@pytest.fixture
def issuer():
    return TokenIssuer(SECRET, TTL)


class TestIssueVerify:
    def test_round_trip_returns_subject(self, issuer):
        user_id = uuid.uuid4()
        token = issuer.issue(user_id, "alice@example.com", now=NOW)

        claims = issuer.verify(token, now=NOW)

        assert claims.subject_id == user_id
        assert claims.email == "alice@example.com"
        assert claims.issued_at == NOW
        assert claims.expires_at == NOW + TTL

    @pytest.mark.parametrize(
        "offset",
        [timedelta(0), timedelta(seconds=1), timedelta(hours=12), TTL - timedelta(seconds=1)],
    )
    def test_valid_inside_window(self, issuer, offset):
        user_id = uuid.uuid4()
        token = issuer.issue(user_id, "a@example.com", now=NOW)
        assert issuer.verify(token, now=NOW + offset).subject_id == user_id

    @pytest.mark.parametrize("offset", [TTL, TTL + timedelta(seconds=1), TTL * 2])
    def test_expired_at_and_after_ttl(self, issuer, offset):
        token = issuer.issue(uuid.uuid4(), "a@example.com", now=NOW)
        with pytest.raises(InvalidTokenError):
            issuer.verify(token, now=NOW + offset)

    def test_explicit_ttl_overrides_default(self, issuer):
        token = issuer.issue(uuid.uuid4(), "a@example.com", now=NOW, ttl=timedelta(minutes=5))
        issuer.verify(token, now=NOW + timedelta(minutes=4))
        with pytest.raises(InvalidTokenError):
            issuer.verify(token, now=NOW + timedelta(minutes=5))

    def test_uses_hs256(self, issuer):
        token = issuer.issue(uuid.uuid4(), "a@example.com", now=NOW)
        assert jwt.get_unverified_header(token)["alg"] == "HS256"

    def test_empty_secret_rejected(self):
        with pytest.raises(ValueError):
            TokenIssuer("", TTL)


class TestRejection:
    def _claims(self, **overrides):
        payload = {
            "sub": str(uuid.uuid4()),
            "email": "a@example.com",
            "iat": NOW.timestamp(),
            "exp": (NOW + TTL).timestamp(),
        }
        payload.update(overrides)
        return payload

    def test_wrong_secret(self, issuer):
        other = TokenIssuer("another-secret-0123456789-abcdefghijklmnopqrstuvwxyz-ABCDEFGHIJKLMN", TTL)
        token = other.issue(uuid.uuid4(), "a@example.com", now=NOW)
        with pytest.raises(InvalidTokenError):
            issuer.verify(token, now=NOW)

    def test_tampered_payload(self, issuer):
        token = issuer.issue(uuid.uuid4(), "a@example.com", now=NOW)
        header, payload, signature = token.split(".")
        forged = jwt.encode(self._claims(email="mallory@example.com"), SECRET, algorithm="HS256")
        token = ".".join([header, forged.split(".")[1], signature])
        with pytest.raises(InvalidTokenError):
            issuer.verify(token, now=NOW)

    def test_alg_none_rejected(self, issuer):
        token = jwt.encode(self._claims(), None, algorithm="none")
        with pytest.raises(InvalidTokenError):
            issuer.verify(token, now=NOW)

    def test_non_hmac_alg_header_rejected(self, issuer):
        header = base64url_encode(b'{"alg":"RS256","typ":"JWT"}').decode()
        _, payload, signature = jwt.encode(self._claims(), SECRET, algorithm="HS256").split(".")
        with pytest.raises(InvalidTokenError):
            issuer.verify(f"{header}.{payload}.{signature}", now=NOW)

    def test_other_hmac_variant_accepted(self, issuer):
        token = jwt.encode(self._claims(), SECRET, algorithm="HS512")
        assert issuer.verify(token, now=NOW).email == "a@example.com"

    @pytest.mark.parametrize("sub", ["not-a-uuid", "", "12345"])
    def test_malformed_subject(self, issuer, sub):
        token = jwt.encode(self._claims(sub=sub), SECRET, algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            issuer.verify(token, now=NOW)

    @pytest.mark.parametrize("claim", ["sub", "email", "exp", "iat"])
    def test_missing_claim(self, issuer, claim):
        payload = self._claims()
        del payload[claim]
        token = jwt.encode(payload, SECRET, algorithm="HS256")
        with pytest.raises(InvalidTokenError):
            issuer.verify(token, now=NOW)

    @pytest.mark.parametrize("token", ["", "garbage", "a.b.c", "a.b"])
    def test_garbage(self, issuer, token):
        with pytest.raises(InvalidTokenError):
            issuer.verify(token, now=NOW)

    def test_failures_are_indistinguishable(self, issuer):
        expired = issuer.issue(uuid.uuid4(), "a@example.com", now=NOW - TTL * 2)
        messages = set()
        for token in (expired, "garbage", jwt.encode(self._claims(sub="x"), SECRET, algorithm="HS256")):
            with pytest.raises(InvalidTokenError) as excinfo:
                issuer.verify(token, now=NOW)
            messages.add((excinfo.value.code, excinfo.value.message))
        assert len(messages) == 1

"""
Unit tests for API dependencies.

Tests cover:
- Access token validation
- Client IP extraction for audit logging
"""

import uuid
from datetime import UTC, datetime, timedelta

import pytest
from jose import jwt
from starlette.requests import Request

from checkbook.api.dependencies import decode_access_token, get_client_info, get_client_ip
from checkbook.core.config import settings
from checkbook.core.exceptions import InvalidTokenError


def encode(claims: dict, secret: str | None = None) -> str:
    return jwt.encode(claims, secret or settings.secret_key, algorithm=settings.jwt_algorithm)


def make_request(headers: dict[str, str] | None = None, client=("203.0.113.9", 50000)) -> Request:
    scope = {
        "type": "http",
        "method": "GET",
        "path": "/",
        "headers": [
            (name.lower().encode(), value.encode()) for name, value in (headers or {}).items()
        ],
        "client": client,
    }
    return Request(scope)


class TestDecodeAccessToken:
    """Tests for decode_access_token."""

    def test_valid_token(self):
        user_id = uuid.uuid4()

        assert decode_access_token(encode({"sub": str(user_id)})) == user_id

    def test_bad_signature(self):
        token = encode({"sub": str(uuid.uuid4())}, secret="another-secret-key-of-sufficient-length")

        with pytest.raises(InvalidTokenError):
            decode_access_token(token)

    def test_expired_token(self):
        expired = datetime.now(UTC) - timedelta(minutes=5)
        token = encode({"sub": str(uuid.uuid4()), "exp": int(expired.timestamp())})

        with pytest.raises(InvalidTokenError):
            decode_access_token(token)

    def test_missing_subject(self):
        with pytest.raises(InvalidTokenError) as exc_info:
            decode_access_token(encode({"type": "access"}))

        assert exc_info.value.message == "Invalid token payload"

    def test_subject_not_a_uuid(self):
        with pytest.raises(InvalidTokenError):
            decode_access_token(encode({"sub": "alice"}))

    def test_garbage(self):
        with pytest.raises(InvalidTokenError):
            decode_access_token("not-a-jwt")


class TestClientIp:
    """Tests for get_client_ip."""

    def test_socket_peer(self):
        assert get_client_ip(make_request()) == "203.0.113.9"

    def test_first_forwarded_address(self):
        request = make_request({"X-Forwarded-For": "198.51.100.7, 10.0.0.1"})

        assert get_client_ip(request) == "198.51.100.7"

    def test_unknown_forwarded_value_is_skipped(self):
        request = make_request({"X-Forwarded-For": "unknown", "X-Real-IP": "198.51.100.8"})

        assert get_client_ip(request) == "198.51.100.8"

    def test_no_client(self):
        assert get_client_ip(make_request(client=None)) is None

    def test_client_info(self):
        request = make_request({"User-Agent": "checkbook-ios/2.1"})

        info = get_client_info(request)

        assert info.ip_address == "203.0.113.9"
        assert info.user_agent == "checkbook-ios/2.1"

"""Session token tests: signing, verification and request resolution."""

from datetime import timedelta

import jwt
import pytest
from starlette.requests import Request

from habitladder.auth.jwt import create_session_token, verify_token
from habitladder.auth.session import Identity, resolve
from habitladder.config import get_settings


def _request(headers: dict[str, str] | None = None, cookies: dict[str, str] | None = None) -> Request:
    raw = [(k.lower().encode(), v.encode()) for k, v in (headers or {}).items()]
    if cookies:
        raw.append((b"cookie", "; ".join(f"{k}={v}" for k, v in cookies.items()).encode()))
    return Request({"type": "http", "method": "GET", "path": "/", "headers": raw})


class TestSessionToken:
    def test_round_trip_claims(self, settings):
        token = create_session_token(7, "Ada", "ada@example.com")
        payload = verify_token(token)
        assert payload["sub"] == "7"
        assert payload["name"] == "Ada"
        assert payload["email"] == "ada@example.com"
        assert payload["iss"] == settings.session_issuer

    def test_expired_token_rejected(self, settings):
        token = create_session_token(7, "Ada", "ada@example.com", expires_in=timedelta(seconds=-1))
        with pytest.raises(jwt.InvalidTokenError, match="expired"):
            verify_token(token)

    def test_wrong_secret_rejected(self, settings):
        forged = jwt.encode(
            {"sub": "7", "exp": 4102444800, "iss": settings.session_issuer, "type": "session"},
            "some-other-secret",
            algorithm="HS256",
        )
        with pytest.raises(jwt.InvalidTokenError):
            verify_token(forged)

    def test_wrong_type_rejected(self, settings):
        other = jwt.encode(
            {"sub": "7", "exp": 4102444800, "iss": settings.session_issuer, "type": "refresh"},
            settings.session_secret,
            algorithm=settings.session_algorithm,
        )
        with pytest.raises(jwt.InvalidTokenError, match="Expected token type"):
            verify_token(other)


class TestResolve:
    def test_no_token_is_anonymous(self, settings):
        assert resolve(_request()) is None

    def test_bearer_header(self, settings):
        token = create_session_token(3, "Bo", "bo@example.com")
        identity = resolve(_request(headers={"Authorization": f"Bearer {token}"}))
        assert identity == Identity(id=3, name="Bo", email="bo@example.com")

    def test_cookie(self, settings):
        token = create_session_token(4, "Cy", "cy@example.com")
        identity = resolve(_request(cookies={get_settings().session_cookie_name: token}))
        assert identity is not None
        assert identity.id == 4

    def test_garbage_token_is_anonymous(self, settings):
        assert resolve(_request(headers={"Authorization": "Bearer not.a.jwt"})) is None

    def test_non_bearer_scheme_ignored(self, settings):
        token = create_session_token(3, "Bo", "bo@example.com")
        assert resolve(_request(headers={"Authorization": f"Basic {token}"})) is None

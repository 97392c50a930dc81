"""
Helpers shared by kitauth tests.
"""

from typing import Any, Dict, Optional

import jwt

from kitauth.auth.routes import Auth
from kitauth.auth.utils import SESSION_COOKIE_NAME
from kitauth.models import AuthRequest, HttpResult
from kitauth.providers.base import Provider, ProviderConfig


TEST_SECRET = "test-session-secret-1234567890123456"


class StaticProvider(Provider):
    """Provider returning a fixed profile, standing in for a real identity service."""

    def __init__(
        self,
        id: str = "github",
        user_profile: Optional[Dict[str, Any]] = None,
        redirect: Optional[str] = None,
    ):
        super().__init__(ProviderConfig(id=id))
        self.user_profile = user_profile if user_profile is not None else {"login": "alice"}
        self.redirect = redirect
        self.signin_result = HttpResult(
            status=302,
            headers={"Location": f"https://idp.example.com/authorize?client={id}"},
        )
        self.callback_calls = 0

    async def signin(self, request: AuthRequest, auth: Auth) -> HttpResult:
        return self.signin_result

    async def callback(self, request: AuthRequest, auth: Auth):
        self.callback_calls += 1
        return dict(self.user_profile), self.redirect


def make_request(
    path: str,
    method: str = "GET",
    cookie: Optional[str] = None,
    host: str = "app.example.com",
    query: Optional[Dict[str, str]] = None,
) -> AuthRequest:
    headers = {}
    if cookie is not None:
        headers["Cookie"] = cookie
    return AuthRequest(method=method, path=path, host=host, headers=headers, query=query or {})


def session_cookie_header(token: str) -> str:
    return f"{SESSION_COOKIE_NAME}={token}"


def token_from_set_cookie(set_cookie: str) -> str:
    """Extract the token from a ``svelteauthjwt=<token>; Path=/; HttpOnly`` value."""
    name_value = set_cookie.split(";", 1)[0]
    name, _, value = name_value.partition("=")
    assert name == SESSION_COOKIE_NAME
    return value


def decode(token: str, secret: str = TEST_SECRET) -> Dict[str, Any]:
    return jwt.decode(token, secret.encode("utf-8"), algorithms=["HS256"])



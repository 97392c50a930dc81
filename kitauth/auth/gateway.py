"""
Session Gateway
===============

Maps the session cookie of an inbound request to verified claims, and
claims to the client-facing session view.

User hooks applied here:
- ``callbacks.jwt(claims)`` on every successful token read
- ``callbacks.session(claims, view)`` when a session view is requested
"""

import logging
from typing import TYPE_CHECKING, Any, Dict, Mapping, Optional

from starlette.requests import cookie_parser

from kitauth.auth.session import TokenCodec
from kitauth.auth.utils import SESSION_COOKIE_NAME, build_session_cookie, maybe_await

if TYPE_CHECKING:
    from kitauth.config import AuthConfig

logger = logging.getLogger(__name__)


Claims = Dict[str, Any]


class SessionGateway:
    """
    Reads, merges, signs and projects session claims.

    Attributes:
        config: Immutable auth configuration (for callbacks and cookie flags)
        codec: Token codec bound to the resolved secret
    """

    def __init__(self, config: "AuthConfig", codec: TokenCodec):
        self.config = config
        self.codec = codec

    # -------------------------------------------------------------------------
    # Token read / write
    # -------------------------------------------------------------------------

    def read_cookie(self, headers: Mapping[str, str]) -> Optional[str]:
        """Return the raw session cookie value, or None."""
        raw = headers.get("cookie")
        if not raw:
            return None

        cookies = cookie_parser(raw)
        return cookies.get(SESSION_COOKIE_NAME) or None

    async def get_token(self, headers: Mapping[str, str]) -> Optional[Claims]:
        """
        Load verified claims from the request's session cookie.

        Missing cookie header, missing session cookie and failed
        verification all yield None.
        """
        raw = self.read_cookie(headers)
        if raw is None:
            return None

        token = self.codec.verify(raw)
        if token is None:
            return None

        jwt_callback = self.config.callbacks.jwt
        if jwt_callback:
            token = await maybe_await(jwt_callback(token))

        return token

    async def set_token(self, headers: Mapping[str, str], patch: Mapping[str, Any]) -> Claims:
        """
        Merge ``patch`` over the current claims (patch keys win).

        The existing token is fully resolved before merging.
        """
        original = await self.get_token(headers)
        return {**(original or {}), **patch}

    def sign_token(self, token: Mapping[str, Any]) -> str:
        return self.codec.sign(token)

    def session_cookie(self, signed: str) -> str:
        """Set-Cookie header value for a signed token."""
        return build_session_cookie(
            signed,
            secure=self.config.cookie_secure,
            samesite=self.config.cookie_samesite,
        )

    # -------------------------------------------------------------------------
    # Session view
    # -------------------------------------------------------------------------

    async def get_session(self, token: Optional[Mapping[str, Any]]) -> Dict[str, Any]:
        """
        Project claims into the client-facing session view.

        Returns ``{}`` when there are no claims, ``{"user": ...}`` by
        default, or whatever the ``session`` callback returns.
        """
        if token is None:
            return {}

        session = {"user": token["user"]} if "user" in token else {}

        session_callback = self.config.callbacks.session
        if session_callback:
            return await maybe_await(session_callback(dict(token), session))

        return session

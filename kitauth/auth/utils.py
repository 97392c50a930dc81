"""
Authentication utilities shared by the router, gateway and providers.

This module handles:
- Awaiting user hooks that may be plain functions or coroutines
- Joining URL path segments under the configured base path
- Building the session Set-Cookie header value
"""

import inspect
from typing import Any, Optional


SESSION_COOKIE_NAME = "svelteauthjwt"


async def maybe_await(value: Any) -> Any:
    """
    Resolve a hook result that may or may not be awaitable.

    Hooks (jwt, session, redirect, sign_in, provider profile) can be
    declared either as ``def`` or ``async def``.
    """
    if inspect.isawaitable(value):
        return await value
    return value


def join_path(*parts: str) -> str:
    """
    Join path segments into a single absolute path.

    Empty segments and duplicate slashes are dropped:

        >>> join_path("/api/auth/", "/signin/", "github")
        '/api/auth/signin/github'
    """
    segments = [part.strip("/") for part in parts if part and part.strip("/")]
    return "/" + "/".join(segments)


def build_session_cookie(
    token: str,
    secure: bool = False,
    samesite: Optional[str] = None,
) -> str:
    """
    Build the Set-Cookie value carrying the signed session token.

    No Max-Age/Expires attribute is set: the token's own ``exp`` claim is
    the authoritative expiry.
    """
    cookie = f"{SESSION_COOKIE_NAME}={token}; Path=/; HttpOnly"
    if secure:
        cookie += "; Secure"
    if samesite:
        cookie += f"; SameSite={samesite.capitalize()}"
    return cookie

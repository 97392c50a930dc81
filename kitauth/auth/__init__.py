"""
Authentication Package

This package implements the session core of kitauth: signed session
tokens carried in a cookie, and the routes that mint, read and clear them
on behalf of pluggable identity providers.

Modules:
- secret: signing key resolution from configuration
- session: HS256 session JWT signing and verification
- gateway: cookie-to-claims mapping and session view projection
- routes: the authentication route state machine and FastAPI adapter
- utils: hook awaiting, path joining, cookie building

The authentication flow:
1. Client hits {base}/signin/{provider} and is redirected to the provider
2. Provider redirects back to {base}/callback/{provider}
3. The provider yields a profile; the core signs it into a session JWT
4. The session JWT is set in the ``svelteauthjwt`` cookie
5. Client reads {base}/session, and clears it via {base}/signout
"""

from .routes import Auth, create_auth_router
from .session import AuthError, TokenCodec

__all__ = [
    "Auth",
    "AuthError",
    "TokenCodec",
    "create_auth_router",
]

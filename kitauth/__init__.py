"""
kitauth: embeddable session authentication core.

Issues, verifies and refreshes signed session tokens on behalf of an HTTP
host, delegating identity verification to pluggable providers.
"""

from kitauth.auth import Auth, AuthError, create_auth_router
from kitauth.config import AuthCallbacks, AuthConfig, Settings, get_settings
from kitauth.models import AuthRequest, HttpResult
from kitauth.providers import GitHubProvider, OAuth2Provider, OAuthError, Provider, ProviderConfig

__all__ = [
    "Auth",
    "AuthCallbacks",
    "AuthConfig",
    "AuthError",
    "AuthRequest",
    "GitHubProvider",
    "HttpResult",
    "OAuth2Provider",
    "OAuthError",
    "Provider",
    "ProviderConfig",
    "Settings",
    "create_auth_router",
    "get_settings",
]

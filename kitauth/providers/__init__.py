"""
Identity Providers Package

- base: the provider contract every identity provider implements
- oauth2: generic OAuth 2.0 authorization-code provider and GitHub preset
"""

from .base import CallbackResult, Provider, ProviderConfig
from .oauth2 import GitHubProvider, OAuth2Provider, OAuth2ProviderConfig, OAuthError

__all__ = [
    "CallbackResult",
    "GitHubProvider",
    "OAuth2Provider",
    "OAuth2ProviderConfig",
    "OAuthError",
    "Provider",
    "ProviderConfig",
]

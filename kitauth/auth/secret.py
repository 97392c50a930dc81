"""
Signing key resolution for session JWTs.

The key is derived from configuration, in priority order:

1. An explicit ``jwt_secret`` string, UTF-8 encoded.
2. The configured provider ids joined with ``+`` and base64 encoded.
3. A fixed default.

Option 2 exists for compatibility only. Anyone who knows which providers
are configured can recompute the key and forge sessions, so deployments
should always set an explicit secret.
"""

import base64
import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from kitauth.config import AuthConfig

logger = logging.getLogger(__name__)


DEFAULT_SECRET = b"svelte_auth_secret"


def derive_provider_secret(provider_ids) -> bytes:
    """Base64 of the ``+``-joined provider ids. Order-sensitive."""
    joined = "+".join(provider_ids)
    return base64.b64encode(joined.encode("utf-8"))


def resolve_secret(config: "AuthConfig") -> bytes:
    """
    Resolve the HS256 signing key for the given configuration.

    Always returns a usable key; never raises.
    """
    if config.jwt_secret:
        return config.jwt_secret.encode("utf-8")

    if config.providers:
        return derive_provider_secret(provider.id for provider in config.providers)

    return DEFAULT_SECRET


def secret_source(config: "AuthConfig") -> str:
    """Name of the branch ``resolve_secret`` takes, for diagnostics."""
    if config.jwt_secret:
        return "explicit"
    if config.providers:
        return "providers"
    return "default"

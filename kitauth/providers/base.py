"""
Identity provider contract.

Every provider exposes a stable ``id`` (used in route paths and in the
provider-derived secret fallback) and implements two operations:

- ``signin``: build the response that starts the provider's flow,
  typically a redirect to an external authorization endpoint
- ``callback``: consume the provider's callback request and yield a
  normalized profile plus an optional post-login redirect URL

Providers are configured once at startup and treated as read-only.
"""

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any, Callable, Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from kitauth.models import AuthRequest, HttpResult

if TYPE_CHECKING:
    from kitauth.auth.routes import Auth


CallbackResult = Tuple[Dict[str, Any], Optional[str]]


class ProviderConfig(BaseModel):
    """Settings shared by all providers."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    id: str = Field(..., description="Stable provider identifier used in route paths", pattern=r"^[A-Za-z0-9_]+$")
    profile: Optional[Callable[..., Any]] = Field(
        None,
        description="Optional profile normalizer: (profile, tokens) -> profile, may be async",
    )


class Provider(ABC):
    """
    Base class for identity providers.

    Subclasses implement ``signin`` and ``callback``; the router only
    looks providers up by ``id`` and never inspects their internals.
    """

    def __init__(self, config: ProviderConfig):
        self.config = config
        self.id = config.id

    def __repr__(self) -> str:
        return f"{type(self).__name__}(id={self.id!r})"

    def get_uri(self, auth: "Auth", path: str, host: Optional[str] = None) -> str:
        return auth.get_url(path, host)

    def get_callback_uri(self, auth: "Auth", host: Optional[str] = None) -> str:
        return self.get_uri(auth, f"/callback/{self.id}", host)

    def get_signin_uri(self, auth: "Auth", host: Optional[str] = None) -> str:
        return self.get_uri(auth, f"/signin/{self.id}", host)

    @abstractmethod
    async def signin(self, request: AuthRequest, auth: "Auth") -> HttpResult:
        """Begin the provider's authentication flow."""

    @abstractmethod
    async def callback(self, request: AuthRequest, auth: "Auth") -> CallbackResult:
        """Return ``(profile, redirect_url_or_None)`` for a callback request."""

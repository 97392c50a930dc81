# =============================================================================
# OAuth 2.0 Providers (generic authorization-code flow, GitHub)
# =============================================================================
#
# Setup (GitHub):
#   1. Go to https://github.com/settings/developers
#   2. Create an OAuth App
#   3. Authorization callback URL: https://yourdomain.com/api/auth/callback/github
#   4. Set env vars:
#      - KITAUTH_GITHUB_CLIENT_ID=...
#      - KITAUTH_GITHUB_CLIENT_SECRET=...
#
# =============================================================================

import base64
import logging
from typing import TYPE_CHECKING, Any, Dict, Optional
from urllib.parse import quote, unquote, urlencode

import httpx
from pydantic import Field

from kitauth.auth.session import AuthError
from kitauth.auth.utils import maybe_await
from kitauth.models import AuthRequest, HttpResult
from kitauth.providers.base import CallbackResult, Provider, ProviderConfig

if TYPE_CHECKING:
    from kitauth.auth.routes import Auth

logger = logging.getLogger(__name__)


class OAuthError(AuthError):
    """OAuth flow error."""
    pass


# =============================================================================
# State Parameter
# =============================================================================

def encode_state(redirect: str) -> str:
    """Pack the post-login redirect into the OAuth ``state`` parameter."""
    # "," separates state pairs, so the value is percent-encoded
    packed = f"redirect={quote(redirect, safe='')}"
    return base64.urlsafe_b64encode(packed.encode("utf-8")).decode("ascii")


def decode_state(state: Optional[str]) -> Optional[str]:
    """Recover the redirect packed by ``encode_state``; None if absent or unreadable."""
    if not state:
        return None

    try:
        padded = state + "=" * (-len(state) % 4)
        decoded = base64.urlsafe_b64decode(padded.encode("ascii")).decode("utf-8")
    except (ValueError, UnicodeError):
        logger.warning("Ignoring undecodable OAuth state parameter")
        return None

    for pair in decoded.split(","):
        key, _, value = pair.partition("=")
        if key == "redirect" and value:
            return unquote(value)
    return None


# =============================================================================
# Generic OAuth 2.0
# =============================================================================

class OAuth2ProviderConfig(ProviderConfig):
    """Endpoints and client credentials for an authorization-code provider."""

    client_id: str = Field(..., min_length=1)
    client_secret: str = Field(..., min_length=1)
    authorization_url: str
    access_token_url: str
    profile_url: str
    scope: str = ""
    params: Dict[str, str] = Field(default_factory=dict, description="Extra authorization URL parameters")
    content_type: str = Field(
        default="application/x-www-form-urlencoded",
        description="Encoding of the token request body",
    )
    timeout: float = 10.0


class OAuth2Provider(Provider):
    """OAuth 2.0 authorization-code provider."""

    config: OAuth2ProviderConfig

    def __init__(self, config: OAuth2ProviderConfig):
        super().__init__(config)

    def get_authorization_url(self, auth: "Auth", host: Optional[str], redirect: str) -> str:
        params = {
            "client_id": self.config.client_id,
            "redirect_uri": self.get_callback_uri(auth, host),
            "response_type": "code",
            "scope": self.config.scope,
            "state": encode_state(redirect),
            **self.config.params,
        }
        return f"{self.config.authorization_url}?{urlencode(params)}"

    async def signin(self, request: AuthRequest, auth: "Auth") -> HttpResult:
        redirect = request.param("redirect") or auth.get_base_url(request.host)
        url = self.get_authorization_url(auth, request.host, redirect)
        return HttpResult(status=302, headers={"Location": url})

    async def exchange_code(self, code: str, redirect_uri: str) -> Dict[str, Any]:
        """
        Exchange an authorization code for tokens.

        Raises:
            OAuthError: If the token endpoint rejects the request
            httpx.HTTPError: If the token endpoint is unreachable
        """
        payload = {
            "client_id": self.config.client_id,
            "client_secret": self.config.client_secret,
            "code": code,
            "redirect_uri": redirect_uri,
            "grant_type": "authorization_code",
        }

        async with httpx.AsyncClient() as client:
            if self.config.content_type == "application/json":
                response = await client.post(
                    self.config.access_token_url,
                    json=payload,
                    headers={"Accept": "application/json"},
                    timeout=self.config.timeout,
                )
            else:
                response = await client.post(
                    self.config.access_token_url,
                    data=payload,
                    headers={"Accept": "application/json"},
                    timeout=self.config.timeout,
                )

            if not response.is_success:
                logger.error(f"{self.id} token exchange failed: {response.text}")
                raise OAuthError(f"Token exchange failed: {response.status_code}")

            tokens = response.json()

        if "access_token" not in tokens:
            error = tokens.get("error_description") or tokens.get("error") or "missing access_token"
            raise OAuthError(f"Token exchange failed: {error}")

        return tokens

    async def get_user_profile(self, tokens: Dict[str, Any]) -> Dict[str, Any]:
        async with httpx.AsyncClient() as client:
            response = await client.get(
                self.config.profile_url,
                headers={
                    "Authorization": f"Bearer {tokens['access_token']}",
                    "Accept": "application/json",
                },
                timeout=self.config.timeout,
            )

            if not response.is_success:
                logger.error(f"{self.id} profile request failed: {response.text}")
                raise OAuthError(f"Failed to get user profile: {response.status_code}")

            return response.json()

    async def callback(self, request: AuthRequest, auth: "Auth") -> CallbackResult:
        error = request.param("error")
        if error:
            raise OAuthError(f"Authorization failed: {request.param('error_description') or error}")

        code = request.param("code")
        if not code:
            raise OAuthError("Missing authorization code")

        tokens = await self.exchange_code(code, self.get_callback_uri(auth, request.host))
        profile = await self.get_user_profile(tokens)

        if self.config.profile:
            profile = await maybe_await(self.config.profile(profile, tokens))

        logger.info(f"{self.id} callback completed")

        return profile, decode_state(request.param("state"))


# =============================================================================
# GitHub
# =============================================================================

class GitHubProvider(OAuth2Provider):
    """GitHub OAuth App provider."""

    AUTHORIZE_URL = "https://github.com/login/oauth/authorize"
    TOKEN_URL = "https://github.com/login/oauth/access_token"
    USERINFO_URL = "https://api.github.com/user"

    def __init__(
        self,
        client_id: str,
        client_secret: str,
        id: str = "github",
        scope: str = "user",
        **kwargs: Any,
    ):
        super().__init__(
            OAuth2ProviderConfig(
                id=id,
                client_id=client_id,
                client_secret=client_secret,
                authorization_url=self.AUTHORIZE_URL,
                access_token_url=self.TOKEN_URL,
                profile_url=self.USERINFO_URL,
                scope=scope,
                **kwargs,
            )
        )

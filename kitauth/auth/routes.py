"""
Authentication routes: the request-routing state machine.

All routes are rooted at the configured base path (default ``/api/auth``)
and evaluated in this order:

1. ``GET  {base}/csrf``               placeholder token
2. ``GET  {base}/session``            ``{"session": <session view>}``
3. ``GET|POST {base}/signout``        clear the session cookie
4. ``{base}/signin/{provider}``       delegate to ``provider.signin``
5. ``{base}/callback/{provider}``     provider-callback sequence
6. anything else                      404 ``"Not found."``

``Auth`` is framework-neutral (``AuthRequest`` in, ``HttpResult`` out);
``create_auth_router`` mounts it on a FastAPI application.
"""

import logging
import re
from typing import TYPE_CHECKING, Any, Dict, Optional
from urllib.parse import urljoin

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse, Response

from kitauth.auth.gateway import SessionGateway
from kitauth.auth.secret import resolve_secret, secret_source
from kitauth.auth.session import TokenCodec
from kitauth.auth.utils import join_path, maybe_await
from kitauth.models import AuthRequest, HttpResult

if TYPE_CHECKING:
    from kitauth.config import AuthConfig
    from kitauth.providers.base import Provider

logger = logging.getLogger(__name__)


# TODO: replace with a per-session anti-forgery token validated on POST routes
CSRF_PLACEHOLDER = "1234"


class Auth:
    """
    Authentication router.

    Attributes:
        config: Immutable auth configuration
        gateway: Session gateway bound to the resolved signing key
        providers: Provider lookup table keyed by id
    """

    def __init__(self, config: "AuthConfig"):
        self.config = config
        self.gateway = SessionGateway(config, TokenCodec(resolve_secret(config), config.jwt_expires_in))
        self.providers: Dict[str, "Provider"] = {provider.id: provider for provider in config.providers}

        self._provider_route = re.compile(
            re.escape(join_path(self.base_path)).rstrip("/")
            + r"/(?P<action>signin|callback)/(?P<provider>[A-Za-z0-9_]+)/?"
        )

        source = secret_source(config)
        if source != "explicit":
            logger.warning(
                f"No jwt_secret configured; signing sessions with the {source} key",
                extra={"secret_source": source},
            )

    # -------------------------------------------------------------------------
    # URLs
    # -------------------------------------------------------------------------

    @property
    def base_path(self) -> str:
        return self.config.base_path

    def get_base_url(self, host: Optional[str] = None) -> str:
        return f"{self.config.protocol}://{self.config.host or host}"

    def get_path(self, path: str) -> str:
        return join_path(self.base_path, path)

    def get_url(self, path: str, host: Optional[str] = None) -> str:
        return urljoin(self.get_base_url(host), self.get_path(path))

    async def get_redirect_url(self, host: Optional[str], redirect_url: Optional[str] = None) -> str:
        """
        Pick the post-auth redirect: ``redirect_url`` or the base URL,
        passed through the ``redirect`` hook when configured.
        """
        redirect = redirect_url or self.get_base_url(host)

        redirect_callback = self.config.callbacks.redirect
        if redirect_callback:
            redirect = await maybe_await(redirect_callback(redirect))

        return redirect

    # -------------------------------------------------------------------------
    # Session hooks for the host application
    # -------------------------------------------------------------------------

    async def get_session_for_request(self, request: AuthRequest) -> Dict[str, Any]:
        token = await self.gateway.get_token(request.headers)
        return await self.gateway.get_session(token)

    # -------------------------------------------------------------------------
    # Handlers
    # -------------------------------------------------------------------------

    async def handle_signout(self, request: AuthRequest) -> HttpResult:
        """
        Replace the session with an empty, freshly signed token.

        POST answers ``{"signout": true}``; GET redirects.
        """
        signed = self.gateway.sign_token({})
        cookie = self.gateway.session_cookie(signed)

        logger.info("Signed out session", extra={"method": request.method})

        if request.method == "POST":
            return HttpResult(headers={"set-cookie": cookie}, body={"signout": True})

        redirect = await self.get_redirect_url(request.host)
        return HttpResult(status=302, headers={"set-cookie": cookie, "Location": redirect})

    async def handle_provider_callback(self, request: AuthRequest, provider: "Provider") -> HttpResult:
        """
        Turn a provider callback into a signed session.

        Provider and hook failures propagate to the caller.
        """
        profile, redirect_url = await provider.callback(request, self)

        sign_in_callback = self.config.callbacks.sign_in
        if sign_in_callback and not await maybe_await(sign_in_callback(profile)):
            logger.warning(f"Sign-in rejected for provider {provider.id}", extra={"provider": provider.id})
            return HttpResult(status=403, body="Access denied.")

        token = await self.gateway.get_token(request.headers) or {"user": {}}

        jwt_callback = self.config.callbacks.jwt
        if jwt_callback:
            token = await maybe_await(jwt_callback(token, profile))
        else:
            token = await self.gateway.set_token(request.headers, {"user": profile})
            # A new login gets a fresh lifetime, not the previous cookie's exp
            token.pop("exp", None)

        signed = self.gateway.sign_token(token)
        redirect = await self.get_redirect_url(request.host, redirect_url)

        logger.info(f"Signed in with provider {provider.id}", extra={"provider": provider.id})

        return HttpResult(
            status=302,
            headers={
                "set-cookie": self.gateway.session_cookie(signed),
                "Location": redirect,
            },
        )

    async def handle_endpoint(self, request: AuthRequest) -> HttpResult:
        """Routes shared by GET and POST: signout, signin, callback."""
        if request.path.rstrip("/") == self.get_path("signout"):
            return await self.handle_signout(request)

        match = self._provider_route.fullmatch(request.path)
        if match:
            provider = self.providers.get(match.group("provider"))
            if provider:
                if match.group("action") == "signin":
                    return await provider.signin(request, self)
                return await self.handle_provider_callback(request, provider)

            logger.debug(f"Unknown provider: {match.group('provider')}")

        return HttpResult(status=404, body="Not found.")

    async def get(self, request: AuthRequest) -> HttpResult:
        path = request.path.rstrip("/")

        if path == self.get_path("csrf"):
            return HttpResult(body=CSRF_PLACEHOLDER)

        if path == self.get_path("session"):
            session = await self.get_session_for_request(request)
            return HttpResult(body={"session": session})

        return await self.handle_endpoint(request)

    async def post(self, request: AuthRequest) -> HttpResult:
        return await self.handle_endpoint(request)

    async def handle(self, request: AuthRequest) -> HttpResult:
        """Dispatch on method; only GET and POST are routed."""
        if request.method == "GET":
            return await self.get(request)
        if request.method == "POST":
            return await self.post(request)
        return HttpResult(status=404, body="Not found.")


# =============================================================================
# FastAPI Integration
# =============================================================================

async def to_auth_request(request: Request) -> AuthRequest:
    """Build an ``AuthRequest`` from a Starlette request."""
    form: Dict[str, str] = {}
    content_type = request.headers.get("content-type", "")
    if request.method == "POST" and (
        content_type.startswith("application/x-www-form-urlencoded")
        or content_type.startswith("multipart/form-data")
    ):
        data = await request.form()
        form = {key: value for key, value in data.items() if isinstance(value, str)}

    headers = dict(request.headers)
    # HTTP/2 clients may split cookies across several headers
    cookies = request.headers.getlist("cookie")
    if len(cookies) > 1:
        headers["cookie"] = "; ".join(cookies)

    return AuthRequest(
        method=request.method,
        path=request.url.path,
        host=request.headers.get("host") or request.url.netloc,
        headers=headers,
        query=dict(request.query_params),
        form=form,
    )


def to_response(result: HttpResult) -> Response:
    """Render an ``HttpResult`` as a Starlette response."""
    if isinstance(result.body, (dict, list)):
        return JSONResponse(content=result.body, status_code=result.status, headers=result.headers)
    if isinstance(result.body, str):
        return PlainTextResponse(content=result.body, status_code=result.status, headers=result.headers)
    return Response(status_code=result.status, headers=result.headers)


def create_auth_router(auth: Auth) -> APIRouter:
    """
    Mount ``auth`` under its base path.

    Usage:
        app.include_router(create_auth_router(Auth(config)))
    """
    router = APIRouter(
        prefix=auth.base_path if auth.base_path != "/" else "",
        tags=["authentication"],
    )

    @router.api_route("/{rest:path}", methods=["GET", "POST"], include_in_schema=False)
    async def auth_endpoint(request: Request) -> Response:
        result = await auth.handle(await to_auth_request(request))
        return to_response(result)

    return router

"""
FastAPI Application Factory
===========================

Builds a FastAPI application with the authentication routes mounted.
Hosts embedding kitauth in an existing app should call
``create_auth_router`` directly; this factory is the standalone service.

Routers:
    - {KITAUTH_BASE_PATH}/*  : Authentication routes (signin, callback, session, signout, csrf)
    - /health                : Health check endpoint

Environment Variables:
    - KITAUTH_JWT_SECRET: Secret for signing session JWTs
    - KITAUTH_JWT_EXPIRES_IN: Session lifetime (default: 30d)
    - KITAUTH_HOST / KITAUTH_PROTOCOL / KITAUTH_BASE_PATH: Public URL layout
    - KITAUTH_GITHUB_CLIENT_ID / KITAUTH_GITHUB_CLIENT_SECRET: Enable GitHub sign-in
    - KITAUTH_LOG_LEVEL: Logging level (default: INFO)

Running the Service:
    Development:
        uvicorn kitauth.main:create_application --factory --reload --port 8080

    Or:
        python -m kitauth.main
"""

import logging
import sys
from typing import Any, Dict, List, Optional

import uvicorn
from fastapi import FastAPI

from kitauth.auth.routes import Auth, create_auth_router
from kitauth.config import AuthCallbacks, Settings, get_settings, validate_configuration
from kitauth.providers import GitHubProvider, Provider

logger = logging.getLogger(__name__)


def setup_logging(log_level: str = "INFO") -> None:
    """
    Configure structured logging for the application.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='{"timestamp": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s", "module": "%(module)s", "function": "%(funcName)s"}',
        handlers=[logging.StreamHandler(sys.stdout)]
    )


def default_providers(settings: Settings) -> List[Provider]:
    """Providers enabled by environment settings."""
    providers: List[Provider] = []
    if settings.github_configured:
        providers.append(GitHubProvider(settings.GITHUB_CLIENT_ID, settings.GITHUB_CLIENT_SECRET))
    return providers


def create_application(
    settings: Optional[Settings] = None,
    providers: Optional[List[Provider]] = None,
    callbacks: Optional[AuthCallbacks] = None,
) -> FastAPI:
    """
    Create the FastAPI application.

    Args:
        settings: Settings to use (defaults to environment settings)
        providers: Identity providers (defaults to those enabled in settings)
        callbacks: Optional user hooks

    Returns:
        FastAPI app with ``app.state.auth`` set to the router
    """
    settings = settings or get_settings()
    setup_logging(settings.LOG_LEVEL)

    if providers is None:
        providers = default_providers(settings)

    config = settings.to_auth_config(providers=providers, callbacks=callbacks)

    report = validate_configuration(config)
    for error in report["errors"]:
        logger.error(f"Configuration error: {error}")
    for warning in report["warnings"]:
        logger.warning(f"Configuration warning: {warning}")

    auth = Auth(config)

    app = FastAPI(title="kitauth", docs_url=None, redoc_url=None)
    app.state.settings = settings
    app.state.auth = auth
    app.include_router(create_auth_router(auth))

    @app.get("/health", tags=["Health"])
    async def health() -> Dict[str, Any]:
        return {
            "status": "ok",
            "providers": report["providers"],
            "base_path": auth.base_path,
        }

    logger.info(
        "Application created",
        extra={"providers": report["providers"], "base_path": auth.base_path},
    )

    return app


if __name__ == "__main__":
    settings = get_settings()
    uvicorn.run(
        create_application(settings),
        host=settings.APP_HOST,
        port=settings.APP_PORT,
        log_level=settings.LOG_LEVEL.lower(),
    )

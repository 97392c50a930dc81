"""
Configuration module for the authentication core.

Two layers of configuration are defined here:

- ``AuthConfig``: the immutable value an ``Auth`` router is built from.
  It holds the provider list and user hooks, which cannot come from the
  environment, and is passed explicitly to the router at construction.
- ``Settings``: deploy-time values loaded with Pydantic Settings from
  environment variables (prefix ``KITAUTH_``) or a ``.env`` file.
  ``Settings.to_auth_config`` combines them with providers and hooks.
"""

from functools import lru_cache
from typing import Any, Callable, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from kitauth.auth.session import DEFAULT_EXPIRES_IN, parse_duration
from kitauth.providers.base import Provider


# =============================================================================
# Auth Configuration
# =============================================================================

class AuthCallbacks(BaseModel):
    """
    Optional user hooks. Each may be a plain function or a coroutine function.

    - sign_in(profile) -> bool: reject a provider login by returning False
    - jwt(token, profile=None) -> token: transform claims on read and on login
    - session(token, session) -> session: shape the client-facing session view
    - redirect(url) -> url: override the post-login / post-signout redirect
    """

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    sign_in: Optional[Callable[..., Any]] = None
    jwt: Optional[Callable[..., Any]] = None
    session: Optional[Callable[..., Any]] = None
    redirect: Optional[Callable[..., Any]] = None


class AuthConfig(BaseModel):
    """Immutable configuration for an ``Auth`` router."""

    model_config = ConfigDict(frozen=True, arbitrary_types_allowed=True)

    providers: List[Provider] = Field(default_factory=list, description="Ordered identity providers")
    callbacks: AuthCallbacks = Field(default_factory=AuthCallbacks)

    jwt_secret: Optional[str] = Field(
        None,
        description="Secret for signing session JWTs; falls back to a provider-derived key when unset",
    )
    jwt_expires_in: Union[str, int] = Field(
        default=DEFAULT_EXPIRES_IN,
        description="Session lifetime as a duration string (e.g. '30d') or seconds",
    )

    host: Optional[str] = Field(None, description="Public host; defaults to the request's Host header")
    protocol: Literal["http", "https"] = "https"
    base_path: str = "/api/auth"

    cookie_secure: bool = Field(default=False, description="Add the Secure attribute to the session cookie")
    cookie_samesite: Optional[Literal["lax", "strict", "none"]] = Field(
        None,
        description="SameSite attribute for the session cookie",
    )

    @field_validator("jwt_expires_in")
    @classmethod
    def validate_expires_in(cls, v: Union[str, int]) -> Union[str, int]:
        parse_duration(v)
        return v

    @field_validator("base_path")
    @classmethod
    def validate_base_path(cls, v: str) -> str:
        if not v.startswith("/"):
            raise ValueError(f"base_path must start with '/', got: {v}")
        return v.rstrip("/") or "/"

    @field_validator("providers")
    @classmethod
    def validate_unique_provider_ids(cls, v: List[Provider]) -> List[Provider]:
        seen = set()
        for provider in v:
            if provider.id in seen:
                raise ValueError(f"Duplicate provider id: {provider.id}")
            seen.add(provider.id)
        return v

    @field_validator("cookie_samesite", mode="before")
    @classmethod
    def normalize_samesite(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if isinstance(v, str) else v


# =============================================================================
# Environment Settings
# =============================================================================

class Settings(BaseSettings):
    """
    Deploy-time settings loaded from environment variables.
    """

    # =========================================================================
    # Session JWT Configuration
    # =========================================================================

    JWT_SECRET: Optional[str] = Field(
        None,
        description="Secret key for signing session JWTs (strongly recommended)",
    )

    JWT_EXPIRES_IN: str = Field(
        default=DEFAULT_EXPIRES_IN,
        description="Session lifetime, e.g. '30d', '12h' or a number of seconds",
    )

    # =========================================================================
    # Routing
    # =========================================================================

    HOST: Optional[str] = Field(None, description="Public host name (defaults to the request Host header)")
    PROTOCOL: Literal["http", "https"] = "https"
    BASE_PATH: str = "/api/auth"

    # =========================================================================
    # Cookie Hardening
    # =========================================================================

    COOKIE_SECURE: bool = False
    COOKIE_SAMESITE: Optional[Literal["lax", "strict", "none"]] = None

    # =========================================================================
    # Bundled Providers
    # =========================================================================

    GITHUB_CLIENT_ID: Optional[str] = None
    GITHUB_CLIENT_SECRET: Optional[str] = None

    # =========================================================================
    # Application
    # =========================================================================

    LOG_LEVEL: str = "INFO"
    APP_HOST: str = "0.0.0.0"
    APP_PORT: int = Field(default=8080, ge=1, le=65535)

    model_config = SettingsConfigDict(
        env_prefix="KITAUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("JWT_EXPIRES_IN")
    @classmethod
    def validate_expires_in(cls, v: str) -> str:
        if v.isdigit():
            return v
        parse_duration(v)
        return v

    @field_validator("COOKIE_SAMESITE", mode="before")
    @classmethod
    def normalize_samesite(cls, v: Optional[str]) -> Optional[str]:
        return v.lower() if isinstance(v, str) else v

    @property
    def jwt_expires_in(self) -> Union[str, int]:
        """JWT_EXPIRES_IN with bare digit strings read as seconds."""
        return int(self.JWT_EXPIRES_IN) if self.JWT_EXPIRES_IN.isdigit() else self.JWT_EXPIRES_IN

    @property
    def github_configured(self) -> bool:
        return bool(self.GITHUB_CLIENT_ID and self.GITHUB_CLIENT_SECRET)

    def to_auth_config(
        self,
        providers: Optional[List[Provider]] = None,
        callbacks: Optional[AuthCallbacks] = None,
    ) -> AuthConfig:
        """Build the immutable router configuration from these settings."""
        return AuthConfig(
            providers=providers or [],
            callbacks=callbacks or AuthCallbacks(),
            jwt_secret=self.JWT_SECRET,
            jwt_expires_in=self.jwt_expires_in,
            host=self.HOST,
            protocol=self.PROTOCOL,
            base_path=self.BASE_PATH,
            cookie_secure=self.COOKIE_SECURE,
            cookie_samesite=self.COOKIE_SAMESITE,
        )


@lru_cache()
def get_settings() -> Settings:
    """
    Get or create a singleton Settings instance.

    Returns:
        Settings instance with all configuration loaded and validated.

    Raises:
        ValidationError: If environment variables are invalid.
    """
    return Settings()


# =============================================================================
# Configuration Helpers
# =============================================================================

def validate_configuration(config: AuthConfig) -> dict:
    """
    Check an auth configuration for deployment problems.

    Returns:
        Dictionary with validation status, errors and warnings.

    Example:
        >>> status = validate_configuration(config)
        >>> if not status["valid"]:
        ...     print(status["errors"])
    """
    errors = []
    warnings = []

    if not config.providers:
        errors.append("No providers configured")

    if not config.jwt_secret:
        if config.providers:
            warnings.append(
                "jwt_secret is not set: the signing key is derived from provider ids "
                "and can be recomputed by anyone who knows them"
            )
        else:
            warnings.append("jwt_secret is not set: the built-in default key is in use")
    elif len(config.jwt_secret) < 32:
        warnings.append("jwt_secret is shorter than recommended (32+ chars)")

    if config.protocol == "https" and not config.cookie_secure:
        warnings.append("Session cookie is not marked Secure while serving over https")

    if config.cookie_samesite is None:
        warnings.append("Session cookie has no SameSite attribute")

    if config.cookie_samesite == "none" and not config.cookie_secure:
        errors.append("SameSite=None requires the Secure cookie attribute")

    return {
        "valid": len(errors) == 0,
        "errors": errors,
        "warnings": warnings,
        "providers": [provider.id for provider in config.providers],
        "jwt_expires_in_seconds": parse_duration(config.jwt_expires_in),
    }

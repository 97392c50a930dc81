"""
Data Models Module

This module defines the Pydantic models exchanged at the boundary between
the authentication core and the hosting HTTP framework.

Models are organized by functional area:
- Request models (framework-neutral view of an inbound request)
- Response models (status/headers/body produced by the router)
"""

from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


# ============================================================================
# Request Models
# ============================================================================

class AuthRequest(BaseModel):
    """Framework-neutral view of an inbound authentication request."""

    model_config = ConfigDict(frozen=True)

    method: str = Field(default="GET", description="HTTP method, upper-case")
    path: str = Field(..., description="Request path without query string")
    host: str = Field(default="localhost", description="Host header value (host[:port])")
    headers: Dict[str, str] = Field(default_factory=dict, description="Request headers, lower-cased names")
    query: Dict[str, str] = Field(default_factory=dict, description="Query string parameters")
    form: Dict[str, str] = Field(default_factory=dict, description="Form body parameters, if any")

    @field_validator("method")
    @classmethod
    def normalize_method(cls, v: str) -> str:
        return v.upper()

    @field_validator("headers")
    @classmethod
    def normalize_headers(cls, v: Dict[str, str]) -> Dict[str, str]:
        return {name.lower(): value for name, value in v.items()}

    def header(self, name: str) -> Optional[str]:
        """Case-insensitive header lookup."""
        return self.headers.get(name.lower())

    def param(self, name: str) -> Optional[str]:
        """Look up a parameter in the query string, then in the form body."""
        if name in self.query:
            return self.query[name]
        return self.form.get(name)


# ============================================================================
# Response Models
# ============================================================================

class HttpResult(BaseModel):
    """HTTP-shaped result produced by the router and by providers."""

    status: int = Field(default=200, description="HTTP status code")
    headers: Dict[str, str] = Field(default_factory=dict, description="Response headers")
    body: Any = Field(default=None, description="Response body (dict, list, str or None)")

    @property
    def location(self) -> Optional[str]:
        for name, value in self.headers.items():
            if name.lower() == "location":
                return value
        return None

    @property
    def set_cookie(self) -> Optional[str]:
        for name, value in self.headers.items():
            if name.lower() == "set-cookie":
                return value
        return None


__all__ = [
    "AuthRequest",
    "HttpResult",
]

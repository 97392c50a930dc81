"""
JWT Session Token Codec
=======================

Handles signing and verification of the session JWTs carried in the
session cookie. Tokens are always HS256 with a ``typ: JWT`` header.

Verification is fail-closed to anonymous: any parse, signature or expiry
failure yields ``None`` instead of raising, so a bad cookie degrades to an
unauthenticated session rather than an error page.
"""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Union

import jwt
from jwt.exceptions import ExpiredSignatureError, PyJWTError

logger = logging.getLogger(__name__)


JWT_ALGORITHM = "HS256"
DEFAULT_EXPIRES_IN = "30d"


# =============================================================================
# Exceptions
# =============================================================================

class AuthError(Exception):
    """Base exception for authentication core errors"""
    pass


# =============================================================================
# Expiry Durations
# =============================================================================

_MINUTE = 60
_HOUR = _MINUTE * 60
_DAY = _HOUR * 24
_WEEK = _DAY * 7
_YEAR = _DAY * 365.25

_DURATION_RE = re.compile(
    r"^(\d+|\d+\.\d+) ?"
    r"(seconds?|secs?|s|minutes?|mins?|m|hours?|hrs?|h|days?|d|weeks?|w|years?|yrs?|y)$",
    re.IGNORECASE,
)


def parse_duration(value: Union[str, int]) -> int:
    """
    Convert an expiry setting to a number of seconds.

    Integers are taken as seconds. Strings use the compact duration
    grammar: ``"30d"``, ``"2 hours"``, ``"90s"``, ``"1.5h"``, ``"1y"``.

    Raises:
        ValueError: If the value is negative or not a recognised duration
    """
    if isinstance(value, bool):
        raise ValueError(f"Invalid duration: {value!r}")

    if isinstance(value, int):
        if value < 0:
            raise ValueError(f"Duration must not be negative, got: {value}")
        return value

    match = _DURATION_RE.match(value.strip()) if isinstance(value, str) else None
    if not match:
        raise ValueError(f"Invalid duration format: {value!r}")

    amount = float(match.group(1))
    unit = match.group(2).lower()

    if unit.startswith("s"):
        seconds = amount
    elif unit.startswith("m"):
        seconds = amount * _MINUTE
    elif unit.startswith("h"):
        seconds = amount * _HOUR
    elif unit.startswith("d"):
        seconds = amount * _DAY
    elif unit.startswith("w"):
        seconds = amount * _WEEK
    else:
        seconds = amount * _YEAR

    return round(seconds)


# =============================================================================
# Codec
# =============================================================================

class TokenCodec:
    """
    Signs claims into compact JWTs and verifies them back into claims.

    Attributes:
        secret: HS256 key bytes
        expires_in: Lifetime in seconds applied when claims carry no ``exp``
    """

    def __init__(self, secret: bytes, expires_in: Union[str, int] = DEFAULT_EXPIRES_IN):
        self.secret = secret
        self.expires_in = parse_duration(expires_in)

    def sign(self, claims: Mapping[str, Any], now: Optional[datetime] = None) -> str:
        """
        Sign claims into a compact JWT string.

        Args:
            claims: Claims to sign. Not mutated.
            now: Signing instant (defaults to current UTC time)

        Returns:
            Encoded JWT string
        """
        payload = dict(claims)

        if not payload.get("exp"):
            issued = now or datetime.now(timezone.utc)
            payload["exp"] = int(issued.timestamp()) + self.expires_in

        token = jwt.encode(
            payload,
            self.secret,
            algorithm=JWT_ALGORITHM,
            headers={"typ": "JWT"},
        )

        logger.debug(
            "Signed session JWT",
            extra={"exp": payload["exp"], "has_user": "user" in payload},
        )

        return token

    def verify(self, token: Optional[str]) -> Optional[Dict[str, Any]]:
        """
        Verify and decode a session JWT.

        Returns:
            Decoded claims, or None if the token is missing, malformed,
            tampered with or expired
        """
        if not token or not isinstance(token, str):
            return None

        try:
            return jwt.decode(
                token,
                self.secret,
                algorithms=[JWT_ALGORITHM],
                options={
                    "verify_signature": True,
                    "verify_exp": True,
                    "verify_aud": False,
                    "verify_iss": False,
                    "verify_sub": False,
                    "verify_jti": False,
                },
            )
        except ExpiredSignatureError:
            logger.debug("Session JWT expired")
            return None
        except PyJWTError as e:
            logger.debug(f"Invalid session JWT: {e}")
            return None
        except (ValueError, TypeError) as e:
            # Undecodable segments that slip past PyJWT's own error wrapping
            logger.debug(f"Malformed session JWT: {e}")
            return None


__all__ = [
    "AuthError",
    "DEFAULT_EXPIRES_IN",
    "JWT_ALGORITHM",
    "TokenCodec",
    "parse_duration",
]

"""
Shared fixtures for kitauth tests.
"""

from typing import Any, Optional

import pytest

from kitauth.auth.routes import Auth
from kitauth.config import AuthCallbacks, AuthConfig
from kitauth.tests.helpers import TEST_SECRET, StaticProvider


@pytest.fixture
def provider():
    return StaticProvider()


@pytest.fixture
def config(provider):
    return AuthConfig(providers=[provider], jwt_secret=TEST_SECRET)


@pytest.fixture
def auth(config):
    return Auth(config)


@pytest.fixture
def make_auth(provider):
    """Build an Auth with the standard provider and overridable options."""

    def _make(callbacks: Optional[AuthCallbacks] = None, **overrides: Any) -> Auth:
        options = {"providers": [provider], "jwt_secret": TEST_SECRET}
        options.update(overrides)
        return Auth(AuthConfig(callbacks=callbacks or AuthCallbacks(), **options))

    return _make

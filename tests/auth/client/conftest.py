from typing import Any
from unittest.mock import AsyncMock

import pytest

from authflow.auth.models.config import AuthConfig
from authflow.auth.primitives.cookies import CookieJar

TEST_CLIENT_ID = "85a03867-dccf-4882-adde-1a79aeec50df"


class RecordingNavigator:
    """Navigation sink that records every URL instead of leaving the page."""

    def __init__(self):
        self.urls: list[str] = []

    def navigate(self, url: str) -> None:
        self.urls.append(url)

    @property
    def last_url(self) -> str | None:
        return self.urls[-1] if self.urls else None


def make_config(**overrides: Any) -> AuthConfig:
    values: dict[str, Any] = {
        "server_url": "http://localhost:9000",
        "client_id": TEST_CLIENT_ID,
        "redirect_uri": "http://localhost",
        "post_logout_redirect_uri": "http://localhost",
    }
    values.update(overrides)
    return AuthConfig(**values)


@pytest.fixture
def config_factory():
    return make_config


@pytest.fixture
def config() -> AuthConfig:
    return make_config()


@pytest.fixture
def navigator() -> RecordingNavigator:
    return RecordingNavigator()


@pytest.fixture
def requester() -> AsyncMock:
    mock = AsyncMock()
    mock.request.return_value = {}
    return mock


@pytest.fixture
def cookies() -> CookieJar:
    return CookieJar()

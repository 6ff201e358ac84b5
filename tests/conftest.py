# tests/conftest.py
from __future__ import annotations

import pytest

from tests.utils import DEFAULT_AMP_HTML, make_request

_ENV_KEYS = ("AMPPKG_CACHE_HOST", "AMPPKG_USER_AGENT", "AMPPKG_TIMEOUT_S", "AMPPKG_ALLOW_NETWORK")


# -------- Isolation --------
@pytest.fixture(autouse=True)
def _clean_env(monkeypatch, tmp_path):
    """No ambient config: clear AMPPKG_* and run from an empty directory."""
    for key in _ENV_KEYS:
        monkeypatch.delenv(key, raising=False)
    monkeypatch.chdir(tmp_path)
    yield


# -------- Document fixtures --------
@pytest.fixture
def amp_html() -> str:
    return DEFAULT_AMP_HTML


@pytest.fixture
def transform_request():
    """Factory for TransformRequest with optional overrides."""

    def _factory(**overrides):
        return make_request(**overrides)

    return _factory


# -------- HTTP fakes --------
class FakeResponse:
    def __init__(
        self,
        *,
        status: int = 200,
        body: bytes = b"",
        url: str = "",
        encoding: str | None = "utf-8",
    ) -> None:
        self.status_code = status
        self.content = body
        self.url = url
        self.encoding = encoding


@pytest.fixture
def fake_response():
    return FakeResponse

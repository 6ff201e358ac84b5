# amppkg/core/fetch/document.py
"""
Document fetcher for the `transform --url` command.

Plain HTTP GET with the configured User-Agent and timeout; no caching, no JS.
The final URL after redirects becomes the document URL used for resolving.
"""

from __future__ import annotations

import logging

import requests
from pydantic import BaseModel, ConfigDict, Field

from amppkg.core.errors import FetchError, NetworkError
from amppkg.inputs.config import PackagerConfig

logger = logging.getLogger(__name__)


class FetchedDocument(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str = Field(..., description="Final URL after redirects.")
    status_code: int
    html: str
    bytes_size: int = Field(..., ge=0)


# -------------------------
# Internal HTTP helpers
# -------------------------


def _http_get(url: str, ua: str, timeout: float) -> requests.Response:
    try:
        return requests.get(url, headers={"User-Agent": ua}, timeout=timeout)
    except requests.RequestException as e:
        raise NetworkError(str(e)) from e


# -------------------------
# Public API
# -------------------------


def fetch_document(url: str, *, config: PackagerConfig | None = None) -> FetchedDocument:
    """
    Fetch `url` and return its decoded body.

    Raises:
        FetchError: networking is disabled by config.
        NetworkError: transport failure or an HTTP status >= 400.
    """
    cfg = config or PackagerConfig()
    if not cfg.allow_network:
        raise FetchError(f"Networking is disabled by config; cannot fetch {url}")

    resp = _http_get(url, cfg.user_agent, cfg.timeout_s)
    if resp.status_code >= 400:
        raise NetworkError(f"HTTP {resp.status_code} for {url}")

    content = resp.content
    encoding = resp.encoding or "utf-8"
    final_url = resp.url or url
    logger.info("Fetched %s (%d bytes, HTTP %d)", final_url, len(content), resp.status_code)
    return FetchedDocument(
        url=final_url,
        status_code=resp.status_code,
        html=content.decode(encoding, errors="replace"),
        bytes_size=len(content),
    )

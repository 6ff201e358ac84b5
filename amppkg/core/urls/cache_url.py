# amppkg/core/urls/cache_url.py
"""
Subresource URL -> cache URL.

Layout of a cache URL:

    https://<subdomain>.<cache host>/<prefix>/<origin host><path>[?query][#fragment]

where <prefix> is
    r            non-image resources
    i            images
    ii/w<N>      images with a requested display width N > 0
followed by an extra "s" segment when the origin was https. The cache URL
itself is always https; ports are never carried over.
"""

from __future__ import annotations

import logging
from urllib.parse import urlsplit

from amppkg.core.errors import UnsupportedSchemeError
from amppkg.schemas.models import CacheURL, SubresourceKind, SubresourceOffset

from .domain import to_cache_url_subdomain
from .resolver import to_absolute_url

logger = logging.getLogger(__name__)

AMP_CACHE_HOST = "cdn.ampproject.org"

_SUPPORTED_SCHEMES = ("http", "https")


def cache_path_prefix(kind: SubresourceKind, desired_image_width: int, secure: bool) -> str:
    """Path segments between the cache host and the origin host, without slashes at the ends."""
    if kind == "image":
        segments = ["ii", f"w{desired_image_width}"] if desired_image_width > 0 else ["i"]
    else:
        segments = ["r"]
    if secure:
        segments.append("s")
    return "/".join(segments)


def get_cache_url(
    root_url: str,
    base_url: str,
    raw: str,
    kind: SubresourceKind = "other",
    desired_image_width: int = 0,
    *,
    cache_host: str = AMP_CACHE_HOST,
) -> CacheURL:
    """
    Build the cache URL for a subresource reference.

    Args:
        root_url: URL of the document being rewritten; used as the base when
            `base_url` is empty.
        base_url: Resolution base (the document's <base href> or its URL).
        raw: The reference as found in the document.
        kind: "image" or "other".
        desired_image_width: Requested width; ignored unless kind is "image"
            and the value is positive.
        cache_host: Parent domain of the per-origin subdomains.

    Raises:
        UnsupportedSchemeError: `raw` is empty or does not resolve to an
            http(s) URL with a host, including a fragment-only
            reference to `root_url` itself.
    """
    if not raw:
        raise UnsupportedSchemeError(raw, reason="empty URL")

    # Same-document fragments come back as "#frag" and fail the scheme check.
    absolute = to_absolute_url(root_url, base_url or root_url, raw)
    try:
        parts = urlsplit(absolute)
        host = parts.hostname
    except ValueError as e:
        raise UnsupportedSchemeError(raw, reason=f"unparseable URL ({e})") from e

    if parts.scheme not in _SUPPORTED_SCHEMES:
        raise UnsupportedSchemeError(raw, parts.scheme)
    if not host:
        raise UnsupportedSchemeError(raw, parts.scheme, reason="missing host")

    # Everything after the authority is carried over as-is.
    tail = absolute[len(parts.scheme) + len("://") + len(parts.netloc) :]
    width = desired_image_width if kind == "image" else 0
    prefix = cache_path_prefix(kind, width, secure=parts.scheme == "https")
    subdomain = to_cache_url_subdomain(host)
    path_host = f"[{host}]" if ":" in host else host

    url = f"https://{subdomain}.{cache_host}/{prefix}/{path_host}{tail}"
    logger.debug("Cache URL for %r: %s", raw, url)
    return CacheURL(url=url, subdomain=subdomain, origin_host=host)


def cache_url_for(
    offset: SubresourceOffset,
    root_url: str,
    base_url: str,
    raw: str,
    *,
    cache_host: str = AMP_CACHE_HOST,
) -> CacheURL:
    """`get_cache_url` driven by a SubresourceOffset's kind and width."""
    return get_cache_url(
        root_url,
        base_url,
        raw,
        offset.kind,
        offset.effective_width,
        cache_host=cache_host,
    )

# amppkg/core/urls/resolver.py
"""
Absolute URL resolution for references found in a document.

Rules:
  - "" is passed through (callers use it for "no URL present").
  - Protocol-relative references ("//host/path") are upgraded to https,
    whatever the scheme of the base or the document.
  - References carrying their own scheme are returned verbatim; non-http(s)
    schemes (mailto:, file:, data:, ...) are not validated here.
  - Relative references resolve against the base URL, never the document URL.
  - If the reference has a fragment and resolves to the document itself
    (both compared without fragments), only "#<fragment>" is returned so the
    anchor does not force a navigation.

Nothing here raises: malformed input comes back as-is.
"""

from __future__ import annotations

from urllib.parse import urldefrag, urljoin, urlsplit

from amppkg.schemas.models import ResourceReference

_HTTP_SCHEMES = ("http", "https")


def _upgrade_protocol_relative(url: str) -> str:
    if url.startswith("//"):
        return "https:" + url
    return url


def _without_fragment(url: str) -> str:
    try:
        return urldefrag(url).url
    except ValueError:
        return url.split("#", 1)[0]


def resolve_reference(base_url: str, raw: str) -> str:
    """
    Resolve `raw` against `base_url` (RFC 3986), without the same-document
    fragment reduction. Returns "" for "".
    """
    if not raw:
        return ""

    ref, sep, fragment = raw.partition("#")
    ref = _upgrade_protocol_relative(ref)

    try:
        parts = urlsplit(ref)
    except ValueError:
        return raw

    # Own scheme: non-web schemes verbatim, absolute web URLs untouched
    if parts.scheme and (parts.scheme not in _HTTP_SCHEMES or parts.netloc):
        return ref + sep + fragment

    base = _without_fragment(_upgrade_protocol_relative(base_url or ""))
    try:
        target = urljoin(base, ref) if ref else base
    except ValueError:
        return raw
    return target + sep + fragment


def to_absolute_url(document_url: str, base_url: str, raw: str) -> str:
    """
    Anchor a possibly-relative URL found in a document.

    Example:
        >>> to_absolute_url("https://a.test/", "https://a.test/", "#top")
        '#top'
        >>> to_absolute_url("https://a.test/", "https://a.test/x/", "y.png")
        'https://a.test/x/y.png'
    """
    if not raw:
        return ""

    resolved = resolve_reference(base_url, raw)
    if "#" not in raw:
        return resolved

    try:
        scheme = urlsplit(resolved).scheme
    except ValueError:
        return resolved
    if scheme not in _HTTP_SCHEMES:
        return resolved

    target, _sep, fragment = resolved.partition("#")
    if document_url and target == _without_fragment(document_url):
        return "#" + fragment
    return resolved


def absolute_url(ref: ResourceReference) -> str:
    """`to_absolute_url` for a ResourceReference."""
    return to_absolute_url(ref.document_url, ref.base_url or ref.document_url, ref.raw_url)

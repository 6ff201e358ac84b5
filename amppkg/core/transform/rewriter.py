# amppkg/core/transform/rewriter.py
"""
Splices cache URLs into a document at known byte offsets.

Offsets come from the scanner (or any other walker) and refer to the raw
attribute value in the source bytes. Occurrences that do not resolve to an
http(s) URL are left as they are and reported back to the caller.
"""

from __future__ import annotations

import html
import logging
from collections.abc import Iterable

from amppkg.core.errors import UnsupportedSchemeError
from amppkg.core.urls.cache_url import AMP_CACHE_HOST, cache_url_for
from amppkg.schemas.models import RewrittenURL, SubresourceOffset

logger = logging.getLogger(__name__)


def _check_offsets(offsets: list[SubresourceOffset], size: int) -> None:
    prev_end = 0
    for off in offsets:
        if off.end > size:
            raise ValueError(f"offset {off.start}..{off.end} is past the end of the document ({size} bytes)")
        if off.start < prev_end:
            raise ValueError(f"offset {off.start}..{off.end} overlaps a previous occurrence")
        prev_end = off.end


def rewrite_subresources(
    document: str | bytes,
    offsets: Iterable[SubresourceOffset],
    root_url: str,
    base_url: str,
    *,
    cache_host: str = AMP_CACHE_HOST,
) -> tuple[bytes, list[RewrittenURL], list[str]]:
    """
    Replace each offset range with its HTML-escaped cache URL.

    Returns:
        (new document bytes, rewritten occurrences in document order,
         raw URLs skipped because they are not cacheable)

    Raises:
        ValueError: offsets overlap or run past the end of the document.
    """
    data = document.encode("utf-8", errors="surrogateescape") if isinstance(document, str) else document
    ordered = sorted(offsets, key=lambda o: (o.start, o.end))
    _check_offsets(ordered, len(data))

    rewritten: list[RewrittenURL] = []
    skipped: list[str] = []
    pieces: list[bytes] = []
    cursor = 0

    for off in ordered:
        original = data[off.start : off.end].decode("utf-8", errors="surrogateescape")
        raw = html.unescape(original).strip()
        try:
            cache_url = cache_url_for(off, root_url, base_url, raw, cache_host=cache_host)
        except UnsupportedSchemeError as e:
            logger.debug("Leaving subresource unrewritten: %s", e)
            skipped.append(raw)
            continue

        pieces.append(data[cursor : off.start])
        pieces.append(html.escape(cache_url.url, quote=True).encode("utf-8"))
        cursor = off.end
        rewritten.append(RewrittenURL(offset=off, original=original, url=cache_url.url))

    pieces.append(data[cursor:])
    return b"".join(pieces), rewritten, skipped

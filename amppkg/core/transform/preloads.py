# amppkg/core/transform/preloads.py
"""
Collects preload hints for the response metadata.

Each hint points at a cache URL; callers either hand in a final URL or let
the collector build it from a raw reference. References that cannot be
served from the cache are dropped rather than failing the document.
"""

from __future__ import annotations

import logging

from amppkg.core.errors import UnsupportedSchemeError
from amppkg.core.urls.cache_url import AMP_CACHE_HOST, get_cache_url
from amppkg.schemas.models import Metadata, Preload, PreloadAs, SubresourceKind

logger = logging.getLogger(__name__)


class PreloadCollector:
    """
    Per-request accumulator of Preload entries (insertion order, no duplicates).
    """

    def __init__(self, *, cache_host: str = AMP_CACHE_HOST) -> None:
        self.cache_host = cache_host
        self._preloads: list[Preload] = []
        self._seen: set[tuple[str, str]] = set()

    def __len__(self) -> int:
        return len(self._preloads)

    def add(self, url: str, as_: PreloadAs, media: str | None = None) -> bool:
        """Record a preload for an already-rewritten URL. Returns False for duplicates."""
        key = (url, as_)
        if key in self._seen:
            return False
        self._seen.add(key)
        self._preloads.append(Preload(url=url, as_=as_, media=media if as_ == "image" else None))
        return True

    def add_subresource(
        self,
        root_url: str,
        base_url: str,
        raw: str,
        kind: SubresourceKind,
        as_: PreloadAs,
        *,
        desired_image_width: int = 0,
        media: str | None = None,
    ) -> bool:
        """Build the cache URL for `raw` and record it; unsupported URLs are skipped."""
        try:
            cache_url = get_cache_url(
                root_url,
                base_url,
                raw,
                kind,
                desired_image_width,
                cache_host=self.cache_host,
            )
        except UnsupportedSchemeError as e:
            logger.debug("Dropping preload hint: %s", e)
            return False
        return self.add(cache_url.url, as_, media)

    def metadata(self) -> Metadata:
        return Metadata(preloads=list(self._preloads))

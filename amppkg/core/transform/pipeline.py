# amppkg/core/transform/pipeline.py
"""
Document transform pipeline.

Flow
----
1) Gate on the declared AMP format and the requested transforms version.
2) Pick the transformer list from the request's TransformersConfig.
3) Run them in order over a shared context:
     - url_rewrite    : every scanned subresource -> cache URL, spliced in place
     - preload_hints  : scripts, stylesheets and <link rel=preload> -> Metadata
4) Return the HTML, the metadata, and what was (not) rewritten.

Everything runs on a per-request context; nothing is shared between calls.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from amppkg.core.errors import (
    UnknownTransformerError,
    UnsupportedFormatError,
    UnsupportedVersionError,
)
from amppkg.core.urls.cache_url import AMP_CACHE_HOST
from amppkg.core.urls.resolver import resolve_reference
from amppkg.schemas.models import (
    FoundSubresource,
    RewrittenURL,
    TransformersConfig,
    TransformRequest,
    TransformResult,
    VersionRange,
)

from .preloads import PreloadCollector
from .rewriter import rewrite_subresources
from .scanner import detect_html_format, find_base_href, find_subresources

logger = logging.getLogger(__name__)

SUPPORTED_VERSIONS = VersionRange(min=1, max=1)
LATEST_VERSION = SUPPORTED_VERSIONS.max

DEFAULT_TRANSFORMERS: tuple[str, ...] = ("url_rewrite", "preload_hints")
VALIDATION_TRANSFORMERS: tuple[str, ...] = ("url_rewrite",)


@dataclass
class TransformContext:
    """Mutable state threaded through the transformers of one request."""

    request: TransformRequest
    cache_host: str
    html: str
    base_url: str
    subresources: list[FoundSubresource]
    preloads: PreloadCollector
    rewritten: list[RewrittenURL] = field(default_factory=list)
    skipped: list[str] = field(default_factory=list)
    urls_rewritten: bool = False


Transformer = Callable[[TransformContext], None]


def _url_rewrite(ctx: TransformContext) -> None:
    # Scanned offsets refer to the original text only.
    if ctx.urls_rewritten:
        return
    new_html, rewritten, skipped = rewrite_subresources(
        ctx.html,
        [s.offset for s in ctx.subresources],
        ctx.request.document_url,
        ctx.base_url,
        cache_host=ctx.cache_host,
    )
    ctx.html = new_html.decode("utf-8", errors="surrogateescape")
    ctx.rewritten.extend(rewritten)
    ctx.skipped.extend(skipped)
    ctx.urls_rewritten = True


def _preload_hints(ctx: TransformContext) -> None:
    for sub in ctx.subresources:
        if sub.preload_as is None:
            continue
        ctx.preloads.add_subresource(
            ctx.request.document_url,
            ctx.base_url,
            sub.url,
            sub.offset.kind,
            sub.preload_as,
            desired_image_width=sub.offset.effective_width,
            media=sub.media,
        )


TRANSFORMERS: dict[str, Transformer] = {
    "url_rewrite": _url_rewrite,
    "preload_hints": _preload_hints,
}


def select_transformers(request: TransformRequest) -> list[str]:
    """Names of the transformers to run, in order."""
    if request.config == TransformersConfig.NONE:
        return []
    if request.config == TransformersConfig.CUSTOM:
        unknown = [name for name in request.transformers if name not in TRANSFORMERS]
        if unknown:
            raise UnknownTransformerError(f"unknown transformers: {', '.join(unknown)}")
        return list(request.transformers)
    if request.config == TransformersConfig.VALIDATION:
        return list(VALIDATION_TRANSFORMERS)
    return list(DEFAULT_TRANSFORMERS)


def _check_version(version: int) -> int:
    if version == 0:
        return LATEST_VERSION
    if version not in SUPPORTED_VERSIONS:
        raise UnsupportedVersionError(
            f"version {version} not in supported range [{SUPPORTED_VERSIONS.min}, {SUPPORTED_VERSIONS.max}]"
        )
    return version


def _base_url(request: TransformRequest) -> str:
    href = find_base_href(request.html)
    if href is None:
        return request.document_url
    return resolve_reference(request.document_url, href)


def transform(request: TransformRequest, *, cache_host: str = AMP_CACHE_HOST) -> TransformResult:
    """
    Run the requested transformers over `request.html`.

    Raises:
        UnsupportedFormatError: the <html> element declares no allowed format.
        UnsupportedVersionError: `request.version` is not supported.
        UnknownTransformerError: a CUSTOM list names an unknown transformer.
    """
    fmt = detect_html_format(request.html)
    if fmt not in request.effective_formats:
        raise UnsupportedFormatError(f"document format {fmt.name} not in {[f.name for f in request.effective_formats]}")
    version = _check_version(request.version)
    names = select_transformers(request)

    ctx = TransformContext(
        request=request,
        cache_host=cache_host,
        html=request.html,
        base_url=_base_url(request),
        subresources=find_subresources(request.html),
        preloads=PreloadCollector(cache_host=cache_host),
    )
    logger.debug(
        "Transforming %s (format=%s, version=%d, transformers=%s, subresources=%d)",
        request.document_url,
        fmt.name,
        version,
        names,
        len(ctx.subresources),
    )
    for name in names:
        TRANSFORMERS[name](ctx)

    return TransformResult(
        html=ctx.html,
        metadata=ctx.preloads.metadata(),
        rewritten=ctx.rewritten,
        skipped=ctx.skipped,
    )

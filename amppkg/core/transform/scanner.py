# amppkg/core/transform/scanner.py
"""
HTML-backed subresource scanner.

Walks a document with BeautifulSoup and reports every URL attribute that
should be served from the cache, with the UTF-8 byte offsets of the raw
attribute value so the rewriter can splice a replacement in place.

Recognized references:
  <img|amp-img|amp-anim src>          image (width from the `width` attribute)
  <script src>                        other, preloadable as "script"
  <link rel=stylesheet href>          other, preloadable as "style"
  <link rel=preload href as=...>      image when as=image, else other
  <link rel=icon|apple-touch-icon>    image
"""

from __future__ import annotations

import re
from collections.abc import Iterator
from html import unescape
from typing import cast

from bs4 import BeautifulSoup, Tag

from amppkg.schemas.models import (
    FoundSubresource,
    HtmlFormat,
    PreloadAs,
    SubresourceKind,
    SubresourceOffset,
)

# -----------------------
# Utilities
# -----------------------

_IMAGE_TAGS = {"img", "amp-img", "amp-anim"}
_ICON_RELS = {"icon", "shortcut", "apple-touch-icon", "apple-touch-icon-precomposed"}
_PRELOAD_AS: set[str] = {"script", "style", "image"}

# A start tag, honouring quoted attribute values that may contain ">".
_START_TAG_RE = re.compile(r"""<[^\s/>]+(?:"[^"]*"|'[^']*'|[^'">])*>""")
_TAG_NAME_RE = re.compile(r"<[^\s/>]+")
# One attribute: name, optional value (quoted or bare).
_ATTR_RE = re.compile(r"""([^\s=/>"']+)(?:\s*=\s*("[^"]*"|'[^']*'|[^\s>"']*))?""")

_FORMAT_ATTRS: tuple[tuple[HtmlFormat, tuple[str, ...]], ...] = (
    (HtmlFormat.AMP4EMAIL, ("⚡4email", "amp4email")),
    (HtmlFormat.AMP4ADS, ("⚡4ads", "amp4ads")),
    (HtmlFormat.AMP, ("⚡", "amp")),
)


def _decode(document: str | bytes) -> str:
    if isinstance(document, bytes):
        # surrogateescape keeps one char per undecodable byte, so offsets survive
        return document.decode("utf-8", errors="surrogateescape")
    return document


def _byte_len(text: str) -> int:
    return len(text.encode("utf-8", errors="surrogateescape"))


def _line_starts(text: str) -> list[int]:
    starts = [0]
    for m in re.finditer("\n", text):
        starts.append(m.end())
    return starts


def _attr_value_span(text: str, tag_start: int, attr: str) -> tuple[int, int] | None:
    """
    Character span of `attr`'s raw value inside the start tag at `tag_start`.
    The last occurrence wins, as in the parsed tree.
    """
    tag = _START_TAG_RE.match(text, tag_start)
    name = _TAG_NAME_RE.match(text, tag_start)
    if not tag or not name:
        return None

    span: tuple[int, int] | None = None
    for m in _ATTR_RE.finditer(text, name.end(), tag.end() - 1):
        if m.group(1).lower() != attr or m.group(2) is None:
            continue
        start, end = m.span(2)
        if m.group(2)[:1] in ("'", '"'):
            start, end = start + 1, end - 1
        span = (start, end)
    return span


def _int_or_zero(value: object) -> int:
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return 0


def _rel_tokens(tag: Tag) -> set[str]:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return {r.lower() for r in rel}


# -----------------------
# Scanner
# -----------------------


def _classify(tag: Tag) -> tuple[str, SubresourceKind, PreloadAs | None] | None:
    """(attribute, kind, preload destination) for tags carrying a cacheable URL."""
    name = tag.name.lower()
    if name in _IMAGE_TAGS:
        return "src", "image", None
    if name == "script":
        return "src", "other", "script"
    if name != "link":
        return None

    rels = _rel_tokens(tag)
    if "stylesheet" in rels:
        return "href", "other", "style"
    if "preload" in rels:
        as_ = str(tag.get("as") or "").lower()
        kind: SubresourceKind = "image" if as_ == "image" else "other"
        preload_as = cast(PreloadAs, as_) if as_ in _PRELOAD_AS else None
        return "href", kind, preload_as
    if rels & _ICON_RELS:
        return "href", "image", None
    return None


def iter_subresources(document: str | bytes) -> Iterator[FoundSubresource]:
    """Yield subresource references in document order."""
    text = _decode(document)
    soup = BeautifulSoup(text, "html.parser")
    line_starts = _line_starts(text)

    for tag in soup.find_all(True):
        match = _classify(tag)
        if match is None:
            continue
        attr, kind, preload_as = match
        if not tag.get(attr) or tag.sourceline is None or tag.sourcepos is None:
            continue

        tag_start = line_starts[tag.sourceline - 1] + tag.sourcepos
        span = _attr_value_span(text, tag_start, attr)
        if span is None:
            continue
        start, end = span

        media = tag.get("media") if preload_as == "image" else None
        yield FoundSubresource(
            offset=SubresourceOffset(
                kind=kind,
                start=_byte_len(text[:start]),
                end=_byte_len(text[:end]),
                desired_image_width=_int_or_zero(tag.get("width")) if kind == "image" else 0,
            ),
            url=unescape(text[start:end]).strip(),
            tag=tag.name.lower(),
            preload_as=preload_as,
            media=media if isinstance(media, str) else None,
        )


def find_subresources(document: str | bytes) -> list[FoundSubresource]:
    return list(iter_subresources(document))


def find_base_href(document: str | bytes) -> str | None:
    """href of the first <base> element, if any."""
    soup = BeautifulSoup(_decode(document), "html.parser")
    base = soup.find("base", href=True)
    if isinstance(base, Tag):
        href = base.get("href")
        if isinstance(href, str) and href.strip():
            return href.strip()
    return None


def detect_html_format(document: str | bytes) -> HtmlFormat:
    """AMP format declared on the <html> element; UNKNOWN_CODE when none."""
    soup = BeautifulSoup(_decode(document), "html.parser")
    html = soup.find("html")
    if not isinstance(html, Tag):
        return HtmlFormat.UNKNOWN_CODE
    attrs = {k.lower() for k in html.attrs}
    for fmt, names in _FORMAT_ATTRS:
        if attrs.intersection(names):
            return fmt
    return HtmlFormat.UNKNOWN_CODE

# tests/unit/test_rewriter.py
from __future__ import annotations

import pytest

from amppkg.core.transform import find_subresources, rewrite_subresources
from amppkg.schemas.models import SubresourceOffset
from tests.utils import (
    DEFAULT_DOCUMENT_URL,
    EXPECTED_CAT_URL,
    EXPECTED_HERO_URL,
    EXPECTED_SCRIPT_URL,
    EXPECTED_STYLE_URL,
    make_amp_html,
    make_offset,
)


def test_rewrites_default_document(amp_html: str) -> None:
    offsets = [s.offset for s in find_subresources(amp_html)]
    out, rewritten, skipped = rewrite_subresources(amp_html, offsets, DEFAULT_DOCUMENT_URL, DEFAULT_DOCUMENT_URL)
    text = out.decode("utf-8")

    assert [r.url for r in rewritten] == [EXPECTED_SCRIPT_URL, EXPECTED_STYLE_URL, EXPECTED_HERO_URL, EXPECTED_CAT_URL]
    assert skipped == ["data:image/png;base64,AAAA"]
    for url in (EXPECTED_SCRIPT_URL, EXPECTED_STYLE_URL, EXPECTED_HERO_URL, EXPECTED_CAT_URL):
        assert f'"{url}"' in text
    # Untouched content survives byte for byte
    assert 'href="data:image/png;base64,AAAA"' in text
    assert '<a href="#top">top</a>' in text


def test_offsets_in_any_order() -> None:
    html = make_amp_html('<img src="/a.png"><img src="/b.png">')
    a = make_offset(html, "/a.png", kind="image")
    b = make_offset(html, "/b.png", kind="image")
    out, rewritten, _ = rewrite_subresources(html, [b, a], "https://x.test/", "https://x.test/")
    assert [r.original for r in rewritten] == ["/a.png", "/b.png"]
    assert out.decode().index("/x.test/a.png") < out.decode().index("/x.test/b.png")


def test_output_is_html_escaped() -> None:
    html = make_amp_html('<img src="/a.png?x=1&amp;y=2">')
    off = make_offset(html, "/a.png?x=1&amp;y=2", kind="image")
    out, rewritten, _ = rewrite_subresources(html, [off], "https://x.test/", "")
    assert rewritten[0].url == "https://x-test.cdn.ampproject.org/i/s/x.test/a.png?x=1&y=2"
    assert b'src="https://x-test.cdn.ampproject.org/i/s/x.test/a.png?x=1&amp;y=2"' in out


def test_empty_offset_list_returns_document_unchanged() -> None:
    html = make_amp_html("<p>ü</p>")
    out, rewritten, skipped = rewrite_subresources(html, [], "https://x.test/", "")
    assert out == html.encode("utf-8")
    assert rewritten == [] and skipped == []


def test_bytes_document_with_invalid_utf8_survives() -> None:
    data = b'<img src="/a.png"><p>\xff\xfe</p>'
    off = SubresourceOffset(kind="image", start=10, end=16)
    out, rewritten, _ = rewrite_subresources(data, [off], "https://x.test/", "")
    assert out.endswith(b"<p>\xff\xfe</p>")
    assert rewritten[0].original == "/a.png"


def test_overlapping_offsets_raise() -> None:
    html = make_amp_html('<img src="/abcdef.png">')
    off = make_offset(html, "/abcdef.png")
    overlapping = SubresourceOffset(start=off.start + 2, end=off.end + 1)
    with pytest.raises(ValueError, match="overlaps"):
        rewrite_subresources(html, [off, overlapping], "https://x.test/", "")


def test_offset_past_end_raises() -> None:
    with pytest.raises(ValueError, match="past the end"):
        rewrite_subresources("abc", [SubresourceOffset(start=1, end=10)], "https://x.test/", "")


def test_offset_rejects_inverted_range() -> None:
    with pytest.raises(ValueError):
        SubresourceOffset(start=5, end=2)


def test_same_document_fragment_left_alone() -> None:
    html = make_amp_html('<img src="#sprite"><img src="/a.png">')
    offsets = [s.offset for s in find_subresources(html)]
    out, rewritten, skipped = rewrite_subresources(html, offsets, "https://x.test/", "https://x.test/")
    assert skipped == ["#sprite"]
    assert [r.original for r in rewritten] == ["/a.png"]
    assert b'src="#sprite"' in out

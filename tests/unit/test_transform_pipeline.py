# tests/unit/test_transform_pipeline.py
from __future__ import annotations

import pytest

from amppkg.core.errors import UnknownTransformerError, UnsupportedFormatError, UnsupportedVersionError
from amppkg.core.transform import select_transformers, transform
from amppkg.schemas.models import HtmlFormat, TransformersConfig
from tests.utils import (
    EXPECTED_CAT_URL,
    EXPECTED_HERO_URL,
    EXPECTED_SCRIPT_URL,
    EXPECTED_STYLE_URL,
    make_amp_html,
    make_request,
)


def test_default_transformers_rewrite_and_collect_preloads(transform_request) -> None:
    result = transform(transform_request())

    assert EXPECTED_CAT_URL in result.html
    assert len(result.rewritten) == 4
    assert result.skipped == ["data:image/png;base64,AAAA"]
    assert [(p.url, p.as_, p.media) for p in result.metadata.preloads] == [
        (EXPECTED_SCRIPT_URL, "script", None),
        (EXPECTED_STYLE_URL, "style", None),
        (EXPECTED_HERO_URL, "image", "(min-width: 600px)"),
    ]


def test_none_config_leaves_document_alone(transform_request, amp_html: str) -> None:
    result = transform(transform_request(config=TransformersConfig.NONE))
    assert result.html == amp_html
    assert result.rewritten == []
    assert result.metadata.preloads == []


def test_validation_config_rewrites_without_preloads(transform_request) -> None:
    result = transform(transform_request(config=TransformersConfig.VALIDATION))
    assert len(result.rewritten) == 4
    assert result.metadata.preloads == []


def test_custom_config_runs_named_transformers_in_order(transform_request, amp_html: str) -> None:
    result = transform(transform_request(config=TransformersConfig.CUSTOM, transformers=["preload_hints"]))
    assert result.html == amp_html
    assert len(result.metadata.preloads) == 3


def test_custom_config_repeated_rewrite_is_applied_once(transform_request) -> None:
    result = transform(transform_request(config=TransformersConfig.CUSTOM, transformers=["url_rewrite", "url_rewrite"]))
    assert len(result.rewritten) == 4
    assert result.html.count(EXPECTED_CAT_URL) == 1


def test_unknown_custom_transformer() -> None:
    req = make_request(config=TransformersConfig.CUSTOM, transformers=["url_rewrite", "minify"])
    with pytest.raises(UnknownTransformerError, match="minify"):
        select_transformers(req)
    with pytest.raises(UnknownTransformerError):
        transform(req)


def test_transformers_list_ignored_unless_custom() -> None:
    req = make_request(transformers=["bogus"])
    assert select_transformers(req) == ["url_rewrite", "preload_hints"]


@pytest.mark.parametrize("version", [0, 1])
def test_supported_versions(version: int) -> None:
    assert transform(make_request(version=version)).rewritten


def test_unsupported_version() -> None:
    with pytest.raises(UnsupportedVersionError):
        transform(make_request(version=2))


def test_non_amp_document_rejected() -> None:
    req = make_request(html="<!doctype html><html><body><img src='a.png'></body></html>")
    with pytest.raises(UnsupportedFormatError):
        transform(req)


def test_allowed_formats_gate() -> None:
    ads = make_amp_html('<img src="a.png">', html_attr="⚡4ads")
    with pytest.raises(UnsupportedFormatError):
        transform(make_request(html=ads, allowed_formats=[HtmlFormat.AMP]))
    assert transform(make_request(html=ads, allowed_formats=[HtmlFormat.AMP4ADS])).rewritten


def test_experimental_needs_explicit_allow() -> None:
    req = make_request()
    assert HtmlFormat.EXPERIMENTAL not in req.effective_formats


def test_base_href_drives_resolution() -> None:
    html = make_amp_html('<amp-img src="a.png" width="64"></amp-img>', head='<base href="/static/">')
    result = transform(make_request(html=html, document_url="https://news.example/story/1"))
    (rw,) = result.rewritten
    assert rw.url == "https://news-example.cdn.ampproject.org/ii/w64/s/news.example/static/a.png"


def test_custom_cache_host(transform_request) -> None:
    result = transform(transform_request(), cache_host="cache.test")
    assert all(".cache.test/" in r.url for r in result.rewritten)
    assert all(".cache.test/" in p.url for p in result.metadata.preloads)

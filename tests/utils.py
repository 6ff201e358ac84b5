# tests/utils.py
"""
Single source of truth for test data, factories, and canonical payloads.
Update values here to cascade across the test suite.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

from amppkg.schemas.models import SubresourceKind, SubresourceOffset, TransformRequest

# -----------------------------
# Global defaults (edit once)
# -----------------------------

DEFAULT_DOCUMENT_URL = "https://example.com/articles/post.html"
DEFAULT_CACHE_HOST = "cdn.ampproject.org"

# URLs shared by the resolver cases
ROOT_URL = "https://www.example.com/"
FOO_URL = "https://www.example.com/foo"
BAR_URL = "https://www.example.com/bar"
OTHER_URL = "http://otherdomain.com"

# A small but complete AMP page exercising every scanned element kind.
DEFAULT_AMP_HTML = """<!doctype html>
<html ⚡ lang="en">
<head>
<meta charset="utf-8">
<script async src="https://cdn.ampproject.org/v0.js"></script>
<link rel="stylesheet" href="/styles/main.css">
<link rel="preload" href="hero.jpg" as="image" media="(min-width: 600px)">
<link rel="icon" href="data:image/png;base64,AAAA">
</head>
<body>
<amp-img src="/img/cat.jpg" width="300" height="200" layout="responsive"></amp-img>
<a href="#top">top</a>
</body>
</html>
"""

# Expected cache URLs for DEFAULT_AMP_HTML at DEFAULT_DOCUMENT_URL
EXPECTED_SCRIPT_URL = "https://cdn-ampproject-org.cdn.ampproject.org/r/s/cdn.ampproject.org/v0.js"
EXPECTED_STYLE_URL = "https://example-com.cdn.ampproject.org/r/s/example.com/styles/main.css"
EXPECTED_HERO_URL = "https://example-com.cdn.ampproject.org/i/s/example.com/articles/hero.jpg"
EXPECTED_CAT_URL = "https://example-com.cdn.ampproject.org/ii/w300/s/example.com/img/cat.jpg"


# -----------------------------
# Document factories
# -----------------------------


def make_amp_html(body: str = "", *, head: str = "", html_attr: str = "⚡") -> str:
    """Wrap `head`/`body` fragments in a minimal AMP document."""
    return (
        "<!doctype html>\n"
        f"<html {html_attr}>\n"
        f'<head><meta charset="utf-8">{head}</head>\n'
        f"<body>{body}</body>\n"
        "</html>\n"
    )


def make_request(**overrides: Any) -> TransformRequest:
    data: dict[str, Any] = {"html": DEFAULT_AMP_HTML, "document_url": DEFAULT_DOCUMENT_URL}
    data.update(overrides)
    return TransformRequest(**data)


def make_offset(
    html: str,
    needle: str,
    *,
    kind: SubresourceKind = "other",
    width: int = 0,
) -> SubresourceOffset:
    """Offset of the first occurrence of `needle` in the UTF-8 bytes of `html`."""
    data = html.encode("utf-8")
    start = data.index(needle.encode("utf-8"))
    return SubresourceOffset(kind=kind, start=start, end=start + len(needle.encode("utf-8")), desired_image_width=width)


def make_document(
    tmp_dir: Path,
    *,
    html: str = DEFAULT_AMP_HTML,
    filename: str = "doc.html",
) -> Path:
    """Write `html` into tmp_dir and return its Path."""
    tmp_dir.mkdir(parents=True, exist_ok=True)
    path = tmp_dir / filename
    path.write_text(html, encoding="utf-8")
    return path

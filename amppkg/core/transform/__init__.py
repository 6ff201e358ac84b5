# amppkg/core/transform/__init__.py
from .pipeline import SUPPORTED_VERSIONS, TRANSFORMERS, select_transformers, transform
from .preloads import PreloadCollector
from .rewriter import rewrite_subresources
from .scanner import detect_html_format, find_base_href, find_subresources, iter_subresources

__all__ = [
    "SUPPORTED_VERSIONS",
    "TRANSFORMERS",
    "select_transformers",
    "transform",
    "PreloadCollector",
    "rewrite_subresources",
    "detect_html_format",
    "find_base_href",
    "find_subresources",
    "iter_subresources",
]

# amppkg/core/urls/__init__.py
from .cache_url import AMP_CACHE_HOST, cache_path_prefix, cache_url_for, get_cache_url
from .domain import (
    decode_subdomain,
    encode_domain_label,
    fallback_subdomain,
    to_cache_url_subdomain,
)
from .resolver import absolute_url, resolve_reference, to_absolute_url

__all__ = [
    "AMP_CACHE_HOST",
    "cache_path_prefix",
    "cache_url_for",
    "get_cache_url",
    "decode_subdomain",
    "encode_domain_label",
    "fallback_subdomain",
    "to_cache_url_subdomain",
    "absolute_url",
    "resolve_reference",
    "to_absolute_url",
]

# amppkg/core/errors.py
"""
Typed errors for the packager.

Exports
-------
- AmpPackagerError            (root of the hierarchy)
- UnsupportedSchemeError      (the only error raised by the URL core)
- TransformError, UnsupportedFormatError, UnsupportedVersionError,
  UnknownTransformerError
- FetchError, NetworkError
- ConfigError
- PACKAGER_ERRORS
"""

from __future__ import annotations

# =========================
# Exception types
# =========================


class AmpPackagerError(RuntimeError):
    """Base class for packager failures."""


class UnsupportedSchemeError(AmpPackagerError, ValueError):
    """
    A subresource resolved to something other than an http(s) URL with a host.

    Always recoverable: callers leave the original reference alone or drop
    the preload hint.
    """

    def __init__(self, url: str, scheme: str = "", reason: str | None = None) -> None:
        self.url = url
        self.scheme = scheme
        if reason is None:
            reason = f"unsupported scheme {scheme!r}" if scheme else "missing scheme"
        super().__init__(f"{reason}: {url!r}")


class TransformError(AmpPackagerError):
    """The document transformation request cannot be honoured."""


class UnsupportedFormatError(TransformError):
    """The document's AMP format is not among the allowed formats."""


class UnsupportedVersionError(TransformError):
    """The requested transforms version is outside the supported range."""


class UnknownTransformerError(TransformError):
    """A CUSTOM request named a transformer that does not exist."""


class FetchError(AmpPackagerError):
    """The source document could not be obtained."""


class NetworkError(FetchError):
    """HTTP/transport failure while fetching the document."""


class ConfigError(AmpPackagerError):
    """Configuration file or overrides failed validation."""


# Selector tuple for grouped exception handling
PACKAGER_ERRORS = (
    UnsupportedSchemeError,
    UnsupportedFormatError,
    UnsupportedVersionError,
    UnknownTransformerError,
    NetworkError,
    FetchError,
    ConfigError,
)

__all__ = [
    "AmpPackagerError",
    "UnsupportedSchemeError",
    "TransformError",
    "UnsupportedFormatError",
    "UnsupportedVersionError",
    "UnknownTransformerError",
    "FetchError",
    "NetworkError",
    "ConfigError",
    "PACKAGER_ERRORS",
]

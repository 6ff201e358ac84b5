# amppkg/core/urls/domain.py
"""
Origin hostname -> cache subdomain label.

The cache serves every origin from its own subdomain. The preferred label is
human-readable: the (Unicode) hostname with each "-" doubled and each "."
replaced by "-", punycode-encoded back to ASCII. For example:

    example.com       -> example-com
    www.my-site.org   -> www-my--site-org
    xn--bcher-kva.ch  -> xn--bcher-ch-65a   (bücher.ch -> bücher-ch)

Concatenating labels can create something that was not there before: a
label mixing left-to-right and right-to-left text, two kinds of Arabic
digits, or a "--" in positions 3-4 that reads like an ACE prefix. Any such
label, anything over 63 characters, any hostname the IDNA processing
rejects, and hostnames with neither a dot nor a hyphen all use the hashed
form instead:

    base32(sha256(UTS #46 form of the hostname)), lowercased, first 52 characters

Both forms are pure functions of the input.
"""

from __future__ import annotations

import base64
import hashlib
import logging
import re

import idna

from amppkg.schemas.models import DomainLabel

logger = logging.getLogger(__name__)

MAX_LABEL_LENGTH = 63
FALLBACK_LABEL_LENGTH = 52
ACE_PREFIX = "xn--"

# Code point ranges that may each appear in a label, but never together.
# (Arabic-Indic digits vs Extended Arabic-Indic digits, per RFC 5892 A.8/A.9.)
MUTUALLY_EXCLUSIVE_RANGES: tuple[tuple[tuple[int, int], ...], ...] = (
    ((0x0660, 0x0669), (0x06F0, 0x06F9)),
)

# UTS #46 deviation characters and their transitional mappings.
TRANSITIONAL_DEVIATIONS: dict[int, str] = {
    0x00DF: "ss",  # LATIN SMALL LETTER SHARP S
    0x03C2: "\u03c3",  # GREEK SMALL LETTER FINAL SIGMA -> SIGMA
    0x200C: "",  # ZERO WIDTH NON-JOINER
    0x200D: "",  # ZERO WIDTH JOINER
}

_ESCAPED_HYPHEN_RE = re.compile(r"--|-")


# -----------------------
# Validation
# -----------------------


def has_invalid_hyphens(label: str) -> bool:
    """
    R-LDH: "--" in positions 3 and 4 is reserved for ACE labels ("xn--").
    """
    return label[2:4] == "--" and not label.startswith(ACE_PREFIX)


def _range_group(cp: int, ranges: tuple[tuple[int, int], ...]) -> int | None:
    for idx, (lo, hi) in enumerate(ranges):
        if lo <= cp <= hi:
            return idx
    return None


def check_label_scripts(label: str) -> bool:
    """
    Return True if a Unicode label is safe to show as a single label:
      - it passes the RFC 5893 bidi rule as one label (no LTR/RTL mixing,
        no mixed numeral types in RTL text), and
      - it draws from at most one range of every MUTUALLY_EXCLUSIVE_RANGES row.
    """
    try:
        idna.check_bidi(label)
    except idna.IDNAError:
        return False

    for ranges in MUTUALLY_EXCLUSIVE_RANGES:
        seen: set[int] = set()
        for ch in label:
            group = _range_group(ord(ch), ranges)
            if group is not None:
                seen.add(group)
        if len(seen) > 1:
            return False
    return True


# -----------------------
# Encoding
# -----------------------


def _canonical(hostname: str) -> str:
    # UTS #46 mapping, then the transitional deviations.
    mapped = idna.uts46_remap(hostname.lower(), std3_rules=True)
    return mapped.translate(TRANSITIONAL_DEVIATIONS)


def fallback_subdomain(hostname: str) -> str:
    """
    Opaque, fixed-length label derived from sha256 of the UTS #46 form of the
    hostname (plain lowercase when the mapping rejects it).
    """
    try:
        canonical = _canonical(hostname)
    except idna.IDNAError:
        canonical = hostname.lower()
    digest = hashlib.sha256(canonical.encode("utf-8")).digest()
    return base64.b32encode(digest).decode("ascii").lower()[:FALLBACK_LABEL_LENGTH]


def _to_unicode(hostname: str) -> str:
    # Transitional UTS #46 form (e.g. "ß" -> "ss"), then every A-label back
    # to its Unicode form.
    mapped = _canonical(hostname)
    return ".".join(idna.ulabel(label) for label in mapped.split("."))


def _escape(unicode_host: str) -> str:
    return unicode_host.replace("-", "--").replace(".", "-")


def _human_readable(hostname: str) -> tuple[str | None, str]:
    """Return (label, "") when the readable form is safe, else (None, reason)."""
    try:
        unicode_host = _to_unicode(hostname)
    except idna.IDNAError as e:
        return None, f"idna: {e}"

    if "." not in unicode_host and "-" not in unicode_host:
        return None, "no dot or hyphen"

    candidate = _escape(unicode_host)
    if not check_label_scripts(candidate):
        return None, "mixed scripts"

    try:
        ascii_label = idna.alabel(candidate).decode("ascii")
    except idna.IDNAError as e:
        return None, f"idna: {e}"

    if len(ascii_label) > MAX_LABEL_LENGTH:
        return None, "too long"
    if has_invalid_hyphens(ascii_label):
        return None, "hyphens in positions 3-4"
    return ascii_label, ""


def encode_domain_label(hostname: str) -> DomainLabel:
    """Encode `hostname` and report which form was chosen."""
    label, reason = _human_readable(hostname) if hostname else (None, "empty")
    if label is not None:
        return DomainLabel(origin=hostname, encoded=label, human_readable=True)

    logger.debug("Using hashed subdomain for %r (%s)", hostname, reason)
    return DomainLabel(origin=hostname, encoded=fallback_subdomain(hostname), human_readable=False)


def to_cache_url_subdomain(hostname: str) -> str:
    """
    Cache subdomain label for an origin hostname (no port, no trailing dot).
    Never raises; always a valid DNS label of at most 63 characters.
    """
    return encode_domain_label(hostname).encoded


# -----------------------
# Decoding
# -----------------------


def _unescape(label: str) -> str:
    return _ESCAPED_HYPHEN_RE.sub(lambda m: "-" if m.group(0) == "--" else ".", label)


def decode_subdomain(label: str) -> str | None:
    """
    Recover the ASCII-compatible origin hostname from a human-readable label.
    Returns None for hashed labels and anything else that does not decode.
    """
    try:
        unicode_label = idna.ulabel(label)
    except idna.IDNAError:
        return None
    if "-" not in unicode_label:
        return None

    unicode_host = _unescape(unicode_label)
    try:
        origin = idna.encode(unicode_host).decode("ascii")
    except idna.IDNAError:
        return None
    if to_cache_url_subdomain(origin) != label.lower():
        return None
    return origin


__all__ = [
    "MAX_LABEL_LENGTH",
    "FALLBACK_LABEL_LENGTH",
    "MUTUALLY_EXCLUSIVE_RANGES",
    "TRANSITIONAL_DEVIATIONS",
    "has_invalid_hyphens",
    "check_label_scripts",
    "fallback_subdomain",
    "encode_domain_label",
    "to_cache_url_subdomain",
    "decode_subdomain",
]

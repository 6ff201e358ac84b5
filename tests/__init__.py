# tests/__init__.py
"""
Expose common test utilities so tests can import directly:
    from tests import make_request, make_amp_html
"""

from .utils import make_amp_html, make_document, make_offset, make_request

__all__ = ["make_request", "make_amp_html", "make_offset", "make_document"]

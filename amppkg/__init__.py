# amppkg/__init__.py
"""Rewrites AMP document subresources to their AMP cache URLs."""

__version__ = "0.1.0"

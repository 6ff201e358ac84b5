# amppkg/core/fetch/__init__.py
from .document import FetchedDocument, fetch_document

__all__ = ["FetchedDocument", "fetch_document"]

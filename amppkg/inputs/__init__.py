# amppkg/inputs/__init__.py
from .config import ConfigLoader, PackagerConfig, load_config

__all__ = ["ConfigLoader", "PackagerConfig", "load_config"]

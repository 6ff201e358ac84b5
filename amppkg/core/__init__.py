# amppkg/core/__init__.py

# amppkg/schemas/__init__.py

# File: /viewengine/routers/__init__.py | Version: 1.0 | Path: /viewengine/routers/__init__.py
"""
Router package exports.
"""
from . import health, modules, views

__all__ = ["health", "modules", "views"]

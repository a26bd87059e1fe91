# File: /viewengine/schemas/__init__.py | Version: 1.0 | Path: /viewengine/schemas/__init__.py
from . import filters, module_config, query, view

__all__ = ["filters", "module_config", "query", "view"]

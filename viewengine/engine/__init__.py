# File: /viewengine/engine/__init__.py | Version: 1.0 | Path: /viewengine/engine/__init__.py
"""
Saved View Engine core: operator catalog, filter model and compiler, ordering,
URL state, and the View State Controller. Nothing here talks to a database
directly; persistence goes through a gateway (see ``engine.gateway``).
"""

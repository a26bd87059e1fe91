# File: viewengine/db/__init__.py | Version: 1.0 | Path: /viewengine/db/__init__.py
# Import models so Base.metadata knows every table before create_all()
import viewengine.models  # noqa: F401

from .base_class import Base
from .session import SessionLocal, engine, get_db

__all__ = ["Base", "get_db", "SessionLocal", "engine"]

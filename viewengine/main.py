# File: /viewengine/main.py | Version: 1.0 | Title: FastAPI App (saved views service)
from __future__ import annotations

import importlib
import importlib.util

from fastapi import FastAPI

from viewengine.core.config import settings
from viewengine.core.error_handlers import register_engine_error_handler
from viewengine.core.logging import configure_logging
from viewengine.observability.sentry import init_sentry_if_configured

# Initialize logging & observability
configure_logging()
init_sentry_if_configured()

app = FastAPI(title="Saved View Engine API")
register_engine_error_handler(app)


def include_if_exists(module_path: str, attr_name: str = "router") -> bool:
    spec = importlib.util.find_spec(module_path)
    if not spec:
        return False
    mod = importlib.import_module(module_path)
    router = getattr(mod, attr_name, None)
    if router is not None:
        app.include_router(router)
        return True
    return False


include_if_exists("viewengine.routers.views")  # Saved Views (collection: /views)
include_if_exists("viewengine.routers.modules")  # Module configs & operator catalog
include_if_exists("viewengine.routers.health")

# Optional standardized error responses
if getattr(settings, "ENABLE_STD_ERRORS", False):
    from viewengine.core.error_handlers import register_exception_handlers

    register_exception_handlers(app)

# File: /viewengine/modules/__init__.py | Version: 1.0 | Title: Registry of module view configurations
from typing import Dict, List

from viewengine.core.exceptions import NotFoundError
from viewengine.schemas.module_config import ModuleViewConfig

from .cases import CASES_VIEW_CONFIG
from .disclosures import DISCLOSURES_VIEW_CONFIG
from .intake_forms import INTAKE_FORMS_VIEW_CONFIG
from .investigations import INVESTIGATIONS_VIEW_CONFIG
from .policies import POLICIES_VIEW_CONFIG

_REGISTRY: Dict[str, ModuleViewConfig] = {}


def register_module_config(config: ModuleViewConfig) -> None:
    _REGISTRY[config.entity_type] = config


def get_module_config(entity_type: str) -> ModuleViewConfig:
    try:
        return _REGISTRY[entity_type]
    except KeyError:
        raise NotFoundError(f"Unknown entity type {entity_type!r}.", entity_type=entity_type)


def list_module_configs() -> List[ModuleViewConfig]:
    return list(_REGISTRY.values())


for _config in (
    CASES_VIEW_CONFIG,
    INVESTIGATIONS_VIEW_CONFIG,
    DISCLOSURES_VIEW_CONFIG,
    INTAKE_FORMS_VIEW_CONFIG,
    POLICIES_VIEW_CONFIG,
):
    register_module_config(_config)

__all__ = ["get_module_config", "list_module_configs", "register_module_config"]

# File: /viewengine/routers/modules.py | Version: 1.0 | Title: Module configuration & operator catalog endpoints
from typing import Dict, List

from fastapi import APIRouter, Depends

from viewengine.engine.catalog import label_for, operators_for, requires_value
from viewengine.modules import get_module_config, list_module_configs
from viewengine.schemas.filters import PropertyType
from viewengine.schemas.module_config import ModuleViewConfig
from viewengine.security import get_current_user_id

router = APIRouter(prefix="/modules", tags=["Modules"], dependencies=[Depends(get_current_user_id)])


@router.get("", summary="Entity types served by the view engine")
def list_modules() -> List[Dict[str, str]]:
    return [{"entity_type": c.entity_type, "entity_name": c.entity_name} for c in list_module_configs()]


@router.get("/operators", summary="Operators per property type")
def operator_catalog() -> Dict[str, List[Dict[str, str]]]:
    return {
        ptype.value: [
            {"operator": op.value, "label": label_for(op), "values": requires_value(op).value}
            for op in operators_for(ptype)
        ]
        for ptype in PropertyType
    }


@router.get("/{entity_type}", response_model=ModuleViewConfig, summary="Full view configuration of one module")
def module_config(entity_type: str):
    return get_module_config(entity_type)

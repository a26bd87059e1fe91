# File: /viewengine/schemas/_base.py | Version: 1.0 | Title: Pydantic Base Schema (V2-ready)
from uuid import uuid4

from pydantic import BaseModel, ConfigDict


def gen_id() -> str:
    return str(uuid4())


class BaseSchema(BaseModel):
    model_config = ConfigDict(from_attributes=True)

"""
Derive tool input contracts from the params models of tool functions.

Tool functions have the signature ``(client, params: SomeParamsModel)``;
the annotation of ``params`` is both the validator and the source of the
JSON Schema advertised through ``tools/list``.
"""
from __future__ import annotations

import inspect
import typing
from typing import Any, Dict, Optional, Type

from pydantic import BaseModel


def param_model_from_func(func) -> Optional[Type[BaseModel]]:
    """Return the pydantic model annotating the ``params`` argument, if any."""
    try:
        hints = typing.get_type_hints(func)
    except (NameError, TypeError):
        hints = {}
    params = list(inspect.signature(func).parameters.values())
    if len(params) < 2:
        return None
    ann = hints.get(params[1].name, params[1].annotation)
    if isinstance(ann, type) and issubclass(ann, BaseModel):
        return ann
    return None


def tool_schema_from_model(model_cls: Optional[Type[BaseModel]]) -> Dict[str, Any]:
    if not model_cls:
        return {"type": "object", "properties": {}}
    schema = model_cls.model_json_schema()
    schema.pop("title", None)
    schema.setdefault("type", "object")
    schema.setdefault("properties", {})
    return schema

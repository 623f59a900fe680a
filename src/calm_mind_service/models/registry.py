from typing import Dict, Type, TypeVar

from pydantic import BaseModel

_T = TypeVar("_T", bound=Type[BaseModel])

BASE_MODEL_REGISTRY: Dict[str, Type[BaseModel]] = {}


############################################################################################################
def register_base_model_class(cls: _T) -> _T:
    """Record a schema class by name so hosts can look payload types up."""
    name = cls.__name__
    assert name not in BASE_MODEL_REGISTRY, f"Duplicate model class: {name}"
    BASE_MODEL_REGISTRY[name] = cls
    return cls


############################################################################################################
def get_registered_model(name: str) -> Type[BaseModel]:
    return BASE_MODEL_REGISTRY[name]

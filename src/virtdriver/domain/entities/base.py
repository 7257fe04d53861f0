"""
Base Entity Class
"""
from abc import ABC
from pydantic import BaseModel


class Entity(BaseModel, ABC):
    """Base Entity Class"""

    model_config = {
        "arbitrary_types_allowed": True,
        "use_enum_values": True
    }


class ValueObject(BaseModel, ABC):
    """Value Object Base Class"""

    model_config = {
        # Value objects are immutable
        "frozen": True,
        "arbitrary_types_allowed": True
    }

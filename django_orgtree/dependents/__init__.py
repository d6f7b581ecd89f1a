"""Adapters answering "how many active things still point at this entity?"."""

from .base import DependentCounter, NullDependentCounter
from .factory import get_dependent_counter, reset_dependent_counter, set_dependent_counter
from .model import ModelDependentCounter

__all__ = [
    "DependentCounter",
    "NullDependentCounter",
    "ModelDependentCounter",
    "get_dependent_counter",
    "set_dependent_counter",
    "reset_dependent_counter",
]

"""Dependent-counter factory and override hooks."""

from __future__ import annotations

from typing import Optional

from django.core.exceptions import ImproperlyConfigured
from django.utils.module_loading import import_string

import django_orgtree.conf as conf

from .base import DependentCounter, NullDependentCounter
from .model import ModelDependentCounter

_counter: Optional[DependentCounter] = None


def get_dependent_counter() -> DependentCounter:
    global _counter
    if _counter is not None:
        return _counter

    config = conf.get_dependents_config()
    if config is None:
        _counter = NullDependentCounter()
    elif isinstance(config, str):
        try:
            factory = import_string(config)
        except ImportError as e:
            raise ImproperlyConfigured(
                f"Could not import dependent counter {config!r}: {e}"
            ) from e
        _counter = factory()
    else:
        model = config.get("model")
        if not model:
            raise ImproperlyConfigured("ORGTREE['dependents'] mapping requires 'model'.")
        _counter = ModelDependentCounter(
            model,
            field=config.get("field", "entity"),
            tenant_field=config.get("tenant_field", "tenant_id"),
            active_field=config.get("active_field", "is_active"),
        )
    return _counter


def set_dependent_counter(counter: DependentCounter | None) -> None:
    global _counter
    _counter = counter


def reset_dependent_counter() -> None:
    global _counter
    _counter = None

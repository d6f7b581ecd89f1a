"""Dependent counter backed by a Django model with a foreign key to the entity."""

from __future__ import annotations

from typing import Any

from django.core.exceptions import FieldDoesNotExist, ImproperlyConfigured
from django.db.models import Model
from django.utils.module_loading import import_string

from .base import DependentCounter


class ModelDependentCounter(DependentCounter):
    """
    Count rows of ``model`` pointing at an entity.

    Example:
        counter = ModelDependentCounter(
            "myapp.models.Member",
            field="entity",
            tenant_field="tenant_id",
            active_field="is_active",
        )
        counter.count_active_dependents(node.pk, "acme")

    ``tenant_field`` and ``active_field`` may be ``None`` for models that are
    not tenant scoped or have no soft-delete flag.
    """

    def __init__(
        self,
        model: type[Model] | str,
        *,
        field: str = "entity",
        tenant_field: str | None = "tenant_id",
        active_field: str | None = "is_active",
    ) -> None:
        self.model = _resolve_model(model)
        self.field = field
        self.tenant_field = tenant_field
        self.active_field = active_field
        for name in (field, tenant_field, active_field):
            if name is None:
                continue
            try:
                self.model._meta.get_field(name)
            except FieldDoesNotExist as exc:
                raise ImproperlyConfigured(
                    f"{self.model.__name__} has no field {name!r} for dependent counting."
                ) from exc

    def count_active_dependents(self, entity_id: Any, tenant_id: str) -> int:
        lookup: dict[str, Any] = {f"{self.field}_id": entity_id}
        if self.tenant_field:
            lookup[self.tenant_field] = tenant_id
        if self.active_field:
            lookup[self.active_field] = True
        return self.model._default_manager.filter(**lookup).count()

    def count_tenant_dependents(self, tenant_id: str) -> int:
        lookup: dict[str, Any] = {f"{self.field}__tenant_id": tenant_id}
        if self.tenant_field:
            lookup[self.tenant_field] = tenant_id
        if self.active_field:
            lookup[self.active_field] = True
        return self.model._default_manager.filter(**lookup).count()


def _resolve_model(model: type[Model] | str) -> type[Model]:
    if not isinstance(model, str):
        return model
    try:
        return import_string(model)
    except ImportError as e:
        raise ImproperlyConfigured(
            f"Could not import dependent model {model!r}: {e}"
        ) from e

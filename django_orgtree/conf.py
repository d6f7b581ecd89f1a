"""Configuration helpers for django-orgtree.

All knobs live under a single optional ``settings.ORGTREE`` mapping::

    ORGTREE = {
        "path_separator": " > ",
        "name_uniqueness": "global",
        "cascade_batch_size": 500,
        "dependents": {
            "model": "myapp.models.Member",
            "field": "entity",
        },
    }
"""

from __future__ import annotations

from typing import Any, Mapping

from django.conf import settings
from django.core.exceptions import ImproperlyConfigured

DEFAULT_PATH_SEPARATOR = " > "
DEFAULT_CASCADE_BATCH_SIZE = 500

UNIQUENESS_GLOBAL = "global"
UNIQUENESS_TENANT = "tenant"
UNIQUENESS_SIBLING = "sibling"
UNIQUENESS_NONE = "none"
UNIQUENESS_SCOPES = frozenset(
    {UNIQUENESS_GLOBAL, UNIQUENESS_TENANT, UNIQUENESS_SIBLING, UNIQUENESS_NONE}
)

DEFAULTS: Mapping[str, Any] = {
    "path_separator": DEFAULT_PATH_SEPARATOR,
    "name_uniqueness": UNIQUENESS_GLOBAL,
    "cascade_batch_size": DEFAULT_CASCADE_BATCH_SIZE,
    "dependents": None,
}


def _get_orgtree_settings() -> Mapping[str, Any]:
    value = getattr(settings, "ORGTREE", None)
    if value is None:
        return {}
    if not isinstance(value, Mapping):
        raise ImproperlyConfigured("settings.ORGTREE must be a mapping.")
    unknown = set(value) - set(DEFAULTS)
    if unknown:
        raise ImproperlyConfigured(
            f"settings.ORGTREE has unknown keys: {', '.join(sorted(unknown))}."
        )
    return value


def get_setting(name: str) -> Any:
    """Return ``settings.ORGTREE[name]`` falling back to the documented default."""

    if name not in DEFAULTS:
        raise KeyError(name)
    return _get_orgtree_settings().get(name, DEFAULTS[name])


def get_path_separator() -> str:
    separator = get_setting("path_separator")
    if not isinstance(separator, str) or not separator:
        raise ImproperlyConfigured("ORGTREE['path_separator'] must be a non-empty string.")
    return separator


def get_name_uniqueness() -> str:
    """
    Return the scope in which active node names must be unique.

    ``global`` reproduces the behaviour of the system this app replaces; the
    narrower scopes are opt-in.
    """
    scope = get_setting("name_uniqueness")
    if scope not in UNIQUENESS_SCOPES:
        raise ImproperlyConfigured(
            f"ORGTREE['name_uniqueness'] must be one of {sorted(UNIQUENESS_SCOPES)}, "
            f"got {scope!r}."
        )
    return scope


def get_cascade_batch_size() -> int:
    size = get_setting("cascade_batch_size")
    if isinstance(size, bool) or not isinstance(size, int) or size < 1:
        raise ImproperlyConfigured("ORGTREE['cascade_batch_size'] must be a positive integer.")
    return size


def get_dependents_config() -> Mapping[str, Any] | str | None:
    config = get_setting("dependents")
    if config is None or isinstance(config, (str, Mapping)):
        return config
    raise ImproperlyConfigured(
        "ORGTREE['dependents'] must be None, a dotted path, or a mapping."
    )

import pytest
from django.core.exceptions import ImproperlyConfigured
from django.test import override_settings

import django_orgtree.conf as conf


@override_settings(ORGTREE=None)
def test_defaults_apply_without_settings() -> None:
    assert conf.get_path_separator() == " > "
    assert conf.get_name_uniqueness() == conf.UNIQUENESS_GLOBAL
    assert conf.get_cascade_batch_size() == conf.DEFAULT_CASCADE_BATCH_SIZE
    assert conf.get_dependents_config() is None


@override_settings(ORGTREE=["not", "a", "mapping"])
def test_non_mapping_settings_raise() -> None:
    with pytest.raises(ImproperlyConfigured):
        conf.get_path_separator()


@override_settings(ORGTREE={"separator": "/"})
def test_unknown_keys_raise() -> None:
    with pytest.raises(ImproperlyConfigured):
        conf.get_path_separator()


@override_settings(ORGTREE={"name_uniqueness": "galaxy"})
def test_unknown_uniqueness_scope_raises() -> None:
    with pytest.raises(ImproperlyConfigured):
        conf.get_name_uniqueness()


@pytest.mark.parametrize("size", [0, -3, "10", True])
def test_cascade_batch_size_must_be_positive_int(size) -> None:
    with override_settings(ORGTREE={"cascade_batch_size": size}):
        with pytest.raises(ImproperlyConfigured):
            conf.get_cascade_batch_size()


@override_settings(ORGTREE={"dependents": 42})
def test_dependents_config_type_is_checked() -> None:
    with pytest.raises(ImproperlyConfigured):
        conf.get_dependents_config()


def test_get_setting_rejects_unknown_name() -> None:
    with pytest.raises(KeyError):
        conf.get_setting("nope")

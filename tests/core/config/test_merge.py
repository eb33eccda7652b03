# tests/core/config/test_merge.py
"""
Testes da política de deep-merge de configuração.

Os testes asseguram que:
- valores escalares são sobrescritos corretamente
- dicionários são mesclados de forma recursiva
- listas são sobrescritas integralmente
- settings opcionais (`None`) aceitam qualquer override
- conflitos de tipo são detectados e rejeitados explicitamente
- objetos de entrada não são mutados durante o merge

Invariantes:
    - Chaves não sobrescritas são preservadas
    - Nenhum merge parcial é produzido em caso de erro
"""

import copy

import pytest

try:
    from atlas_lifecycle.core.config.errors import ConfigTypeConflictError
    from atlas_lifecycle.core.config.merge import deep_merge
except Exception as e:  # noqa: BLE001
    deep_merge = None
    ConfigTypeConflictError = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(
            "Missing config merge. Implement:\n"
            "- src/atlas_lifecycle/core/config/merge.py (deep_merge)\n"
            f"Import error: {_IMPORT_ERR}"
        )


def test_merge_simple_override():
    """
    Override de escalar substitui o valor base sem mutar as entradas.
    """
    _require_imports()
    base = {"cascade": {"on_failure": "continue"}, "journal": {"enabled": True}}
    override = {"cascade": {"on_failure": "abort"}}
    base_before = copy.deepcopy(base)

    out = deep_merge(base, override)

    assert out == {"cascade": {"on_failure": "abort"}, "journal": {"enabled": True}}
    assert base == base_before


def test_merge_nested_and_new_keys():
    _require_imports()
    out = deep_merge({"a": {"b": 1, "c": 2}}, {"a": {"c": 3, "d": 4}, "e": 5})
    assert out == {"a": {"b": 1, "c": 3, "d": 4}, "e": 5}


def test_merge_lists_are_replaced():
    _require_imports()
    out = deep_merge({"tags": ["a", "b"]}, {"tags": ["c"]})
    assert out == {"tags": ["c"]}


def test_merge_optional_setting_accepts_value():
    """
    Base `None` (ex.: `engine.ack_timeout_seconds`) aceita número; e vice-versa.
    """
    _require_imports()
    out = deep_merge({"engine": {"ack_timeout_seconds": None}}, {"engine": {"ack_timeout_seconds": 2.5}})
    assert out["engine"]["ack_timeout_seconds"] == 2.5

    back = deep_merge(out, {"engine": {"ack_timeout_seconds": None}})
    assert back["engine"]["ack_timeout_seconds"] is None


def test_merge_int_and_float_are_compatible():
    _require_imports()
    assert deep_merge({"t": 5}, {"t": 2.5}) == {"t": 2.5}


@pytest.mark.parametrize(
    "base, override",
    [
        ({"cascade": {"on_failure": "continue"}}, {"cascade": "abort"}),
        ({"journal": {"enabled": True}}, {"journal": {"enabled": "yes"}}),
        ({"t": 5}, {"t": True}),
    ],
)
def test_merge_type_conflict(base, override):
    _require_imports()
    with pytest.raises(ConfigTypeConflictError):
        deep_merge(base, override)


def test_merge_requires_dicts():
    _require_imports()
    with pytest.raises(ConfigTypeConflictError):
        deep_merge({"a": 1}, ["not", "a", "dict"])

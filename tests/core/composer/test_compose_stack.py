# tests/core/composer/test_compose_stack.py
"""
Testes de composição em cascata (`compose_stack`).
"""

from stratum.core.composer import Layer, compose, compose_stack
from stratum.core.diagnostics import ORPHAN_DELETE


def test_stack_applies_layers_in_order(base_documents):
    staging = Layer(
        name="staging",
        patches=({"kind": "ConfigMap", "metadata": {"name": "cfg"}, "data": {"DB_URL": "jdbc://STG"}},),
        transforms=({"kind": "AddCommonLabel", "key": "stage", "value": "staging"},),
    )
    prod = Layer(
        name="prod",
        patches=({"kind": "ConfigMap", "metadata": {"name": "cfg"}, "data": {"LOG_LEVEL": "warn"}},),
        transforms=({"kind": "AddCommonLabel", "key": "stage", "value": "prod"},),
    )
    result = compose_stack(base_documents, [staging, prod])

    cfg = result.result_set.get("ConfigMap", "cfg")
    assert cfg.body["data"] == {"LOG_LEVEL": "warn", "DB_URL": "jdbc://STG"}
    assert cfg.body["metadata"]["labels"] == {"stage": "prod"}
    assert result.layers == ("staging", "prod")
    assert len(result.transform_results) == 2
    assert len(result.meta["compositions"]) == 2


def test_stack_equals_nested_compose(base_documents):
    a = Layer(name="a", transforms=({"kind": "SetNamePrefix", "value": "a-"},))
    b = Layer(name="b", transforms=({"kind": "SetNameSuffix", "value": "-b"},))
    stacked = compose_stack(base_documents, [a, b])
    nested = compose(compose(base_documents, a).result_set, b)
    assert stacked.result_set == nested.result_set


def test_stack_accumulates_diagnostics(base_documents):
    ghost = {"$patch": "delete", "kind": "Secret", "metadata": {"name": "ghost"}}
    result = compose_stack(base_documents, [Layer(name="one", patches=(ghost,)), Layer(name="two", patches=(ghost,))])
    assert [d.details["layer"] for d in result.diagnostics if d.type == ORPHAN_DELETE] == ["one", "two"]


def test_empty_stack_returns_base(base_documents):
    result = compose_stack(base_documents, [])
    assert result.result_set.to_list() == base_documents

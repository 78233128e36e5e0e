# tests/core/document/test_model.py
"""
Testes do Document Model.

Os testes asseguram que:
- apenas raízes mapeamento são aceitas
- chaves não-string e tipos fora do modelo são rejeitados (`FormatError`)
- tuplas são normalizadas como sequências
- o aninhamento é limitado por `max_depth` (`DepthExceededError`)
- documentos parseados e clonados não compartilham nós com a origem
- igualdade é estrutural
"""

import pytest

from stratum.core.document.model import Document, clone_document, node_type, parse_document
from stratum.core.exceptions import DepthExceededError, FormatError


def _nested(levels: int) -> dict:
    node = 1
    for _ in range(levels):
        node = {"k": node}
    return node


def test_parse_valid_document(configmap_cfg):
    doc = parse_document(configmap_cfg)
    assert doc.kind == "ConfigMap"
    assert doc.name == "cfg"
    assert doc.body == configmap_cfg


@pytest.mark.parametrize("raw", [["a", "b"], "text", 42, None])
def test_non_mapping_root_is_rejected(raw):
    with pytest.raises(FormatError):
        parse_document(raw)


def test_non_string_key_is_rejected():
    with pytest.raises(FormatError) as exc:
        parse_document({"kind": "ConfigMap", "data": {1: "one"}})
    assert exc.value.details["path"] == "data"


def test_unsupported_value_type_is_rejected():
    with pytest.raises(FormatError):
        parse_document({"kind": "ConfigMap", "data": {"tags": {"a", "b"}}})


def test_tuples_become_sequences():
    doc = parse_document({"kind": "X", "items": ("a", ("b", "c"))})
    assert doc.body["items"] == ["a", ["b", "c"]]


def test_depth_limit():
    """
    A raiz está na profundidade 0; o escalar mais interno de `_nested(n)`
    está na profundidade n.
    """
    parse_document(_nested(5), max_depth=5)
    with pytest.raises(DepthExceededError):
        parse_document(_nested(6), max_depth=5)


def test_parse_does_not_share_nodes(configmap_cfg):
    doc = parse_document(configmap_cfg)
    configmap_cfg["data"]["LOG_LEVEL"] = "debug"
    assert doc.body["data"]["LOG_LEVEL"] == "info"


def test_clone_is_independent_and_equal(deployment_web):
    doc = parse_document(deployment_web)
    clone = clone_document(doc)
    assert clone == doc
    clone.body["spec"]["template"]["spec"]["containers"][0]["image"] = "web:9.9"
    assert doc.body["spec"]["template"]["spec"]["containers"][0]["image"] == "web:1.0"
    assert clone != doc


def test_structural_equality():
    assert Document(body={"kind": "A", "x": [1, 2]}) == Document(body={"kind": "A", "x": [1, 2]})
    assert Document(body={"kind": "A", "x": [1, 2]}) != Document(body={"kind": "A", "x": [2, 1]})


def test_node_type():
    assert node_type({}) == "mapping"
    assert node_type([]) == "sequence"
    assert node_type("x") == "scalar"
    assert node_type(None) == "scalar"

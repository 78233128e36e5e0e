# tests/core/composer/test_compose.py
"""
Testes do Layer Composer (`compose`).

Este módulo valida o fluxo completo de uma composição base + overlay:
- o cenário canônico do ConfigMap (merge + transforms)
- identidade duplicada na base antes de qualquer merge
- determinismo, idempotência e ausência de mutação das entradas
- aditividade (documentos novos ao final, na ordem do overlay)
- diretivas de exclusão na raiz do patch
- merge por identidade de sequência habilitado pelo overlay
- colisão de nomes após transforms

Limites explícitos:
    - Não valida I/O (ver tests/io)
"""

import copy

import pytest

from stratum.core.composer import Layer, compose
from stratum.core.diagnostics import ORPHAN_DELETE, PATH_NOT_FOUND
from stratum.core.document.identity import IdentityKey
from stratum.core.exceptions import DuplicateIdentityError, FormatError, IdentityError, TransformSpecError
from stratum.core.transforms.types import TransformStatus


def _configmap_patch(**data):
    return {"kind": "ConfigMap", "metadata": {"name": "cfg"}, "data": data}


def test_configmap_example(configmap_cfg):
    """
    Base: ConfigMap `cfg` com LOG_LEVEL e DB_URL.
    Overlay: patch de DB_URL, SetField de réplicas e label `stage=prod`.

    Esperado:
        - data mesclado (LOG_LEVEL preservado, DB_URL do overlay)
        - label `stage=prod` adicionado
        - ConfigMap não tem `spec.replicas`: PATH_NOT_FOUND, sem abortar
    """
    overlay = Layer(
        name="prod",
        patches=(_configmap_patch(DB_URL="jdbc://PROD"),),
        transforms=(
            {"kind": "SetField", "path": "spec.replicas", "value": 10},
            {"kind": "AddCommonLabel", "key": "stage", "value": "prod"},
        ),
    )
    result = compose([configmap_cfg], overlay)

    (doc,) = result.documents
    assert doc.body["data"] == {"LOG_LEVEL": "info", "DB_URL": "jdbc://PROD"}
    assert doc.body["metadata"]["labels"] == {"stage": "prod"}
    assert [d.type for d in result.diagnostics] == [PATH_NOT_FOUND]
    assert [r.status for r in result.transform_results] == [TransformStatus.UNCHANGED, TransformStatus.APPLIED]
    assert result.has_warnings
    assert result.is_valid
    assert result.layers == ("prod",)


def test_duplicate_identity_in_base_raises(configmap_cfg):
    with pytest.raises(DuplicateIdentityError):
        compose([configmap_cfg, copy.deepcopy(configmap_cfg)], Layer())


def test_overlay_mapping_form(base_documents):
    result = compose(base_documents, {"name": "staging", "transforms": [{"kind": "SetNameSuffix", "value": "-stg"}]})
    assert [str(k) for k in result.result_set.identities()] == [
        "ConfigMap/cfg-stg",
        "Deployment/web-stg",
        "Service/web-stg",
    ]


def test_invalid_overlay_is_rejected(base_documents):
    with pytest.raises(FormatError):
        compose(base_documents, {"name": "x", "patchez": []})
    with pytest.raises(FormatError):
        compose(base_documents, ["not", "a", "layer"])


def test_unknown_transform_is_rejected_before_merge(base_documents):
    with pytest.raises(TransformSpecError):
        compose(base_documents, Layer(transforms=({"kind": "Frobnicate"},)))


def test_patch_without_identity_raises(base_documents):
    with pytest.raises(IdentityError):
        compose(base_documents, Layer(patches=({"kind": "ConfigMap", "data": {"A": "1"}},)))


def test_composition_is_deterministic(base_documents):
    overlay = Layer(
        patches=(_configmap_patch(DB_URL="jdbc://PROD"),),
        transforms=({"kind": "SetNamePrefix", "value": "prod-"}, {"kind": "AddCommonLabel", "key": "stage", "value": "prod"}),
    )
    first = compose(base_documents, overlay)
    second = compose(base_documents, overlay)
    assert first.result_set == second.result_set
    assert first.result_set.digest() == second.result_set.digest()
    assert first.diagnostics == second.diagnostics
    assert first.meta["composition_id"] != second.meta["composition_id"]


def test_composition_is_idempotent(base_documents):
    """Compor o mesmo overlay sobre o próprio resultado não muda nada."""
    overlay = Layer(
        patches=(_configmap_patch(DB_URL="jdbc://PROD"),),
        transforms=({"kind": "AddCommonLabel", "key": "stage", "value": "prod"},),
    )
    once = compose(base_documents, overlay)
    twice = compose(once.result_set, overlay)
    assert twice.result_set == once.result_set


def test_inputs_are_not_mutated(base_documents):
    base_snapshot = copy.deepcopy(base_documents)
    patch = _configmap_patch(DB_URL="jdbc://PROD")
    patch_snapshot = copy.deepcopy(patch)
    compose(
        base_documents,
        Layer(patches=(patch,), transforms=({"kind": "AddCommonLabel", "key": "stage", "value": "prod"},)),
    )
    assert base_documents == base_snapshot
    assert patch == patch_snapshot


def test_identities_are_preserved_and_additions_appended(base_documents):
    """
    Sem exclusões nem renomeações, toda identidade da base sobrevive e
    documentos novos aparecem depois da base, na ordem do overlay.
    """
    overlay = Layer(
        patches=(
            {"kind": "Secret", "metadata": {"name": "db-creds"}, "stringData": {"password": "x"}},
            _configmap_patch(DB_URL="jdbc://PROD"),
            {"kind": "ServiceAccount", "metadata": {"name": "web"}},
        )
    )
    result = compose(base_documents, overlay)
    assert result.result_set.identities() == [
        IdentityKey("ConfigMap", "cfg"),
        IdentityKey("Deployment", "web"),
        IdentityKey("Service", "web"),
        IdentityKey("Secret", "db-creds"),
        IdentityKey("ServiceAccount", "web"),
    ]


def test_multiple_patches_apply_sequentially(base_documents):
    overlay = Layer(
        patches=(
            {"kind": "ConfigMap", "metadata": {"name": "extra"}, "data": {"A": "1"}},
            _configmap_patch(DB_URL="jdbc://ONE"),
            {"kind": "ConfigMap", "metadata": {"name": "extra"}, "data": {"B": "2"}},
            _configmap_patch(DB_URL="jdbc://TWO"),
        )
    )
    result = compose(base_documents, overlay)
    assert result.result_set.get("ConfigMap", "cfg").body["data"]["DB_URL"] == "jdbc://TWO"
    assert result.result_set.get("ConfigMap", "extra").body["data"] == {"A": "1", "B": "2"}
    assert len(result.result_set) == 4


def test_root_delete_directive_removes_document(base_documents):
    overlay = Layer(patches=({"$patch": "delete", "kind": "Service", "metadata": {"name": "web"}},))
    result = compose(base_documents, overlay)
    assert result.result_set.get("Service", "web") is None
    assert len(result.result_set) == 2
    assert result.diagnostics == ()


def test_orphan_delete_is_reported(base_documents):
    overlay = Layer(name="prod", patches=({"$patch": "delete", "kind": "Service", "metadata": {"name": "ghost"}},))
    result = compose(base_documents, overlay)
    assert len(result.result_set) == 3
    (diag,) = result.diagnostics
    assert diag.type == ORPHAN_DELETE
    assert diag.details == {"identity": "Service/ghost", "layer": "prod"}


def test_additions_never_carry_directives(base_documents):
    overlay = Layer(
        patches=({"kind": "ConfigMap", "metadata": {"name": "new"}, "data": {"$patch": "replace", "A": "1", "B": {"$patch": "delete"}}},)
    )
    result = compose(base_documents, overlay)
    assert result.result_set.get("ConfigMap", "new").body["data"] == {"A": "1"}


def test_sequence_identity_directive_is_scoped(base_documents):
    """
    `PatchSequenceByIdentity` habilita merge por identidade só para os
    documentos em escopo; nos demais a sequência é substituída.
    """
    containers = "spec.template.spec.containers"
    overlay = Layer(
        patches=(
            {
                "kind": "Deployment",
                "metadata": {"name": "web"},
                "spec": {"template": {"spec": {"containers": [{"name": "app", "image": "web:2.0"}]}}},
            },
            {
                "kind": "Deployment",
                "metadata": {"name": "worker"},
                "spec": {"template": {"spec": {"containers": [{"name": "w", "image": "w:1"}]}}},
            },
        ),
        transforms=({"kind": "PatchSequenceByIdentity", "path": containers, "scope": {"names": ["web"]}},),
    )
    result = compose(base_documents, overlay)
    web = result.result_set.get("Deployment", "web").body["spec"]["template"]["spec"]["containers"]
    assert [c["name"] for c in web] == ["app", "sidecar"]
    assert web[0]["image"] == "web:2.0"
    assert web[0]["envFrom"] == [{"configMapRef": {"name": "cfg"}}]
    assert result.transform_results[0].status == TransformStatus.DIRECTIVE


def test_rename_collision_raises(configmap_cfg):
    other = {"kind": "ConfigMap", "metadata": {"name": "prod-cfg"}, "data": {}}
    overlay = Layer(transforms=({"kind": "SetNamePrefix", "value": "prod-", "scope": {"names": ["cfg"]}},))
    with pytest.raises(DuplicateIdentityError):
        compose([configmap_cfg, other], overlay)


def test_label_self_consistency_after_composition(base_documents):
    overlay = Layer(
        transforms=(
            {"kind": "AddCommonLabel", "key": "stage", "value": "prod"},
            {"kind": "AddCommonLabel", "key": "team", "value": "core", "scope": {"kinds": ["Deployment"]}},
        )
    )
    result = compose(base_documents, overlay)
    for doc in result.documents:
        selector = (doc.body.get("spec") or {}).get("selector") or {}
        selector = selector.get("matchLabels", selector)
        template = (((doc.body.get("spec") or {}).get("template") or {}).get("metadata") or {}).get("labels")
        if template is not None:
            assert selector.items() <= template.items()


def test_events_describe_the_composition(base_documents):
    result = compose(base_documents, Layer(name="prod", patches=(_configmap_patch(DB_URL="x"),)))
    assert result.events[0]["stage"] == "compose"
    assert result.events[-1]["message"] == "Composição concluída"
    assert {e["layer"] for e in result.events} == {"prod"}
    assert any(e["stage"] == "merge" and e.get("identity") == "ConfigMap/cfg" for e in result.events)


def test_result_set_accessors(base_documents):
    result = compose(base_documents, Layer())
    rs = result.result_set
    assert rs.to_list() == base_documents
    assert rs.get("Deployment", "web").name == "web"
    assert rs.get("Deployment", "missing") is None
    assert len(rs.digest()) == 64


def _thing_settings():
    from stratum.core.config.settings import ComposerSettings

    return ComposerSettings.from_config({"identity": {"kind_field": "type", "name_path": "id"}})


def test_configured_identity_fields_reach_the_result_set():
    settings = _thing_settings()
    overlay = Layer(patches=({"type": "Thing", "id": "a", "v": 2}, {"type": "Thing", "id": "b", "v": 1}))

    result = compose([{"type": "Thing", "id": "a", "v": 1}], overlay, settings=settings)

    assert result.is_valid
    assert result.result_set.identities() == [IdentityKey("Thing", "a"), IdentityKey("Thing", "b")]
    assert result.result_set.get("Thing", "a").body == {"type": "Thing", "id": "a", "v": 2}
    assert result.result_set.get(IdentityKey("Thing", "b")).body["v"] == 1


def test_stacked_result_set_keeps_configured_identity_fields():
    from stratum.core.composer import compose_stack

    settings = _thing_settings()
    result = compose_stack(
        [{"type": "Thing", "id": "a"}],
        [Layer(name="one"), Layer(name="two", patches=({"type": "Thing", "id": "c"},))],
        settings=settings,
    )
    assert result.is_valid
    assert [str(k) for k in result.result_set.identities()] == ["Thing/a", "Thing/c"]


def test_result_set_get_accepts_identity_key(base_documents):
    rs = compose(base_documents, Layer()).result_set
    assert rs.get(IdentityKey("Service", "web")) is rs.get("Service", "web")
    assert rs.get(IdentityKey("Service", "nope")) is None
    with pytest.raises(TypeError):
        rs.get("Service/web")


def test_template_without_metadata_stays_consistent_after_compose(configmap_cfg):
    bare = {
        "kind": "Deployment",
        "metadata": {"name": "bare"},
        "spec": {"selector": {"matchLabels": {"app": "bare"}}, "template": {"spec": {"containers": []}}},
    }
    overlay = Layer(transforms=({"kind": "AddCommonLabel", "key": "stage", "value": "prod"},))

    result = compose([configmap_cfg, bare], overlay)

    spec = result.result_set.get("Deployment", "bare").body["spec"]
    assert spec["selector"]["matchLabels"] == {"app": "bare", "stage": "prod"}
    assert spec["template"]["metadata"]["labels"] == {"stage": "prod"}
    assert "spec" not in result.result_set.get("ConfigMap", "cfg").body


def test_final_event_counts_warnings(base_documents):
    overlay = Layer(transforms=({"kind": "SetReplicas", "count": 2},))
    result = compose(base_documents, overlay)
    assert result.events[-1]["warnings"] == 2
    assert len(result.diagnostics_of(PATH_NOT_FOUND)) == 2

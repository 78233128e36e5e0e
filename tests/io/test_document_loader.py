# tests/io/test_document_loader.py
"""
Testes do Loader de documentos e overlays (YAML/JSON).

Os testes asseguram que:
- arquivos YAML multi-documento preservam a ordem e ignoram documentos vazios
- chaves duplicadas são rejeitadas com FormatError (YAML com linha/coluna)
- JSON aceita objeto único ou lista de objetos
- timestamps YAML permanecem como string
- overlays aceitam patches inline e caminhos relativos
- diretórios de base são lidos em ordem alfabética

Limites explícitos:
    - Não executa composição (ver tests/e2e)
"""

import textwrap

import pytest

try:
    from stratum.core.document.model import Document
    from stratum.core.exceptions import DepthExceededError, FormatError
    from stratum.io import (
        SourceNotFoundError,
        UnsupportedSourceFormatError,
        load_base,
        load_documents,
        load_layer,
    )
except Exception as e:
    load_documents = None
    _IMPORT_ERR = e
else:
    _IMPORT_ERR = None


def _require_imports():
    if _IMPORT_ERR is not None:
        pytest.fail(f"Falha ao importar stratum.io: {_IMPORT_ERR}")


def _write(path, text):
    path.write_text(textwrap.dedent(text).lstrip(), encoding="utf-8")
    return path


def test_multi_document_yaml_preserves_order(tmp_path):
    _require_imports()
    src = _write(
        tmp_path / "base.yaml",
        """
        ---
        kind: ConfigMap
        metadata:
          name: cfg
        data:
          LOG_LEVEL: info
        ---
        ---
        kind: Service
        metadata:
          name: web
        """,
    )

    docs = load_documents(src)

    assert all(isinstance(d, Document) for d in docs)
    assert [d.kind for d in docs] == ["ConfigMap", "Service"]
    assert docs[0].body["data"] == {"LOG_LEVEL": "info"}


def test_duplicate_yaml_key_is_rejected_with_position(tmp_path):
    _require_imports()
    src = _write(
        tmp_path / "dup.yaml",
        """
        kind: ConfigMap
        metadata:
          name: cfg
        kind: Secret
        """,
    )

    with pytest.raises(FormatError) as exc:
        load_documents(src)

    assert exc.value.details["key"] == "'kind'"
    assert exc.value.details["line"] == 4
    assert exc.value.details["column"] == 1


def test_duplicate_nested_yaml_key_is_rejected(tmp_path):
    _require_imports()
    src = _write(
        tmp_path / "dup.yaml",
        """
        kind: ConfigMap
        metadata:
          name: cfg
          name: other
        """,
    )

    with pytest.raises(FormatError):
        load_documents(src)


def test_invalid_yaml_raises_format_error(tmp_path):
    _require_imports()
    src = _write(tmp_path / "bad.yaml", "kind: [unterminated\n")

    with pytest.raises(FormatError) as exc:
        load_documents(src)

    assert exc.value.details["source"] == str(src)


def test_non_mapping_document_reports_position(tmp_path):
    _require_imports()
    src = _write(
        tmp_path / "list.yaml",
        """
        kind: ConfigMap
        metadata:
          name: cfg
        ---
        - just
        - a list
        """,
    )

    with pytest.raises(FormatError) as exc:
        load_documents(src)

    assert exc.value.details["document"] == 1
    assert exc.value.details["source"] == str(src)


def test_yaml_timestamps_stay_strings(tmp_path):
    _require_imports()
    src = _write(
        tmp_path / "ts.yaml",
        """
        kind: ConfigMap
        metadata:
          name: cfg
        data:
          RELEASED: 2024-01-02
        """,
    )

    (doc,) = load_documents(src)

    assert doc.body["data"]["RELEASED"] == "2024-01-02"


def test_depth_limit_applies_on_load(tmp_path):
    _require_imports()
    src = _write(tmp_path / "deep.json", '{"kind": "X", "metadata": {"name": "x"}, "a": {"b": {"c": {"d": 1}}}}')

    with pytest.raises(DepthExceededError):
        load_documents(src, max_depth=2)


def test_json_object_and_array(tmp_path):
    _require_imports()
    single = _write(tmp_path / "one.json", '{"kind": "ConfigMap", "metadata": {"name": "cfg"}}')
    many = _write(
        tmp_path / "many.json",
        '[{"kind": "ConfigMap", "metadata": {"name": "a"}}, {"kind": "ConfigMap", "metadata": {"name": "b"}}]',
    )

    assert [d.name for d in load_documents(single)] == ["cfg"]
    assert [d.name for d in load_documents(many)] == ["a", "b"]


def test_duplicate_json_key_is_rejected(tmp_path):
    _require_imports()
    src = _write(tmp_path / "dup.json", '{"kind": "ConfigMap", "kind": "Secret"}')

    with pytest.raises(FormatError):
        load_documents(src)


def test_missing_and_unsupported_sources(tmp_path):
    _require_imports()
    with pytest.raises(SourceNotFoundError):
        load_documents(tmp_path / "missing.yaml")

    src = _write(tmp_path / "base.toml", "kind = 'ConfigMap'\n")
    with pytest.raises(UnsupportedSourceFormatError):
        load_documents(src)


def test_load_base_reads_directories_in_sorted_order(tmp_path):
    _require_imports()
    base_dir = tmp_path / "base"
    base_dir.mkdir()
    _write(base_dir / "b.yaml", "kind: Service\nmetadata:\n  name: web\n")
    _write(base_dir / "a.json", '{"kind": "ConfigMap", "metadata": {"name": "cfg"}}')
    _write(base_dir / "notes.txt", "ignored\n")
    extra = _write(tmp_path / "extra.yml", "kind: Secret\nmetadata:\n  name: creds\n")

    docs = load_base([base_dir, extra])

    assert [d.kind for d in docs] == ["ConfigMap", "Service", "Secret"]


def test_load_layer_with_inline_and_relative_patches(tmp_path):
    _require_imports()
    patches_dir = tmp_path / "patches"
    patches_dir.mkdir()
    _write(
        patches_dir / "cfg.yaml",
        """
        kind: ConfigMap
        metadata:
          name: cfg
        data:
          DB_URL: jdbc://PROD
        """,
    )
    overlay = _write(
        tmp_path / "prod.yaml",
        """
        patches:
          - patches/cfg.yaml
          - kind: Service
            metadata:
              name: web
            spec:
              type: LoadBalancer
        transforms:
          - kind: AddCommonLabel
            key: stage
            value: prod
        """,
    )

    layer = load_layer(overlay)

    assert layer.name == "prod"
    assert [p.kind for p in layer.patches] == ["ConfigMap", "Service"]
    assert layer.patches[0].body["data"] == {"DB_URL": "jdbc://PROD"}
    assert layer.transforms == ({"kind": "AddCommonLabel", "key": "stage", "value": "prod"},)


def test_load_layer_rejects_invalid_structure(tmp_path):
    _require_imports()
    unknown = _write(tmp_path / "a.yaml", "name: a\npatchez: []\n")
    not_list = _write(tmp_path / "b.yaml", "name: b\npatches: {kind: X}\n")
    two_docs = _write(tmp_path / "c.yaml", "name: c\n---\nname: d\n")

    for src in (unknown, not_list, two_docs):
        with pytest.raises(FormatError):
            load_layer(src)

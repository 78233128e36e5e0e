# src/stratum/io/loader.py
"""
Loader de documentos e overlays do Stratum.

Este módulo é o colaborador de fronteira que transforma arquivos YAML/JSON
em `Document`s e `Layer`s consumidos pelo Composer.

Decisões arquiteturais:
    - YAML é lido com um `yaml.SafeLoader` que rejeita chaves duplicadas
      (`FormatError` com linha e coluna da segunda ocorrência)
    - Timestamps YAML são mantidos como string: o Document Model só
      aceita escalares JSON-compatíveis
    - Documentos YAML vazios (`---` sem conteúdo) são ignorados
    - Patches de um overlay podem ser inline ou caminhos relativos ao
      arquivo do overlay

Invariantes:
    - A ordem dos documentos reflete a ordem no arquivo
    - Nenhum documento é devolvido sem passar por `parse_document`

Limites explícitos:
    - Não compõe nada
    - Não interpreta transforms (apenas repassa as declarações)
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Iterable, List, Union

import yaml  # PyYAML

from stratum.core.composer.layer import Layer
from stratum.core.document.model import DEFAULT_MAX_DEPTH, Document, parse_document
from stratum.core.exceptions import FormatError

from .errors import SourceNotFoundError, UnsupportedSourceFormatError

YAML_SUFFIXES = frozenset({".yaml", ".yml"})
JSON_SUFFIXES = frozenset({".json"})

PathLike = Union[str, Path]


class UniqueKeyLoader(yaml.SafeLoader):
    """SafeLoader que trata chaves duplicadas como erro de formato."""

    def construct_mapping(self, node, deep=False):
        if not isinstance(node, yaml.MappingNode):
            return super().construct_mapping(node, deep=deep)
        seen = set()
        for key_node, _ in node.value:
            if key_node.tag == "tag:yaml.org,2002:merge":
                continue
            key = self.construct_object(key_node, deep=deep)
            try:
                duplicated = key in seen
            except TypeError:
                # chave não hashable: o SafeLoader reporta com a mensagem dele
                continue
            if duplicated:
                mark = key_node.start_mark
                raise FormatError(
                    message=f"Chave duplicada no documento: {key!r}",
                    details={"key": repr(key), "line": mark.line + 1, "column": mark.column + 1},
                    hint="Cada chave deve aparecer uma única vez por mapeamento.",
                )
            seen.add(key)
        return super().construct_mapping(node, deep=deep)


def _construct_timestamp_as_str(loader: yaml.SafeLoader, node: yaml.Node) -> str:
    return loader.construct_scalar(node)


UniqueKeyLoader.add_constructor("tag:yaml.org,2002:timestamp", _construct_timestamp_as_str)


def _read_source(path: Path) -> List[Any]:
    if not path.exists():
        raise SourceNotFoundError(f"Arquivo não encontrado: {path}")

    suffix = path.suffix.lower()
    text = path.read_text(encoding="utf-8")

    if suffix in YAML_SUFFIXES:
        try:
            return [doc for doc in yaml.load_all(text, Loader=UniqueKeyLoader) if doc is not None]
        except yaml.YAMLError as e:
            raise FormatError(
                message="YAML inválido",
                details={"source": str(path), "error": str(e)},
            ) from e

    if suffix in JSON_SUFFIXES:
        try:
            data = json.loads(text, object_pairs_hook=_reject_duplicate_pairs)
        except json.JSONDecodeError as e:
            raise FormatError(
                message="JSON inválido",
                details={"source": str(path), "line": e.lineno, "column": e.colno},
            ) from e
        if data is None:
            return []
        return list(data) if isinstance(data, list) else [data]

    raise UnsupportedSourceFormatError(f"Formato não suportado: {path.suffix}")


def _reject_duplicate_pairs(pairs):
    out = {}
    for key, value in pairs:
        if key in out:
            raise FormatError(
                message=f"Chave duplicada no documento: {key!r}",
                details={"key": repr(key)},
                hint="Cada chave deve aparecer uma única vez por mapeamento.",
            )
        out[key] = value
    return out


def load_documents(path: PathLike, *, max_depth: int = DEFAULT_MAX_DEPTH) -> List[Document]:
    """
    Carrega todos os documentos de um arquivo YAML (multi-documento) ou JSON.

    Raises:
        SourceNotFoundError: Arquivo inexistente.
        UnsupportedSourceFormatError: Extensão não suportada.
        FormatError: Conteúdo malformado ou chaves duplicadas.
        DepthExceededError: Aninhamento além de `max_depth`.
    """
    source = Path(path)
    documents = []
    for position, raw in enumerate(_read_source(source)):
        try:
            documents.append(parse_document(raw, max_depth=max_depth))
        except FormatError as e:
            details = dict(e.details)
            details.update({"source": str(source), "document": position})
            raise FormatError(message=e.message, details=details, hint=e.hint) from e
    return documents


def load_base(paths: Union[PathLike, Iterable[PathLike]], *, max_depth: int = DEFAULT_MAX_DEPTH) -> List[Document]:
    """
    Carrega a base a partir de um ou mais arquivos (ou diretórios).

    Diretórios contribuem com seus arquivos YAML/JSON em ordem alfabética;
    a ordem final é a ordem dos argumentos.
    """
    if isinstance(paths, (str, Path)):
        paths = [paths]

    documents: List[Document] = []
    for entry in paths:
        p = Path(entry)
        if p.is_dir():
            files = sorted(f for f in p.iterdir() if f.suffix.lower() in YAML_SUFFIXES | JSON_SUFFIXES)
        else:
            files = [p]
        for f in files:
            documents.extend(load_documents(f, max_depth=max_depth))
    return documents


def load_layer(path: PathLike, *, max_depth: int = DEFAULT_MAX_DEPTH) -> Layer:
    """
    Carrega um arquivo de overlay.

    Formato (v1):

        name: prod
        patches:
          - patches/configmap.yaml      # relativo ao arquivo do overlay
          - kind: ConfigMap             # ou inline
            metadata: {name: cfg}
            data: {DB_URL: jdbc://PROD}
        transforms:
          - kind: AddCommonLabel
            key: stage
            value: prod

    `name` ausente assume o nome do arquivo sem extensão.

    Raises:
        SourceNotFoundError / UnsupportedSourceFormatError: arquivo do
            overlay ou de algum patch referenciado.
        FormatError: Estrutura do overlay inválida.
    """
    source = Path(path)
    raw_docs = _read_source(source)
    if len(raw_docs) != 1 or not isinstance(raw_docs[0], dict):
        raise FormatError(
            message="Arquivo de overlay deve conter exatamente um mapeamento",
            details={"source": str(source), "documents": len(raw_docs)},
        )
    raw = raw_docs[0]

    unknown = set(raw) - {"name", "patches", "transforms"}
    if unknown:
        raise FormatError(
            message="Chaves desconhecidas no overlay",
            details={"source": str(source), "unknown": sorted(unknown)},
            hint="Use apenas 'name', 'patches' e 'transforms'.",
        )

    patch_entries = raw.get("patches") or []
    transforms = raw.get("transforms") or []
    if not isinstance(patch_entries, list) or not isinstance(transforms, list):
        raise FormatError(
            message="'patches' e 'transforms' devem ser listas",
            details={"source": str(source)},
        )

    patches: List[Document] = []
    for entry in patch_entries:
        if isinstance(entry, str):
            patches.extend(load_documents(source.parent / entry, max_depth=max_depth))
        else:
            patches.append(parse_document(entry, max_depth=max_depth))

    return Layer(
        name=str(raw.get("name") or source.stem),
        patches=tuple(patches),
        transforms=tuple(transforms),
    )

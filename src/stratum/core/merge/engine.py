# src/stratum/core/merge/engine.py
"""
Merge Engine do Stratum.

Este módulo implementa o deep-merge de um documento de patch sobre um
documento base que compartilha a mesma identidade.

Política de merge (v1), por par de tipos de nó:
    - escalar + escalar      → o valor do patch prevalece
    - mapping + mapping      → união de chaves; chaves comuns são mescladas
                               recursivamente; chaves só do patch são
                               adicionadas; chaves só da base são mantidas
    - sequência + sequência  → substituição integral (padrão) ou merge por
                               identidade de elemento, quando habilitado
                               para o path (ou globalmente)
    - tipos divergentes      → o patch prevalece e um diagnóstico
                               `TYPE_CONFLICT_WARNING` é registrado

`null` em qualquer lado é tratado como valor ausente: nunca gera aviso.

Diretivas estratégicas (`$patch`):
    - `{"$patch": "replace", ...}` em um mapping substitui o mapping base
    - `{"$patch": "delete"}` como valor remove a chave da base
    - `{"$patch": "delete", "name": ...}` em sequência com merge por
      identidade remove o elemento correspondente
    - na raiz do patch, a exclusão do documento é tratada pelo Composer

Princípios fundamentais:
    - O merge é puramente funcional: nenhum input é mutado
    - O resultado nunca compartilha nós mutáveis com base ou patch
    - Diretivas nunca aparecem no resultado
    - A recursão é limitada por `max_depth` (`DepthExceededError`)

Limites explícitos:
    - Não resolve identidade de documentos (ver Composer)
    - Não faz merge posicional de sequências
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, FrozenSet, Iterable, List, Optional, Protocol, Sequence, Tuple

from stratum.core.config.settings import ComposerSettings
from stratum.core.diagnostics import Diagnostic, sequence_identity_missing, type_conflict_warning
from stratum.core.document.identity import identity_of
from stratum.core.document.model import DEFAULT_MAX_DEPTH, Document, clone_node, node_type
from stratum.core.document.paths import FieldPath
from stratum.core.exceptions import DepthExceededError, IdentityError

PATCH_DIRECTIVE = "$patch"
DIRECTIVE_DELETE = "delete"
DIRECTIVE_REPLACE = "replace"


class DiagnosticSink(Protocol):
    def add_diagnostic(self, diagnostic: Diagnostic) -> None:
        ...


@dataclass(frozen=True)
class MergeOptions:
    """Parâmetros do merge de um par (base, patch)."""

    sequence_strategy: str = "replace"
    identity_paths: FrozenSet[FieldPath] = frozenset()
    element_key_fields: Tuple[str, ...] = ("name",)
    kind_field: str = "kind"
    name_path: FieldPath = ("metadata", "name")
    max_depth: int = DEFAULT_MAX_DEPTH

    @classmethod
    def from_settings(
        cls,
        settings: ComposerSettings,
        extra_identity_paths: Iterable[FieldPath] = (),
    ) -> "MergeOptions":
        return cls(
            sequence_strategy=settings.sequence_strategy,
            identity_paths=frozenset(settings.identity_sequence_paths) | frozenset(extra_identity_paths),
            element_key_fields=settings.element_key_fields,
            kind_field=settings.kind_field,
            name_path=settings.name_path,
            max_depth=settings.max_depth,
        )


def is_delete_directive(node: Any) -> bool:
    return isinstance(node, dict) and node.get(PATCH_DIRECTIVE) == DIRECTIVE_DELETE


def merge_documents(
    base: Document,
    patch: Document,
    *,
    options: Optional[MergeOptions] = None,
    ctx: Optional[DiagnosticSink] = None,
) -> Document:
    """
    Mescla `patch` sobre `base` e devolve um novo Document.

    Invariantes:
        - `base` e `patch` não são mutados
        - O resultado é independente de ambos (sem aliasing)
        - Mesclar com um patch vazio produz um documento estruturalmente igual

    Args:
        base (Document): Documento base.
        patch (Document): Patch parcial com a mesma identidade.
        options (Optional[MergeOptions]): Estratégias e limites do merge.
        ctx (Optional[DiagnosticSink]): Destino dos diagnósticos não fatais.

    Returns:
        Document: Novo documento mesclado.

    Raises:
        DepthExceededError: Se o aninhamento exceder `options.max_depth`.
    """
    opts = options or MergeOptions()
    try:
        label: Optional[str] = str(identity_of(base, kind_field=opts.kind_field, name_path=opts.name_path))
    except IdentityError:
        label = None
    run = _MergeRun(opts, label, ctx)
    body = run.merge(base.body, patch.body, (), 0)
    return Document(body=body)


def merge_nodes(
    base: Any,
    patch: Any,
    *,
    options: Optional[MergeOptions] = None,
    ctx: Optional[DiagnosticSink] = None,
) -> Any:
    """Mescla duas árvores arbitrárias com a mesma política de `merge_documents`."""
    run = _MergeRun(options or MergeOptions(), None, ctx)
    return run.merge(base, patch, (), 0)


def strip_directives(node: Any, *, max_depth: int = DEFAULT_MAX_DEPTH) -> Any:
    """Clona `node` removendo diretivas `$patch` (e valores marcados para exclusão)."""
    return _MergeRun(MergeOptions(max_depth=max_depth), None, None).strip(node, 0)


class _MergeRun:
    def __init__(self, options: MergeOptions, identity: Optional[str], ctx: Optional[DiagnosticSink]):
        self.options = options
        self.identity = identity
        self.ctx = ctx

    # ------------------------------------------------------------------
    # Despacho por tipo de nó
    # ------------------------------------------------------------------
    def merge(self, base: Any, patch: Any, path: Tuple[str, ...], depth: int) -> Any:
        self._guard(depth, path)

        if isinstance(patch, dict):
            if isinstance(base, dict):
                if patch.get(PATCH_DIRECTIVE) == DIRECTIVE_REPLACE:
                    return self.strip(patch, depth)
                return self._merge_mapping(base, patch, path, depth)
            self._conflict(base, patch, path)
            return self.strip(patch, depth)

        if isinstance(patch, list):
            if isinstance(base, list):
                if self._identity_enabled(path):
                    return self._merge_sequence(base, patch, path, depth)
                return self.strip(patch, depth)
            self._conflict(base, patch, path)
            return self.strip(patch, depth)

        if patch is not None:
            self._conflict(base, patch, path)
        return patch

    def _merge_mapping(self, base: dict, patch: dict, path: Tuple[str, ...], depth: int) -> dict:
        result: Dict[str, Any] = {}
        for key, base_value in base.items():
            if key in patch and key != PATCH_DIRECTIVE:
                patch_value = patch[key]
                if is_delete_directive(patch_value):
                    continue
                result[key] = self.merge(base_value, patch_value, path + (key,), depth + 1)
            else:
                result[key] = clone_node(base_value, max_depth=self.options.max_depth, _depth=depth + 1)

        for key, patch_value in patch.items():
            if key == PATCH_DIRECTIVE or key in base or is_delete_directive(patch_value):
                continue
            result[key] = self.strip(patch_value, depth + 1)
        return result

    # ------------------------------------------------------------------
    # Sequências com merge por identidade
    # ------------------------------------------------------------------
    def _identity_enabled(self, path: Tuple[str, ...]) -> bool:
        return self.options.sequence_strategy == "identity" or path in self.options.identity_paths

    def _merge_sequence(self, base: list, patch: list, path: Tuple[str, ...], depth: int) -> list:
        base_keys = self._element_keys(base)
        patch_keys = self._element_keys(patch)

        if base_keys is None or patch_keys is None:
            # estratégia global tolera listas sem identidade (ex.: listas de strings)
            if path in self.options.identity_paths:
                self._report(sequence_identity_missing(identity=self.identity, path=path))
            return self.strip(patch, depth)

        by_key = dict(zip(base_keys, base))
        merged: Dict[Any, Any] = {}
        deleted = set()
        additions: List[Any] = []

        for key, element in zip(patch_keys, patch):
            if is_delete_directive(element):
                deleted.add(key)
            elif key in by_key:
                merged[key] = self.merge(by_key[key], element, path, depth + 1)
            else:
                additions.append(self.strip(element, depth + 1))

        result: List[Any] = []
        for key, element in zip(base_keys, base):
            if key in deleted:
                continue
            if key in merged:
                result.append(merged[key])
            else:
                result.append(clone_node(element, max_depth=self.options.max_depth, _depth=depth + 1))
        result.extend(additions)
        return result

    def _element_keys(self, elements: Sequence[Any]) -> Optional[List[Any]]:
        keys: List[Any] = []
        for element in elements:
            key = self._element_key(element)
            if key is None or key in keys:
                return None
            keys.append(key)
        return keys

    def _element_key(self, element: Any) -> Optional[Tuple[Any, ...]]:
        if not isinstance(element, dict):
            return None
        try:
            doc_key = identity_of(
                Document(body=element),
                kind_field=self.options.kind_field,
                name_path=self.options.name_path,
            )
        except IdentityError:
            doc_key = None
        if doc_key is not None:
            return ("identity", doc_key.kind, doc_key.name)
        for field_name in self.options.element_key_fields:
            value = element.get(field_name)
            if value is not None and not isinstance(value, (dict, list)):
                return (field_name, value)
        return None

    # ------------------------------------------------------------------
    # Cópia sem diretivas
    # ------------------------------------------------------------------
    def strip(self, node: Any, depth: int) -> Any:
        self._guard(depth, ())
        if isinstance(node, dict):
            return {
                k: self.strip(v, depth + 1)
                for k, v in node.items()
                if k != PATCH_DIRECTIVE and not is_delete_directive(v)
            }
        if isinstance(node, list):
            return [self.strip(v, depth + 1) for v in node if not is_delete_directive(v)]
        return node

    # ------------------------------------------------------------------
    # Guardas e diagnósticos
    # ------------------------------------------------------------------
    def _guard(self, depth: int, path: Tuple[str, ...]) -> None:
        if depth > self.options.max_depth:
            raise DepthExceededError(
                message="Profundidade máxima excedida durante o merge",
                details={
                    "max_depth": self.options.max_depth,
                    "identity": self.identity,
                    "path": ".".join(path[:10]),
                },
                hint="Verifique se a entrada não é cíclica ou gerada de forma patológica.",
            )

    def _conflict(self, base: Any, patch: Any, path: Tuple[str, ...]) -> None:
        if base is None or patch is None:
            return
        base_type, patch_type = node_type(base), node_type(patch)
        if base_type != patch_type:
            self._report(
                type_conflict_warning(
                    identity=self.identity,
                    path=path,
                    base_type=base_type,
                    patch_type=patch_type,
                )
            )

    def _report(self, diagnostic: Diagnostic) -> None:
        if self.ctx is not None:
            self.ctx.add_diagnostic(diagnostic)

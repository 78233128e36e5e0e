# src/stratum/core/composer/composer.py
"""
Layer Composer do Stratum.

Orquestra uma composição completa: base + um overlay → result set.

Fluxo (v1):
    1. Valida e indexa a base (`DuplicateIdentityError` antes de qualquer merge)
    2. Constrói os transforms a partir das declarações (registry) e coleta
       as diretivas `PatchSequenceByIdentity`
    3. Aplica cada patch, na ordem declarada:
         - `$patch: delete` na raiz → remove o documento (ou `ORPHAN_DELETE`)
         - identidade conhecida     → merge
         - identidade nova          → adição ao final
    4. Executa o Transform Pipeline sobre o result set inteiro
    5. Reindexa a saída (renomeações não podem colidir)

Decisões arquiteturais:
    - Um `CompositionContext` novo por chamada: composições concorrentes
      não compartilham estado
    - Erros fatais propagam como exceções tipadas, sem resultado parcial
    - Vários patches para a mesma identidade são aplicados em sequência
    - Ordem de saída: ordem da base, depois adições na ordem do overlay

Limites explícitos:
    - Não lê nem escreve arquivos (ver `stratum.io`)
    - Não conhece schemas de recursos além das field specs das settings
"""

from __future__ import annotations

from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple

from stratum.core.config.settings import ComposerSettings, default_settings
from stratum.core.diagnostics import orphan_delete
from stratum.core.document.identity import IdentityKey, identity_of, index_documents
from stratum.core.document.model import Document, parse_document
from stratum.core.document.paths import FieldPath
from stratum.core.exceptions import FormatError
from stratum.core.merge.engine import MergeOptions, is_delete_directive, merge_documents, strip_directives
from stratum.core.transforms.base import Transform, TransformScope
from stratum.core.transforms.pipeline import TransformPipeline
from stratum.core.transforms.registry import TransformRegistry, default_registry
from stratum.core.transforms.sequences import PatchSequenceByIdentity

from .context import CompositionContext, new_context
from .layer import CompositionResult, Layer, ResultSet, documents_of


def compose(
    base: Any,
    overlay: Any,
    *,
    settings: Optional[ComposerSettings] = None,
    registry: Optional[TransformRegistry] = None,
    ctx: Optional[CompositionContext] = None,
) -> CompositionResult:
    """
    Compõe um overlay sobre uma base e devolve o result set final.

    Args:
        base: Documents, mapeamentos brutos, um ResultSet ou um
            CompositionResult anterior.
        overlay: `Layer` ou mapeamento `{"name", "patches", "transforms"}`.
        settings: Settings do composer (padrão: `default_settings()`).
        registry: Registry de transforms (padrão: `default_registry()`).
        ctx: Contexto a ser usado (padrão: um contexto novo).

    Returns:
        CompositionResult: ResultSet + diagnósticos, resultados de
        transforms e eventos.

    Raises:
        FormatError: Documento ou declaração de transform malformada.
        IdentityError: Documento sem identidade válida.
        DuplicateIdentityError: Identidade repetida na base, no overlay
            após merge ou na saída após transforms.
        DepthExceededError: Aninhamento além de `document.max_depth`.
        DanglingReferenceError: Referência reescrita sem alvo.
    """
    settings = settings or default_settings()
    registry = registry or default_registry()
    layer = as_layer(overlay)
    ctx = ctx or new_context(layer.name)

    ctx.log(
        stage="compose",
        level="info",
        message="Composição iniciada",
        patches=len(layer.patches),
        transforms=len(layer.transforms),
    )

    base_docs = [parse_document(raw, max_depth=settings.max_depth) for raw in documents_of(base)]
    working: Dict[IdentityKey, Document] = index_documents(
        base_docs, kind_field=settings.kind_field, name_path=settings.name_path
    )
    ctx.log(stage="index", level="info", message="Base indexada", documents=len(working))

    transforms = [registry.build(spec, settings) for spec in layer.transforms]
    directives = sequence_directives(transforms)

    for position, raw in enumerate(layer.patches):
        patch = parse_document(raw, max_depth=settings.max_depth)
        key = identity_of(patch, kind_field=settings.kind_field, name_path=settings.name_path)

        if is_delete_directive(patch.body):
            if working.pop(key, None) is None:
                ctx.add_diagnostic(orphan_delete(identity=str(key), layer=layer.name))
            else:
                ctx.log(stage="merge", level="info", message="Documento removido", identity=str(key))
            continue

        if key in working:
            options = MergeOptions.from_settings(
                settings,
                extra_identity_paths=[path for scope, path in directives if scope.matches(key)],
            )
            working[key] = merge_documents(working[key], patch, options=options, ctx=ctx)
            ctx.log(stage="merge", level="info", message="Patch mesclado", identity=str(key), position=position)
        else:
            working[key] = Document(body=strip_directives(patch.body, max_depth=settings.max_depth))
            ctx.log(stage="merge", level="info", message="Documento adicionado", identity=str(key), position=position)

    pipeline = TransformPipeline(transforms, settings=settings)
    documents = pipeline.run(list(working.values()), ctx)

    # renomeações não podem colidir
    index_documents(documents, kind_field=settings.kind_field, name_path=settings.name_path)

    ctx.log(
        stage="compose",
        level="info",
        message="Composição concluída",
        documents=len(documents),
        diagnostics=len(ctx.diagnostics),
        warnings=len(ctx.warnings()),
    )
    return CompositionResult(
        result_set=ResultSet(
            documents=tuple(documents),
            kind_field=settings.kind_field,
            name_path=settings.name_path,
        ),
        diagnostics=tuple(ctx.diagnostics),
        transform_results=tuple(ctx.transform_results),
        events=tuple(ctx.events),
        layers=(layer.name,),
        meta={
            "composition_id": ctx.composition_id,
            "created_at": ctx.created_at.isoformat(),
            "settings_hash": settings.config_hash(),
        },
    )


def compose_stack(
    base: Any,
    overlays: Iterable[Any],
    *,
    settings: Optional[ComposerSettings] = None,
    registry: Optional[TransformRegistry] = None,
) -> CompositionResult:
    """
    Compõe overlays em cascata: cada overlay é aplicado sobre o resultado
    do anterior. Diagnósticos, resultados de transforms e eventos são
    acumulados na ordem das camadas.

    Uma pilha vazia devolve a base validada, sem transforms.
    """
    settings = settings or default_settings()
    registry = registry or default_registry()

    current: Any = base
    diagnostics: List[Any] = []
    transform_results: List[Any] = []
    events: List[Dict[str, Any]] = []
    layers: List[str] = []
    meta: Dict[str, Any] = {"settings_hash": settings.config_hash(), "compositions": []}

    overlays = list(overlays)
    if not overlays:
        overlays = [Layer(name="base")]

    for overlay in overlays:
        result = compose(current, overlay, settings=settings, registry=registry)
        diagnostics.extend(result.diagnostics)
        transform_results.extend(result.transform_results)
        events.extend(result.events)
        layers.extend(result.layers)
        meta["compositions"].append(result.meta.get("composition_id"))
        current = result

    return CompositionResult(
        result_set=current.result_set,
        diagnostics=tuple(diagnostics),
        transform_results=tuple(transform_results),
        events=tuple(events),
        layers=tuple(layers),
        meta=meta,
    )


def as_layer(overlay: Any) -> Layer:
    """Normaliza um overlay (Layer ou mapeamento declarativo) em `Layer`."""
    if isinstance(overlay, Layer):
        return overlay
    if not isinstance(overlay, Mapping):
        raise FormatError(
            message="Overlay deve ser um Layer ou um mapeamento",
            details={"received": type(overlay).__name__},
        )
    unknown = set(overlay) - {"name", "patches", "transforms"}
    if unknown:
        raise FormatError(
            message="Chaves desconhecidas na declaração do overlay",
            details={"unknown": sorted(unknown)},
            hint="Use apenas 'name', 'patches' e 'transforms'.",
        )
    patches = overlay.get("patches") or []
    transforms = overlay.get("transforms") or []
    if not isinstance(patches, (list, tuple)) or not isinstance(transforms, (list, tuple)):
        raise FormatError(
            message="'patches' e 'transforms' devem ser listas",
            details={"patches": type(patches).__name__, "transforms": type(transforms).__name__},
        )
    return Layer(name=str(overlay.get("name") or "overlay"), patches=tuple(patches), transforms=tuple(transforms))


def sequence_directives(transforms: Sequence[Transform]) -> List[Tuple[TransformScope, FieldPath]]:
    """Coleta as diretivas de merge por identidade declaradas no overlay."""
    return [(t.scope, t.path) for t in transforms if isinstance(t, PatchSequenceByIdentity)]

# src/stratum/core/document/paths.py
"""
Paths de campo sobre árvores de documento.

Um path é uma string pontuada (`"spec.template.metadata.labels"`)
convertida em uma tupla de segmentos. Dois modos de navegação existem:

    - estrito (`resolve_parent`): cada segmento precisa existir; segmentos
      numéricos indexam sequências. Usado por `SetField`.
    - em leque (`iter_parents`): sequências no caminho são atravessadas
      implicitamente e cada elemento recebe o restante do path. Usado
      pelos field specs de labels, annotations e referências.

Nenhuma função deste módulo copia a árvore: quem chama é responsável por
operar sobre um clone.
"""

from __future__ import annotations

from typing import Any, Iterator, List, Sequence, Tuple, Union

from stratum.core.exceptions import PathNotFoundError

FieldPath = Tuple[str, ...]
Container = Union[dict, list]


def parse_path(path: Union[str, Sequence[str]]) -> FieldPath:
    """Normaliza `"a.b.c"` (ou uma sequência de segmentos) em `("a", "b", "c")`."""
    if isinstance(path, str):
        segments = tuple(path.split("."))
    else:
        segments = tuple(str(s) for s in path)
    if not segments or any(not s for s in segments):
        raise ValueError(f"path inválido: {path!r}")
    return segments


def format_path(path: Sequence[Any]) -> str:
    return ".".join(str(p) for p in path)


def iter_parents(
    node: Any,
    segments: Sequence[str],
    *,
    create: bool = False,
    existing: int = 0,
) -> Iterator[dict]:
    """
    Produz os mapas que são pai do último segmento de `segments`.

    Sequências encontradas são atravessadas elemento a elemento. Com
    `create=True`, mapas intermediários ausentes (ou nulos) são criados;
    sem ele, ramos ausentes são simplesmente ignorados.

    `existing` limita a criação: os primeiros `existing` segmentos
    precisam existir (nunca são criados), mesmo com `create=True`.

    O gerador muta `node` quando `create=True`.
    """
    if isinstance(node, list):
        for element in node:
            yield from iter_parents(element, segments, create=create, existing=existing)
        return

    if not isinstance(node, dict):
        return

    if len(segments) <= 1:
        yield node
        return

    key = segments[0]
    child = node.get(key)
    if child is None:
        if not create or existing > 0:
            return
        child = {}
        node[key] = child
    yield from iter_parents(child, segments[1:], create=create, existing=max(existing - 1, 0))


def resolve_parent(body: dict, segments: Sequence[str]) -> Tuple[Container, Union[str, int]]:
    """
    Resolve de forma estrita o container pai do último segmento.

    Returns:
        (container, chave): `chave` é `int` quando o pai é uma sequência.

    Raises:
        PathNotFoundError: se algum segmento intermediário não existir ou
            não for um container compatível.
    """
    node: Any = body
    walked: List[str] = []
    for segment in segments[:-1]:
        walked.append(segment)
        node = _step(node, segment, segments, walked)

    last = segments[-1]
    if isinstance(node, list):
        return node, _index(node, last, segments)
    if isinstance(node, dict):
        return node, last
    raise PathNotFoundError(
        message="Path não encontrado no documento",
        details={"path": format_path(segments), "missing": format_path(walked)},
    )


def get_value(body: dict, segments: Sequence[str]) -> Any:
    """Lê o valor em um path estrito (`PathNotFoundError` se ausente)."""
    container, key = resolve_parent(body, segments)
    if isinstance(container, dict) and key not in container:
        raise PathNotFoundError(
            message="Path não encontrado no documento",
            details={"path": format_path(segments), "missing": format_path(segments)},
        )
    return container[key]


def has_path(body: dict, segments: Sequence[str]) -> bool:
    try:
        get_value(body, segments)
    except PathNotFoundError:
        return False
    return True


def _step(node: Any, segment: str, segments: Sequence[str], walked: List[str]) -> Any:
    if isinstance(node, dict) and segment in node:
        return node[segment]
    if isinstance(node, list):
        return node[_index(node, segment, segments)]
    raise PathNotFoundError(
        message="Path não encontrado no documento",
        details={"path": format_path(segments), "missing": format_path(walked)},
    )


def _index(node: list, segment: str, segments: Sequence[str]) -> int:
    try:
        idx = int(segment)
    except ValueError:
        idx = None
    if idx is None or not (0 <= idx < len(node)):
        raise PathNotFoundError(
            message="Índice de sequência inválido no path",
            details={"path": format_path(segments), "segment": segment, "length": len(node)},
        )
    return idx

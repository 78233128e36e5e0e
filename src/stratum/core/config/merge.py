# src/stratum/core/config/merge.py
"""
Resolução de settings por camadas.

`deep_merge` combina `DEFAULT_CONFIG`, o arquivo de defaults do projeto e o
arquivo local em um único dict, antes da materialização em
`ComposerSettings`.

Regras:
    - mapa sobre mapa: merge chave a chave
    - lista: a lista do override substitui a anterior (ex.: field specs,
      `identity_sequence_paths`)
    - escalar: o override vence
    - chave com `None` nos defaults aceita qualquer tipo
    - tipos diferentes: `ConfigTypeConflictError` com o path pontuado da chave

Diferente do Merge Engine de documentos, aqui não há diretivas, merge de
listas por identidade nem diagnósticos: um override com tipo errado é erro
do operador e interrompe o carregamento.
"""

from copy import deepcopy
from typing import Any, Dict, Tuple

from .errors import ConfigTypeConflictError


def deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Aplica `override` sobre `base` e devolve um dict novo.

    Nenhum dos dois é mutado; valores copiados do override são cópias
    profundas.

    Raises:
        ConfigTypeConflictError: Raiz que não seja dict ou conflito de tipo
            em alguma chave.
    """
    if not isinstance(base, dict) or not isinstance(override, dict):
        raise ConfigTypeConflictError(
            f"Deep-merge requer dicts no nível raiz, recebido: "
            f"{type(base).__name__} vs {type(override).__name__}"
        )
    return _merge_level(base, override, ())


def _merge_level(base: Dict[str, Any], override: Dict[str, Any], path: Tuple[str, ...]) -> Dict[str, Any]:
    merged: Dict[str, Any] = {key: deepcopy(value) for key, value in base.items()}

    for key, incoming in override.items():
        where = path + (str(key),)
        current = merged.get(key)

        if isinstance(current, dict) and isinstance(incoming, dict):
            merged[key] = _merge_level(current, incoming, where)
        elif key not in merged or current is None or _same_shape(current, incoming):
            merged[key] = deepcopy(incoming)
        else:
            raise ConfigTypeConflictError(
                f"Conflito de tipo em '{'.'.join(where)}': "
                f"{type(current).__name__} vs {type(incoming).__name__}"
            )

    return merged


def _same_shape(current: Any, incoming: Any) -> bool:
    if isinstance(current, list):
        return isinstance(incoming, list)
    return type(current) is type(incoming)

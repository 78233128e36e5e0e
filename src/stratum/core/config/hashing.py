# src/stratum/core/config/hashing.py
"""
Hashing canônico do Stratum.

Este módulo implementa a geração de hash determinístico de estruturas
serializáveis em JSON, usado para:
    - identidade das settings resolvidas (`compute_config_hash`)
    - digest de um ResultSet (`compute_canonical_hash`), que permite
      comparar duas composições sem comparar documento a documento

Política de hashing (v1):
    - Serialização JSON canônica
    - Ordenação estável de chaves
    - Separadores compactos
    - Codificação UTF-8
    - Algoritmo SHA-256

Invariantes:
    - Estruturas equivalentes produzem o mesmo hash
    - O valor gerado é sempre uma string hexadecimal de 64 caracteres
    - A ordem de listas participa do hash (ordem de documentos importa)
"""

import hashlib
import json
from typing import Any, Dict


def compute_canonical_hash(obj: Any) -> str:
    """
    Gera o SHA-256 hexadecimal da serialização JSON canônica de `obj`.

    Raises:
        TypeError: Se `obj` contiver valores não serializáveis em JSON.
    """
    canonical_json = json.dumps(
        obj,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
    )
    return hashlib.sha256(canonical_json.encode("utf-8")).hexdigest()


def compute_config_hash(config: Dict[str, Any]) -> str:
    """
    Gera um hash determinístico da configuração efetiva do composer.

    Decisões arquiteturais:
        - O hash representa a identidade estrutural das settings
        - O hash é independente da ordem original das chaves
        - O resultado é adequado para uso no relatório de composição

    Args:
        config (Dict[str, Any]): Configuração efetiva resolvida.

    Returns:
        str: Hash SHA-256 hexadecimal da configuração.

    Raises:
        TypeError: Se o objeto fornecido não for um dicionário.
    """

    if not isinstance(config, dict):
        raise TypeError(
            f"Config para hashing deve ser dict, recebido: {type(config).__name__}"
        )

    return compute_canonical_hash(config)

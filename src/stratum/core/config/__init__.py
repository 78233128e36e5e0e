# src/stratum/core/config/__init__.py

"""
Camada de configuração do Stratum.

Este pacote contém as estruturas e utilitários responsáveis por carregar,
mesclar, materializar e identificar as settings do composer.

Responsabilidades do pacote:
    - Defaults embutidos (field specs de labels/annotations, tabela de referências)
    - Carregamento de arquivos de configuração (defaults + overrides locais)
    - Resolução de configuração final via deep-merge determinístico
    - Materialização em `ComposerSettings` imutáveis
    - Hash canônico para rastreabilidade

Princípios fundamentais:
    - Nenhuma heurística implícita durante merge
    - Overrides são sempre explícitos
    - A mesma entrada sempre produz as mesmas settings
"""

from .defaults import DEFAULT_CONFIG
from .loader import load_config, load_settings
from .settings import ComposerSettings, FieldSpec, ReferenceSpec, default_settings

__all__ = [
    "DEFAULT_CONFIG",
    "ComposerSettings",
    "FieldSpec",
    "ReferenceSpec",
    "default_settings",
    "load_config",
    "load_settings",
]

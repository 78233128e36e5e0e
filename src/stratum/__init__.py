# src/stratum/__init__.py
"""
Stratum — motor determinístico de overlays e patch-merge para documentos
de configuração.

Dado um conjunto base de documentos estruturados e um overlay (patches +
transforms declarativos), o Stratum produz um result set específico de
ambiente, de forma determinística e rastreável.

Arquitetura em alto nível:
    - core.document     → Document Model, identidade e paths de campo
    - core.merge        → deep-merge de patches sobre documentos base
    - core.transforms   → vocabulário, registry e pipeline de transforms
    - core.composer     → orquestração de uma composição (Layer Composer)
    - core.config       → settings do composer (defaults, arquivos, hashing)
    - core.traceability → relatório de composição
    - io                → leitura de YAML/JSON e escrita de result sets

Limites explícitos:
    - Não oferece CLI
    - Não valida schemas de recursos específicos
"""

__version__ = "0.1.0"

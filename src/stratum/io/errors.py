# src/stratum/io/errors.py
"""
Exceções da camada de I/O do Stratum (leitura de fontes e escrita de
result sets).

Erros de estrutura de documento não vivem aqui: o Loader levanta
`stratum.core.exceptions.FormatError` para YAML/JSON malformado ou com
chaves duplicadas.
"""


class SourceError(Exception):
    """Exceção base para falhas de leitura/escrita de fontes."""


class SourceNotFoundError(SourceError):
    """Arquivo de documentos ou de overlay inexistente."""


class UnsupportedSourceFormatError(SourceError):
    """
    Extensão de arquivo não suportada.

    Formatos suportados (v1):
        - YAML (.yaml, .yml), com múltiplos documentos
        - JSON (.json), objeto ou lista de objetos
    """

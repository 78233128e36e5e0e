# src/stratum/io/serializer.py
"""
Serializer de result sets do Stratum.

    - YAML: multi-documento, ordem de chaves preservada (`sort_keys=False`)
    - JSON: lista de documentos, indentação estável

A saída é determinística: o mesmo result set produz o mesmo texto.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Union

import yaml  # PyYAML

from stratum.core.composer.layer import documents_of

from .errors import UnsupportedSourceFormatError
from .loader import JSON_SUFFIXES, YAML_SUFFIXES


def _bodies(result: Any) -> list:
    return [doc.body if hasattr(doc, "body") else doc for doc in documents_of(result)]


def dump_yaml(result: Any) -> str:
    return yaml.safe_dump_all(
        _bodies(result),
        sort_keys=False,
        default_flow_style=False,
        allow_unicode=True,
        explicit_start=True,
    )


def dump_json(result: Any) -> str:
    return json.dumps(_bodies(result), ensure_ascii=False, indent=2) + "\n"


def write_result_set(result: Any, path: Union[str, Path]) -> Path:
    """
    Escreve o result set em `path`, escolhendo o formato pela extensão.

    Raises:
        UnsupportedSourceFormatError: Extensão diferente de .yaml/.yml/.json.
    """
    target = Path(path)
    suffix = target.suffix.lower()
    if suffix in YAML_SUFFIXES:
        text = dump_yaml(result)
    elif suffix in JSON_SUFFIXES:
        text = dump_json(result)
    else:
        raise UnsupportedSourceFormatError(f"Formato não suportado: {target.suffix}")

    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(text, encoding="utf-8")
    return target

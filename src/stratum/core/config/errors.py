# src/stratum/core/config/errors.py
"""
Exceções canônicas da camada de configuração do Stratum.

Este módulo define a hierarquia oficial de exceções utilizadas durante
o carregamento, a resolução e a materialização das settings do composer.

As exceções aqui definidas representam **violações explícitas** da
configuração do engine, e não erros de composição de documentos
(esses vivem em `stratum.core.exceptions`).

Princípios fundamentais:
    - Exceções são tipadas e semânticas
    - Erros estruturais de configuração são falhas fatais
    - Mensagens de erro são claras e direcionadas ao usuário

Invariantes:
    - Todas as exceções de configuração herdam de `ConfigError`
    - Nenhuma exceção aqui representa erro de merge de documentos

Limites explícitos:
    - Não compõe overlays
    - Não realiza fallback ou recovery
"""


class ConfigError(Exception):
    """
    Exceção base para erros relacionados à configuração do Stratum.

    Todas as exceções levantadas durante carregamento, merge e
    materialização das settings devem herdar desta classe.
    """


class DefaultsNotFoundError(ConfigError):
    """
    Exceção levantada quando um arquivo de defaults explicitamente
    informado não é encontrado no caminho especificado.

    Decisões arquiteturais:
        - Sem arquivo informado, os defaults embutidos (`DEFAULT_CONFIG`) são usados
        - Um caminho informado e inexistente é erro, nunca fallback silencioso
    """


class UnsupportedConfigFormatError(ConfigError):
    """
    Exceção levantada quando o formato do arquivo de configuração
    não é suportado pelo loader.

    Formatos suportados (v1):
        - YAML (.yaml, .yml)
        - JSON (.json)
    """


class InvalidConfigRootTypeError(ConfigError):
    """
    Exceção levantada quando o conteúdo raiz da configuração
    não é um dicionário (`dict`).
    """


class ConfigTypeConflictError(ConfigError):
    """
    Exceção levantada quando ocorre conflito de tipos durante o deep-merge
    de configuração.

    Exemplo de conflito:
        - base:     {"merge": {"sequence_strategy": "replace"}}
        - override: {"merge": "identity"}

    Decisões arquiteturais:
        - O deep-merge de settings é estritamente tipado por chave
        - Diferente do merge de documentos (que registra aviso),
          aqui o conflito é falha fatal

    Invariantes:
        - Nenhum merge parcial é produzido em caso de conflito
    """


class InvalidSettingsError(ConfigError):
    """
    Exceção levantada quando a configuração resolvida não pode ser
    materializada em `ComposerSettings` (valores fora do domínio
    permitido, field specs malformados, estratégia desconhecida).
    """

# src/atlas_docaudit/core/config/errors.py
"""
Exceções da camada de configuração do Atlas DocAudit.

Todas herdam de `ConfigError` e representam falhas estruturais fatais:
o loader nunca tenta corrigir, inferir ou completar a configuração.
"""


class ConfigError(Exception):
    """Exceção base para erros de configuração da auditoria."""


class DefaultsNotFoundError(ConfigError):
    """
    Arquivo de configuração base (defaults) não encontrado.

    Sem defaults não existe configuração efetiva válida; o loader não
    cria defaults implicitamente.
    """


class UnsupportedConfigFormatError(ConfigError):
    """Extensão não suportada (v1: .yaml, .yml, .json)."""


class InvalidConfigRootTypeError(ConfigError):
    """Conteúdo raiz da configuração não é um mapa chave-valor."""


class ConfigTypeConflictError(ConfigError):
    """
    Conflito de tipos durante o deep-merge.

    Exemplo:
        - base:     {"docs": {"include": ["**/*.md"]}}
        - override: {"docs": "site/"}
    """

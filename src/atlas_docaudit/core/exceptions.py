"""
Atlas DocAudit — Canonical Exceptions (v1)

Exceções tipadas internas do Atlas DocAudit.

Objetivo:
- Permitir que Steps/Engine levantem exceções semânticas tipadas
- Facilitar o mapeamento determinístico para DocAuditErrorPayload

Regras:
- Defeitos de conteúdo NÃO são exceções (ver core.findings).
- Exceções carregam apenas dados estruturados (serializáveis).
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class DocAuditException(Exception):
    """Base class para exceções internas do Atlas DocAudit.

    Importante:
    - Sempre carregar dados estruturados em `details`
    - Mensagem deve ser curta e humana
    """

    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    decision_required: bool = False

    def __str__(self) -> str:  # pragma: no cover
        return self.message


# ---------------------------------------------------------------------------
# Entradas obrigatórias
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DocsRootNotFound(DocAuditException):
    """Diretório raiz da documentação não existe."""


@dataclass(frozen=True)
class DocumentsNotFound(DocAuditException):
    """Artefato de documentos exigido por um Step não está no contexto."""


@dataclass(frozen=True)
class ManifestNotFound(DocAuditException):
    """Manifest obrigatório não foi encontrado."""


# ---------------------------------------------------------------------------
# Engine / Configuração
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class EngineConfigurationError(DocAuditException):
    """Configuração inválida ou inconsistente para execução."""


@dataclass(frozen=True)
class EngineExecutionError(DocAuditException):
    """Erro inesperado durante execução do Engine (encapsulado)."""

"""
Atlas DocAudit — Canonical Error Structures (v1)

Este módulo define o padrão canônico de erros de execução do Atlas DocAudit.

Erros de execução são distintos de findings: um finding descreve um defeito
no conteúdo da documentação; um erro descreve uma falha que impediu um Step
de auditar (ex.: raiz da documentação inexistente). Erros devem ser:
- explícitos
- serializáveis
- rastreáveis
- acionáveis
"""

from __future__ import annotations

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional


# ---------------------------------------------------------------------------
# Payload canônico
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class DocAuditErrorPayload:
    """
    Payload canônico de erro do Atlas DocAudit.

    Campos:
    - type: código estável do erro (não é texto livre)
    - message: mensagem curta, humana e objetiva
    - details: dados estruturados relevantes para diagnóstico
    - hint: ação sugerida ao operador (onde corrigir)
    - decision_required: indica que a run está bloqueada aguardando decisão humana
    """

    type: str
    message: str
    details: Dict[str, Any]
    hint: Optional[str] = None
    decision_required: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """Retorna representação serializável do erro."""
        return asdict(self)


# ---------------------------------------------------------------------------
# Catálogo canônico de tipos de erro (v1)
# ---------------------------------------------------------------------------

# Entradas obrigatórias
DOCS_ROOT_NOT_FOUND = "DOCS_ROOT_NOT_FOUND"
DOCUMENTS_NOT_FOUND = "DOCUMENTS_NOT_FOUND"
MANIFEST_NOT_FOUND = "MANIFEST_NOT_FOUND"

# Engine / Execução
ENGINE_EXECUTION_ERROR = "ENGINE_EXECUTION_ERROR"
ENGINE_CONFIGURATION_ERROR = "ENGINE_CONFIGURATION_ERROR"


# ---------------------------------------------------------------------------
# Helpers de fábrica
# ---------------------------------------------------------------------------

def docs_root_not_found(
    *,
    root: Optional[str],
    step: Optional[str] = None,
    hint: str = "Declare `docs.root` na config apontando para o diretório fonte do site.",
) -> DocAuditErrorPayload:
    return DocAuditErrorPayload(
        type=DOCS_ROOT_NOT_FOUND,
        message="Diretório raiz da documentação não encontrado",
        details={"root": root, "step": step, "config_key": "docs.root"},
        hint=hint,
        decision_required=True,
    )


def documents_not_found(
    *,
    expected_artifact: str = "docs.documents",
    step: Optional[str] = None,
    required_by: Optional[str] = None,
    hint: str = "Execute `ingest.scan` e `parse.front_matter` antes deste Step.",
) -> DocAuditErrorPayload:
    return DocAuditErrorPayload(
        type=DOCUMENTS_NOT_FOUND,
        message="Documentos parseados não encontrados no contexto",
        details={
            "expected_artifact": expected_artifact,
            "step": step,
            "required_by": required_by,
            "artifact_namespace": "artifacts",
        },
        hint=hint,
        decision_required=False,
    )


def manifest_not_found(
    *,
    expected_artifact: str = "manifest",
    step: Optional[str] = None,
    required_by: Optional[str] = None,
    hint: str = "Garanta que o Manifest foi gerado a partir do RunResult antes dos exports.",
) -> DocAuditErrorPayload:
    return DocAuditErrorPayload(
        type=MANIFEST_NOT_FOUND,
        message="Manifest canônico não encontrado para execução",
        details={
            "expected_artifact": expected_artifact,
            "step": step,
            "required_by": required_by,
            "artifact_namespace": "meta",
        },
        hint=hint,
        decision_required=False,
    )


def engine_execution_error(
    *,
    step: Optional[str] = None,
    exc_type: Optional[str] = None,
    exc_message: Optional[str] = None,
    hint: str = "Verifique o log estruturado da run. Nenhum fallback é aplicado automaticamente.",
) -> DocAuditErrorPayload:
    return DocAuditErrorPayload(
        type=ENGINE_EXECUTION_ERROR,
        message="Falha inesperada durante a execução da auditoria",
        details={
            "step": step,
            "exc_type": exc_type,
            "exc_message": exc_message,
        },
        hint=hint,
        decision_required=False,
    )


def engine_configuration_error(
    *,
    message: str = "Configuração inválida para execução da auditoria",
    details: Optional[Dict[str, Any]] = None,
    hint: str = "Revise a configuração da run/steps antes de reexecutar.",
) -> DocAuditErrorPayload:
    return DocAuditErrorPayload(
        type=ENGINE_CONFIGURATION_ERROR,
        message=message,
        details=details or {},
        hint=hint,
        decision_required=False,
    )

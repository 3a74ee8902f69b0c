"""
Helpers compartilhados pelos Steps canônicos.

Concentra o que todos os Steps repetem:
    - leitura de `steps.<id>` na config
    - resolução de caminhos relativos (ancorados em `ctx.meta["base_dir"]`)
    - construção de StepResult FAILED com `payload["error"]`
    - publicação de findings + métricas padrão de auditoria
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional

from atlas_docaudit.core.config.loader import resolve_config_path, step_config
from atlas_docaudit.core.contract.schema import validate_site_contract_v1
from atlas_docaudit.core.errors import DocAuditErrorPayload, documents_not_found
from atlas_docaudit.core.exceptions import DocumentsNotFound
from atlas_docaudit.core.findings import Finding, count_by_severity, sort_findings
from atlas_docaudit.core.pipeline.context import RunContext
from atlas_docaudit.core.pipeline.types import StepKind, StepResult, StepStatus

ARTIFACT_ROOT = "docs.root"
ARTIFACT_SOURCES = "docs.sources"
ARTIFACT_DOCUMENTS = "docs.documents"
ARTIFACT_FINDINGS = "audit.findings"


def get_step_cfg(ctx: RunContext, step_id: str) -> Dict[str, Any]:
    return step_config(ctx.config or {}, step_id)


def resolve_path(ctx: RunContext, value: Any) -> Path:
    return resolve_config_path(str(value), base_dir=(ctx.meta or {}).get("base_dir"))


def require_artifact(ctx: RunContext, key: str, *, step_id: str) -> Any:
    """Lê um artefato obrigatório; ausência vira DocumentsNotFound tipado."""
    if not ctx.has_artifact(key):
        err = documents_not_found(expected_artifact=key, step=step_id, required_by=step_id)
        raise DocumentsNotFound(message=err.message, details=err.details, hint=err.hint)
    return ctx.get_artifact(key)


def failed_result(
    *,
    step_id: str,
    kind: StepKind,
    error: Dict[str, Any],
    metrics: Optional[Dict[str, Any]] = None,
) -> StepResult:
    return StepResult(
        step_id=step_id,
        kind=kind,
        status=StepStatus.FAILED,
        summary=str(error.get("message") or f"{step_id} failed"),
        metrics=dict(metrics or {}),
        warnings=[],
        artifacts={},
        payload={"error": error},
    )


def exception_result(ctx: RunContext, *, step_id: str, kind: StepKind, exc: Exception) -> StepResult:
    """Converte uma exceção capturada pelo Step em StepResult FAILED."""
    ctx.log(
        step_id=step_id,
        level="error",
        message=f"{step_id} failed",
        error_type=exc.__class__.__name__,
        error_message=str(exc),
    )
    error: Dict[str, Any] = {"type": exc.__class__.__name__, "message": str(exc)}
    details = getattr(exc, "details", None)
    if isinstance(details, dict):
        error = DocAuditErrorPayload(
            type=exc.__class__.__name__,
            message=str(exc),
            details=dict(details),
            hint=getattr(exc, "hint", None),
            decision_required=bool(getattr(exc, "decision_required", False)),
        ).to_dict()
    return failed_result(step_id=step_id, kind=kind, error=error)


def findings_result(
    ctx: RunContext,
    *,
    step_id: str,
    kind: StepKind,
    findings: Iterable[Finding],
    summary: str,
    metrics: Optional[Dict[str, Any]] = None,
    payload: Optional[Dict[str, Any]] = None,
    warnings: Optional[List[str]] = None,
) -> StepResult:
    """Publica findings no contexto e devolve StepResult SUCCESS.

    Métricas padrão: `findings`, `errors`, `warnings` (contagens).
    `payload.findings` carrega os findings ordenados em forma de dict.
    """
    ordered = sort_findings(findings)
    ctx.add_findings(step_id=step_id, findings=ordered)

    by_sev = count_by_severity(ordered)
    m = {"findings": len(ordered), "errors": by_sev["error"], "warnings": by_sev["warning"]}
    m.update(metrics or {})

    p = dict(payload or {})
    p["findings"] = [f.to_dict() for f in ordered]

    ctx.log(step_id=step_id, level="info", message=summary, findings=len(ordered))

    return StepResult(
        step_id=step_id,
        kind=kind,
        status=StepStatus.SUCCESS,
        summary=summary,
        metrics=m,
        warnings=list(warnings or []),
        artifacts={},
        payload=p,
    )


def effective_contract(ctx: RunContext) -> Dict[str, Any]:
    """Contrato carregado ou, na ausência de `contract.load`, os defaults v1."""
    contract = ctx.contract or {}
    if contract.get("contract_version"):
        return contract
    return validate_site_contract_v1({"contract_version": "1.0"}).to_dict()

# src/atlas_docaudit/core/pipeline/context.py
"""
Contexto de execução compartilhado do pipeline de auditoria.

Este módulo define o `RunContext`, a estrutura canônica utilizada para
compartilhar estado explícito entre Steps durante uma run do Atlas DocAudit.

O RunContext atua como o único meio permitido de:
    - troca indireta de informações entre Steps (artifact store)
    - registro de logs estruturados de execução
    - coleta de warnings não fatais associados a Steps
    - coleta de findings de auditoria por Step

Invariantes:
    - Artefatos são indexados por chave explícita
    - Logs sempre incluem `run_id`, `step_id` e `timestamp`
    - Warnings e findings são agrupados por `step_id`
    - A ordem de registro de findings é preservada

Limites explícitos:
    - Não executa Steps
    - Não persiste dados automaticamente
    - Não registra eventos no Manifest
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, List
from datetime import timezone

from atlas_docaudit.core.findings import Finding


@dataclass
class RunContext:
    """
    Contexto de execução compartilhado de uma run de auditoria.

    O RunContext consolida:
        - identidade da execução (run_id, created_at)
        - configuração resolvida
        - contrato do site (após `contract.load`)
        - metadados livres (ex.: run_dir, manifest final)
        - artefatos produzidos pelos Steps
        - logs estruturados, warnings e findings

    Decisões arquiteturais:
        - Steps interagem apenas via RunContext
        - Findings são dados de auditoria, não exceções
    """
    run_id: str
    created_at: datetime
    config: Dict[str, Any]
    contract: Dict[str, Any]
    meta: Dict[str, Any] = field(default_factory=dict)

    _artifacts: Dict[str, Any] = field(default_factory=dict, init=False, repr=False)
    events: List[Dict[str, Any]] = field(default_factory=list, init=False)
    warnings: Dict[str, List[str]] = field(default_factory=dict, init=False)
    findings: Dict[str, List[Finding]] = field(default_factory=dict, init=False)

    # -----------------------------
    # Artifact store
    # -----------------------------
    def set_artifact(self, key: str, value: Any) -> None:
        self._artifacts[key] = value

    def has_artifact(self, key: str) -> bool:
        return key in self._artifacts

    def get_artifact(self, key: str) -> Any:
        if key not in self._artifacts:
            raise KeyError(key)
        return self._artifacts[key]

    # -----------------------------
    # Logging & warnings
    # -----------------------------
    def log(self, *, step_id: str, level: str, message: str, **extra: Any) -> None:
        event = {
            "run_id": self.run_id,
            "step_id": step_id,
            "level": level,
            "message": message,
            "timestamp": datetime.now(timezone.utc).isoformat(),
        }
        event.update(extra)
        self.events.append(event)

    def add_warning(self, *, step_id: str, message: str) -> None:
        if step_id not in self.warnings:
            self.warnings[step_id] = []
        self.warnings[step_id].append(message)

    # -----------------------------
    # Findings
    # -----------------------------
    def add_findings(self, *, step_id: str, findings: Iterable[Finding]) -> None:
        bucket = self.findings.setdefault(step_id, [])
        for f in findings:
            if not isinstance(f, Finding):
                raise TypeError(f"expected Finding, got {type(f).__name__}")
            bucket.append(f)

    def findings_for(self, step_id: str) -> List[Finding]:
        return list(self.findings.get(step_id, []))

    def all_findings(self) -> List[Finding]:
        out: List[Finding] = []
        for sid in sorted(self.findings):
            out.extend(self.findings[sid])
        return out

# src/atlas_docaudit/core/pipeline/types.py
"""
Tipos canônicos do pipeline de auditoria do Atlas DocAudit.

Este módulo define as estruturas e enums fundamentais que padronizam
a comunicação entre Steps, Engine e camadas de rastreabilidade.

Componentes principais:
    - StepStatus → enum de estados finais (SUCCESS, SKIPPED, FAILED)
    - StepKind   → enum de classificação semântica de Steps
    - StepResult → estrutura imutável de resultado de execução

Invariantes:
    - Enums possuem valores textuais canônicos
    - StepResult é imutável e seguro contra mutação acidental
    - Tipos não dependem de engine, pipeline ou CLI

Limites explícitos:
    - Não executa Steps
    - Não decide políticas de execução
    - Não contém regras de auditoria de documentos
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List


class StepKind(str, Enum):
    """
    Tipos semânticos de Steps no pipeline de auditoria.

    Tipos definidos:
        - DIAGNOSTIC: inspeções e auditorias sobre o corpus de documentos
        - TRANSFORM: derivação de estruturas (ex.: parsing de front-matter)
        - EXPORT: materialização de relatórios e findings

    Decisões arquiteturais:
        - O tipo é puramente informativo e semântico
        - O Engine não utiliza `StepKind` para decidir execução

    Invariantes:
        - Todo Step possui exatamente um `kind`
        - O valor textual do enum é estável e canônico
    """
    DIAGNOSTIC = "diagnostic"
    TRANSFORM = "transform"
    EXPORT = "export"


class StepStatus(str, Enum):
    """
    Estados finais possíveis da execução de um Step.

    Estados definidos:
        - SUCCESS: execução concluída (mesmo que findings tenham sido produzidos)
        - SKIPPED: execução pulada por decisão explícita (config ou dependência)
        - FAILED: execução interrompida por erro

    Invariantes:
        - Estados intermediários (ex.: running) não pertencem a este enum
        - Findings de conteúdo nunca transformam um Step em FAILED
    """
    SUCCESS = "success"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class StepResult:
    """
    Resultado imutável da execução de um Step.

    Campos:
        - step_id: identificador único do Step
        - kind: tipo semântico do Step
        - status: estado final da execução do Step
        - summary: resumo textual da execução
        - metrics: métricas numéricas produzidas pelo Step
        - warnings: avisos não fatais gerados durante a execução
        - artifacts: referências a artefatos produzidos (ex.: paths relativos)
        - payload: dados adicionais associados ao resultado (ex.: findings)

    Invariantes:
        - Uma instância de StepResult nunca é alterada após criada
        - `step_id`, `kind` e `status` estão sempre presentes
    """
    step_id: str
    kind: StepKind
    status: StepStatus
    summary: str
    metrics: Dict[str, Any] = field(default_factory=dict)
    warnings: List[str] = field(default_factory=list)
    artifacts: Dict[str, Any] = field(default_factory=dict)
    payload: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        """Representação serializável (valores de enum como texto)."""
        return {
            "step_id": self.step_id,
            "kind": self.kind.value if isinstance(self.kind, StepKind) else str(self.kind),
            "status": self.status.value if isinstance(self.status, StepStatus) else str(self.status),
            "summary": self.summary,
            "metrics": dict(self.metrics),
            "warnings": list(self.warnings),
            "artifacts": dict(self.artifacts),
            "payload": dict(self.payload),
        }

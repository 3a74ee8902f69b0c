# src/atlas_docaudit/core/pipeline/registry.py
"""
Registro estrutural de Steps do pipeline de auditoria.

O `StepRegistry` valida a integridade estrutural do pipeline antes de
qualquer planejamento ou execução:
    - cada Step possui um identificador válido
    - não existem identificadores duplicados
    - a ordem de declaração dos Steps é preservada explicitamente

Limites explícitos:
    - Não planeja execução (não é DAG planner)
    - Não executa pipeline
    - Não interage com RunContext ou Manifest
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List

from .step import Step


class DuplicateStepIdError(ValueError):
    """
    Exceção levantada quando ocorre duplicidade de identificador de Step.

    A duplicidade é tratada como erro fatal de configuração e é detectada
    no momento do registro, antes da execução.
    """


@dataclass
class StepRegistry:
    """
    Registro canônico de Steps para validação estrutural pré-execução.

    Invariantes:
        - Cada `step.id` é único no registry
        - A lista de Steps reflete exatamente a ordem de registro
    """

    _steps: Dict[str, Step] = field(default_factory=dict, init=False, repr=False)
    _order: List[str] = field(default_factory=list, init=False, repr=False)

    def add(self, step: Step) -> None:
        step_id = getattr(step, "id", None)
        if not isinstance(step_id, str) or not step_id.strip():
            raise ValueError("step.id must be a non-empty string")

        if step_id in self._steps:
            raise DuplicateStepIdError(f"Duplicate step id: {step_id}")

        self._steps[step_id] = step
        self._order.append(step_id)

    def get(self, step_id: str) -> Step:
        return self._steps[step_id]

    def ids(self) -> List[str]:
        return list(self._order)

    def list(self) -> List[Step]:
        return [self._steps[sid] for sid in self._order]

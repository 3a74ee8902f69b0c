# src/atlas_docaudit/core/engine/planner.py
"""
Planejador de execução do pipeline de auditoria (DAG).

Valida a estrutura do pipeline e produz uma ordem de execução topológica
determinística dos Steps declarados.

Decisões arquiteturais:
    - Ordenação topológica determinística (Kahn com heap)
    - Empates são resolvidos por ordem lexicográfica de `step.id`
    - Erros estruturais são tratados como falhas fatais

Invariantes:
    - Nenhum Step é executado antes de suas dependências
    - Todos os Steps aparecem exatamente uma vez
    - A mesma definição de pipeline produz sempre a mesma ordem
"""

from __future__ import annotations

import heapq
from typing import Dict, Iterable, List, Set

from atlas_docaudit.core.pipeline.step import Step


class UnknownDependencyError(ValueError):
    """Um Step declarou em `depends_on` um id que não está no pipeline."""


class CycleDetectedError(ValueError):
    """
    O grafo de dependências contém um ciclo.

    Nenhuma execução parcial é permitida em presença de ciclos; os Steps
    envolvidos são listados na mensagem para diagnóstico.
    """


def plan_execution(steps: Iterable[Step]) -> List[Step]:
    """
    Valida e produz uma ordem de execução topológica determinística.

    Args:
        steps: Coleção de Steps declarativos do pipeline.

    Returns:
        Lista de Steps em ordem de execução.

    Raises:
        ValueError: Se algum Step possuir `id` inválido ou duplicado.
        UnknownDependencyError: Se um Step declarar dependência inexistente.
        CycleDetectedError: Se houver ciclo no grafo de dependências.
    """
    by_id: Dict[str, Step] = {}
    for s in steps:
        sid = getattr(s, "id", None)
        if not isinstance(sid, str) or not sid.strip():
            raise ValueError("step.id must be a non-empty string")
        if sid in by_id:
            raise ValueError(f"Duplicate step id: {sid}")
        by_id[sid] = s

    pending: Dict[str, int] = {}
    children: Dict[str, Set[str]] = {sid: set() for sid in by_id}
    for sid, s in by_id.items():
        deps = set(getattr(s, "depends_on", []) or [])
        for dep in sorted(deps):
            if dep not in by_id:
                raise UnknownDependencyError(f"Step '{sid}' depends on unknown step '{dep}'")
            children[dep].add(sid)
        pending[sid] = len(deps)

    ready: List[str] = [sid for sid, n in pending.items() if n == 0]
    heapq.heapify(ready)

    order: List[str] = []
    while ready:
        sid = heapq.heappop(ready)
        order.append(sid)
        for child in children[sid]:
            pending[child] -= 1
            if pending[child] == 0:
                heapq.heappush(ready, child)

    if len(order) != len(by_id):
        stuck = sorted(sid for sid, n in pending.items() if n > 0)
        raise CycleDetectedError(f"Cycle detected in step dependency graph: {stuck}")

    return [by_id[sid] for sid in order]

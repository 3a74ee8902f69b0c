"""Execução direta (sem Engine) de uma sequência de Steps em testes."""

from __future__ import annotations

from typing import Any, Dict

from atlas_docaudit.core.pipeline.types import StepResult, StepStatus


def run_steps(ctx: Any, *steps: Any) -> Dict[str, StepResult]:
    """Roda `steps` em ordem; falha o teste se algum pré-requisito falhar."""
    results: Dict[str, StepResult] = {}
    for step in steps[:-1]:
        sr = step.run(ctx)
        assert sr.status == StepStatus.SUCCESS, f"{step.id} failed: {sr.summary}"
        results[step.id] = sr
    last = steps[-1]
    results[last.id] = last.run(ctx)
    return results


def rules_of(result: StepResult) -> list:
    return [f["rule"] for f in result.payload.get("findings", [])]

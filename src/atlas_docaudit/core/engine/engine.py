# src/atlas_docaudit/core/engine/engine.py
"""
Engine de execução do pipeline do Atlas DocAudit.

Regras:
- O Engine **não** muta instâncias de StepResult in-place (frozen dataclass);
  qualquer enriquecimento cria uma nova instância (dataclasses.replace).
- Steps desabilitados por config (`steps.<id>.enabled: false`) → SKIPPED.
- Steps cuja dependência falhou (ou foi pulada por falha anterior) → SKIPPED.
- Exceções que escapam de um Step viram DocAuditErrorPayload em
  `payload["error"]` (sem stack trace cru para o operador).
- Warnings do RunContext e contagens de findings são incorporados ao
  StepResult; `artifacts.payload_meta` carrega bytes + sha256 do payload.
- `engine.fail_fast` (default False) interrompe a run no primeiro FAILED.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence, Tuple

from atlas_docaudit.core.config.hashing import sha256_hex
from atlas_docaudit.core.errors import (
    DocAuditErrorPayload,
    engine_configuration_error,
    engine_execution_error,
)
from atlas_docaudit.core.exceptions import DocAuditException
from atlas_docaudit.core.findings import count_by_severity
from atlas_docaudit.core.pipeline.context import RunContext
from atlas_docaudit.core.pipeline.step import Step
from atlas_docaudit.core.pipeline.types import StepKind, StepResult, StepStatus

from .planner import plan_execution


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass(frozen=True)
class RunResult:
    """Resultado agregado de uma execução de pipeline (RunResult v1).

    `steps` preserva a ordem de execução; `timings` guarda (início, fim)
    reais de cada Step executado ou pulado.
    """

    steps: Dict[str, StepResult] = field(default_factory=dict)
    timings: Dict[str, Tuple[datetime, datetime]] = field(default_factory=dict)

    @property
    def failed(self) -> List[str]:
        return [sid for sid, r in self.steps.items() if r.status == StepStatus.FAILED]


class Engine:
    """Engine canônico do Atlas DocAudit (planner + executor)."""

    def __init__(self, *, steps: Sequence[Step], ctx: RunContext, clock=_utcnow):
        self.steps: List[Step] = list(steps)
        self.ctx: RunContext = ctx
        self._clock = clock

    def _is_enabled(self, step_id: str) -> bool:
        steps_cfg = (self.ctx.config or {}).get("steps", {}) or {}
        step_cfg = steps_cfg.get(step_id, {}) or {}
        return bool(step_cfg.get("enabled", True))

    def _fail_fast(self) -> bool:
        engine_cfg = (self.ctx.config or {}).get("engine", {}) or {}
        return bool(engine_cfg.get("fail_fast", False))

    def _exception_to_error(self, step_id: str, exc: Exception) -> DocAuditErrorPayload:
        if isinstance(exc, DocAuditException):
            return DocAuditErrorPayload(
                type=exc.__class__.__name__,
                message=str(exc) or "Erro de execução",
                details=dict(exc.details or {}),
                hint=exc.hint,
                decision_required=bool(exc.decision_required),
            )
        return engine_execution_error(
            step=step_id,
            exc_type=exc.__class__.__name__,
            exc_message=str(exc) or None,
        )

    def _payload_meta(self, payload: Any) -> Dict[str, Any]:
        raw = json.dumps(payload, ensure_ascii=False, sort_keys=True, default=str).encode("utf-8")
        return {"payload_bytes": len(raw), "payload_sha256": sha256_hex(raw)}

    def _enrich(self, *, step: Step, result: StepResult) -> StepResult:
        sid = step.id

        merged_w: List[str] = []
        for msg in list(result.warnings or []) + list(self.ctx.warnings.get(sid, [])):
            if msg not in merged_w:
                merged_w.append(msg)

        metrics = dict(result.metrics or {})
        findings = self.ctx.findings_for(sid)
        if findings:
            by_sev = count_by_severity(findings)
            metrics.setdefault("findings", len(findings))
            metrics.setdefault("errors", by_sev["error"])
            metrics.setdefault("warnings", by_sev["warning"])

        payload = dict(result.payload or {})
        artifacts = dict(result.artifacts or {})
        artifacts.setdefault("payload_meta", self._payload_meta(payload))

        return replace(
            result,
            step_id=sid,
            kind=result.kind or getattr(step, "kind", StepKind.DIAGNOSTIC),
            warnings=merged_w,
            metrics=metrics,
            payload=payload,
            artifacts=artifacts,
        )

    def _mk_result(
        self,
        *,
        step: Step,
        status: StepStatus,
        summary: str,
        payload: Dict[str, Any] | None = None,
    ) -> StepResult:
        r = StepResult(
            step_id=step.id,
            kind=getattr(step, "kind", StepKind.DIAGNOSTIC) or StepKind.DIAGNOSTIC,
            status=status,
            summary=summary,
            payload=dict(payload or {}),
        )
        return self._enrich(step=step, result=r)

    def run(self) -> RunResult:
        ordered = plan_execution(self.steps)

        results: Dict[str, StepResult] = {}
        timings: Dict[str, Tuple[datetime, datetime]] = {}

        for step in ordered:
            sid = step.id
            started = self._clock()

            if not self._is_enabled(sid):
                results[sid] = self._mk_result(step=step, status=StepStatus.SKIPPED, summary="skipped by config")
                timings[sid] = (started, self._clock())
                self.ctx.log(step_id=sid, level="info", message="step skipped by config")
                continue

            deps = list(getattr(step, "depends_on", []) or [])
            # desabilitado por config não bloqueia; falha (direta ou propagada) bloqueia
            blocked = [
                d for d in deps
                if d in results
                and (
                    results[d].status == StepStatus.FAILED
                    or (results[d].status == StepStatus.SKIPPED and "blocked_by" in results[d].payload)
                )
            ]
            if blocked:
                results[sid] = self._mk_result(
                    step=step,
                    status=StepStatus.SKIPPED,
                    summary="skipped due to failed dependency",
                    payload={"blocked_by": blocked},
                )
                timings[sid] = (started, self._clock())
                self.ctx.log(step_id=sid, level="warning", message="step skipped due to dependency", blocked_by=blocked)
                continue

            try:
                step_result = step.run(self.ctx)
                if not isinstance(step_result, StepResult):
                    err = engine_configuration_error(
                        message="Step retornou tipo inválido",
                        details={
                            "step_id": sid,
                            "expected": "StepResult",
                            "received": type(step_result).__name__,
                        },
                        hint="Ajuste o Step para retornar StepResult",
                    )
                    results[sid] = self._mk_result(
                        step=step, status=StepStatus.FAILED, summary=err.message, payload={"error": err.to_dict()}
                    )
                else:
                    results[sid] = self._enrich(step=step, result=step_result)

            except Exception as e:
                err = self._exception_to_error(sid, e)
                self.ctx.log(
                    step_id=sid,
                    level="error",
                    message="step raised",
                    error_type=e.__class__.__name__,
                    error_message=str(e) or "error",
                )
                results[sid] = self._mk_result(
                    step=step, status=StepStatus.FAILED, summary=err.message, payload={"error": err.to_dict()}
                )

            timings[sid] = (started, self._clock())

            if results[sid].status == StepStatus.FAILED and self._fail_fast():
                break

        return RunResult(steps=results, timings=timings)

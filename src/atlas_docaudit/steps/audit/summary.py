"""Step canônico: audit.summary (v1).

Consolida os findings publicados pelos Steps de auditoria:
- totais por severidade, por regra, por Step e por arquivo (pandas)
- `passed`: nenhuma finding de severidade `error`
- publica `audit.findings` (lista ordenada de Finding)

Payload:
    summary:
      passed: bool
      total: int
      by_severity: {error, warning, info}
      by_rule: {RULE: count}
      by_step: {step_id: count}
      top_files: [{path, findings, errors}]
    findings: [...]

Config (`steps.audit.summary`):
    top_files: int (default 10)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List

import pandas as pd

from atlas_docaudit.core.findings import Severity, sort_findings
from atlas_docaudit.core.pipeline.context import RunContext
from atlas_docaudit.core.pipeline.step import Step
from atlas_docaudit.core.pipeline.types import StepKind, StepResult, StepStatus
from atlas_docaudit.steps.common import ARTIFACT_FINDINGS, exception_result, get_step_cfg

AUDIT_STEP_IDS = [
    "parse.front_matter",
    "audit.encoding",
    "audit.diff_markers",
    "audit.front_matter",
    "audit.templates",
    "audit.links",
    "audit.translations",
]

_COLUMNS = ["step_id", "rule", "severity", "path", "line"]


def findings_frame(findings_by_step: Dict[str, List[Any]]) -> pd.DataFrame:
    rows = [
        {"step_id": sid, "rule": f.rule, "severity": f.severity.value, "path": f.path, "line": f.line}
        for sid in sorted(findings_by_step)
        for f in findings_by_step[sid]
    ]
    return pd.DataFrame(rows, columns=_COLUMNS)


def summarize(df: pd.DataFrame, *, top_files: int = 10) -> Dict[str, Any]:
    by_severity = {s.value: 0 for s in Severity}
    by_severity.update({str(k): int(v) for k, v in df["severity"].value_counts().items()})

    by_rule = {str(k): int(v) for k, v in df.groupby("rule").size().sort_index().items()}
    by_step = {str(k): int(v) for k, v in df.groupby("step_id").size().sort_index().items()}

    top: List[Dict[str, Any]] = []
    if not df.empty:
        per_file = (
            df.assign(is_error=(df["severity"] == Severity.ERROR.value).astype(int))
            .groupby("path")
            .agg(findings=("rule", "size"), errors=("is_error", "sum"))
            .reset_index()
            .sort_values(["findings", "errors", "path"], ascending=[False, False, True])
            .head(top_files)
        )
        top = [
            {"path": str(r.path), "findings": int(r.findings), "errors": int(r.errors)}
            for r in per_file.itertuples(index=False)
        ]

    return {
        "passed": by_severity[Severity.ERROR.value] == 0,
        "total": int(len(df)),
        "files_with_findings": int(df["path"].nunique()),
        "by_severity": by_severity,
        "by_rule": by_rule,
        "by_step": by_step,
        "top_files": top,
    }


@dataclass
class AuditSummaryStep(Step):
    """Consolidação determinística dos findings da run."""

    id: str = "audit.summary"
    kind: StepKind = StepKind.DIAGNOSTIC
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = list(AUDIT_STEP_IDS)

    def run(self, ctx: RunContext) -> StepResult:
        try:
            cfg = get_step_cfg(ctx, self.id)
            top_files = int(cfg.get("top_files", 10))

            by_step = {sid: ctx.findings_for(sid) for sid in self.depends_on if ctx.findings_for(sid)}
            ordered = sort_findings(f for fs in by_step.values() for f in fs)
            ctx.set_artifact(ARTIFACT_FINDINGS, ordered)

            summary = summarize(findings_frame(by_step), top_files=top_files)
            verdict = "passed" if summary["passed"] else "failed"
            ctx.log(step_id=self.id, level="info", message=f"audit {verdict}", total=summary["total"])

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary=f"audit {verdict}: {summary['total']} findings",
                metrics={
                    "findings": summary["total"],
                    "errors": summary["by_severity"]["error"],
                    "warnings": summary["by_severity"]["warning"],
                    "files_with_findings": summary["files_with_findings"],
                },
                warnings=[],
                artifacts={},
                payload={
                    "summary": summary,
                    "findings": [f.to_dict() for f in ordered],
                },
            )
        except Exception as e:
            return exception_result(ctx, step_id=self.id, kind=self.kind, exc=e)

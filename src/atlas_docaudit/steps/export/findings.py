"""
Step canônico: export.findings (v1)

Materializa os findings consolidados a partir do Manifest final
(payload de `audit.summary`):
- `artifacts/findings.json`: summary + findings ordenados (JSON determinístico)
- `artifacts/findings.csv`: uma linha por finding (pandas)

Não faz:
- reauditar documentos
- filtrar ou reclassificar findings
"""

from __future__ import annotations

import json
from dataclasses import dataclass
from typing import Any, Dict, List

import pandas as pd

from atlas_docaudit.core.pipeline.context import RunContext
from atlas_docaudit.core.pipeline.step import Step
from atlas_docaudit.core.pipeline.types import StepKind, StepResult, StepStatus
from atlas_docaudit.report.report_md import summary_payload
from atlas_docaudit.steps.common import exception_result, get_step_cfg
from atlas_docaudit.steps.export.report_md import get_run_dir, require_manifest

CSV_COLUMNS = ["path", "line", "severity", "rule", "message", "details"]


def findings_table(findings: List[Dict[str, Any]]) -> pd.DataFrame:
    rows = [
        {
            "path": f.get("path"),
            "line": f.get("line"),
            "severity": f.get("severity"),
            "rule": f.get("rule"),
            "message": f.get("message"),
            "details": json.dumps(f.get("details") or {}, ensure_ascii=False, sort_keys=True),
        }
        for f in findings
    ]
    df = pd.DataFrame(rows, columns=CSV_COLUMNS)
    # linhas ausentes continuam vazias no CSV (sem `.0` de float)
    df["line"] = df["line"].astype("Int64")
    return df


@dataclass
class ExportFindingsStep(Step):
    """Exporta findings.json e findings.csv a partir do Manifest (v1)."""

    id: str = "export.findings"
    kind: StepKind = StepKind.EXPORT
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            self.depends_on = []

    def run(self, ctx: RunContext) -> StepResult:
        try:
            cfg = get_step_cfg(ctx, self.id)
            json_name = cfg.get("json_filename", "findings.json")
            csv_name = cfg.get("csv_filename", "findings.csv")

            manifest = require_manifest(ctx, step_id=self.id)
            payload = summary_payload(manifest)
            if not payload:
                raise ValueError("Manifest has no `audit.summary` payload to export")

            findings = list(payload.get("findings") or [])
            summary = dict(payload.get("summary") or {})

            out_dir = get_run_dir(ctx) / "artifacts"
            out_dir.mkdir(parents=True, exist_ok=True)

            doc = {
                "run_id": (manifest.get("run") or {}).get("run_id"),
                "summary": summary,
                "findings": findings,
            }
            (out_dir / json_name).write_text(
                json.dumps(doc, ensure_ascii=False, indent=2, sort_keys=True) + "\n", encoding="utf-8"
            )
            findings_table(findings).to_csv(out_dir / csv_name, index=False, encoding="utf-8")

            rel_json, rel_csv = f"artifacts/{json_name}", f"artifacts/{csv_name}"
            ctx.set_artifact(self.id, {"findings_json": rel_json, "findings_csv": rel_csv})
            ctx.log(step_id=self.id, level="info", message="export.findings completed", findings=len(findings))

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary=f"{len(findings)} findings exported",
                metrics={"findings": len(findings)},
                warnings=[],
                artifacts={"findings_json": rel_json, "findings_csv": rel_csv},
                payload={"findings_json_path": rel_json, "findings_csv_path": rel_csv},
            )
        except Exception as e:
            return exception_result(ctx, step_id=self.id, kind=self.kind, exc=e)


__all__ = ["ExportFindingsStep"]

"""
Step canônico: export.report_md (v1)

Gera `report.md` de forma determinística e auditável,
usando exclusivamente fontes de verdade:
- Manifest final (meta["manifest"])

Não faz:
- reauditar documentos
- recalcular contagens
- acessar artefatos fora do Manifest
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List

from atlas_docaudit.core.errors import manifest_not_found
from atlas_docaudit.core.exceptions import ManifestNotFound
from atlas_docaudit.core.pipeline.context import RunContext
from atlas_docaudit.core.pipeline.step import Step
from atlas_docaudit.core.pipeline.types import StepKind, StepResult, StepStatus
from atlas_docaudit.report.report_md import generate_report_md
from atlas_docaudit.steps.common import exception_result, get_step_cfg


def get_run_dir(ctx: RunContext) -> Path:
    md = ctx.meta if isinstance(ctx.meta, dict) else {}
    run_dir = md.get("run_dir") or md.get("tmp_path")
    if run_dir is None:
        raise ValueError("Missing required meta: run_dir (or tmp_path)")
    return Path(str(run_dir))


def require_manifest(ctx: RunContext, *, step_id: str) -> Dict[str, Any]:
    md = ctx.meta if isinstance(ctx.meta, dict) else {}
    manifest = md.get("manifest")
    if not isinstance(manifest, dict) or not manifest:
        err = manifest_not_found(step=step_id, required_by=step_id)
        raise ManifestNotFound(message=err.message, details=err.details, hint=err.hint)
    return manifest


@dataclass
class ExportReportMdStep(Step):
    """Gera `report.md` a partir do Manifest (v1)."""

    id: str = "export.report_md"
    kind: StepKind = StepKind.EXPORT
    depends_on: List[str] = None  # type: ignore[assignment]

    def __post_init__(self) -> None:
        if self.depends_on is None:
            # roda depois do Manifest existir; a ordem é dada pelo runner
            self.depends_on = []

    def run(self, ctx: RunContext) -> StepResult:
        try:
            cfg = get_step_cfg(ctx, self.id)
            filename = cfg.get("filename", "report.md")
            if not isinstance(filename, str) or not filename.strip():
                raise ValueError("Invalid config: export.report_md.filename must be a non-empty string")
            max_findings = int(cfg.get("max_findings", 200))

            run_dir = get_run_dir(ctx)
            out_path = run_dir / "artifacts" / filename
            rel_path = f"artifacts/{filename}"

            manifest = require_manifest(ctx, step_id=self.id)

            content = generate_report_md(manifest, max_findings=max_findings)
            out_path.parent.mkdir(parents=True, exist_ok=True)
            out_path.write_text(content, encoding="utf-8")

            payload = {"report_md_path": rel_path, "bytes": out_path.stat().st_size}

            ctx.set_artifact(self.id, payload)
            ctx.log(step_id=self.id, level="info", message="export.report_md completed", report_md_path=rel_path, bytes=payload["bytes"])

            return StepResult(
                step_id=self.id,
                kind=self.kind,
                status=StepStatus.SUCCESS,
                summary="export.report_md completed",
                metrics={},
                warnings=[],
                artifacts={"report_md": rel_path},
                payload=payload,
            )

        except Exception as e:
            return exception_result(ctx, step_id=self.id, kind=self.kind, exc=e)


__all__ = ["ExportReportMdStep"]

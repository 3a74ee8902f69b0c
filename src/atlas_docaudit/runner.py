"""
Runner canônico do Atlas DocAudit.

Monta uma run completa usando apenas as APIs públicas do core:
    1. RunContext a partir da config resolvida
    2. StepRegistry com os Steps de auditoria (DAG determinístico)
    3. Engine → RunResult
    4. Manifest v1 explícito a partir do RunResult (timestamps derivados de
       `ctx.created_at`, nunca do relógio)
    5. exports baseados em Manifest (report.md, findings.json/csv)
    6. persistência de `manifest.json` no run_dir

Códigos de saída:
    0 → nenhum Step falhou e nenhuma finding `error`
    1 → há findings `error`
    2 → algum Step falhou
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Union

from atlas_docaudit import __version__
from atlas_docaudit.core.config.hashing import compute_config_hash
from atlas_docaudit.core.contract.hashing import compute_contract_hash
from atlas_docaudit.core.engine.engine import Engine, RunResult
from atlas_docaudit.core.findings import Severity
from atlas_docaudit.core.pipeline.context import RunContext
from atlas_docaudit.core.pipeline.registry import StepRegistry
from atlas_docaudit.core.pipeline.types import StepResult, StepStatus
from atlas_docaudit.core.traceability.manifest import (
    DocAuditManifest,
    create_manifest,
    save_manifest,
    step_finished,
    step_started,
)
from atlas_docaudit.steps.audit.diff_markers import AuditDiffMarkersStep
from atlas_docaudit.steps.audit.encoding import AuditEncodingStep
from atlas_docaudit.steps.audit.front_matter import AuditFrontMatterStep
from atlas_docaudit.steps.audit.links import AuditLinksStep
from atlas_docaudit.steps.audit.summary import AuditSummaryStep
from atlas_docaudit.steps.audit.templates import AuditTemplatesStep
from atlas_docaudit.steps.audit.translations import AuditTranslationsStep
from atlas_docaudit.steps.contract.load import ContractLoadStep
from atlas_docaudit.steps.export.findings import ExportFindingsStep
from atlas_docaudit.steps.export.report_md import ExportReportMdStep
from atlas_docaudit.steps.ingest.scan import IngestScanStep
from atlas_docaudit.steps.parse.front_matter import ParseFrontMatterStep

EXIT_OK = 0
EXIT_FINDINGS = 1
EXIT_STEP_FAILED = 2

MANIFEST_FILENAME = "manifest.json"

Clock = Callable[[int], datetime]


@dataclass
class AuditRun:
    ctx: RunContext
    run_result: RunResult
    manifest: DocAuditManifest
    exit_code: int
    exports: Dict[str, StepResult]


def build_registry() -> StepRegistry:
    """Registry da execução principal (Engine).

    Não inclui export.report_md / export.findings: ambos dependem do Manifest
    final, que só existe depois do RunResult.
    """
    registry = StepRegistry()
    registry.add(ContractLoadStep())
    registry.add(IngestScanStep())
    registry.add(AuditEncodingStep())
    registry.add(AuditDiffMarkersStep())
    registry.add(ParseFrontMatterStep())
    registry.add(AuditFrontMatterStep())
    registry.add(AuditTemplatesStep())
    registry.add(AuditLinksStep())
    registry.add(AuditTranslationsStep())
    registry.add(AuditSummaryStep())
    return registry


def export_steps() -> List[Any]:
    return [ExportReportMdStep(), ExportFindingsStep()]


def _default_clock(ctx: RunContext) -> Clock:
    base = ctx.created_at

    def _at(tick: int) -> datetime:
        return base + timedelta(seconds=tick)

    return _at


def _record(manifest: DocAuditManifest, results: Dict[str, StepResult], clock: Clock, start_tick: int) -> int:
    tick = start_tick
    for sid, sr in results.items():
        step_started(manifest, step_id=sid, kind=sr.kind.value, ts=clock(tick))
        step_finished(manifest, step_id=sid, ts=clock(tick + 1), result=sr)
        tick += 2
    return tick


def build_manifest(ctx: RunContext, run_result: RunResult, *, clock: Optional[Clock] = None) -> DocAuditManifest:
    """Cria o Manifest v1 determinístico a partir do RunResult.

    A ordem dos Steps é a ordem de execução (inserção em `run_result.steps`).
    """
    clock = clock or _default_clock(ctx)

    scan = run_result.steps.get("ingest.scan")
    corpus_hash = scan.payload.get("corpus_hash") if scan is not None else None

    manifest = create_manifest(
        run_id=ctx.run_id,
        started_at=ctx.created_at,
        docaudit_version=__version__,
        config_hash=compute_config_hash(ctx.config),
        contract_hash=compute_contract_hash(ctx.contract or {}),
        corpus_hash=corpus_hash,
    )
    _record(manifest, run_result.steps, clock, 0)
    return manifest


def compute_exit_code(ctx: RunContext, results: List[StepResult]) -> int:
    if any(r.status == StepStatus.FAILED for r in results):
        return EXIT_STEP_FAILED
    if any(f.severity == Severity.ERROR for f in ctx.all_findings()):
        return EXIT_FINDINGS
    return EXIT_OK


def default_run_id(created_at: datetime) -> str:
    return "run-" + created_at.astimezone(timezone.utc).strftime("%Y%m%dT%H%M%SZ")


def run_audit(
    config: Dict[str, Any],
    *,
    run_dir: Union[str, Path],
    run_id: Optional[str] = None,
    created_at: Optional[datetime] = None,
    base_dir: Optional[Union[str, Path]] = None,
) -> AuditRun:
    """Executa a auditoria completa e persiste manifest.json + exports em `run_dir`.

    Caminhos relativos da config (`docs.root`, `contract.path`) são resolvidos
    a partir de `base_dir` (default: diretório corrente).
    """
    created_at = created_at or datetime.now(timezone.utc)
    run_dir = Path(run_dir)
    run_dir.mkdir(parents=True, exist_ok=True)

    ctx = RunContext(
        run_id=run_id or default_run_id(created_at),
        created_at=created_at,
        config=config,
        contract={},
        meta={
            "run_dir": str(run_dir),
            "base_dir": str(Path(base_dir) if base_dir is not None else Path.cwd()),
        },
    )

    registry = build_registry()
    run_result = Engine(steps=registry.list(), ctx=ctx).run()

    clock = _default_clock(ctx)
    manifest = build_manifest(ctx, run_result, clock=clock)
    ctx.meta["manifest"] = manifest.to_dict()

    exports: Dict[str, StepResult] = {}
    for step in export_steps():
        exports[step.id] = step.run(ctx)
    _record(manifest, exports, clock, 2 * len(run_result.steps))

    save_manifest(manifest, run_dir / MANIFEST_FILENAME)

    exit_code = compute_exit_code(ctx, list(run_result.steps.values()) + list(exports.values()))
    ctx.log(step_id="runner", level="info", message="audit finished", exit_code=exit_code)

    return AuditRun(ctx=ctx, run_result=run_result, manifest=manifest, exit_code=exit_code, exports=exports)

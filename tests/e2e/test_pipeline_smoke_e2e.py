"""
Smoke E2E — Atlas DocAudit

Valida o core de ponta a ponta:
- site de fixture versionado
- contrato mínimo
- config mínima
- steps dummy (scan/headings/export)
- Engine DAG
- geração e round-trip do Manifest v1
"""

from __future__ import annotations

import json
from datetime import datetime, timedelta, timezone
from pathlib import Path

from atlas_docaudit.core.config.hashing import compute_config_hash
from atlas_docaudit.core.config.loader import load_config
from atlas_docaudit.core.contract.hashing import compute_contract_hash
from atlas_docaudit.core.contract.loader import load_contract
from atlas_docaudit.core.engine.engine import Engine
from atlas_docaudit.core.pipeline.context import RunContext
from atlas_docaudit.core.pipeline.registry import StepRegistry
from atlas_docaudit.core.traceability.manifest import (
    create_manifest,
    load_manifest,
    save_manifest,
    step_finished,
    step_started,
)

from tests.fixtures.steps.dummy_export import DummyExportStep
from tests.fixtures.steps.dummy_headings import DummyHeadingsStep
from tests.fixtures.steps.dummy_scan import DummyScanStep

STEP_IDS = ["dummy.scan", "dummy.headings", "dummy.export"]


def test_pipeline_smoke_e2e(tmp_path: Path) -> None:
    fixtures_dir = Path(__file__).parents[1] / "fixtures"
    site_dir = fixtures_dir / "site"
    contract_path = fixtures_dir / "config" / "site.contract.yaml"
    config_path = fixtures_dir / "config" / "docaudit.yaml"

    assert site_dir.is_dir()
    assert contract_path.exists()
    assert config_path.exists()

    config = load_config(defaults_path=str(config_path), local_path=None)
    contract = load_contract(path=contract_path)

    created_at = datetime(2026, 1, 16, 0, 0, 0, tzinfo=timezone.utc)
    ctx = RunContext(
        run_id="smoke-e2e",
        created_at=created_at,
        config=config,
        contract=contract,
        meta={"docs_root": site_dir, "tmp_path": tmp_path},
    )

    registry = StepRegistry()
    registry.add(DummyScanStep())
    registry.add(DummyHeadingsStep())
    registry.add(DummyExportStep())

    run_result = Engine(steps=registry.list(), ctx=ctx).run()

    assert list(run_result.steps.keys()) == STEP_IDS
    assert run_result.failed == []

    manifest = create_manifest(
        run_id=ctx.run_id,
        started_at=ctx.created_at,
        docaudit_version="0.1.0",
        config_hash=compute_config_hash(config),
        contract_hash=compute_contract_hash(contract),
    )

    for i, sid in enumerate(STEP_IDS):
        sr = run_result.steps[sid]
        step_started(manifest, step_id=sid, kind=sr.kind.value, ts=created_at + timedelta(seconds=2 * i))
        step_finished(manifest, step_id=sid, ts=created_at + timedelta(seconds=2 * i + 1), result=sr)

    manifest_path = tmp_path / "manifest.json"
    save_manifest(manifest, manifest_path)
    assert manifest_path.exists()

    loaded = load_manifest(manifest_path).to_dict()
    assert set(loaded["steps"].keys()) == set(STEP_IDS)
    assert len(loaded["events"]) == 6

    export_file = tmp_path / "headings.json"
    assert export_file.exists()
    counts = json.loads(export_file.read_text(encoding="utf-8"))
    assert counts["documentation/programming-guide.md"] >= 3
    assert set(counts) == {
        "documentation/programming-guide.md",
        "documentation/sdks/python.md",
        "index.md",
        "zh/documentation/sdks/python.md",
    }

# tests/core/pipeline/test_run_context.py
"""
Testes do RunContext: artifact store, log estruturado, warnings e findings.

Invariantes:
    - Artefatos são indexados por chave explícita
    - Logs sempre incluem `run_id`, `step_id` e `timestamp`
    - Findings são agrupados por `step_id`, preservando a ordem de registro
"""

from datetime import datetime, timezone

import pytest

from atlas_docaudit.core.findings import Finding, Severity, make_finding
from atlas_docaudit.core.pipeline.context import RunContext


def test_artifact_set_get(dummy_ctx):
    dummy_ctx.set_artifact("docs.root", "/tmp/site")
    assert dummy_ctx.has_artifact("docs.root")
    assert dummy_ctx.get_artifact("docs.root") == "/tmp/site"


def test_artifact_missing_key_raises(dummy_ctx):
    with pytest.raises(KeyError):
        dummy_ctx.get_artifact("docs.documents")


def test_context_isolation(dummy_config, dummy_contract):
    created = datetime(2026, 1, 1, tzinfo=timezone.utc)
    a = RunContext(run_id="a", created_at=created, config=dummy_config, contract=dummy_contract)
    b = RunContext(run_id="b", created_at=created, config=dummy_config, contract=dummy_contract)

    a.set_artifact("x", 1)
    a.add_warning(step_id="s", message="w")
    assert not b.has_artifact("x")
    assert b.warnings == {}


def test_structured_log_event(dummy_ctx):
    dummy_ctx.log(step_id="ingest.scan", level="info", message="corpus scanned", files=3)

    ev = dummy_ctx.events[-1]
    assert ev["run_id"] == "run-test-001"
    assert ev["step_id"] == "ingest.scan"
    assert ev["level"] == "info"
    assert ev["message"] == "corpus scanned"
    assert ev["files"] == 3
    assert "timestamp" in ev


def test_warning_collection(dummy_ctx):
    dummy_ctx.add_warning(step_id="ingest.scan", message="no files matched")
    dummy_ctx.add_warning(step_id="ingest.scan", message="second")
    assert dummy_ctx.warnings["ingest.scan"] == ["no files matched", "second"]


def test_findings_grouped_by_step(dummy_ctx):
    f1 = make_finding("LINK_BROKEN_PAGE", path="b.md", line=3, message="broken")
    f2 = make_finding("ENCODING_BOM", path="a.md", line=1, message="bom")
    dummy_ctx.add_findings(step_id="audit.links", findings=[f1])
    dummy_ctx.add_findings(step_id="audit.encoding", findings=[f2])

    assert dummy_ctx.findings_for("audit.links") == [f1]
    assert dummy_ctx.findings_for("audit.templates") == []
    # ordem por step_id
    assert dummy_ctx.all_findings() == [f2, f1]


def test_add_findings_rejects_non_findings(dummy_ctx):
    with pytest.raises(TypeError):
        dummy_ctx.add_findings(step_id="audit.links", findings=[{"rule": "X"}])


def test_findings_are_plain_data(dummy_ctx):
    f = Finding(rule="DIFF_MARKERS", severity=Severity.ERROR, path="zh/a.md", message="m", line=None)
    dummy_ctx.add_findings(step_id="audit.diff_markers", findings=[f])
    assert dummy_ctx.findings_for("audit.diff_markers")[0].to_dict()["line"] is None

"""Testes do Step audit.summary (consolidação com pandas)."""

from atlas_docaudit.core.findings import make_finding
from atlas_docaudit.core.pipeline.types import StepStatus
from atlas_docaudit.steps.audit.summary import AuditSummaryStep, findings_frame, summarize


def _seed(ctx):
    ctx.add_findings(
        step_id="audit.links",
        findings=[
            make_finding("LINK_BROKEN_PAGE", path="b.md", line=3, message="x"),
            make_finding("LINK_BROKEN_PAGE", path="b.md", line=9, message="y"),
            make_finding("ANCHOR_DUPLICATE", path="a.md", line=2, message="z"),
        ],
    )
    ctx.add_findings(
        step_id="audit.encoding",
        findings=[make_finding("ENCODING_MOJIBAKE", path="a.md", line=1, message="m")],
    )


def test_summary_consolidates_findings(make_ctx) -> None:
    ctx = make_ctx()
    _seed(ctx)

    sr = AuditSummaryStep().run(ctx)

    assert sr.status == StepStatus.SUCCESS
    s = sr.payload["summary"]
    assert s["passed"] is False
    assert s["total"] == 4
    assert s["by_severity"] == {"error": 3, "warning": 1, "info": 0}
    assert s["by_rule"] == {"ANCHOR_DUPLICATE": 1, "ENCODING_MOJIBAKE": 1, "LINK_BROKEN_PAGE": 2}
    assert s["by_step"] == {"audit.encoding": 1, "audit.links": 3}
    assert s["top_files"] == [
        {"path": "b.md", "findings": 2, "errors": 2},
        {"path": "a.md", "findings": 2, "errors": 1},
    ]
    assert sr.metrics["errors"] == 3
    assert sr.metrics["files_with_findings"] == 2


def test_summary_publishes_sorted_findings(make_ctx) -> None:
    ctx = make_ctx()
    _seed(ctx)

    sr = AuditSummaryStep().run(ctx)

    ordered = ctx.get_artifact("audit.findings")
    assert [(f.path, f.line) for f in ordered] == [("a.md", 1), ("a.md", 2), ("b.md", 3), ("b.md", 9)]
    assert [f["rule"] for f in sr.payload["findings"]] == [f.rule for f in ordered]


def test_summary_ignores_findings_outside_its_dependencies(make_ctx) -> None:
    ctx = make_ctx()
    ctx.add_findings(
        step_id="dummy.headings",
        findings=[make_finding("LINK_BROKEN_PAGE", path="a.md", message="x")],
    )

    sr = AuditSummaryStep().run(ctx)

    assert sr.payload["summary"]["total"] == 0
    assert sr.payload["summary"]["passed"] is True


def test_empty_summary():
    s = summarize(findings_frame({}))

    assert s["passed"] is True
    assert s["total"] == 0
    assert s["by_rule"] == {}
    assert s["top_files"] == []


def test_top_files_limit(make_ctx) -> None:
    ctx = make_ctx(config={"steps": {"audit.summary": {"top_files": 1}}})
    _seed(ctx)

    sr = AuditSummaryStep().run(ctx)

    assert len(sr.payload["summary"]["top_files"]) == 1

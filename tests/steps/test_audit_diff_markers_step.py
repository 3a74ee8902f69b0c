from atlas_docaudit.core.pipeline.types import StepStatus
from atlas_docaudit.steps.audit.diff_markers import AuditDiffMarkersStep
from atlas_docaudit.steps.ingest.scan import IngestScanStep
from tests.fixtures.docs_tree import page
from tests.fixtures.pipeline import rules_of, run_steps


def _prefixed(text: str) -> str:
    return "".join("+" + line + "\n" for line in text.split("\n"))


def test_pasted_patch_is_flagged(make_ctx) -> None:
    ctx = make_ctx({"zh/python.md": _prefixed(page("Python", "/zh/python/", "# Python\n\nText."))})

    sr = run_steps(ctx, IngestScanStep(), AuditDiffMarkersStep())["audit.diff_markers"]

    assert sr.status == StepStatus.SUCCESS
    assert rules_of(sr) == ["DIFF_MARKERS"]
    f = sr.payload["findings"][0]
    assert f["line"] == 1
    assert f["details"]["ratio"] == 1.0
    assert sr.metrics["flagged_files"] == 1


def test_bullet_list_below_threshold_is_not_flagged(make_ctx) -> None:
    body = "# List\n\nIntro.\n\n+ one\n+ two\n\nOutro.\n"
    ctx = make_ctx({"a.md": page("A", "/a/", body)})

    sr = run_steps(ctx, IngestScanStep(), AuditDiffMarkersStep())["audit.diff_markers"]

    assert sr.metrics["findings"] == 0


def test_min_lines_guards_tiny_files(make_ctx) -> None:
    ctx = make_ctx(
        {"tiny.md": "+a\n+b\n"},
        config={"steps": {"audit.diff_markers": {"min_lines": 3}}},
    )

    sr = run_steps(ctx, IngestScanStep(), AuditDiffMarkersStep())["audit.diff_markers"]

    assert sr.metrics["findings"] == 0


def test_hunk_headers_outside_code_are_flagged(make_ctx) -> None:
    body = "Text\n@@ -1,2 +1,3 @@\n```diff\n@@ -5 +5 @@\n```\n"
    ctx = make_ctx({"a.md": page("A", "/a/", body)})

    sr = run_steps(ctx, IngestScanStep(), AuditDiffMarkersStep())["audit.diff_markers"]

    assert rules_of(sr) == ["DIFF_HUNK_HEADER"]
    assert sr.payload["findings"][0]["line"] == 7


def test_invalid_threshold_fails(make_ctx) -> None:
    ctx = make_ctx({"a.md": "x"}, config={"steps": {"audit.diff_markers": {"threshold": 1.5}}})

    sr = run_steps(ctx, IngestScanStep(), AuditDiffMarkersStep())["audit.diff_markers"]

    assert sr.status == StepStatus.FAILED
    assert "threshold" in sr.payload["error"]["message"]

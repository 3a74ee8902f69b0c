"""
E2E — auditoria completa sobre uma cópia do site de fixture.

Cenários:
- site íntegro → nenhuma finding, exit 0
- tradução colada de um patch e decodificada com code page legada →
  findings `error`, exit 1
- duas runs do mesmo cenário → reports equivalentes
"""

from __future__ import annotations

import json
from pathlib import Path

from atlas_docaudit.runner import EXIT_FINDINGS, EXIT_OK

from tests.e2e._helpers import assert_core_artifacts, assert_reports_equal, make_scenario, run_pipeline

CHINESE = "\u4e2d\u6587"

ZH_PAGE = "zh/documentation/sdks/python.md"


def _corrupt_translation(scenario: Path) -> None:
    lines = [
        "---",
        "layout: section",
        f"title: Python SDK {CHINESE}",
        "permalink: /zh/documentation/sdks/python/",
        "---",
        f"# Python SDK {CHINESE}",
        f"## {CHINESE}",
        f"{CHINESE} Beam",
    ]
    patched = "\n".join("+" + line for line in lines) + "\n"
    mojibake = patched.encode("utf-8").decode("cp1252")
    (scenario / "site" / ZH_PAGE).write_text(mojibake, encoding="utf-8")


def test_clean_site_e2e(tmp_path: Path) -> None:
    scenario = make_scenario(tmp_path, "clean")

    ctx, run_result, exit_code = run_pipeline(scenario=scenario, run_id="e2e-clean")

    assert run_result.failed == []
    assert ctx.all_findings() == []
    assert exit_code == EXIT_OK
    assert_core_artifacts(scenario / "run")

    findings = json.loads((scenario / "run" / "artifacts" / "findings.json").read_text(encoding="utf-8"))
    assert findings["summary"]["passed"] is True
    assert findings["findings"] == []


def test_corrupted_translation_e2e(tmp_path: Path) -> None:
    scenario = make_scenario(tmp_path, "corrupted")
    _corrupt_translation(scenario)

    ctx, run_result, exit_code = run_pipeline(scenario=scenario, run_id="e2e-corrupted")

    assert run_result.failed == []
    assert exit_code == EXIT_FINDINGS
    assert_core_artifacts(scenario / "run")

    on_page = {f.rule for f in ctx.all_findings() if f.path == ZH_PAGE}
    assert {"DIFF_MARKERS", "ENCODING_MOJIBAKE", "FRONT_MATTER_MISSING"} <= on_page

    report = (scenario / "run" / "artifacts" / "report.md").read_text(encoding="utf-8")
    assert "**FAILED**" in report
    assert "`DIFF_MARKERS`" in report


def test_runs_are_deterministic(tmp_path: Path) -> None:
    a = make_scenario(tmp_path, "a")
    b = make_scenario(tmp_path, "b")
    _corrupt_translation(a)
    _corrupt_translation(b)

    ctx_a, _, _ = run_pipeline(scenario=a, run_id="e2e-det")
    ctx_b, _, _ = run_pipeline(scenario=b, run_id="e2e-det")

    assert [f.to_dict() for f in ctx_a.get_artifact("audit.findings")] == [
        f.to_dict() for f in ctx_b.get_artifact("audit.findings")
    ]
    assert_reports_equal(a / "run", b / "run")

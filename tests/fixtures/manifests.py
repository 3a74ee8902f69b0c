"""Manifest final sintético para testes de exports e do report."""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from atlas_docaudit.core.pipeline.context import RunContext


def _finding(path: str, line: Optional[int], rule: str, severity: str, message: str) -> dict:
    return {"rule": rule, "severity": severity, "path": path, "line": line, "message": message, "details": {}}


def minimal_manifest() -> dict:
    findings = [
        _finding("documentation/sdks/python.md", 12, "LINK_BROKEN_ANCHOR", "error", "anchor `#x` not found"),
        _finding("zh/documentation/sdks/python.md", 1, "DIFF_MARKERS", "error", "40/40 lines start with `+`"),
        _finding("zh/documentation/sdks/python.md", 6, "ENCODING_MOJIBAKE", "error", "a | b"),
    ]
    return {
        "run": {
            "run_id": "test-run-001",
            "started_at": "2026-01-01T00:00:00+00:00",
            "docaudit_version": "0.1.0",
            "schema_version": "1",
        },
        "inputs": {"config_hash": "cfg123", "contract_hash": "ctr456", "corpus_hash": "cor789"},
        "steps": {
            "ingest.scan": {
                "step_id": "ingest.scan",
                "kind": "diagnostic",
                "status": "success",
                "summary": "4 files scanned",
                "metrics": {"files": 4},
                "warnings": [],
                "artifacts": {},
                "payload": {},
            },
            "audit.summary": {
                "step_id": "audit.summary",
                "kind": "diagnostic",
                "status": "success",
                "summary": "audit failed: 3 findings",
                "metrics": {"findings": 3},
                "warnings": [],
                "artifacts": {"payload_meta": {"payload_bytes": 1, "payload_sha256": "x"}},
                "payload": {
                    "summary": {
                        "passed": False,
                        "total": 3,
                        "by_severity": {"error": 3, "warning": 0, "info": 0},
                        "by_rule": {"DIFF_MARKERS": 1, "ENCODING_MOJIBAKE": 1, "LINK_BROKEN_ANCHOR": 1},
                        "top_files": [
                            {"path": "zh/documentation/sdks/python.md", "findings": 2, "errors": 2},
                            {"path": "documentation/sdks/python.md", "findings": 1, "errors": 1},
                        ],
                    },
                    "findings": findings,
                },
            },
            "export.findings": {
                "step_id": "export.findings",
                "kind": "export",
                "status": "success",
                "summary": "3 findings exported",
                "metrics": {},
                "warnings": [],
                "artifacts": {"findings_json": "artifacts/findings.json"},
                "payload": {},
            },
        },
        "events": [],
    }


def manifest_ctx(tmp_path: Path, manifest: Optional[dict]) -> RunContext:
    ctx = RunContext(
        run_id="test-run-001",
        created_at=datetime(2026, 1, 1, tzinfo=timezone.utc),
        config={"steps": {}},
        contract={},
        meta={"run_dir": str(tmp_path)},
    )
    if manifest is not None:
        ctx.meta["manifest"] = manifest
    return ctx


